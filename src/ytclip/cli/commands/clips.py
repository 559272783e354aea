"""CLI commands for generating clips from videos and channels."""

from __future__ import annotations

import asyncio
import random
from functools import lru_cache
from pathlib import Path
from typing import Any, Coroutine, Optional, Sequence, TypeVar

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ytclip.config.settings import get_settings
from ytclip.models.channel import ChannelIdentityKind
from ytclip.models.clip import ClipOptions, ClipOutcome, Resolution
from ytclip.services.pipeline import ClipPipeline
from ytclip.utils.formatting import format_timecode, parse_timecode
from ytclip.utils.progress import ProgressUpdate
from ytclip.utils.validation import InvalidChannelReferenceError, parse_channel_reference

T = TypeVar("T")


class ClipExitCode:
    """Mapping of meaningful CLI exit codes."""

    SUCCESS = 0
    INVALID_INPUT = 1


_CHANNEL_COMMANDS: tuple[tuple[str, ChannelIdentityKind, str, str], ...] = (
    (
        "channel-id",
        ChannelIdentityKind.CHANNEL_ID,
        "The YouTube channel ID (UC...) or channel URL.",
        "Generate clips from random uploads of a channel, by channel ID.",
    ),
    (
        "user",
        ChannelIdentityKind.USER,
        "The legacy YouTube username or /user/ URL.",
        "Generate clips from random uploads of a channel, by legacy username.",
    ),
    (
        "slug",
        ChannelIdentityKind.SLUG,
        "The channel's vanity slug or /c/ URL.",
        "Generate clips from random uploads of a channel, by vanity slug.",
    ),
    (
        "handle",
        ChannelIdentityKind.HANDLE,
        "The channel handle, with or without @, or /@ URL.",
        "Generate clips from random uploads of a channel, by handle.",
    ),
)

START_TIME_HELP = (
    "Seek time for the start of the clip, in seconds or H:MM:SS. "
    "With --random, the earliest start time the random clip may use."
)
LENGTH_HELP = "Length of the clip in seconds."
RANDOM_HELP = "Pick a random start time within the video."
OUTPUT_HELP = "Directory for the generated clips. Defaults to the current directory."
RESOLUTION_HELP = "Maximum video resolution. Defaults to the highest available."
SCALE_HELP = "Scale the clip to the exact dimensions of --resolution."
CLIPS_HELP = "Number of clips to generate."


def register(app: typer.Typer, console: Console) -> None:
    """Register the clip generation commands."""

    settings = get_settings()
    defaults = settings.clip_defaults

    @lru_cache(maxsize=1)
    def get_pipeline() -> ClipPipeline:
        return ClipPipeline(settings=settings, console=console, rng=random.Random(settings.random_seed))

    @app.command("video")
    def video(  # pylint: disable=too-many-arguments
        reference: str = typer.Argument(..., help="The YouTube video URL or ID."),
        start_time: str = typer.Option(str(defaults.start_time_seconds), "--start-time", "-s", help=START_TIME_HELP),
        length: int = typer.Option(defaults.length_seconds, "--length", "-l", help=LENGTH_HELP),
        random_clip: bool = typer.Option(False, "--random", "-r", help=RANDOM_HELP),
        output: Optional[Path] = typer.Option(None, "--output", "-o", help=OUTPUT_HELP),
        resolution: Optional[Resolution] = typer.Option(None, "--resolution", "-q", help=RESOLUTION_HELP),
        scale: bool = typer.Option(False, "--scale", help=SCALE_HELP),
    ) -> None:
        """Generate a clip from a YouTube video."""

        options = _build_options_or_exit(console, start_time, length, random_clip, output, resolution, scale)
        pipeline = get_pipeline()
        outcome = _run_with_status(console, pipeline, pipeline.process_reference(reference, options))
        if outcome is None:
            raise typer.Exit(code=ClipExitCode.INVALID_INPUT)

        _render_outcomes(console, [outcome], title="Clip")

    def register_channel_command(
        name: str,
        kind: ChannelIdentityKind,
        argument_help: str,
        command_help: str,
    ) -> None:
        @app.command(name, help=command_help)
        def channel_command(  # pylint: disable=too-many-arguments
            identity: str = typer.Argument(..., help=argument_help),
            clips: int = typer.Option(defaults.clips_to_generate, "--clips", "-c", min=1, help=CLIPS_HELP),
            start_time: str = typer.Option(
                str(defaults.start_time_seconds), "--start-time", "-s", help=START_TIME_HELP
            ),
            length: int = typer.Option(defaults.length_seconds, "--length", "-l", help=LENGTH_HELP),
            random_clip: bool = typer.Option(False, "--random", "-r", help=RANDOM_HELP),
            output: Optional[Path] = typer.Option(None, "--output", "-o", help=OUTPUT_HELP),
            resolution: Optional[Resolution] = typer.Option(None, "--resolution", "-q", help=RESOLUTION_HELP),
            scale: bool = typer.Option(False, "--scale", help=SCALE_HELP),
        ) -> None:
            try:
                channel = parse_channel_reference(kind, identity)
            except InvalidChannelReferenceError as exc:
                console.print(f"[red]Error:[/red] {escape(str(exc))}")
                raise typer.Exit(code=ClipExitCode.INVALID_INPUT) from exc

            options = _build_options_or_exit(console, start_time, length, random_clip, output, resolution, scale)
            pipeline = get_pipeline()
            report = _run_with_status(console, pipeline, pipeline.process_channel(channel, clips, options))
            if report is None:
                return

            _render_outcomes(console, report.outcomes, title=f"Clips from {report.channel.title}")
            console.print(
                f"Generated: {report.succeeded} | Failed: {report.failed} | "
                f"Requested: {report.requested}"
            )

    for name, kind, argument_help, command_help in _CHANNEL_COMMANDS:
        register_channel_command(name, kind, argument_help, command_help)


def _parse_start_time(raw: str) -> int:
    value = raw.strip()
    try:
        return int(value)
    except ValueError:
        pass
    try:
        seconds = parse_timecode(value)
    except ValueError as exc:
        raise ValueError(f"Invalid start time {raw!r}; use seconds or H:MM:SS.") from exc
    # Seeks are whole seconds.
    if not seconds.is_integer():
        raise ValueError(f"Invalid start time {raw!r}; use whole seconds.")
    return int(seconds)


def _build_options_or_exit(  # pylint: disable=too-many-arguments
    console: Console,
    start_time: str,
    length: int,
    random_clip: bool,
    output: Optional[Path],
    resolution: Optional[Resolution],
    scale: bool,
) -> ClipOptions:
    values: dict[str, Any] = {
        "length_seconds": length,
        "random_clip": random_clip,
        "resolution": resolution,
        "force_scale": scale,
    }
    if output is not None:
        values["output_dir"] = output
    try:
        values["start_time_seconds"] = _parse_start_time(start_time)
        return ClipOptions(**values)
    except ValueError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=ClipExitCode.INVALID_INPUT) from exc


def _run_with_status(console: Console, pipeline: ClipPipeline, work: Coroutine[Any, Any, T]) -> T:
    with console.status("Starting...") as status:

        def handler(update: ProgressUpdate) -> None:
            status.update(_describe_progress(update))

        pipeline.on_progress = handler
        try:
            return asyncio.run(work)
        finally:
            pipeline.on_progress = None


def _describe_progress(update: ProgressUpdate) -> str:
    if update.position is not None and update.total is not None:
        return f"[{update.position}/{update.total}] {escape(update.message)}"
    return escape(update.message)


def _render_outcomes(console: Console, outcomes: Sequence[ClipOutcome], *, title: str) -> None:
    table = Table(title=title)
    table.add_column("Video")
    table.add_column("Status")
    table.add_column("Start")
    table.add_column("Result", overflow="fold")
    table.add_column("Time")

    for outcome in outcomes:
        start = format_timecode(outcome.seek_seconds) if outcome.seek_seconds is not None else "-"
        if outcome.success:
            status = "[green]saved[/green]"
            result = str(outcome.output_path)
        else:
            status = f"[red]failed ({outcome.stage.value})[/red]"
            result = escape(outcome.error_message or "")
        elapsed = f"{outcome.elapsed_seconds * 1000:.0f}ms" if outcome.elapsed_seconds is not None else "-"
        table.add_row(outcome.video_id, status, start, result, elapsed)

    console.print(table)


__all__ = ["ClipExitCode", "register"]
