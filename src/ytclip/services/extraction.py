"""ffmpeg-driven clip extraction."""

from __future__ import annotations

import asyncio
import os
import shlex
import time
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional
from uuid import uuid4

from rich.console import Console

from ytclip.config.settings import Settings, get_settings
from ytclip.models.clip import ClipOutcome, ClipRequest, Resolution
from ytclip.utils.formatting import format_timecode, sanitize_filename, scale_for_resolution
from ytclip.utils.progress import ProcessingStage

ProcessFactory = Callable[..., Awaitable[Any]]
CLIP_EXTENSION = "mp4"


def build_output_path(output_dir: Path, video_id: str, token: Optional[str] = None) -> Path:
    """Return a unique, sanitized output path for a clip of ``video_id``."""

    stem = sanitize_filename(f"{video_id}_{token or uuid4().hex}")
    return output_dir / f"{stem}.{CLIP_EXTENSION}"


def build_ffmpeg_arguments(
    *,
    video_url: str,
    audio_url: str,
    seek_seconds: int,
    length_seconds: int,
    output_path: Path,
    resolution: Optional[Resolution] = None,
    scale: bool = False,
) -> List[str]:
    """Build ffmpeg's argument list.

    Both inputs are seeked before they are read. The scale filter is only added when a resolution
    was requested and scaling applies.
    """

    seek = format_timecode(seek_seconds)
    arguments = [
        "-ss", seek, "-i", video_url,
        "-ss", seek, "-i", audio_url,
        "-t", format_timecode(length_seconds),
    ]
    if resolution is not None and scale:
        arguments.extend(["-vf", f"scale={scale_for_resolution(resolution)}"])
    arguments.append(str(output_path))
    return arguments


class ClipExtractor:
    """Run ffmpeg to cut and mux a clip from remote video and audio streams."""

    def __init__(
        self,
        *,
        settings: Optional[Settings] = None,
        console: Optional[Console] = None,
        process_factory: Optional[ProcessFactory] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._console = console or Console()
        self._process_factory = process_factory or asyncio.create_subprocess_exec

    async def extract(self, request: ClipRequest) -> ClipOutcome:
        """Extract the clip described by ``request``.

        Parameters
        ----------
        request:
            Fully resolved clip parameters including the chosen stream URLs.

        Returns
        -------
        ClipOutcome
            Successful outcome carrying the output path and elapsed wall time, or a failed outcome
            when ffmpeg is missing or exits with a non-zero status.
        """

        request.output_dir.mkdir(parents=True, exist_ok=True)
        output_path = build_output_path(request.output_dir, request.video_id)
        arguments = build_ffmpeg_arguments(
            video_url=request.selection.video_url,
            audio_url=request.selection.audio_url,
            seek_seconds=request.seek_seconds,
            length_seconds=request.length_seconds,
            output_path=output_path,
            resolution=request.resolution,
            scale=request.selection.scale_required,
        )

        if self._settings.debug:
            self._console.log(f"[dim]{shlex.join([self._settings.ffmpeg_path, *arguments])}[/dim]")

        # ffmpeg's own output is only surfaced in debug mode.
        output_stream = None if self._settings.debug else asyncio.subprocess.DEVNULL
        started = time.perf_counter()
        try:
            process = await self._process_factory(
                self._settings.ffmpeg_path,
                *arguments,
                cwd=os.getcwd(),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=output_stream,
                stderr=output_stream,
            )
        except FileNotFoundError:
            message = f"ffmpeg executable not found: {self._settings.ffmpeg_path}"
            self._console.log(f"[red]{message}[/red]")
            return ClipOutcome.failure(
                request.video_id, ProcessingStage.EXTRACTING, message, seek_seconds=request.seek_seconds
            )

        return_code = await process.wait()
        elapsed = time.perf_counter() - started

        if return_code != 0:
            message = f"Failed to generate clip (ffmpeg exited with status {return_code})."
            self._console.log(f"[red]{message}[/red]")
            return ClipOutcome.failure(
                request.video_id, ProcessingStage.EXTRACTING, message, seek_seconds=request.seek_seconds
            )

        self._console.log(f"[green]Clip saved to {output_path}[/green]")
        self._console.log(f"Clip took {elapsed * 1000:.0f}ms to generate.")
        return ClipOutcome(
            video_id=request.video_id,
            success=True,
            stage=ProcessingStage.COMPLETE,
            output_path=output_path,
            elapsed_seconds=elapsed,
            seek_seconds=request.seek_seconds,
        )


__all__ = [
    "CLIP_EXTENSION",
    "ClipExtractor",
    "ProcessFactory",
    "build_ffmpeg_arguments",
    "build_output_path",
]
