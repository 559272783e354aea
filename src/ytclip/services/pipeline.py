"""Clip generation pipeline for single videos and channel batches."""

from __future__ import annotations

import asyncio
import math
import random
from typing import Callable, Optional

from rich.console import Console
from rich.markup import escape

from ytclip.config.settings import Settings, get_settings
from ytclip.models.channel import ChannelReference
from ytclip.models.clip import BatchReport, ClipOptions, ClipOutcome, ClipRequest
from ytclip.services.extraction import ClipExtractor, ProcessFactory
from ytclip.services.platform import PlatformClient, PlatformError, YouTubePlatformClient
from ytclip.services.sampler import ChannelUploadSampler
from ytclip.services.streams import StreamSelector
from ytclip.utils.formatting import format_timecode
from ytclip.utils.progress import ProcessingStage, ProgressUpdate
from ytclip.utils.validation import InvalidVideoReferenceError, extract_video_id

ProgressHandler = Callable[[ProgressUpdate], None]


class VideoTooShortError(ValueError):
    """Raised when a video cannot fit a random clip of the requested length."""


def compute_seek_offset(duration_seconds: float, length_seconds: int, seek_floor: int, rng: random.Random) -> int:
    """Draw a random seek offset so that the clip ends before the video does.

    The offset is drawn uniformly from ``[seek_floor, floor(duration) - length)``; ``seek_floor``
    lets callers keep an intro out of the draw.

    Raises
    ------
    VideoTooShortError
        If that range is empty.
    """

    max_start = math.floor(duration_seconds) - length_seconds
    if max_start <= 0 or max_start <= seek_floor:
        raise VideoTooShortError(
            f"Video is too short for a random {length_seconds}s clip starting after {seek_floor}s "
            f"(duration {duration_seconds:.0f}s)."
        )
    return rng.randrange(seek_floor, max_start)


class ClipPipeline:
    """Coordinate duration lookup, seek selection, stream selection and extraction.

    The pipeline owns the single random source used for both upload sampling and seek windows. Each
    video is processed to completion before the next one starts, and a failure is reported as a
    failed :class:`ClipOutcome` rather than raised.
    """

    def __init__(
        self,
        *,
        settings: Optional[Settings] = None,
        console: Optional[Console] = None,
        rng: Optional[random.Random] = None,
        client: Optional[PlatformClient] = None,
        process_factory: Optional[ProcessFactory] = None,
        on_progress: Optional[ProgressHandler] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._console = console or Console()
        self._rng = rng or random.Random(self._settings.random_seed)
        self._client = client or YouTubePlatformClient(settings=self._settings, console=self._console)
        self._sampler = ChannelUploadSampler(self._client, rng=self._rng, console=self._console)
        self._selector = StreamSelector(self._client, console=self._console)
        self._extractor = ClipExtractor(
            settings=self._settings,
            console=self._console,
            process_factory=process_factory,
        )
        self._on_progress = on_progress

    @property
    def on_progress(self) -> Optional[ProgressHandler]:
        return self._on_progress

    @on_progress.setter
    def on_progress(self, handler: Optional[ProgressHandler]) -> None:
        self._on_progress = handler

    # ------------------------------------------------------------------ #
    # Public API                                                         #
    # ------------------------------------------------------------------ #
    async def process_reference(self, raw_reference: str, options: ClipOptions) -> Optional[ClipOutcome]:
        """Validate a raw URL or ID and process it; ``None`` when the reference is invalid."""

        self._emit(ProcessingStage.VALIDATING, f"Validating {raw_reference}")
        try:
            video_id = extract_video_id(raw_reference)
        except InvalidVideoReferenceError as exc:
            self._console.log(f"[red]{escape(str(exc))}[/red]")
            return None
        return await self.process_video(video_id, options)

    async def process_video(
        self,
        video_id: str,
        options: ClipOptions,
        *,
        position: Optional[int] = None,
        total: Optional[int] = None,
    ) -> ClipOutcome:
        """Generate one clip from ``video_id``.

        Parameters
        ----------
        video_id:
            Canonical 11-character video identifier.
        options:
            Seek, length, randomisation, output and resolution options.
        position, total:
            Place of this video within a batch, forwarded to progress updates.

        Returns
        -------
        ClipOutcome
            Outcome tagged with the stage that finished or failed.
        """

        stage = ProcessingStage.FETCHING_DURATION
        seek_seconds: Optional[int] = None
        try:
            self._emit(stage, f"Fetching duration of {video_id}", video_id, position, total)
            try:
                duration = await asyncio.to_thread(self._client.get_duration, video_id)
            except PlatformError as exc:
                return self._fail(video_id, stage, f"Failed to get video duration: {exc}")

            seek_seconds = options.start_time_seconds
            if options.random_clip:
                stage = ProcessingStage.SELECTING_WINDOW
                try:
                    seek_seconds = compute_seek_offset(
                        duration, options.length_seconds, options.start_time_seconds, self._rng
                    )
                except VideoTooShortError as exc:
                    return self._fail(video_id, stage, f"Video {video_id}: {exc}")

            self._console.log(
                f"Generating clip from {video_id} at {format_timecode(seek_seconds)} "
                f"for {options.length_seconds} seconds."
            )

            stage = ProcessingStage.SELECTING_STREAMS
            self._emit(stage, f"Selecting streams for {video_id}", video_id, position, total)
            selection = await self._selector.select(video_id, options.resolution)
            if selection is None:
                return self._fail(video_id, stage, "Failed to get stream manifest URIs.", seek_seconds)
            if options.force_scale and options.resolution is not None:
                selection = selection.model_copy(update={"scale_required": True})

            stage = ProcessingStage.EXTRACTING
            self._emit(stage, f"Extracting clip from {video_id}", video_id, position, total)
            request = ClipRequest(
                video_id=video_id,
                seek_seconds=seek_seconds,
                length_seconds=options.length_seconds,
                output_dir=options.output_dir,
                selection=selection,
                resolution=options.resolution,
            )
            return await self._extractor.extract(request)
        except Exception as exc:  # pylint: disable=broad-except
            # Nothing escapes a single video's processing.
            return self._fail(video_id, stage, f"Unexpected error: {exc}", seek_seconds)

    async def process_channel(
        self,
        reference: ChannelReference,
        count: int,
        options: ClipOptions,
    ) -> Optional[BatchReport]:
        """Generate clips from up to ``count`` random uploads of a channel.

        Returns ``None`` when the channel or its uploads cannot be resolved; otherwise a report with
        one outcome per sampled video, processed sequentially.
        """

        self._emit(ProcessingStage.RESOLVING_CHANNEL, f"Resolving channel {reference}")
        sampled = await self._sampler.sample(reference, count)
        if sampled is None:
            self._console.log(f"[red]Failed to get video IDs for {reference}[/red]")
            return None

        report = BatchReport(channel=sampled.channel, requested=count)
        total = len(sampled.video_ids)
        for position, video_id in enumerate(sampled.video_ids, start=1):
            outcome = await self.process_video(video_id, options, position=position, total=total)
            report.outcomes.append(outcome)
        return report

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #
    def _fail(
        self,
        video_id: str,
        stage: ProcessingStage,
        message: str,
        seek_seconds: Optional[int] = None,
    ) -> ClipOutcome:
        self._console.log(f"[red]{escape(message)}[/red]")
        return ClipOutcome.failure(video_id, stage, message, seek_seconds=seek_seconds)

    def _emit(
        self,
        stage: ProcessingStage,
        message: str,
        video_id: Optional[str] = None,
        position: Optional[int] = None,
        total: Optional[int] = None,
    ) -> None:
        if self._on_progress is None:
            return
        self._on_progress(
            ProgressUpdate(stage=stage, message=message, video_id=video_id, position=position, total=total)
        )


__all__ = ["ClipPipeline", "ProgressHandler", "VideoTooShortError", "compute_seek_offset"]
