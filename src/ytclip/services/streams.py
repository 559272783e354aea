"""Selection of the best video-only and audio-only streams for a clip."""

from __future__ import annotations

import asyncio
from typing import Iterable, List, Optional

from rich.console import Console
from rich.markup import escape

from ytclip.models.clip import Resolution
from ytclip.models.stream import Container, StreamSelection, StreamVariant
from ytclip.services.platform import PlatformClient, PlatformError

TARGET_CONTAINER = Container.MP4


def best_video_variant(
    variants: Iterable[StreamVariant],
    resolution: Optional[Resolution] = None,
    container: Container = TARGET_CONTAINER,
) -> Optional[StreamVariant]:
    """Return the highest-quality video-only variant within the ceiling and container."""

    candidates = [variant for variant in variants if variant.is_video_only]
    if resolution is not None:
        candidates = [variant for variant in candidates if (variant.height or 0) <= resolution.height]
    candidates = [variant for variant in candidates if variant.container is container]
    if not candidates:
        return None
    return max(candidates, key=lambda variant: variant.quality_rank)


def best_audio_variant(
    variants: Iterable[StreamVariant],
    container: Container = TARGET_CONTAINER,
) -> Optional[StreamVariant]:
    """Return the highest-bitrate audio-only variant in the container."""

    candidates = [variant for variant in variants if variant.is_audio_only and variant.container is container]
    if not candidates:
        return None
    return max(candidates, key=lambda variant: variant.bitrate)


class StreamSelector:
    """Choose the source streams that ffmpeg will mux into a clip."""

    def __init__(self, client: PlatformClient, *, console: Optional[Console] = None) -> None:
        self._client = client
        self._console = console or Console()

    async def select(self, video_id: str, resolution: Optional[Resolution] = None) -> Optional[StreamSelection]:
        """Pick one video-only and one audio-only MP4 stream for ``video_id``.

        When a resolution ceiling is given, oversized variants are dropped and the selection reports
        that no explicit scaling is required; without a ceiling the selection reports that scaling
        applies. Returns ``None`` when the manifest cannot be fetched or either stream is missing.
        """

        try:
            manifest: List[StreamVariant] = await asyncio.to_thread(self._client.get_manifest, video_id)
        except PlatformError as exc:
            self._console.log(f"[red]Could not fetch stream manifest for {video_id}:[/red] {escape(str(exc))}")
            return None

        scale_required = resolution is None

        video = best_video_variant(manifest, resolution)
        if video is None:
            self._console.log("[red]No stream info found.[/red]")
            return None

        audio = best_audio_variant(manifest)
        if audio is None:
            self._console.log("[red]No audio stream info found.[/red]")
            return None

        return StreamSelection(video_url=video.url, audio_url=audio.url, scale_required=scale_required)


__all__ = ["StreamSelector", "TARGET_CONTAINER", "best_audio_variant", "best_video_variant"]
