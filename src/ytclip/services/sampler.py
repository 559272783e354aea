"""Channel resolution and random sampling of uploads."""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from ytclip.models.channel import ChannelRecord, ChannelReference
from ytclip.services.platform import PlatformClient


@dataclass(slots=True)
class SampledUploads:
    """Randomly drawn uploads of a resolved channel."""

    channel: ChannelRecord
    total_uploads: int
    video_ids: List[str]


def sample_uploads(uploads: List[str], count: int, rng: random.Random) -> List[str]:
    """Return ``min(count, len(uploads))`` distinct uploads in uniformly random order.

    Each upload is paired with a fresh random key and the list is sorted by that key, so the draw
    carries no bias toward upload order.
    """

    unique = list(dict.fromkeys(uploads))
    keyed = [(rng.random(), index, video_id) for index, video_id in enumerate(unique)]
    keyed.sort()
    return [video_id for _, _, video_id in keyed[: max(count, 0)]]


class ChannelUploadSampler:
    """Resolve a channel identity and draw a random subset of its uploads."""

    def __init__(
        self,
        client: PlatformClient,
        *,
        rng: random.Random,
        console: Optional[Console] = None,
    ) -> None:
        self._client = client
        self._rng = rng
        self._console = console or Console()

    async def sample(self, reference: ChannelReference, count: int) -> Optional[SampledUploads]:
        """Return up to ``count`` random uploads of the channel, or ``None`` on any failure.

        Parameters
        ----------
        reference:
            Validated channel identity in any of its four forms.
        count:
            Number of uploads requested; fewer are returned when the channel has fewer uploads.

        Returns
        -------
        SampledUploads or None
            ``None`` when the channel cannot be resolved, its uploads cannot be listed, or it has no
            uploads at all. The failure is logged here and covers the whole batch.
        """

        # Any failure while resolving or listing abandons the batch, never the process.
        try:
            channel = await asyncio.to_thread(self._client.resolve_channel, reference)
        except Exception as exc:  # pylint: disable=broad-except
            self._console.log(f"[red]Could not resolve channel {reference}:[/red] {escape(str(exc))}")
            return None

        self._console.log(f"Getting videos from {channel.title}")
        try:
            uploads = await asyncio.to_thread(self._client.list_uploads, channel.channel_id)
        except Exception as exc:  # pylint: disable=broad-except
            self._console.log(f"[red]Could not list uploads for {channel.title}:[/red] {escape(str(exc))}")
            return None

        self._console.log(f"Found {len(uploads)} videos.")
        if not uploads:
            self._console.log(f"[red]Channel {channel.title} has no uploads.[/red]")
            return None

        return SampledUploads(
            channel=channel,
            total_uploads=len(uploads),
            video_ids=sample_uploads(uploads, count, self._rng),
        )


__all__ = ["ChannelUploadSampler", "SampledUploads", "sample_uploads"]
