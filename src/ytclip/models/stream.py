"""Pydantic models describing the stream variants of a video manifest."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import Field

from ytclip.models.base import ClipBaseModel


class Container(str, Enum):
    """Container families a stream variant can be wrapped in."""

    MP4 = "mp4"
    WEBM = "webm"
    THREE_GP = "3gp"
    OTHER = "other"


class StreamKind(str, Enum):
    """Which elementary streams a variant carries."""

    VIDEO_ONLY = "video_only"
    AUDIO_ONLY = "audio_only"
    MUXED = "muxed"


class StreamVariant(ClipBaseModel):
    """A single entry of a video's stream manifest."""

    format_id: str
    container: Container
    kind: StreamKind
    url: str = Field(min_length=1)
    height: Optional[int] = Field(default=None, ge=0)
    width: Optional[int] = Field(default=None, ge=0)
    framerate: Optional[float] = Field(default=None, ge=0.0)
    bitrate: float = Field(default=0.0, ge=0.0)

    @property
    def is_video_only(self) -> bool:
        return self.kind is StreamKind.VIDEO_ONLY

    @property
    def is_audio_only(self) -> bool:
        return self.kind is StreamKind.AUDIO_ONLY

    @property
    def quality_rank(self) -> tuple[int, float, float]:
        """Ordering key for video quality: height, then framerate, then bitrate."""

        return (self.height or 0, self.framerate or 0.0, self.bitrate)


class StreamSelection(ClipBaseModel):
    """The video-only and audio-only sources chosen for one clip."""

    video_url: str
    audio_url: str
    scale_required: bool


__all__ = ["Container", "StreamKind", "StreamSelection", "StreamVariant"]
