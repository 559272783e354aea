"""Models describing clip requests and their outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import Field, NonNegativeInt, PositiveInt

from ytclip.models.base import ClipBaseModel
from ytclip.models.channel import ChannelRecord
from ytclip.models.stream import StreamSelection
from ytclip.utils.progress import ProcessingStage


class Resolution(str, Enum):
    """Supported vertical resolution ceilings."""

    P144 = "144p"
    P240 = "240p"
    P360 = "360p"
    P480 = "480p"
    P720 = "720p"
    P1080 = "1080p"
    P1440 = "1440p"
    P2160 = "2160p"

    @property
    def height(self) -> int:
        return int(self.value[:-1])


class ClipOptions(ClipBaseModel):
    """Options shared by every clip command.

    ``start_time_seconds`` is the fixed seek offset, or the lower bound of the random draw when
    ``random_clip`` is set.
    """

    start_time_seconds: NonNegativeInt = 0
    length_seconds: PositiveInt = 5
    random_clip: bool = False
    output_dir: Path = Field(default_factory=Path.cwd)
    resolution: Optional[Resolution] = None
    force_scale: bool = False


class ClipRequest(ClipBaseModel):
    """Fully resolved parameters for one ffmpeg extraction."""

    video_id: str = Field(min_length=1)
    seek_seconds: NonNegativeInt
    length_seconds: PositiveInt
    output_dir: Path
    selection: StreamSelection
    resolution: Optional[Resolution] = None


@dataclass(slots=True)
class ClipOutcome:
    """Result of processing one video, successful or not."""

    video_id: str
    success: bool
    stage: ProcessingStage
    output_path: Optional[Path] = None
    elapsed_seconds: Optional[float] = None
    seek_seconds: Optional[int] = None
    error_message: Optional[str] = None

    @classmethod
    def failure(
        cls,
        video_id: str,
        stage: ProcessingStage,
        message: str,
        *,
        seek_seconds: Optional[int] = None,
    ) -> "ClipOutcome":
        return cls(
            video_id=video_id,
            success=False,
            stage=stage,
            seek_seconds=seek_seconds,
            error_message=message,
        )


@dataclass(slots=True)
class BatchReport:
    """Aggregate result of a channel-derived batch."""

    channel: ChannelRecord
    requested: int
    outcomes: List[ClipOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success)

    @property
    def failed(self) -> int:
        return len(self.outcomes) - self.succeeded


__all__ = ["BatchReport", "ClipOptions", "ClipOutcome", "ClipRequest", "Resolution"]
