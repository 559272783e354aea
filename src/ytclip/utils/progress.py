"""Progress tracking types shared across CLI and services."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ProcessingStage(str, Enum):
    """Lifecycle stages for generating a clip."""

    RESOLVING_CHANNEL = "resolving_channel"
    VALIDATING = "validating"
    FETCHING_DURATION = "fetching_duration"
    SELECTING_WINDOW = "selecting_window"
    SELECTING_STREAMS = "selecting_streams"
    EXTRACTING = "extracting"
    COMPLETE = "complete"
    FAILED = "failed"


class ProgressUpdate(BaseModel):
    """Structured progress payload for UI rendering and logging."""

    stage: ProcessingStage
    message: str
    video_id: Optional[str] = None
    position: Optional[int] = Field(default=None, ge=1)
    total: Optional[int] = Field(default=None, ge=1)

    model_config = ConfigDict(extra="forbid")


__all__ = ["ProcessingStage", "ProgressUpdate"]
