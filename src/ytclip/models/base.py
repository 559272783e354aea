"""Shared base model definitions for ytclip domain objects."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ClipBaseModel(BaseModel):
    """Base model configured for ytclip-wide defaults.

    Instances are frozen: a validated reference or selection is never mutated once built.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)


__all__ = ["ClipBaseModel"]
