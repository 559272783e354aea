"""Pydantic models describing YouTube channel identities and metadata."""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from ytclip.models.base import ClipBaseModel


class ChannelIdentityKind(str, Enum):
    """The forms a user can identify a channel by."""

    CHANNEL_ID = "channel_id"
    USER = "user"
    SLUG = "slug"
    HANDLE = "handle"


class ChannelReference(ClipBaseModel):
    """User-supplied channel identity, validated but not yet resolved."""

    kind: ChannelIdentityKind
    value: str = Field(min_length=1)

    def __str__(self) -> str:
        if self.kind is ChannelIdentityKind.HANDLE:
            return f"@{self.value}"
        return self.value


class ChannelRecord(ClipBaseModel):
    """Channel metadata returned by the platform once a reference is resolved."""

    title: str
    channel_id: str = Field(min_length=1)


__all__ = ["ChannelIdentityKind", "ChannelRecord", "ChannelReference"]
