"""Validation helpers for YouTube video and channel identifiers."""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import ParseResult, parse_qs, urlparse

from ytclip.models.channel import ChannelIdentityKind, ChannelReference


class InvalidVideoReferenceError(ValueError):
    """Raised when a provided value is not a valid YouTube video URL or ID."""


class InvalidChannelReferenceError(ValueError):
    """Raised when a provided value is not a valid channel identity of the requested form."""


_VIDEO_ID_PATTERN = re.compile(r"^[0-9A-Za-z_-]{11}$")
_PATH_VIDEO_PATTERN = re.compile(r"^/(?:embed|shorts|live|v)/([0-9A-Za-z_-]{11})")

_CHANNEL_ID_PATTERN = re.compile(r"^UC[0-9A-Za-z_-]{22}$")
_USER_PATTERN = re.compile(r"^[0-9A-Za-z]{1,20}$")
_SLUG_PATTERN = re.compile(r"^[^\s/?#]+$")
_HANDLE_PATTERN = re.compile(r"^[0-9A-Za-z_.\-]{1,100}$")

_CHANNEL_PATTERNS: dict[ChannelIdentityKind, re.Pattern[str]] = {
    ChannelIdentityKind.CHANNEL_ID: _CHANNEL_ID_PATTERN,
    ChannelIdentityKind.USER: _USER_PATTERN,
    ChannelIdentityKind.SLUG: _SLUG_PATTERN,
    ChannelIdentityKind.HANDLE: _HANDLE_PATTERN,
}

_CHANNEL_URL_PATTERNS: dict[ChannelIdentityKind, re.Pattern[str]] = {
    ChannelIdentityKind.CHANNEL_ID: re.compile(r"^/channel/([^/?#]+)"),
    ChannelIdentityKind.USER: re.compile(r"^/user/([^/?#]+)"),
    ChannelIdentityKind.SLUG: re.compile(r"^/c/([^/?#]+)"),
    ChannelIdentityKind.HANDLE: re.compile(r"^/@([^/?#]+)"),
}


def _parse_url(value: str) -> Optional[ParseResult]:
    # Scheme-less references such as ``youtu.be/<id>`` still name a host.
    if "://" not in value:
        value = f"https://{value}"
    try:
        return urlparse(value)
    except ValueError:
        return None


def _host(parsed: ParseResult) -> str:
    return (parsed.hostname or "").lower()


def _is_youtube_host(parsed: ParseResult) -> bool:
    host = _host(parsed)
    return host == "youtube.com" or host.endswith(".youtube.com")


def extract_video_id(url: str) -> str:
    """Extract and validate a YouTube video ID from a URL or raw ID string."""

    stripped = url.strip()
    if _VIDEO_ID_PATTERN.fullmatch(stripped):
        return stripped

    parsed = _parse_url(stripped)
    if parsed is not None and _host(parsed) in {"youtu.be", "www.youtu.be"}:
        candidate = parsed.path.lstrip("/")
        if _VIDEO_ID_PATTERN.fullmatch(candidate):
            return candidate

    if parsed is not None and _is_youtube_host(parsed):
        # Handle standard watch URLs as well as embed, shorts and live paths.
        if parsed.path == "/watch":
            candidate_list = parse_qs(parsed.query).get("v", [])
            if candidate_list and _VIDEO_ID_PATTERN.fullmatch(candidate_list[0]):
                return candidate_list[0]
        else:
            path_match = _PATH_VIDEO_PATTERN.match(parsed.path)
            if path_match:
                return path_match.group(1)

    raise InvalidVideoReferenceError(f"Invalid video URL: {url}")


def _channel_value_from_url(kind: ChannelIdentityKind, raw: str) -> Optional[str]:
    parsed = _parse_url(raw)
    if parsed is None or not _is_youtube_host(parsed):
        return None
    match = _CHANNEL_URL_PATTERNS[kind].match(parsed.path)
    return match.group(1) if match else None


def parse_channel_reference(kind: ChannelIdentityKind, raw: str) -> ChannelReference:
    """Validate a channel identity of the given form.

    Accepts either the bare value (``@`` is optional for handles) or a channel URL of the matching
    shape, such as ``https://www.youtube.com/@handle``.
    """

    value = raw.strip()
    from_url = _channel_value_from_url(kind, value)
    if from_url is not None:
        value = from_url
    elif kind is ChannelIdentityKind.HANDLE:
        value = value.removeprefix("@")

    if not _CHANNEL_PATTERNS[kind].fullmatch(value):
        label = kind.value.replace("_", " ")
        raise InvalidChannelReferenceError(f"Invalid channel {label}: {raw!r}")
    return ChannelReference(kind=kind, value=value)


__all__ = [
    "InvalidChannelReferenceError",
    "InvalidVideoReferenceError",
    "extract_video_id",
    "parse_channel_reference",
]
