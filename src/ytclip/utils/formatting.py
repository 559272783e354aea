"""Pure helpers for filenames, ffmpeg time codes, and scale filters."""

from __future__ import annotations

import re
from datetime import timedelta
from typing import Optional, Union

from ytclip.models.clip import Resolution

MAX_FILENAME_LENGTH = 255
DEFAULT_SCALE = "1920:1080"

_RESERVED_CHARS_PATTERN = re.compile(r'[<>:"/\\|?*\x00-\x1f]+')
_EDGE_PATTERN = re.compile(r"^[\s.]+|[\s.]+$")
_TIMECODE_PATTERN = re.compile(r"^(\d+):([0-5]\d):([0-5]\d)(?:\.(\d{1,3}))?$")

_SCALES: dict[Resolution, str] = {
    Resolution.P144: "256:144",
    Resolution.P240: "426:240",
    Resolution.P360: "640:360",
    Resolution.P480: "854:480",
    Resolution.P720: "1280:720",
    Resolution.P1080: "1920:1080",
    Resolution.P1440: "2560:1440",
    Resolution.P2160: "3840:2160",
}


def sanitize_filename(value: str) -> str:
    """Map an arbitrary string to a name that is safe on every common filesystem.

    Runs of reserved characters collapse to a single underscore, surrounding whitespace and dots
    are trimmed, and the result is capped at 255 characters. An empty result becomes ``"_"``.
    """

    sanitized = _RESERVED_CHARS_PATTERN.sub("_", value)
    sanitized = _EDGE_PATTERN.sub("", sanitized)
    # Truncation can expose a trailing dot or space, so trim once more.
    sanitized = _EDGE_PATTERN.sub("", sanitized[:MAX_FILENAME_LENGTH])
    return sanitized or "_"


def format_timecode(value: Union[int, float, timedelta]) -> str:
    """Render a non-negative duration as ffmpeg's ``H:MM:SS.mmm`` time code."""

    seconds = value.total_seconds() if isinstance(value, timedelta) else float(value)
    if seconds < 0:
        raise ValueError(f"Time code cannot be negative: {value!r}")

    total_ms = int(round(seconds * 1000))
    hours, remainder = divmod(total_ms, 3_600_000)
    minutes, remainder = divmod(remainder, 60_000)
    secs, millis = divmod(remainder, 1000)
    return f"{hours}:{minutes:02d}:{secs:02d}.{millis:03d}"


def parse_timecode(text: str) -> float:
    """Parse ``H:MM:SS[.mmm]`` back into seconds."""

    match = _TIMECODE_PATTERN.fullmatch(text.strip())
    if match is None:
        raise ValueError(f"Invalid time code: {text!r}")

    hours, minutes, seconds, fraction = match.groups()
    millis = int((fraction or "0").ljust(3, "0"))
    total_ms = ((int(hours) * 60 + int(minutes)) * 60 + int(seconds)) * 1000 + millis
    return total_ms / 1000


def scale_for_resolution(resolution: Optional[Union[Resolution, str]]) -> str:
    """Return the ``W:H`` scale filter argument for a resolution.

    Unknown or missing values fall back to the 1080p dimensions.
    """

    if resolution is None:
        return DEFAULT_SCALE
    try:
        key = Resolution(resolution)
    except ValueError:
        return DEFAULT_SCALE
    return _SCALES.get(key, DEFAULT_SCALE)


__all__ = [
    "DEFAULT_SCALE",
    "MAX_FILENAME_LENGTH",
    "format_timecode",
    "parse_timecode",
    "sanitize_filename",
    "scale_for_resolution",
]
