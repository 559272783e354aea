"""YouTube metadata access through ``yt-dlp``."""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Protocol

import yt_dlp
from rich.console import Console
from yt_dlp.utils import DownloadError, ExtractorError

from ytclip.config.settings import Settings, get_settings
from ytclip.models.channel import ChannelIdentityKind, ChannelRecord, ChannelReference
from ytclip.models.stream import Container, StreamKind, StreamVariant

YOUTUBE_BASE_URL = "https://www.youtube.com"

_CHANNEL_PATHS: dict[ChannelIdentityKind, str] = {
    ChannelIdentityKind.CHANNEL_ID: "/channel/{value}",
    ChannelIdentityKind.USER: "/user/{value}",
    ChannelIdentityKind.SLUG: "/c/{value}",
    ChannelIdentityKind.HANDLE: "/@{value}",
}

_CONTAINERS: dict[str, Container] = {
    "mp4": Container.MP4,
    "m4a": Container.MP4,
    "webm": Container.WEBM,
    "weba": Container.WEBM,
    "3gp": Container.THREE_GP,
}


class PlatformError(RuntimeError):
    """Raised when YouTube metadata cannot be retrieved."""


class PlatformClient(Protocol):
    """Operations the clip pipeline needs from the video platform."""

    def resolve_channel(self, reference: ChannelReference) -> ChannelRecord:
        """Resolve a channel identity to its canonical record."""

    def list_uploads(self, channel_id: str) -> List[str]:
        """Return the video IDs of every upload of a channel."""

    def get_duration(self, video_id: str) -> float:
        """Return the duration of a video in seconds."""

    def get_manifest(self, video_id: str) -> List[StreamVariant]:
        """Return every stream variant available for a video."""


def channel_url(reference: ChannelReference) -> str:
    """Build the canonical channel URL for a reference."""

    return YOUTUBE_BASE_URL + _CHANNEL_PATHS[reference.kind].format(value=reference.value)


def uploads_playlist_url(channel_id: str) -> str:
    """Return the URL of a channel's uploads playlist (``UC…`` becomes ``UU…``)."""

    if not channel_id.startswith("UC"):
        raise PlatformError(f"Unexpected channel id format: {channel_id}")
    return f"{YOUTUBE_BASE_URL}/playlist?list=UU{channel_id[2:]}"


def video_url(video_id: str) -> str:
    return f"{YOUTUBE_BASE_URL}/watch?v={video_id}"


def stream_variant_from_format(fmt: Mapping[str, Any]) -> Optional[StreamVariant]:
    """Convert a yt-dlp format dictionary to a :class:`StreamVariant`.

    Formats without a direct URL or without any media stream (storyboards) yield ``None``.
    """

    url = fmt.get("url")
    if not url:
        return None

    has_video = fmt.get("vcodec") not in (None, "none")
    has_audio = fmt.get("acodec") not in (None, "none")
    if has_video and has_audio:
        kind = StreamKind.MUXED
    elif has_video:
        kind = StreamKind.VIDEO_ONLY
    elif has_audio:
        kind = StreamKind.AUDIO_ONLY
    else:
        return None

    if kind is StreamKind.AUDIO_ONLY:
        bitrate = fmt.get("abr") or fmt.get("tbr") or 0.0
    else:
        bitrate = fmt.get("vbr") or fmt.get("tbr") or 0.0

    return StreamVariant(
        format_id=str(fmt.get("format_id", "")),
        container=_CONTAINERS.get(str(fmt.get("ext", "")).lower(), Container.OTHER),
        kind=kind,
        url=url,
        height=fmt.get("height"),
        width=fmt.get("width"),
        framerate=fmt.get("fps"),
        bitrate=float(bitrate),
    )


class YouTubePlatformClient:
    """Blocking :class:`PlatformClient` implementation backed by ``yt-dlp``.

    Every network call honours ``Settings.http_timeout_seconds`` through yt-dlp's socket timeout, so
    identity resolution and manifest retrieval cannot hang indefinitely.
    """

    def __init__(self, *, settings: Optional[Settings] = None, console: Optional[Console] = None) -> None:
        self._settings = settings or get_settings()
        self._console = console or Console()

    def resolve_channel(self, reference: ChannelReference) -> ChannelRecord:
        """Resolve a channel identity to its title and canonical ``UC…`` id."""

        url = channel_url(reference)
        info = self._extract(url, extract_flat="in_playlist", playlistend=1)
        channel_id = info.get("channel_id") or info.get("id")
        if not channel_id:
            raise PlatformError(f"Channel not found: {reference}")
        title = info.get("channel") or info.get("uploader") or info.get("title") or str(reference)
        return ChannelRecord(title=title, channel_id=channel_id)

    def list_uploads(self, channel_id: str) -> List[str]:
        """Enumerate the channel's uploads playlist without resolving each video."""

        info = self._extract(uploads_playlist_url(channel_id), extract_flat=True)
        entries = info.get("entries") or []
        return [entry["id"] for entry in entries if entry and entry.get("id")]

    def get_duration(self, video_id: str) -> float:
        info = self._extract(video_url(video_id))
        duration = info.get("duration")
        if duration is None:
            raise PlatformError(f"Video {video_id} has no known duration.")
        return float(duration)

    def get_manifest(self, video_id: str) -> List[StreamVariant]:
        info = self._extract(video_url(video_id))
        variants: List[StreamVariant] = []
        for fmt in info.get("formats") or []:
            variant = stream_variant_from_format(fmt)
            if variant is not None:
                variants.append(variant)
        return variants

    def _extract(self, url: str, **overrides: Any) -> dict[str, Any]:
        ydl_opts: dict[str, Any] = {
            "quiet": True,
            "no_warnings": True,
            "skip_download": True,
            "socket_timeout": self._settings.http_timeout_seconds,
            **overrides,
        }
        if self._settings.debug:
            self._console.log(f"[dim]yt-dlp: {url}[/dim]")
        try:
            with yt_dlp.YoutubeDL(ydl_opts) as ydl:
                info = ydl.extract_info(url, download=False)
        except (DownloadError, ExtractorError) as exc:
            raise PlatformError(str(exc)) from exc
        if not info:
            raise PlatformError(f"No metadata returned for {url}")
        return dict(info)


__all__ = [
    "PlatformClient",
    "PlatformError",
    "YouTubePlatformClient",
    "channel_url",
    "stream_variant_from_format",
    "uploads_playlist_url",
    "video_url",
]
