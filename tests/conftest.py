"""Pytest configuration and fixtures."""

from __future__ import annotations

import io
import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
from rich.console import Console

from ytclip.config.settings import Settings
from ytclip.models.channel import ChannelRecord, ChannelReference
from ytclip.models.stream import Container, StreamKind, StreamVariant
from ytclip.services.platform import PlatformError


def make_variant(
    format_id: str,
    *,
    kind: StreamKind = StreamKind.VIDEO_ONLY,
    container: Container = Container.MP4,
    height: Optional[int] = None,
    framerate: Optional[float] = None,
    bitrate: float = 0.0,
) -> StreamVariant:
    return StreamVariant(
        format_id=format_id,
        container=container,
        kind=kind,
        url=f"https://media.example/{format_id}",
        height=height,
        framerate=framerate,
        bitrate=bitrate,
    )


def standard_manifest() -> List[StreamVariant]:
    """A manifest resembling a typical YouTube video."""

    return [
        make_variant("160", height=144, framerate=30, bitrate=100),
        make_variant("136", height=720, framerate=30, bitrate=1500),
        make_variant("298", height=720, framerate=60, bitrate=3000),
        make_variant("137", height=1080, framerate=30, bitrate=4000),
        make_variant("248", container=Container.WEBM, height=1080, framerate=30, bitrate=3500),
        make_variant("313", container=Container.WEBM, height=2160, framerate=30, bitrate=12000),
        make_variant("18", kind=StreamKind.MUXED, height=360, framerate=30, bitrate=600),
        make_variant("139", kind=StreamKind.AUDIO_ONLY, bitrate=48),
        make_variant("140", kind=StreamKind.AUDIO_ONLY, bitrate=128),
        make_variant("251", kind=StreamKind.AUDIO_ONLY, container=Container.WEBM, bitrate=160),
    ]


@dataclass
class FakePlatformClient:
    """In-memory stand-in for the yt-dlp platform client."""

    channels: Dict[str, ChannelRecord] = field(default_factory=dict)
    uploads: Dict[str, List[str]] = field(default_factory=dict)
    durations: Dict[str, float] = field(default_factory=dict)
    manifests: Dict[str, List[StreamVariant]] = field(default_factory=dict)
    calls: List[tuple[str, Any]] = field(default_factory=list)

    def resolve_channel(self, reference: ChannelReference) -> ChannelRecord:
        self.calls.append(("resolve_channel", reference))
        try:
            return self.channels[reference.value]
        except KeyError:
            raise PlatformError(f"Channel not found: {reference}") from None

    def list_uploads(self, channel_id: str) -> List[str]:
        self.calls.append(("list_uploads", channel_id))
        try:
            return list(self.uploads[channel_id])
        except KeyError:
            raise PlatformError(f"Uploads unavailable for {channel_id}") from None

    def get_duration(self, video_id: str) -> float:
        self.calls.append(("get_duration", video_id))
        try:
            return self.durations[video_id]
        except KeyError:
            raise PlatformError(f"Video unavailable: {video_id}") from None

    def get_manifest(self, video_id: str) -> List[StreamVariant]:
        self.calls.append(("get_manifest", video_id))
        try:
            return list(self.manifests[video_id])
        except KeyError:
            raise PlatformError(f"Manifest unavailable: {video_id}") from None


class FakeProcess:
    def __init__(self, returncode: int) -> None:
        self.returncode = returncode

    async def wait(self) -> int:
        return self.returncode


@dataclass
class FakeProcessFactory:
    """Records ffmpeg invocations instead of spawning processes."""

    returncode: int = 0
    missing_executable: bool = False
    invocations: List[List[str]] = field(default_factory=list)
    options: List[Dict[str, Any]] = field(default_factory=list)

    async def __call__(self, program: str, *args: str, **kwargs: Any) -> FakeProcess:
        if self.missing_executable:
            raise FileNotFoundError(program)
        self.invocations.append([program, *args])
        self.options.append(kwargs)
        return FakeProcess(self.returncode)

    @property
    def last_arguments(self) -> List[str]:
        return self.invocations[-1][1:]


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=300, color_system=None)


@pytest.fixture
def console_output(console: Console):
    def read() -> str:
        return console.file.getvalue()  # type: ignore[attr-defined]

    return read


@pytest.fixture
def settings() -> Settings:
    return Settings(ffmpeg_path="ffmpeg", http_timeout_seconds=3.0, debug=False)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def process_factory() -> FakeProcessFactory:
    return FakeProcessFactory()


@pytest.fixture
def platform_client() -> FakePlatformClient:
    return FakePlatformClient(
        channels={
            "UCabcdefghijklmnopqrstuv": ChannelRecord(title="Example Channel", channel_id="UCabcdefghijklmnopqrstuv"),
        },
        uploads={"UCabcdefghijklmnopqrstuv": ["aaaaaaaaaaa", "bbbbbbbbbbb", "ccccccccccc"]},
        durations={"aaaaaaaaaaa": 120.0, "bbbbbbbbbbb": 300.0, "ccccccccccc": 45.5, "dQw4w9WgXcQ": 212.0},
        manifests={
            "aaaaaaaaaaa": standard_manifest(),
            "bbbbbbbbbbb": standard_manifest(),
            "ccccccccccc": standard_manifest(),
            "dQw4w9WgXcQ": standard_manifest(),
        },
    )


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "clips"
