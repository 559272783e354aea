"""Tests for ffmpeg argument building and clip extraction."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

import pytest

from ytclip.models.clip import ClipRequest, Resolution
from ytclip.models.stream import StreamSelection
from ytclip.services.extraction import ClipExtractor, build_ffmpeg_arguments, build_output_path
from ytclip.utils.progress import ProcessingStage


def make_request(output_dir: Path, *, resolution=None, scale_required: bool = False) -> ClipRequest:
    return ClipRequest(
        video_id="dQw4w9WgXcQ",
        seek_seconds=10,
        length_seconds=5,
        output_dir=output_dir,
        resolution=resolution,
        selection=StreamSelection(
            video_url="https://media.example/video",
            audio_url="https://media.example/audio",
            scale_required=scale_required,
        ),
    )


def test_build_ffmpeg_arguments_seeks_both_inputs() -> None:
    arguments = build_ffmpeg_arguments(
        video_url="https://v",
        audio_url="https://a",
        seek_seconds=10,
        length_seconds=5,
        output_path=Path("/tmp/out.mp4"),
    )
    assert arguments == [
        "-ss", "0:00:10.000", "-i", "https://v",
        "-ss", "0:00:10.000", "-i", "https://a",
        "-t", "0:00:05.000",
        str(Path("/tmp/out.mp4")),
    ]


def test_build_ffmpeg_arguments_adds_scale_only_with_resolution_and_flag() -> None:
    common = dict(video_url="v", audio_url="a", seek_seconds=0, length_seconds=5, output_path=Path("o.mp4"))

    scaled = build_ffmpeg_arguments(**common, resolution=Resolution.P720, scale=True)
    assert scaled[-3:] == ["-vf", "scale=1280:720", "o.mp4"]

    assert "-vf" not in build_ffmpeg_arguments(**common, resolution=Resolution.P720, scale=False)
    assert "-vf" not in build_ffmpeg_arguments(**common, resolution=None, scale=True)


def test_build_output_path_is_sanitized_and_unique(tmp_path: Path) -> None:
    assert build_output_path(tmp_path, "abc", token="123") == tmp_path / "abc_123.mp4"
    assert build_output_path(tmp_path, "a/b", token="x") == tmp_path / "a_b_x.mp4"
    assert build_output_path(tmp_path, "abc") != build_output_path(tmp_path, "abc")


@pytest.mark.asyncio
async def test_extract_success(settings, console, console_output, process_factory, output_dir: Path) -> None:
    extractor = ClipExtractor(settings=settings, console=console, process_factory=process_factory)

    outcome = await extractor.extract(make_request(output_dir))

    assert output_dir.is_dir()
    assert outcome.success is True
    assert outcome.stage is ProcessingStage.COMPLETE
    assert outcome.output_path is not None
    assert outcome.output_path.parent == output_dir
    assert outcome.output_path.name.startswith("dQw4w9WgXcQ_")
    assert outcome.output_path.suffix == ".mp4"
    assert outcome.elapsed_seconds is not None and outcome.elapsed_seconds >= 0

    program, *arguments = process_factory.invocations[0]
    assert program == "ffmpeg"
    assert arguments[-1] == str(outcome.output_path)
    assert process_factory.options[0]["cwd"] == os.getcwd()
    assert process_factory.options[0]["stderr"] == asyncio.subprocess.DEVNULL
    assert "Clip saved to" in console_output()
    assert "to generate." in console_output()


@pytest.mark.asyncio
async def test_extract_applies_scale_when_requested(settings, console, process_factory, output_dir: Path) -> None:
    extractor = ClipExtractor(settings=settings, console=console, process_factory=process_factory)

    await extractor.extract(make_request(output_dir, resolution=Resolution.P360, scale_required=True))

    assert "scale=640:360" in process_factory.last_arguments


@pytest.mark.asyncio
async def test_extract_nonzero_exit_is_reported(settings, console, console_output, process_factory, output_dir) -> None:
    process_factory.returncode = 1
    extractor = ClipExtractor(settings=settings, console=console, process_factory=process_factory)

    outcome = await extractor.extract(make_request(output_dir))

    assert outcome.success is False
    assert outcome.stage is ProcessingStage.EXTRACTING
    assert outcome.output_path is None
    assert "status 1" in (outcome.error_message or "")
    assert "Failed to generate clip" in console_output()


@pytest.mark.asyncio
async def test_extract_missing_ffmpeg_is_reported(settings, console, process_factory, output_dir) -> None:
    process_factory.missing_executable = True
    extractor = ClipExtractor(settings=settings, console=console, process_factory=process_factory)

    outcome = await extractor.extract(make_request(output_dir))

    assert outcome.success is False
    assert "not found" in (outcome.error_message or "")


@pytest.mark.asyncio
async def test_debug_mode_logs_command_and_shows_ffmpeg_output(console, console_output, process_factory, output_dir):
    from ytclip.config.settings import Settings

    extractor = ClipExtractor(
        settings=Settings(ffmpeg_path="/opt/ffmpeg", debug=True),
        console=console,
        process_factory=process_factory,
    )

    await extractor.extract(make_request(output_dir))

    assert process_factory.invocations[0][0] == "/opt/ffmpeg"
    assert process_factory.options[0]["stderr"] is None
    assert "/opt/ffmpeg -ss 0:00:10.000" in console_output()
