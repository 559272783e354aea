"""Application settings loaded from environment variables and config files."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, PositiveFloat, PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict

from ytclip.config import CONFIG_ROOT


class ClipDefaults(BaseModel):
    """Default values for the shared clip options of every command."""

    start_time_seconds: NonNegativeInt = 0
    length_seconds: PositiveInt = 5
    clips_to_generate: PositiveInt = 5

    model_config = ConfigDict(extra="forbid")


def _load_clip_defaults(defaults_path: Path) -> ClipDefaults:
    if not defaults_path.exists():
        return ClipDefaults()

    raw_data = yaml.safe_load(defaults_path.read_text(encoding="utf-8")) or {}
    return ClipDefaults(**(raw_data.get("clip") or {}))


class Settings(BaseSettings):
    """Primary application settings for the ytclip CLI."""

    ffmpeg_path: str = Field(default="ffmpeg", alias="YTCLIP_FFMPEG_PATH")
    http_timeout_seconds: PositiveFloat = Field(default=3.0, alias="YTCLIP_HTTP_TIMEOUT_SECONDS")
    random_seed: Optional[int] = Field(default=None, alias="YTCLIP_RANDOM_SEED")
    debug: bool = Field(default=False, alias="YTCLIP_DEBUG")

    clip_defaults: ClipDefaults = Field(
        default_factory=lambda: _load_clip_defaults(CONFIG_ROOT / "clip_defaults.yaml")
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached instance of the application settings."""

    return Settings()


__all__ = ["ClipDefaults", "Settings", "get_settings"]
