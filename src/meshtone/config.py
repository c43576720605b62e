"""Runtime configuration."""
from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven settings for the HTTP surface and exports."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    export_width: int = Field(800, gt=0, validation_alias=AliasChoices("EXPORT_WIDTH", "export_width"))
    export_height: int = Field(600, gt=0, validation_alias=AliasChoices("EXPORT_HEIGHT", "export_height"))
    max_steps: int = Field(512, ge=2, validation_alias=AliasChoices("MAX_STEPS", "max_steps"))
    max_render_pixels: int = Field(
        4_000_000, gt=0, validation_alias=AliasChoices("MAX_RENDER_PIXELS", "max_render_pixels")
    )
    mirror_tolerance: float = Field(
        5.0, ge=0.0, validation_alias=AliasChoices("MIRROR_TOLERANCE", "mirror_tolerance")
    )
    grain_seed: int = Field(0, validation_alias=AliasChoices("GRAIN_SEED", "grain_seed"))
    log_level: str = Field("INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level"))


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings."""

    return Settings()
