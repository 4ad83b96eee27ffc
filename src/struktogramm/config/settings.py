"""Application settings.

All configuration is sourced from environment variables (and optionally `.env`)
using the `STRUKTOGRAMM_` prefix. Every field has a default.
"""

from __future__ import annotations

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed environment-backed settings for struktogramm."""

    model_config = SettingsConfigDict(
        env_prefix="STRUKTOGRAMM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Text metrics and block sizes (pixels)
    char_width_avg: float = Field(default=8, gt=0)
    line_height: float = Field(default=20, gt=0)
    padding_x: float = Field(default=10, ge=0)
    padding_y: float = Field(default=10, ge=0)
    min_block_width: float = Field(default=100, gt=0)
    min_block_height: float = Field(default=40, ge=0)
    header_min_height: float = Field(default=40, ge=0)
    header_margin: float = Field(default=20, ge=0)
    loop_header_min_height: float = Field(default=30, ge=0)
    loop_sidebar_width: float = Field(default=30, ge=0)
    min_diagram_width: float = Field(default=800, ge=0)

    # Structuring
    merge_search_limit: int = Field(default=1000, gt=0)
    merge_fallback: str = "keep_branches"
    affirmative_terms: List[str] = Field(default_factory=lambda: ["ja", "yes", "true"])
    negative_terms: List[str] = Field(default_factory=lambda: ["nein", "no", "false"])
    exit_terms: List[str] = Field(default_factory=lambda: ["exit"])

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False

    @field_validator("merge_fallback")
    @classmethod
    def validate_merge_fallback(cls, v: str) -> str:
        value = v.strip().lower()
        if value not in {"keep_branches", "first_branch", "raise"}:
            raise ValueError(
                "merge_fallback must be one of: keep_branches, first_branch, raise"
            )
        return value


def load_settings(**overrides) -> Settings:
    """Build settings from the environment, applying explicit overrides."""
    return Settings(**overrides)
