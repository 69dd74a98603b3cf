"""Content cache configuration model.

This module contains the configuration model for the client-side
content cache: backend selection, freshness windows per content kind,
the version tag and the clear-on-load startup policy.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from promptvault.shared.constants import Cache, CacheKeys, FileSystem


class CacheSettings(BaseModel):
    """Content cache configuration."""

    enabled: bool = Field(default=True, description="Enable the content cache")
    backend: Literal["memory", "file"] = Field(
        default=Cache.BACKEND_FILE,
        description="Durable store backend (memory, file)",
    )
    store_path: str = Field(
        default="",
        description="JSON store file for the file backend "
        "(empty uses ~/.promptvault/cache/content_store.json)",
    )
    quota_bytes: int | None = Field(
        default=None,
        gt=0,
        description="Byte quota for the memory backend",
    )
    freshness_window: float = Field(
        default=Cache.FRESHNESS_WINDOW,
        ge=0,
        description="Freshness window for flat content in seconds",
    )
    timeline_freshness_window: float = Field(
        default=Cache.TIMELINE_FRESHNESS_WINDOW,
        ge=0,
        description="Freshness window for timeline content in seconds",
    )
    version_tag: str = Field(
        default=Cache.VERSION_TAG,
        description="Version tag embedded in every cache key",
    )
    clear_on_load: bool = Field(
        default=True,
        description="Clear the cache once at application start",
    )

    @field_validator("version_tag")
    @classmethod
    def _valid_tag(cls, value: str) -> str:
        if not value.strip() or Cache.SEPARATOR in value:
            msg = f"version_tag must be non-empty and must not contain '{Cache.SEPARATOR}'"
            raise ValueError(msg)
        return value

    def resolved_store_path(self) -> Path:
        if self.store_path:
            return Path(self.store_path).expanduser()
        return (
            Path.home()
            / FileSystem.HOME_DIR
            / FileSystem.CACHE_DIRECTORY
            / FileSystem.CACHE_STORE_FILENAME
        )

    def freshness_overrides(self) -> dict[str, float]:
        """Per key-prefix freshness windows for the cache manager."""
        return {CacheKeys.TIMELINE_PREFIX: self.timeline_freshness_window}


__all__ = ["CacheSettings"]
