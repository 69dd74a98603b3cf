"""Configuration domain models."""

from __future__ import annotations

from .api_settings import SupabaseSettings
from .app_settings import AppSettings, LoggingSettings
from .cache_settings import CacheSettings
from .settings import Settings

__all__ = [
    "AppSettings",
    "CacheSettings",
    "LoggingSettings",
    "Settings",
    "SupabaseSettings",
]
