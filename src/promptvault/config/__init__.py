"""PromptVault Configuration Module

This module provides unified access to configuration models and settings
management for the PromptVault application.
"""

from __future__ import annotations

from .loader import (
    SettingsLoader,
    get_config,
    load_settings,
    reload_config,
    update_and_save_config,
)
from .models import (
    AppSettings,
    CacheSettings,
    LoggingSettings,
    Settings,
    SupabaseSettings,
)

__all__ = [
    "AppSettings",
    "CacheSettings",
    "LoggingSettings",
    "Settings",
    "SettingsLoader",
    "SupabaseSettings",
    "get_config",
    "load_settings",
    "reload_config",
    "update_and_save_config",
]
