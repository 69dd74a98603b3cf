"""PromptVault Settings Configuration Model.

Main Settings class that consolidates all configuration domains.
"""

from __future__ import annotations

import logging
from pathlib import Path

import toml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from promptvault.config.models.api_settings import SupabaseSettings
from promptvault.config.models.app_settings import AppSettings, LoggingSettings
from promptvault.config.models.cache_settings import CacheSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Unified configuration access.

    Nested values can be set from the environment with the
    ``PROMPTVAULT_`` prefix and ``__`` as delimiter, e.g.
    ``PROMPTVAULT_CACHE__CLEAR_ON_LOAD=false``.
    """

    model_config = SettingsConfigDict(
        env_prefix="PROMPTVAULT_",
        env_nested_delimiter="__",
        env_ignore_empty=True,
        extra="ignore",
    )

    app: AppSettings = Field(default_factory=AppSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    supabase: SupabaseSettings = Field(default_factory=SupabaseSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)

    @classmethod
    def from_toml_file(cls, file_path: str | Path) -> Settings:
        """Load settings from TOML file with environment variable overrides."""
        file_path = Path(file_path)
        if not file_path.exists():
            msg = f"Configuration file not found: {file_path}"
            raise FileNotFoundError(msg)

        raw_config = toml.load(file_path)
        return cls(**raw_config)

    def to_toml_file(self, file_path: str | Path) -> None:
        """Save settings to TOML file.

        The anon key is written as well; it is a public key and the file
        is needed to run without environment variables.
        """
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = self.model_dump(exclude_none=True, exclude_unset=False)

        with open(file_path, "w", encoding="utf-8") as f:
            toml.dump(config_dict, f)
        logger.debug("Settings written to %s", file_path)


__all__ = ["Settings"]
