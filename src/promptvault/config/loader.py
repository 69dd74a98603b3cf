"""Settings loader and singleton manager.

This module handles:
- Environment variable loading from .env files
- Configuration file loading from TOML
- Thread-safe singleton pattern for Settings instance
- Configuration update and save operations
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path

import toml
from dotenv import load_dotenv
from pydantic import ValidationError

from promptvault.config.models.settings import Settings
from promptvault.shared.constants import FileSystem
from promptvault.shared.errors import (
    ApplicationError,
    ErrorCode,
    ErrorContext,
    create_config_error,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(FileSystem.CONFIG_DIRECTORY) / FileSystem.CONFIG_FILENAME


def default_config_paths() -> list[Path]:
    """Locations searched for a TOML file, in priority order."""
    return [
        DEFAULT_CONFIG_PATH,
        Path(FileSystem.CONFIG_FILENAME),
        Path.home() / FileSystem.HOME_DIR / FileSystem.CONFIG_FILENAME,
    ]


def default_save_path() -> Path:
    """Existing config file to update, else the per-user config file."""
    existing = next((p for p in default_config_paths() if p.exists()), None)
    return existing or default_config_paths()[-1]


class SettingsLoader:
    """Thread-safe singleton manager for Settings.

    Uses double-checked locking to load the settings once.
    """

    def __init__(self, config_path: Path | str | None = None) -> None:
        self.config_path = Path(config_path) if config_path else None
        self._instance: Settings | None = None
        self._lock = threading.RLock()

    def get_config(self) -> Settings:
        """Return the settings instance, loading it on first use."""
        if self._instance is None:
            with self._lock:
                if self._instance is None:
                    self._instance = load_settings(self.config_path)

        return self._instance

    def reload_config(self) -> Settings:
        """Reload the settings from the .env and TOML files."""
        with self._lock:
            self._instance = load_settings(self.config_path)

        return self._instance

    def update_and_save_config(
        self,
        updater: Callable[[Settings], None],
        config_path: Path | str | None = None,
    ) -> Settings:
        """Apply ``updater`` to a copy of the settings, validate, save and swap in.

        Args:
            updater: Callable that modifies a Settings object in place
            config_path: TOML file to write (defaults to the loaded file,
                then the first existing default location, then
                ``~/.promptvault/config.toml``)

        Returns:
            The updated Settings instance.

        Raises:
            ApplicationError: If validation fails or the file cannot be written
        """
        target = Path(config_path or self.config_path or default_save_path())

        with self._lock:
            try:
                current = self.get_config()
                updated = current.model_copy(deep=True)
                updater(updated)
                updated = Settings.model_validate(updated.model_dump())
                updated.to_toml_file(target)
                self._instance = updated
            except (ValidationError, OSError, TypeError, ValueError) as e:
                logger.exception("Failed to update and save configuration")
                raise ApplicationError(
                    code=ErrorCode.CONFIGURATION_ERROR,
                    message=f"Configuration update failed: {e}",
                    context=ErrorContext(
                        operation="update_and_save_config",
                        additional_data={"config_path": str(target)},
                    ),
                    original_error=e,
                ) from e

        logger.info("Configuration updated and saved successfully to %s", target)
        return updated


def _load_env_file(env_file: Path | None = None) -> bool:
    """Load variables from a .env file into the environment.

    Values already present in the environment win over the file.

    Returns:
        True when a .env file was found and loaded.
    """
    env_file = env_file or Path(FileSystem.ENV_FILENAME)
    if not env_file.exists():
        logger.debug("No %s file found, using process environment only", env_file)
        return False
    return load_dotenv(env_file, override=False)


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings from a TOML file or the environment.

    Args:
        config_path: Optional TOML file. If None, the default locations
            are tried before falling back to environment variables only.

    Returns:
        Settings instance loaded from the first available source

    Raises:
        ApplicationError: If the file is missing, unparsable or invalid
    """
    _load_env_file()

    if config_path:
        path: Path | None = Path(config_path)
    else:
        path = next((p for p in default_config_paths() if p.exists()), None)

    if path is not None:
        try:
            settings = Settings.from_toml_file(path)
        except FileNotFoundError as e:
            raise create_config_error(
                f"Configuration file not found: {path}",
                config_key=str(path),
                operation="load_settings",
                original_error=e,
            ) from e
        except (toml.TomlDecodeError, ValidationError) as e:
            raise create_config_error(
                f"Invalid configuration file {path}: {e}",
                config_key=str(path),
                operation="load_settings",
                original_error=e,
            ) from e
        logger.debug("Loaded configuration from %s", path)
        return settings

    try:
        return Settings()
    except ValidationError as e:
        raise create_config_error(
            f"Invalid configuration in environment: {e}",
            operation="load_settings",
            original_error=e,
        ) from e


# Global loader instance
_loader = SettingsLoader()


def get_config() -> Settings:
    """Return the process-wide settings instance."""
    return _loader.get_config()


def reload_config() -> Settings:
    """Reload the process-wide settings instance."""
    return _loader.reload_config()


def update_and_save_config(
    updater: Callable[[Settings], None],
    config_path: Path | str | None = None,
) -> Settings:
    """Update, validate and save the process-wide settings."""
    return _loader.update_and_save_config(updater, config_path)


__all__ = [
    "SettingsLoader",
    "get_config",
    "load_settings",
    "reload_config",
    "update_and_save_config",
]
