"""Application and logging configuration models."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from promptvault.shared.constants import Application, Logging


class AppSettings(BaseModel):
    """Application configuration."""

    name: str = Field(default=Application.NAME, description="Application name")
    version: str = Field(default=Application.VERSION, description="Application version")
    description: str = Field(
        default=Application.DESCRIPTION,
        description="Application description",
    )
    debug: bool = Field(default=False, description="Enable debug mode")


class LoggingSettings(BaseModel):
    """Logging configuration.

    The console handler is rich-based; the optional file handler always
    writes JSON lines.
    """

    level: str = Field(default=Logging.DEFAULT_LEVEL, description="Logging level")
    file: str = Field(
        default="",
        description="JSON log file path (empty disables file logging)",
    )
    console_output: bool = Field(default=True, description="Use rich console output")

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            msg = f"Unknown log level: {value}"
            raise ValueError(msg)
        return level


__all__ = [
    "AppSettings",
    "LoggingSettings",
]
