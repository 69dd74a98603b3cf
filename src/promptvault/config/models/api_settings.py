"""Remote content service configuration model.

This module contains the configuration model for the hosted content
backend (a Supabase project exposing PostgREST endpoints).
"""

from __future__ import annotations

import os

from pydantic import BaseModel, Field

from promptvault.shared.constants import ContentServiceConfig


def _env_default(*names: str) -> str:
    for name in names:
        value = os.getenv(name)
        if value:
            return value.strip()
    return ""


class SupabaseSettings(BaseModel):
    """Content service configuration.

    ``url`` and ``anon_key`` fall back to the plain ``SUPABASE_URL`` /
    ``SUPABASE_ANON_KEY`` variables (and their ``NEXT_PUBLIC_`` variants
    used by the web client) when not set through PromptVault's own
    configuration.

    Security: anon_key is masked in __repr__.
    """

    url: str = Field(
        default_factory=lambda: _env_default("SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL"),
        description="Project URL of the hosted backend",
    )
    anon_key: str = Field(
        default_factory=lambda: _env_default(
            "SUPABASE_ANON_KEY",
            "NEXT_PUBLIC_SUPABASE_ANON_KEY",
        ),
        repr=False,
        description="Anonymous (public) API key",
    )

    timeout: float = Field(
        default=ContentServiceConfig.COLLECTION_TIMEOUT,
        gt=0,
        description="Collection request timeout in seconds",
    )
    record_timeout: float = Field(
        default=ContentServiceConfig.RECORD_TIMEOUT,
        gt=0,
        description="Single record and search request timeout in seconds",
    )
    retry_attempts: int = Field(
        default=ContentServiceConfig.RETRY_ATTEMPTS,
        ge=0,
        description="Number of transport retry attempts",
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.anon_key)

    def __repr__(self) -> str:
        """Masks anon_key in logs and debugging output."""
        masked_key = "****" if self.anon_key else "[empty]"
        return (
            f"SupabaseSettings("
            f"url={self.url!r}, "
            f"anon_key={masked_key}, "
            f"timeout={self.timeout}, "
            f"retry_attempts={self.retry_attempts})"
        )


__all__ = ["SupabaseSettings"]
