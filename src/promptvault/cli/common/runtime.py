"""Per-invocation runtime for CLI commands.

Settings are loaded, CLI overrides applied and the DI container built
the first time a command asks for it; the main callback resets it so
every invocation starts from a fresh container.
"""

from __future__ import annotations

import contextvars
import logging

from dependency_injector import providers

from promptvault.cli.common.context import CliContext, get_cli_context
from promptvault.config.loader import load_settings
from promptvault.config.models.settings import Settings
from promptvault.containers import Container
from promptvault.shared.logging import setup_structured_logger

logger = logging.getLogger(__name__)

_container_var: contextvars.ContextVar[Container | None] = contextvars.ContextVar(
    "cli_container",
    default=None,
)


def setup_logging(context: CliContext, settings: Settings) -> logging.Logger:
    """Configure the package logger from CLI options and settings."""
    return setup_structured_logger(
        "promptvault",
        level=context.get_effective_log_level(),
        log_file=settings.logging.file or None,
        use_rich_console=settings.logging.console_output,
    )


def build_container(context: CliContext) -> Container:
    """Load settings, apply CLI overrides and return a wired container."""
    settings = load_settings()
    if context.keep_cache is not None:
        settings.cache.clear_on_load = not context.keep_cache

    setup_logging(context, settings)

    container = Container()
    container.config.override(providers.Object(settings))
    logger.debug("Container built (backend=%s)", settings.cache.backend)
    return container


def get_container() -> Container:
    container = _container_var.get()
    if container is None:
        container = build_container(get_cli_context())
        _container_var.set(container)
    return container


def reset_container() -> None:
    _container_var.set(None)
