"""Cache command handlers for PromptVault CLI.

These commands operate on the durable store directly and never run the
startup clear-on-load policy, so ``cache info`` reports what earlier
sessions left behind.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.table import Table

from promptvault.cli.common.context import get_cli_context
from promptvault.cli.common.error_handler import handle_cli_errors
from promptvault.cli.common.runtime import get_container
from promptvault.cli.json_formatter import format_success_output, write_json_output
from promptvault.config.loader import update_and_save_config
from promptvault.config.models.settings import Settings
from promptvault.shared.constants import Cache, CLICommands, CLIDefaults, CLIMessages

logger = logging.getLogger(__name__)


def _command(name: str) -> str:
    return f"{CLICommands.CACHE} {name}"


def _emit(name: str, data: dict) -> bool:
    if not get_cli_context().is_json_output_enabled():
        return False
    write_json_output(format_success_output(_command(name), data))
    return True


@handle_cli_errors(command=_command(CLICommands.CACHE_INFO))
def handle_cache_info_command() -> int:
    """Show entry counts by state plus the active cache policy."""
    container = get_container()
    settings = container.config()
    info = container.content_cache().info()

    data = info.to_dict()
    data["enabled"] = settings.cache.enabled
    data["backend"] = settings.cache.backend
    data["timeline_freshness_window"] = settings.cache.timeline_freshness_window
    data["clear_on_load"] = settings.cache.clear_on_load
    if settings.cache.backend == Cache.BACKEND_FILE:
        data["store_path"] = str(settings.cache.resolved_store_path())

    if _emit(CLICommands.CACHE_INFO, data):
        return CLIDefaults.EXIT_SUCCESS

    table = Table(title="Content cache", show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Enabled", str(settings.cache.enabled))
    table.add_row("Backend", settings.cache.backend)
    if "store_path" in data:
        table.add_row("Store", data["store_path"])
    table.add_row("Version tag", info.version_tag)
    table.add_row("Freshness window", f"{info.freshness_window:g}s")
    table.add_row("Timeline freshness window", f"{settings.cache.timeline_freshness_window:g}s")
    table.add_row("Clear on load", str(settings.cache.clear_on_load))
    table.add_row("Total entries", str(info.total_entries))
    table.add_row("Fresh", str(info.fresh_entries))
    table.add_row("Expired", str(info.expired_entries))
    table.add_row("Superseded", str(info.superseded_entries))
    table.add_row("Unreadable", str(info.unreadable_entries))
    Console().print(table)
    return CLIDefaults.EXIT_SUCCESS


@handle_cli_errors(command=_command(CLICommands.CACHE_CLEAR))
def handle_cache_clear_command() -> int:
    """Remove every cache entry, whatever its version tag."""
    container = get_container()
    app = container.app()
    removed = app.clear_cache() if app.cache is not None else container.content_cache().invalidate_all()

    if not _emit(CLICommands.CACHE_CLEAR, {"removed": removed}):
        Console().print(f"[green]{CLIMessages.CACHE_CLEARED.format(count=removed)}[/green]")
    return CLIDefaults.EXIT_SUCCESS


@handle_cli_errors(command=_command(CLICommands.CACHE_PURGE))
def handle_cache_purge_command() -> int:
    """Remove superseded, expired and unreadable entries only."""
    purged = get_container().content_cache().purge_stale()

    if not _emit(CLICommands.CACHE_PURGE, {"purged": purged}):
        Console().print(f"[green]{CLIMessages.CACHE_PURGED.format(count=purged)}[/green]")
    return CLIDefaults.EXIT_SUCCESS


@handle_cli_errors(command=_command(CLICommands.CACHE_BUMP_VERSION))
def handle_cache_bump_version_command(new_tag: str) -> int:
    """Switch the version tag and persist it in the configuration file."""
    cache = get_container().content_cache()
    previous = cache.bump_version(new_tag)

    def _set_tag(settings: Settings) -> None:
        settings.cache.version_tag = new_tag

    update_and_save_config(_set_tag)
    logger.info(CLIMessages.VERSION_BUMPED.format(old=previous, new=new_tag))

    if not _emit(CLICommands.CACHE_BUMP_VERSION, {"previous": previous, "current": new_tag}):
        Console().print(
            f"[green]{CLIMessages.VERSION_BUMPED.format(old=previous, new=new_tag)}[/green]"
        )
    return CLIDefaults.EXIT_SUCCESS
