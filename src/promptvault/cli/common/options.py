"""
Reusable Typer Options Module

This module provides the option definitions shared by the main callback
and the commands, so flags look the same everywhere.
"""

from __future__ import annotations

import typer

from promptvault.shared.constants import CLIHelp

verbose_option = typer.Option(
    "--verbose",
    "-v",
    count=True,
    help="Enable verbose output (equivalent to --log-level DEBUG).",
)

log_level_option = typer.Option(
    "--log-level",
    case_sensitive=False,
    help="Set the logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Default: WARNING.",
)

json_output_option = typer.Option(
    "--json",
    help="Enable machine-readable JSON output instead of human-readable format.",
)

version_option = typer.Option(
    "--version",
    "-V",
    help="Show version information and exit.",
    is_eager=True,
)

keep_cache_option = typer.Option(
    "--keep-cache/--clear-on-load",
    help=CLIHelp.KEEP_CACHE_HELP,
    show_default=False,
)

search_option = typer.Option("--search", "-s", help=CLIHelp.SEARCH_HELP)

category_option = typer.Option("--category", "-c", help=CLIHelp.CATEGORY_HELP)

style_option = typer.Option("--style", help=CLIHelp.STYLE_HELP)

timeline_flag_option = typer.Option("--timeline", "-t", help=CLIHelp.TIMELINE_FLAG_HELP)
