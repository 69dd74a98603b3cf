"""
PromptVault Typer CLI Application

This is the main Typer-based CLI application for PromptVault. It exposes
the prompt library through the cache-aside repository and the cache
maintenance operations.
"""

from __future__ import annotations

from typing import Annotated

import typer

from promptvault.cli.cache_handler import (
    handle_cache_bump_version_command,
    handle_cache_clear_command,
    handle_cache_info_command,
    handle_cache_purge_command,
)
from promptvault.cli.common.context import CliContext, LogLevel, set_cli_context
from promptvault.cli.common.options import (
    category_option,
    json_output_option,
    keep_cache_option,
    log_level_option,
    search_option,
    style_option,
    timeline_flag_option,
    verbose_option,
    version_option,
)
from promptvault.cli.common.runtime import reset_container
from promptvault.cli.content_handler import (
    handle_categories_command,
    handle_prompt_command,
    handle_prompts_command,
    handle_styles_command,
    handle_timeline_command,
    handle_timeline_prompt_command,
)
from promptvault.shared.constants import CLICommands, CLIDefaults, CLIHelp

# Version information
__version__ = CLIDefaults.VERSION


def version_callback(value: bool) -> None:
    """Print version information and exit."""
    if value:
        typer.echo(CLIHelp.VERSION_TEXT.format(version=__version__))
        raise typer.Exit


def _finish(exit_code: int) -> None:
    if exit_code != CLIDefaults.EXIT_SUCCESS:
        raise typer.Exit(exit_code)


app = typer.Typer(
    name=CLIHelp.APP_NAME,
    help=CLIHelp.APP_DESCRIPTION,
    add_completion=True,
    rich_markup_mode=CLIHelp.APP_STYLE,
    no_args_is_help=True,
)

cache_app = typer.Typer(
    name=CLICommands.CACHE,
    help=CLIHelp.CACHE_DESCRIPTION,
    no_args_is_help=True,
)
app.add_typer(cache_app, name=CLICommands.CACHE)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: Annotated[int, verbose_option] = 0,
    log_level: Annotated[LogLevel, log_level_option] = LogLevel.WARNING,
    json_output: Annotated[bool, json_output_option] = False,
    keep_cache: Annotated[bool | None, keep_cache_option] = None,
    version: Annotated[bool, version_option] = False,
) -> None:
    """Process the global options before any command runs."""
    if version:
        version_callback(value=True)

    set_cli_context(
        CliContext(
            verbose=verbose,
            log_level=log_level,
            json_output=json_output,
            keep_cache=keep_cache,
        )
    )
    reset_container()

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


@app.command(CLICommands.PROMPTS)
def prompts_command(
    search: Annotated[str | None, search_option] = None,
) -> None:
    """
    List public prompts, newest first.

    Examples:
        promptvault prompts
        promptvault prompts --search sunset
        promptvault --keep-cache --json prompts
    """
    _finish(handle_prompts_command(search))


@app.command(CLICommands.PROMPT)
def prompt_command(
    item_id: Annotated[str, typer.Argument(help="Prompt identifier")],
) -> None:
    """Show a single prompt."""
    _finish(handle_prompt_command(item_id))


@app.command(CLICommands.TIMELINE)
def timeline_command(
    search: Annotated[str | None, search_option] = None,
    category: Annotated[str | None, category_option] = None,
    style: Annotated[str | None, style_option] = None,
) -> None:
    """
    List timeline prompts, optionally filtered by text, category and base style.

    Without filters the list is served through the content cache; filtered
    searches always go to the content service.
    """
    _finish(handle_timeline_command(search, category, style))


@app.command(CLICommands.TIMELINE_PROMPT)
def timeline_prompt_command(
    item_id: Annotated[str, typer.Argument(help="Timeline prompt identifier")],
) -> None:
    """Show a single timeline prompt with its sequence."""
    _finish(handle_timeline_prompt_command(item_id))


@app.command(CLICommands.CATEGORIES)
def categories_command(
    timeline: Annotated[bool, timeline_flag_option] = False,
) -> None:
    """List the distinct categories (fallback list when offline)."""
    _finish(handle_categories_command(timeline))


@app.command(CLICommands.STYLES)
def styles_command(
    timeline: Annotated[bool, timeline_flag_option] = False,
) -> None:
    """List the distinct styles (fallback list when offline)."""
    _finish(handle_styles_command(timeline))


@cache_app.command(CLICommands.CACHE_INFO)
def cache_info_command() -> None:
    """Show cache entries by state and the active cache policy."""
    _finish(handle_cache_info_command())


@cache_app.command(CLICommands.CACHE_CLEAR)
def cache_clear_command() -> None:
    """Remove every cached entry."""
    _finish(handle_cache_clear_command())


@cache_app.command(CLICommands.CACHE_PURGE)
def cache_purge_command() -> None:
    """Remove superseded, expired and unreadable entries."""
    _finish(handle_cache_purge_command())


@cache_app.command(CLICommands.CACHE_BUMP_VERSION)
def cache_bump_version_command(
    new_tag: Annotated[str, typer.Argument(help=CLIHelp.BUMP_VERSION_HELP)],
) -> None:
    """Change the cache version tag."""
    _finish(handle_cache_bump_version_command(new_tag))


if __name__ == "__main__":
    app()
