"""Content browsing command handlers for PromptVault CLI.

Each handler starts the application shell (which applies the
clear-on-load policy), reads through the cache-aside repository and
renders the result as a rich table or as the JSON envelope.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from rich.console import Console
from rich.table import Table

from promptvault.app import PromptVaultApp
from promptvault.cli.common.context import get_cli_context
from promptvault.cli.common.error_handler import handle_cli_errors
from promptvault.cli.common.runtime import get_container
from promptvault.cli.json_formatter import format_json_output, write_json_output
from promptvault.shared.constants import CLICommands, CLIDefaults, CLIMessages
from promptvault.shared.errors import CliError, create_cli_error
from promptvault.shared.models import (
    ContentRecord,
    Prompt,
    TimelinePrompt,
    dump_records,
)

logger = logging.getLogger(__name__)


def _started_app() -> PromptVaultApp:
    app = get_container().app()
    app.start()
    return app


def _emit(command: str, data: dict, warnings: list[str] | None = None) -> bool:
    """Write the JSON envelope when --json is active; report whether it did."""
    if not get_cli_context().is_json_output_enabled():
        return False
    write_json_output(
        format_json_output(success=True, command=command, data=data, warnings=warnings)
    )
    return True


def _prompt_table(prompts: Sequence[Prompt]) -> Table:
    table = Table(title="Prompts", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title", style="green")
    table.add_column("Category")
    table.add_column("Style")
    table.add_column("Likes", justify="right")
    for prompt in prompts:
        table.add_row(
            prompt.id,
            prompt.title,
            prompt.category,
            prompt.style,
            str(prompt.likes_count),
        )
    return table


def _timeline_table(prompts: Sequence[TimelinePrompt]) -> Table:
    table = Table(title="Timeline prompts", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title", style="green")
    table.add_column("Category")
    table.add_column("Base style")
    table.add_column("Aspect")
    table.add_column("Steps", justify="right")
    for prompt in prompts:
        table.add_row(
            prompt.id,
            prompt.title,
            prompt.category,
            prompt.base_style,
            prompt.aspect_ratio,
            str(len(prompt.timeline)),
        )
    return table


def _detail_table(record: ContentRecord, fields: Sequence[str]) -> Table:
    table = Table(title=record.title or record.id, show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for name in fields:
        value = getattr(record, name)
        if isinstance(value, list):
            value = ", ".join(str(v) for v in value)
        table.add_row(name, str(value))
    return table


def _print_records(
    command: str,
    kind: str,
    records: Sequence[ContentRecord],
    table: Table,
) -> None:
    warnings = [] if records else [CLIMessages.EMPTY_RESULT.format(kind=kind)]
    if _emit(command, {kind: dump_records(list(records)), "count": len(records)}, warnings):
        return

    console = Console()
    if not records:
        console.print(f"[yellow]{CLIMessages.EMPTY_RESULT.format(kind=kind)}[/yellow]")
        return
    console.print(table)


def _print_labels(command: str, kind: str, labels: list[str]) -> None:
    if _emit(command, {kind: labels}):
        return
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column(kind.capitalize(), style="green")
    for label in labels:
        table.add_row(label)
    Console().print(table)


def _not_found(command: str, kind: str, item_id: str) -> CliError:
    return create_cli_error(
        CLIMessages.NOT_FOUND.format(kind=kind, item_id=item_id),
        command=command,
        operation=f"handle_{command.replace('-', '_')}",
    )


@handle_cli_errors(command=CLICommands.PROMPTS)
def handle_prompts_command(search: str | None = None) -> int:
    """List public prompts, optionally filtered by a search query."""
    logger.info(CLIMessages.COMMAND_STARTED.format(command=CLICommands.PROMPTS))
    repository = _started_app().repository
    prompts = repository.search_items(search) if search else repository.get_items()
    _print_records(CLICommands.PROMPTS, "prompts", prompts, _prompt_table(prompts))
    logger.info(CLIMessages.COMMAND_COMPLETED.format(command=CLICommands.PROMPTS))
    return CLIDefaults.EXIT_SUCCESS


@handle_cli_errors(command=CLICommands.PROMPT)
def handle_prompt_command(item_id: str) -> int:
    prompt = _started_app().repository.get_item(item_id)
    if prompt is None:
        raise _not_found(CLICommands.PROMPT, "prompt", item_id)

    if _emit(CLICommands.PROMPT, {"prompt": prompt.model_dump(mode="json")}):
        return CLIDefaults.EXIT_SUCCESS

    Console().print(
        _detail_table(
            prompt,
            (
                "id",
                "category",
                "description",
                "style",
                "camera",
                "lighting",
                "environment",
                "elements",
                "motion",
                "ending",
                "text",
                "keywords",
                "likes_count",
                "usage_count",
                "created_at",
            ),
        )
    )
    return CLIDefaults.EXIT_SUCCESS


@handle_cli_errors(command=CLICommands.TIMELINE)
def handle_timeline_command(
    search: str | None = None,
    category: str | None = None,
    style: str | None = None,
) -> int:
    """List timeline prompts, optionally filtered."""
    logger.info(CLIMessages.COMMAND_STARTED.format(command=CLICommands.TIMELINE))
    repository = _started_app().repository
    prompts = repository.search_timeline_items(search or "", category, style)
    _print_records(
        CLICommands.TIMELINE,
        "timeline_prompts",
        prompts,
        _timeline_table(prompts),
    )
    logger.info(CLIMessages.COMMAND_COMPLETED.format(command=CLICommands.TIMELINE))
    return CLIDefaults.EXIT_SUCCESS


@handle_cli_errors(command=CLICommands.TIMELINE_PROMPT)
def handle_timeline_prompt_command(item_id: str) -> int:
    prompt = _started_app().repository.get_timeline_item(item_id)
    if prompt is None:
        raise _not_found(CLICommands.TIMELINE_PROMPT, "timeline prompt", item_id)

    if _emit(CLICommands.TIMELINE_PROMPT, {"timeline_prompt": prompt.model_dump(mode="json")}):
        return CLIDefaults.EXIT_SUCCESS

    console = Console()
    console.print(
        _detail_table(
            prompt,
            (
                "id",
                "category",
                "description",
                "base_style",
                "aspect_ratio",
                "scene_description",
                "camera_setup",
                "lighting",
                "negative_prompts",
                "created_at",
            ),
        )
    )

    steps = Table(title="Timeline", show_header=True, header_style="bold magenta")
    steps.add_column("#", justify="right")
    steps.add_column("Time", style="cyan")
    steps.add_column("Action")
    steps.add_column("Audio")
    for step in prompt.timeline:
        steps.add_row(str(step.sequence), step.timestamp, step.action, step.audio)
    console.print(steps)
    return CLIDefaults.EXIT_SUCCESS


@handle_cli_errors(command=CLICommands.CATEGORIES)
def handle_categories_command(timeline: bool = False) -> int:
    repository = _started_app().repository
    labels = repository.get_timeline_categories() if timeline else repository.get_categories()
    _print_labels(CLICommands.CATEGORIES, "categories", labels)
    return CLIDefaults.EXIT_SUCCESS


@handle_cli_errors(command=CLICommands.STYLES)
def handle_styles_command(timeline: bool = False) -> int:
    repository = _started_app().repository
    labels = repository.get_timeline_styles() if timeline else repository.get_styles()
    _print_labels(CLICommands.STYLES, "styles", labels)
    return CLIDefaults.EXIT_SUCCESS
