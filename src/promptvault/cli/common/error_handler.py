"""
CLI Error Handling Utilities

This module provides consistent error handling across CLI commands:
mapping exceptions to CliError and exit codes, logging them, and
writing them to stderr or as a JSON envelope.
"""

from __future__ import annotations

import functools
import logging
import sys
from collections.abc import Callable
from typing import Any, TypeVar

from promptvault.cli.common.context import get_cli_context
from promptvault.cli.json_formatter import format_json_output, write_json_output
from promptvault.shared.constants import CLIDefaults
from promptvault.shared.errors import (
    ApplicationError,
    CliError,
    ErrorCode,
    InfrastructureError,
    PromptVaultError,
    SecurityError,
    create_cli_error,
)

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., int])


def handle_cli_error(
    error: BaseException,
    command: str,
    *,
    json_output: bool = False,
) -> int:
    """Handle CLI errors with consistent formatting and logging.

    Args:
        error: The exception that occurred
        command: The CLI command being executed
        json_output: Whether to output JSON format

    Returns:
        Exit code for the CLI command
    """
    error_context: dict[str, Any] = {
        "command": command,
        "error_type": type(error).__name__,
        "json_output": json_output,
    }
    cli_error = _map_error_to_cli_error(error, command, error_context)
    _log_error(error, command, cli_error, error_context)
    _output_error(cli_error, error, command, error_context, json_output=json_output)

    return cli_error.exit_code


def _map_error_to_cli_error(
    error: BaseException,
    command: str,
    error_context: dict[str, Any],
) -> CliError:
    """Map specific exception types to CLI errors."""
    if isinstance(error, CliError):
        error_context["error_code"] = error.code.value
        return error

    if isinstance(error, KeyboardInterrupt):
        error_context["interrupt_type"] = "user_interrupt"
        cli_error = create_cli_error(
            message="Command interrupted by user",
            command=command,
            exit_code=CLIDefaults.EXIT_INTERRUPTED,
        )
        cli_error.code = ErrorCode.CLI_COMMAND_INTERRUPTED
        return cli_error

    if isinstance(error, PromptVaultError):
        error_context["error_code"] = error.code.value
        if isinstance(error, SecurityError):
            prefix = "Configuration error"
        elif isinstance(error, ApplicationError):
            prefix = "Application error"
        elif isinstance(error, InfrastructureError):
            prefix = "Infrastructure error"
        else:
            prefix = "Error"
        cli_error = create_cli_error(
            message=f"{prefix}: {error.message}",
            command=command,
            original_error=error,
        )
        cli_error.code = error.code
        return cli_error

    if isinstance(error, OSError):
        error_context["error_category"] = "file_system"
        return create_cli_error(
            message=f"File system error: {error}",
            command=command,
            original_error=error,
        )

    error_context["error_category"] = "unexpected"
    return create_cli_error(
        message=f"Unexpected error: {error}",
        command=command,
        original_error=error if isinstance(error, Exception) else None,
    )


def _log_error(
    error: BaseException,
    command: str,
    cli_error: CliError,
    error_context: dict[str, Any],
) -> None:
    """Log the error with structured context."""
    if isinstance(error, KeyboardInterrupt):
        logger.warning(
            "Command interrupted: %s",
            cli_error.message,
            extra={"context": error_context},
        )
    elif isinstance(error, PromptVaultError):
        logger.error(
            "CLI error in %s: %s",
            command,
            cli_error.message,
            extra={"error_code": error.code.name, "context": error_context},
        )
    else:
        logger.exception(
            "CLI error in %s: %s",
            command,
            cli_error.message,
            extra={"context": error_context},
        )


def _output_error(
    cli_error: CliError,
    error: BaseException,
    command: str,
    error_context: dict[str, Any],
    *,
    json_output: bool,
) -> None:
    """Output error message in appropriate format."""
    if not json_output:
        sys.stderr.write(f"Error: {cli_error.message}\n")
        return

    try:
        write_json_output(
            format_json_output(
                success=False,
                command=command,
                errors=[cli_error.message],
                data={
                    "error_code": cli_error.code.value,
                    "error_type": type(error).__name__,
                    "exit_code": cli_error.exit_code,
                    "context": error_context,
                },
            )
        )
    except OSError as output_error:
        logger.exception("JSON output error for %s", command)
        sys.stderr.write(f"Error: {cli_error.message}\n")
        sys.stderr.write(f"JSON output failed: {output_error}\n")


def handle_cli_errors(command: str) -> Callable[[F], F]:
    """Decorator turning exceptions raised by a command handler into exit codes.

    Example:
        >>> @handle_cli_errors(command="prompts")
        ... def handle_prompts_command(search: str | None) -> int:
        ...     ...
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> int:
            try:
                return func(*args, **kwargs)
            except (KeyboardInterrupt, Exception) as e:  # noqa: BLE001
                return handle_cli_error(
                    e,
                    command,
                    json_output=get_cli_context().is_json_output_enabled(),
                )

        return wrapper  # type: ignore[return-value]

    return decorator
