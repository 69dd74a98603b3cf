"""
JSON Output Formatter for PromptVault CLI

This module provides a centralized JSON formatter that all CLI commands
use to produce machine-readable output when the --json flag is given.
"""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from typing import Any

import orjson


def format_json_output(
    success: bool,
    command: str,
    data: Any | None = None,
    errors: list[str] | None = None,
    warnings: list[str] | None = None,
) -> bytes:
    """
    Format command output as JSON.

    Args:
        success: Whether the command executed successfully
        command: The command name (e.g., "prompts", "cache info")
        data: The command's output data
        errors: List of error messages
        warnings: List of warning messages

    Returns:
        JSON-encoded bytes ready for output

    Example:
        >>> output = format_json_output(
        ...     success=True,
        ...     command="categories",
        ...     data={"categories": ["Business", "Creative"]}
        ... )
        >>> print(output.decode())
        {
          "command": "categories",
          "data": {
            "categories": [
              "Business",
              "Creative"
            ]
          },
          "errors": [],
          "success": true,
          "timestamp": "2025-01-01T10:30:00+00:00",
          "warnings": []
        }
    """
    errors = errors or []
    warnings = warnings or []

    # If there are errors, success should be False
    if errors:
        success = False

    json_data = {
        "success": success,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "command": command,
        "data": data,
        "errors": errors,
        "warnings": warnings,
    }

    try:
        return orjson.dumps(
            json_data,
            option=orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2,
        )
    except TypeError as e:
        error_data = {
            "success": False,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "command": command,
            "data": None,
            "errors": [f"JSON serialization failed: {e!s}"],
            "warnings": [],
        }
        return orjson.dumps(
            error_data,
            option=orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2,
        )


def write_json_output(payload: bytes) -> None:
    """Write a formatted payload to stdout followed by a newline."""
    sys.stdout.buffer.write(payload)
    sys.stdout.buffer.write(b"\n")
    sys.stdout.buffer.flush()


def format_success_output(command: str, data: Any) -> bytes:
    """Convenience wrapper for a successful command."""
    return format_json_output(success=True, command=command, data=data)
