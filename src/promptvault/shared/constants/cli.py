"""
CLI Configuration Constants

This module contains constants related to the command-line interface:
command names, help texts and exit codes.
"""

from .system import Application


class CLIDefaults:
    """CLI default values."""

    VERSION = Application.VERSION
    EXIT_SUCCESS = 0
    EXIT_ERROR = 1
    EXIT_INTERRUPTED = 130


class CLICommands:
    """CLI command names."""

    PROMPTS = "prompts"
    PROMPT = "prompt"
    TIMELINE = "timeline"
    TIMELINE_PROMPT = "timeline-prompt"
    CATEGORIES = "categories"
    STYLES = "styles"
    CACHE = "cache"
    CACHE_INFO = "info"
    CACHE_CLEAR = "clear"
    CACHE_PURGE = "purge"
    CACHE_BUMP_VERSION = "bump-version"


class CLIHelp:
    """CLI help texts."""

    APP_NAME = "promptvault"
    APP_DESCRIPTION = "Browse the prompt library and manage the local content cache."
    APP_STYLE = "rich"
    VERSION_TEXT = "PromptVault CLI v{version}"

    CACHE_DESCRIPTION = "Inspect and maintain the local content cache."
    SEARCH_HELP = "Filter by text in title or description"
    CATEGORY_HELP = "Only timeline prompts in this category"
    STYLE_HELP = "Only timeline prompts with this base style"
    TIMELINE_FLAG_HELP = "Use timeline prompts instead of flat prompts"
    KEEP_CACHE_HELP = (
        "Keep cached content from earlier runs instead of clearing it at startup "
        "(default comes from cache.clear_on_load)."
    )
    BUMP_VERSION_HELP = "New cache version tag; entries written under older tags stop being served"


class CLIMessages:
    """CLI message templates."""

    NOT_FOUND = "No {kind} found with id '{item_id}'"
    EMPTY_RESULT = "No {kind} found"
    CACHE_CLEARED = "Removed {count} cache entries"
    CACHE_PURGED = "Purged {count} stale cache entries"
    VERSION_BUMPED = "Cache version tag changed from '{old}' to '{new}'"
    COMMAND_STARTED = "Starting {command} command"
    COMMAND_COMPLETED = "Completed {command} command"
