"""
System Configuration Constants

This module contains constants related to application metadata,
file system locations and logging defaults.
"""

# =============================================================================
# BASE CONSTANTS (Foundation values used by other constants)
# =============================================================================

BASE_SECOND = 1
BASE_MINUTE = 60 * BASE_SECOND

# =============================================================================
# APPLICATION METADATA
# =============================================================================


class Application:
    """Application metadata constants."""

    NAME = "PromptVault"
    VERSION = "0.1.0"
    DESCRIPTION = "Prompt library client with a versioned content cache"


# =============================================================================
# FILE AND PATH CONFIGURATION
# =============================================================================


class FileSystem:
    """File system related constants."""

    HOME_DIR = ".promptvault"
    CONFIG_DIRECTORY = "config"
    CACHE_DIRECTORY = "cache"

    CACHE_STORE_FILENAME = "content_store.json"
    ENV_FILENAME = ".env"
    CONFIG_FILENAME = "config.toml"


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================


class Logging:
    """Logging configuration constants."""

    DEFAULT_LEVEL = "INFO"
