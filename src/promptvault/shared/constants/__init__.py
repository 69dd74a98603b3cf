"""
PromptVault Constants Module

This module provides centralized constants for the PromptVault application.
All magic values and policy constants are defined here to ensure
consistency across the codebase.
"""

from .api import (
    ContentDefaults,
    ContentServiceConfig,
    ContentTables,
    FallbackContent,
    HTTPHeaders,
    QueryParams,
)
from .cache import Cache, CacheKeys
from .cli import CLICommands, CLIDefaults, CLIHelp, CLIMessages
from .system import Application, FileSystem, Logging

__all__ = [
    "CLICommands",
    "CLIDefaults",
    "CLIHelp",
    "CLIMessages",
    "Application",
    "Cache",
    "CacheKeys",
    "ContentDefaults",
    "ContentServiceConfig",
    "ContentTables",
    "FallbackContent",
    "FileSystem",
    "HTTPHeaders",
    "Logging",
    "QueryParams",
]
