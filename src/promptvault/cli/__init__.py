"""Command-line interface for PromptVault."""

from .typer_app import app

__all__ = ["app"]
