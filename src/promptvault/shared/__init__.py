"""Shared modules for PromptVault: constants, errors, logging and models."""
