"""
Pytest configuration and shared fixtures for PromptVault tests.

This module provides common fixtures and configuration that can be used
across all test modules in the project.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest

from promptvault.cli.common.context import clear_cli_context
from promptvault.cli.common.runtime import reset_container
from promptvault.config import loader as config_loader
from promptvault.services.content_cache import ContentCacheManager
from promptvault.services.storage import MemoryKeyValueStore
from promptvault.shared.constants import CacheKeys


class FakeClock:
    """Controllable time source returning epoch seconds."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to the temporary directory.
    """
    with tempfile.TemporaryDirectory() as temp_path:
        yield Path(temp_path)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def cache_manager(memory_store: MemoryKeyValueStore, fake_clock: FakeClock) -> ContentCacheManager:
    """Cache manager over an in-memory store with a 300s window."""
    return ContentCacheManager(
        memory_store,
        version_tag="v1",
        freshness_window=300,
        freshness_overrides={CacheKeys.TIMELINE_PREFIX: 600},
        clock=fake_clock,
    )


@pytest.fixture
def prompt_row() -> dict[str, Any]:
    """A backend row from the prompts table, with the usual NULL columns."""
    return {
        "id": "p-1",
        "title": "Golden hour drone shot",
        "description": "Sweeping aerial over a coastline",
        "category": "Creative",
        "style": "Cinematic",
        "camera": "Drone",
        "lighting": "Golden hour",
        "environment": "Coast",
        "elements": ["waves", "cliffs"],
        "motion": "Slow push",
        "ending": "Fade to sky",
        "text": "",
        "keywords": None,
        "timeline": None,
        "created_at": "2025-01-02T10:00:00+00:00",
        "updated_at": None,
        "created_by": None,
        "is_featured": None,
        "is_public": True,
        "likes_count": 4,
        "usage_count": None,
    }


@pytest.fixture
def timeline_row() -> dict[str, Any]:
    """A backend row from the timeline_prompts table."""
    return {
        "id": "t-1",
        "title": "City at dawn",
        "description": "Urban sunrise sequence",
        "category": "Urban",
        "base_style": "cinematic",
        "aspect_ratio": None,
        "scene_description": "Empty streets",
        "camera_setup": "Tripod",
        "lighting": "Soft",
        "negative_prompts": None,
        "timeline": [
            {"sequence": 1, "timestamp": "00:00", "action": "Streetlights fade", "audio": "Birds"},
            {"sequence": 2, "timestamp": "00:04", "action": "Sun rises", "audio": "Traffic"},
        ],
        "created_by": "",
        "created_at": "2025-01-03T06:00:00+00:00",
        "updated_at": "2025-01-03T06:00:00+00:00",
        "is_featured": True,
        "is_public": None,
        "likes_count": 10,
        "usage_count": 2,
    }


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[None, None, None]:
    """Keep tests away from the developer's .env, config files and credentials."""
    for name in (
        "SUPABASE_URL",
        "SUPABASE_ANON_KEY",
        "NEXT_PUBLIC_SUPABASE_URL",
        "NEXT_PUBLIC_SUPABASE_ANON_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    for name in list(os.environ):
        if name.startswith("PROMPTVAULT_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config_loader, "_loader", config_loader.SettingsLoader())

    clear_cli_context()
    reset_container()
    yield
    clear_cli_context()
    reset_container()

    # setup_structured_logger detaches the package logger from the root logger
    package_logger = logging.getLogger("promptvault")
    package_logger.handlers.clear()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")


def pytest_collection_modifyitems(config, items):
    """Add the unit marker to everything not marked as integration."""
    for item in items:
        if "integration" not in item.keywords:
            item.add_marker(pytest.mark.unit)
