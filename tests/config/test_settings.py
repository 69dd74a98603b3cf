"""Tests for settings models and loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from promptvault.config import CacheSettings, Settings, SupabaseSettings, load_settings
from promptvault.shared.errors import ApplicationError, ErrorCode


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    config_file = tmp_path / "settings.toml"
    config_file.write_text(
        """
[logging]
level = "debug"

[supabase]
url = "https://project.supabase.co"
anon_key = "file-key"

[cache]
backend = "memory"
freshness_window = 120
timeline_freshness_window = 900
version_tag = "v3"
clear_on_load = false
""",
        encoding="utf-8",
    )
    return config_file


class TestDefaults:
    """Default values without any configuration source."""

    def test_cache_defaults(self):
        settings = Settings()

        assert settings.cache.enabled is True
        assert settings.cache.backend == "file"
        assert settings.cache.freshness_window == 300
        assert settings.cache.version_tag == "v1"
        assert settings.cache.clear_on_load is True

    def test_default_store_path_under_home(self):
        path = CacheSettings().resolved_store_path()

        assert path == Path.home() / ".promptvault" / "cache" / "content_store.json"

    def test_freshness_overrides(self):
        overrides = CacheSettings(timeline_freshness_window=42).freshness_overrides()

        assert overrides == {"timeline-": 42}


class TestEnvironment:
    """Environment variable sources."""

    def test_nested_prefix_override(self, monkeypatch):
        monkeypatch.setenv("PROMPTVAULT_CACHE__CLEAR_ON_LOAD", "false")
        monkeypatch.setenv("PROMPTVAULT_CACHE__FRESHNESS_WINDOW", "60")

        settings = Settings()

        assert settings.cache.clear_on_load is False
        assert settings.cache.freshness_window == 60

    def test_plain_supabase_variables(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_URL", "https://env.supabase.co")
        monkeypatch.setenv("NEXT_PUBLIC_SUPABASE_ANON_KEY", "public-key")

        supabase = Settings().supabase

        assert supabase.url == "https://env.supabase.co"
        assert supabase.anon_key == "public-key"
        assert supabase.is_configured

    def test_dotenv_file_is_loaded(self, tmp_path, monkeypatch):
        # Register the variable so monkeypatch removes what load_dotenv sets
        monkeypatch.setenv("SUPABASE_URL", "placeholder")
        monkeypatch.delenv("SUPABASE_URL")
        (tmp_path / ".env").write_text("SUPABASE_URL=https://dotenv.supabase.co\n", encoding="utf-8")

        settings = load_settings()

        assert settings.supabase.url == "https://dotenv.supabase.co"

    def test_not_configured_without_credentials(self):
        assert not Settings().supabase.is_configured


class TestTomlLoading:
    """TOML configuration files."""

    def test_load_from_file(self, config_file):
        settings = load_settings(config_file)

        assert settings.logging.level == "DEBUG"
        assert settings.supabase.anon_key == "file-key"
        assert settings.cache.backend == "memory"
        assert settings.cache.version_tag == "v3"
        assert settings.cache.clear_on_load is False
        assert settings.cache.freshness_overrides() == {"timeline-": 900}

    def test_default_location_is_discovered(self, tmp_path, config_file):
        (tmp_path / "config").mkdir()
        config_file.rename(tmp_path / "config" / "config.toml")

        assert load_settings().cache.version_tag == "v3"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ApplicationError) as exc_info:
            load_settings(tmp_path / "absent.toml")

        assert exc_info.value.code == ErrorCode.CONFIG_ERROR

    def test_unparsable_file(self, tmp_path):
        bad = tmp_path / "bad.toml"
        bad.write_text("[cache\nenabled = ", encoding="utf-8")

        with pytest.raises(ApplicationError):
            load_settings(bad)

    def test_invalid_version_tag_in_file(self, tmp_path):
        bad = tmp_path / "bad.toml"
        bad.write_text('[cache]\nversion_tag = "a:b"\n', encoding="utf-8")

        with pytest.raises(ApplicationError):
            load_settings(bad)

    def test_round_trip_through_toml(self, tmp_path, config_file):
        settings = load_settings(config_file)
        target = tmp_path / "out" / "config.toml"

        settings.to_toml_file(target)

        assert Settings.from_toml_file(target).cache == settings.cache


class TestValidation:
    """Field validation and masking."""

    @pytest.mark.parametrize("tag", ["", "  ", "v:1"])
    def test_invalid_version_tag(self, tag):
        with pytest.raises(ValidationError):
            CacheSettings(version_tag=tag)

    def test_negative_window_rejected(self):
        with pytest.raises(ValidationError):
            CacheSettings(freshness_window=-5)

    def test_unknown_backend_rejected(self):
        with pytest.raises(ValidationError):
            CacheSettings(backend="redis")

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError):
            Settings(logging={"level": "chatty"})

    def test_anon_key_masked_in_repr(self):
        supabase = SupabaseSettings(url="https://x.supabase.co", anon_key="super-secret")

        assert "super-secret" not in repr(supabase)
        assert "****" in repr(supabase)
        assert "super-secret" not in repr(Settings(supabase=supabase))
