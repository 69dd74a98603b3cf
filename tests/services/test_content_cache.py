"""Tests for the content cache manager."""

from __future__ import annotations

import logging
from datetime import datetime

import orjson
import pytest

from promptvault.services.content_cache import CacheEntry, ContentCacheManager
from promptvault.services.storage import MemoryKeyValueStore
from promptvault.shared.constants import CacheKeys
from promptvault.shared.errors import (
    DomainError,
    ErrorCode,
    StorageUnavailableError,
    create_storage_unavailable_error,
)


class TestCacheEntry:
    """Test the CacheEntry Pydantic model."""

    def test_entry_age(self):
        entry = CacheEntry(key="items", value=[], captured_at=100.0, version="v1")

        assert entry.age(250.0) == 150.0

    def test_entry_requires_key_and_version(self):
        with pytest.raises(ValueError):
            CacheEntry(key="", value=[], captured_at=0.0, version="v1")
        with pytest.raises(ValueError):
            CacheEntry(key="items", value=[], captured_at=0.0, version="")


class TestStorageKeys:
    """Test namespaced storage key generation."""

    def test_storage_key_embeds_namespace_and_tag(self, cache_manager):
        assert cache_manager.storage_key("items") == "promptvault:v1:items"
        assert cache_manager.storage_key("items", "v9") == "promptvault:v9:items"

    def test_record_keys_keep_their_separator(self, cache_manager, memory_store):
        cache_manager.put(CacheKeys.item("42"), {"id": "42"})

        assert memory_store.keys() == ["promptvault:v1:item:42"]
        assert cache_manager.get("item:42") == {"id": "42"}

    def test_empty_key_is_rejected(self, cache_manager):
        with pytest.raises(DomainError) as exc_info:
            cache_manager.get("")

        assert exc_info.value.code == ErrorCode.VALIDATION_ERROR

    def test_put_persists_entry_shape(self, cache_manager, memory_store, fake_clock):
        fake_clock.now = 1234.5
        cache_manager.put("styles", ["Action"])

        stored = orjson.loads(memory_store.get_item("promptvault:v1:styles"))
        assert stored == {
            "key": "styles",
            "value": ["Action"],
            "captured_at": 1234.5,
            "version": "v1",
        }


class TestRoundTrip:
    """put followed by get returns the value."""

    @pytest.mark.parametrize(
        "value",
        [
            [{"id": "a"}],
            {"nested": {"list": [1, 2, 3]}},
            ["Business", "Creative"],
            "plain string",
            0,
        ],
    )
    def test_put_then_get(self, cache_manager, value):
        assert cache_manager.put("items", value) is True
        assert cache_manager.get("items") == value

    def test_get_missing_key(self, cache_manager):
        assert cache_manager.get("items") is None
        assert cache_manager.statistics.misses == 1

    def test_refresh_replaces_value(self, cache_manager):
        cache_manager.put("items", [{"id": "a"}])
        cache_manager.put("items", [{"id": "b"}])

        assert cache_manager.get("items") == [{"id": "b"}]

    def test_get_entry_exposes_capture_time(self, cache_manager, fake_clock):
        fake_clock.now = 50
        cache_manager.put("items", [])
        fake_clock.now = 60

        entry = cache_manager.get_entry("items")

        assert entry is not None
        assert entry.captured_at == 50
        assert entry.version == "v1"

    def test_statistics_count_hits_and_writes(self, cache_manager):
        cache_manager.put("items", [])
        cache_manager.get("items")
        cache_manager.get("styles")

        stats = cache_manager.statistics
        assert stats.writes == 1
        assert stats.hits == 1
        assert stats.misses == 1
        assert stats.hit_ratio == 0.5


class TestFreshness:
    """Entries are served only while younger than their freshness window."""

    def test_expiry_boundary(self, cache_manager, fake_clock):
        cache_manager.put("items", ["x"])

        fake_clock.now = 300 - 0.001
        assert cache_manager.get("items") == ["x"]

        fake_clock.now = 300 + 0.001
        assert cache_manager.get("items") is None

    def test_entry_at_exact_window_is_stale(self, cache_manager, fake_clock):
        cache_manager.put("items", ["x"])
        fake_clock.now = 300

        assert cache_manager.get("items") is None

    def test_expire_and_refresh_scenario(self, cache_manager, fake_clock):
        fake_clock.now = 0
        cache_manager.put("items", [{"id": "a"}])

        fake_clock.now = 100
        assert cache_manager.get("items") == [{"id": "a"}]

        fake_clock.now = 400
        assert cache_manager.get("items") is None

        cache_manager.put("items", [{"id": "a"}, {"id": "b"}])
        fake_clock.now = 401
        assert cache_manager.get("items") == [{"id": "a"}, {"id": "b"}]

    def test_expired_entry_is_removed(self, cache_manager, memory_store, fake_clock):
        cache_manager.put("items", ["x"])
        fake_clock.now = 1000

        cache_manager.get("items")

        assert memory_store.get_item("promptvault:v1:items") is None

    def test_timeline_keys_use_their_own_window(self, cache_manager, fake_clock):
        cache_manager.put(CacheKeys.ITEMS, ["flat"])
        cache_manager.put(CacheKeys.TIMELINE_ITEMS, ["timeline"])
        cache_manager.put(CacheKeys.timeline_item("t-1"), {"id": "t-1"})

        fake_clock.now = 400
        assert cache_manager.get(CacheKeys.ITEMS) is None
        assert cache_manager.get(CacheKeys.TIMELINE_ITEMS) == ["timeline"]
        assert cache_manager.get("timeline-item:t-1") == {"id": "t-1"}

        fake_clock.now = 600
        assert cache_manager.get(CacheKeys.TIMELINE_ITEMS) is None

    def test_longest_prefix_override_wins(self, memory_store, fake_clock):
        cache = ContentCacheManager(
            memory_store,
            freshness_window=300,
            freshness_overrides={"timeline-": 600, "timeline-item": 30},
            clock=fake_clock,
        )

        assert cache.freshness_window_for("timeline-styles") == 600
        assert cache.freshness_window_for("timeline-item:1") == 30
        assert cache.freshness_window_for("items") == 300

    def test_zero_window_never_serves(self, memory_store, fake_clock):
        cache = ContentCacheManager(memory_store, freshness_window=0, clock=fake_clock)

        cache.put("items", ["x"])

        assert cache.get("items") is None

    def test_negative_window_is_rejected(self, memory_store):
        with pytest.raises(DomainError):
            ContentCacheManager(memory_store, freshness_window=-1)


class TestInvalidateAll:
    """invalidate_all removes every namespaced entry and nothing else."""

    def test_all_keys_absent_after_invalidate(self, cache_manager):
        keys = ["items", "categories", "styles", "timeline-items", "item:1"]
        for key in keys:
            cache_manager.put(key, [key])

        removed = cache_manager.invalidate_all()

        assert removed == len(keys)
        for key in keys:
            assert cache_manager.get(key) is None

    def test_removes_entries_of_every_version(self, cache_manager, memory_store):
        cache_manager.put("items", ["old"])
        cache_manager.bump_version("v2")
        cache_manager.put("items", ["new"])

        assert cache_manager.invalidate_all() == 2
        assert memory_store.keys() == []

    def test_unrelated_keys_are_untouched(self, cache_manager, memory_store):
        memory_store.set_item("theme", "dark")
        memory_store.set_item("promptvaultish", "x")
        memory_store.set_item("supabase.auth.token", "secret")
        cache_manager.put("items", ["x"])

        cache_manager.invalidate_all()

        assert sorted(memory_store.keys()) == ["promptvaultish", "supabase.auth.token", "theme"]

    def test_initialize_respects_clear_on_load(self, cache_manager):
        cache_manager.put("items", ["x"])

        assert cache_manager.initialize(clear_on_load=False) == 0
        assert cache_manager.get("items") == ["x"]

        assert cache_manager.initialize(clear_on_load=True) == 1
        assert cache_manager.get("items") is None

    def test_delete_single_key(self, cache_manager):
        cache_manager.put("items", ["x"])
        cache_manager.put("styles", ["y"])

        assert cache_manager.delete("items") is True
        assert cache_manager.delete("items") is False
        assert cache_manager.get("styles") == ["y"]


class TestVersionBump:
    """bump_version hides entries written under older tags."""

    def test_old_entries_unreachable_but_present(self, cache_manager, memory_store):
        cache_manager.put("items", ["x"])

        previous = cache_manager.bump_version("v2")

        assert previous == "v1"
        assert cache_manager.version_tag == "v2"
        assert cache_manager.get("items") is None
        assert memory_store.get_item("promptvault:v1:items") is not None

    def test_same_tag_is_a_noop(self, cache_manager):
        cache_manager.put("items", ["x"])

        cache_manager.bump_version("v1")

        assert cache_manager.get("items") == ["x"]

    def test_switching_back_restores_fresh_entries(self, cache_manager):
        cache_manager.put("items", ["x"])
        cache_manager.bump_version("v2")
        cache_manager.bump_version("v1")

        assert cache_manager.get("items") == ["x"]

    @pytest.mark.parametrize("tag", ["", "   ", "v:2"])
    def test_invalid_tags_are_rejected(self, cache_manager, tag):
        with pytest.raises(DomainError) as exc_info:
            cache_manager.bump_version(tag)

        assert exc_info.value.code == ErrorCode.INVALID_VERSION_TAG
        assert cache_manager.version_tag == "v1"


class TestFailureHandling:
    """Storage and deserialization failures degrade to a miss."""

    def test_failing_write_does_not_raise(self, cache_manager, memory_store, mocker):
        mocker.patch.object(
            memory_store,
            "set_item",
            side_effect=create_storage_unavailable_error("disk full", key="items"),
        )

        assert cache_manager.put("items", ["x"]) is False
        assert cache_manager.get("items") is None
        assert cache_manager.statistics.failed_writes == 1

    def test_quota_exceeded_is_a_failed_write(self, fake_clock):
        store = MemoryKeyValueStore(quota_bytes=64)
        cache = ContentCacheManager(store, clock=fake_clock)

        assert cache.put("items", ["x" * 200]) is False
        assert cache.get("items") is None

    def test_unexpected_store_exception_on_write(self, cache_manager, memory_store, mocker):
        mocker.patch.object(memory_store, "set_item", side_effect=RuntimeError("boom"))

        assert cache_manager.put("items", ["x"]) is False

    def test_failing_read_is_a_miss(self, cache_manager, memory_store, mocker):
        cache_manager.put("items", ["x"])
        mocker.patch.object(memory_store, "get_item", side_effect=OSError("unavailable"))

        assert cache_manager.get("items") is None
        assert cache_manager.statistics.failed_reads == 1

    def test_failing_keys_listing_clears_nothing(self, cache_manager, memory_store, mocker):
        mocker.patch.object(memory_store, "keys", side_effect=RuntimeError("locked"))

        assert cache_manager.invalidate_all() == 0
        assert cache_manager.purge_stale() == 0

    def test_storage_failure_logged_as_warning(self, cache_manager, memory_store, mocker, caplog):
        mocker.patch.object(
            memory_store,
            "set_item",
            side_effect=StorageUnavailableError(ErrorCode.STORAGE_UNAVAILABLE, "no storage"),
        )

        with caplog.at_level(logging.DEBUG, logger="promptvault"):
            cache_manager.put("items", ["x"])

        failures = [r for r in caplog.records if getattr(r, "error_code", None)]
        assert len(failures) == 1
        assert failures[0].levelno == logging.WARNING
        assert failures[0].error_code == "STORAGE_UNAVAILABLE"
        assert failures[0].exc_info is None

    def test_corrupted_entry_is_a_miss_and_removed(self, cache_manager, memory_store, caplog):
        memory_store.set_item("promptvault:v1:items", "{not json")

        with caplog.at_level(logging.DEBUG, logger="promptvault"):
            assert cache_manager.get("items") is None

        assert memory_store.get_item("promptvault:v1:items") is None
        failures = [r for r in caplog.records if getattr(r, "error_code", None)]
        assert failures[0].levelno == logging.INFO
        assert failures[0].error_code == "CACHE_DESERIALIZATION_FAILED"

    def test_entry_with_wrong_shape_is_a_miss(self, cache_manager, memory_store):
        memory_store.set_item("promptvault:v1:items", orjson.dumps({"data": [1]}).decode())

        assert cache_manager.get("items") is None

    def test_entry_for_another_key_is_ignored(self, cache_manager, memory_store):
        foreign = CacheEntry(key="styles", value=["x"], captured_at=0, version="v1")
        memory_store.set_item("promptvault:v1:items", foreign.model_dump_json())

        assert cache_manager.get("items") is None

    def test_unserializable_value_is_not_cached(self, cache_manager):
        assert cache_manager.put("items", object()) is False
        assert cache_manager.get("items") is None

    @pytest.mark.parametrize(
        "value",
        [float("inf"), [float("nan")], {1: "a"}, ("a", "b"), {"when": datetime(2025, 1, 1)}],
    )
    def test_value_that_would_read_back_changed_is_rejected(self, cache_manager, memory_store, value):
        assert cache_manager.put("items", value) is False

        assert memory_store.get_item("promptvault:v1:items") is None
        assert cache_manager.statistics.failed_writes == 1


class TestHousekeeping:
    """info() and purge_stale() classify entries by state."""

    @pytest.fixture
    def mixed_store(self, cache_manager, memory_store, fake_clock):
        cache_manager.put("items", ["superseded"])
        cache_manager.bump_version("v2")
        cache_manager.put("styles", ["expires"])
        fake_clock.now = 200
        cache_manager.put("categories", ["fresh"])
        memory_store.set_item("promptvault:v2:timeline-items", "garbage")
        memory_store.set_item("promptvault:broken", "x")
        memory_store.set_item("theme", "dark")
        fake_clock.now = 400
        return memory_store

    def test_info_counts_states(self, cache_manager, mixed_store):
        info = cache_manager.info()

        assert info.version_tag == "v2"
        assert info.total_entries == 5
        assert info.fresh_entries == 1
        assert info.expired_entries == 1
        assert info.superseded_entries == 1
        assert info.unreadable_entries == 2
        assert "hit_ratio" in info.to_dict()["statistics"]

    def test_purge_keeps_only_fresh_and_unrelated(self, cache_manager, mixed_store):
        assert cache_manager.purge_stale() == 4
        assert sorted(mixed_store.keys()) == ["promptvault:v2:categories", "theme"]
        assert cache_manager.get("categories") == ["fresh"]
