"""Tests for the durable key-value stores."""

from __future__ import annotations

import logging
from pathlib import Path

import orjson
import pytest

from promptvault.services.storage import (
    JSONFileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
)
from promptvault.shared.errors import ErrorCode, StorageUnavailableError


class TestMemoryKeyValueStore:
    """MemoryKeyValueStore 동작 테스트."""

    def test_implements_protocol(self):
        assert isinstance(MemoryKeyValueStore(), KeyValueStore)

    def test_set_get_remove(self):
        store = MemoryKeyValueStore()

        store.set_item("a", "1")
        assert store.get_item("a") == "1"
        assert store.keys() == ["a"]

        store.remove_item("a")
        store.remove_item("a")
        assert store.get_item("a") is None

    def test_quota_exceeded_raises(self):
        store = MemoryKeyValueStore(quota_bytes=10)

        with pytest.raises(StorageUnavailableError) as exc_info:
            store.set_item("key", "x" * 20)

        assert exc_info.value.code == ErrorCode.STORAGE_QUOTA_EXCEEDED
        assert store.get_item("key") is None

    def test_quota_counts_replacement_once(self):
        store = MemoryKeyValueStore(quota_bytes=10)
        store.set_item("k", "12345678")

        # Replacing an existing value frees its old size first
        store.set_item("k", "abcdefgh")

        assert store.used_bytes() == 9


class TestJSONFileKeyValueStore:
    """JSONFileKeyValueStore 영속화 테스트."""

    def test_values_survive_reopen(self, tmp_path: Path):
        path = tmp_path / "cache" / "store.json"
        JSONFileKeyValueStore(path).set_item("promptvault:v1:items", '{"x":1}')

        reopened = JSONFileKeyValueStore(path)

        assert reopened.get_item("promptvault:v1:items") == '{"x":1}'
        assert orjson.loads(path.read_bytes()) == {"promptvault:v1:items": '{"x":1}'}

    def test_missing_file_is_empty(self, tmp_path: Path):
        store = JSONFileKeyValueStore(tmp_path / "absent.json")

        assert store.keys() == []
        assert not (tmp_path / "absent.json").exists()

    def test_remove_rewrites_file(self, tmp_path: Path):
        path = tmp_path / "store.json"
        store = JSONFileKeyValueStore(path)
        store.set_item("a", "1")
        store.set_item("b", "2")

        store.remove_item("a")

        assert orjson.loads(path.read_bytes()) == {"b": "2"}

    def test_corrupted_file_is_backed_up(self, tmp_path: Path, caplog):
        path = tmp_path / "store.json"
        path.write_text("{broken json", encoding="utf-8")

        with caplog.at_level(logging.WARNING, logger="promptvault"):
            store = JSONFileKeyValueStore(path)
            assert store.keys() == []

        backups = list(tmp_path.glob("store.corrupted.*.json"))
        assert len(backups) == 1
        assert backups[0].read_text(encoding="utf-8") == "{broken json"
        assert any(getattr(r, "error_code", None) == "CACHE_CORRUPTED" for r in caplog.records)

    def test_non_string_values_count_as_corruption(self, tmp_path: Path):
        path = tmp_path / "store.json"
        path.write_bytes(orjson.dumps({"a": 1}))

        assert JSONFileKeyValueStore(path).get_item("a") is None

    def test_failed_flush_rolls_back(self, tmp_path: Path, mocker):
        path = tmp_path / "store.json"
        store = JSONFileKeyValueStore(path)
        store.set_item("a", "1")

        mocker.patch(
            "promptvault.services.storage.tempfile.mkstemp",
            side_effect=OSError("read-only file system"),
        )

        with pytest.raises(StorageUnavailableError):
            store.set_item("a", "2")
        with pytest.raises(StorageUnavailableError):
            store.set_item("b", "3")

        assert store.get_item("a") == "1"
        assert store.get_item("b") is None
        assert orjson.loads(path.read_bytes()) == {"a": "1"}
