"""Durable client-local key-value stores.

The content cache persists its entries in a string-oriented key-value
store that plays the role of browser ``localStorage``: values are plain
strings, keys share one flat namespace with unrelated application data,
and every operation can fail because storage is disabled, full or
inaccessible. Backends signal such failures with StorageUnavailableError.
"""

from __future__ import annotations

import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol, runtime_checkable

import orjson

from promptvault.shared.errors import (
    DeserializationError,
    ErrorCode,
    ErrorContext,
    StorageUnavailableError,
    create_storage_unavailable_error,
)
from promptvault.shared.logging import log_operation_error

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """String key-value store interface used by the content cache."""

    def get_item(self, key: str) -> str | None:
        """Return the stored string or None when the key is absent."""
        ...

    def set_item(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        ...

    def remove_item(self, key: str) -> None:
        """Remove key; removing an absent key is not an error."""
        ...

    def keys(self) -> list[str]:
        """Return every key currently in the store."""
        ...


class MemoryKeyValueStore:
    """In-process store with an optional byte quota.

    Args:
        quota_bytes: Maximum total size of keys plus values in UTF-8 bytes.
            None disables the quota.
    """

    def __init__(self, quota_bytes: int | None = None) -> None:
        self.quota_bytes = quota_bytes
        self._items: dict[str, str] = {}

    @staticmethod
    def _size(key: str, value: str) -> int:
        return len(key.encode("utf-8")) + len(value.encode("utf-8"))

    def used_bytes(self) -> int:
        """Total size of stored keys and values."""
        return sum(self._size(k, v) for k, v in self._items.items())

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.quota_bytes is not None:
            current = self._items.get(key)
            used = self.used_bytes()
            if current is not None:
                used -= self._size(key, current)
            if used + self._size(key, value) > self.quota_bytes:
                raise create_storage_unavailable_error(
                    f"Storage quota of {self.quota_bytes} bytes exceeded",
                    key=key,
                    operation="set_item",
                    code=ErrorCode.STORAGE_QUOTA_EXCEEDED,
                )
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)


class JSONFileKeyValueStore:
    """Store persisted as a single JSON object file.

    The file is read once on first access and rewritten atomically
    (temporary file plus rename) after every mutation. A file that does
    not decode to a JSON object of strings is moved aside as
    ``<name>.corrupted.<timestamp>.json`` and the store starts empty.

    Args:
        path: Location of the JSON file. Parent directories are created
            on first write.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._items: dict[str, str] | None = None

    def _load(self) -> dict[str, str]:
        if self._items is not None:
            return self._items

        context = ErrorContext(operation="load_store", file_path=str(self.path))

        if not self.path.exists():
            self._items = {}
            return self._items

        try:
            raw = self.path.read_bytes()
        except OSError as e:
            raise StorageUnavailableError(
                ErrorCode.STORAGE_UNAVAILABLE,
                f"Failed to read store file: {self.path}",
                context,
                original_error=e,
            ) from e

        try:
            data = orjson.loads(raw) if raw.strip() else {}
            if not isinstance(data, dict) or not all(
                isinstance(v, str) for v in data.values()
            ):
                msg = "store file must contain a JSON object of strings"
                raise TypeError(msg)
        except (orjson.JSONDecodeError, TypeError) as e:
            self._handle_corrupted_file(e, context)
            data = {}

        self._items = data
        return self._items

    def _handle_corrupted_file(self, decode_error: Exception, context: ErrorContext) -> None:
        """Move a corrupted store file aside and log the event."""
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
        backup_file = self.path.with_suffix(f".corrupted.{timestamp}.json")

        error = DeserializationError(
            ErrorCode.CACHE_CORRUPTED,
            f"Store file corrupted, backed up to {backup_file}",
            context,
            original_error=decode_error,
        )
        log_operation_error(logger, error, level=logging.WARNING)

        try:
            self.path.rename(backup_file)
        except OSError:
            logger.warning("Failed to back up corrupted store file %s", self.path)

    def _flush(self) -> None:
        items = self._load()
        context = ErrorContext(operation="flush_store", file_path=str(self.path))
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(orjson.dumps(items))
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageUnavailableError(
                ErrorCode.STORAGE_UNAVAILABLE,
                f"Failed to write store file: {self.path}",
                context,
                original_error=e,
            ) from e

    def get_item(self, key: str) -> str | None:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        previous = items.get(key)
        items[key] = value
        try:
            self._flush()
        except StorageUnavailableError:
            # Keep memory consistent with what is on disk
            if previous is None:
                items.pop(key, None)
            else:
                items[key] = previous
            raise

    def remove_item(self, key: str) -> None:
        items = self._load()
        if key not in items:
            return
        previous = items.pop(key)
        try:
            self._flush()
        except StorageUnavailableError:
            items[key] = previous
            raise

    def keys(self) -> list[str]:
        return list(self._load())


__all__ = [
    "JSONFileKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
]
