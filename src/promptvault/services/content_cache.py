"""Content cache manager for PromptVault.

This module keeps a client-local snapshot of remotely fetched content
collections in a durable key-value store. Every entry is stored under a
namespaced key that embeds the active version tag
(``promptvault:<tag>:<key>``) and carries its capture timestamp, so that:

- an entry older than its freshness window is treated as absent;
- bumping the version tag makes every older entry unreachable without
  sweeping the store;
- ``invalidate_all`` removes every entry in the reserved namespace and
  leaves unrelated keys in the store untouched.

The cache is strictly best-effort. Store failures and unreadable entries
are logged at a low severity and reported to the caller as a miss; they
never propagate past this module.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any

import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_core import PydanticSerializationError

from promptvault.services.storage import KeyValueStore
from promptvault.shared.constants import Cache
from promptvault.shared.errors import (
    DeserializationError,
    DomainError,
    ErrorCode,
    ErrorContext,
    PromptVaultError,
    StorageUnavailableError,
    create_deserialization_error,
    create_storage_unavailable_error,
    create_validation_error,
)
from promptvault.shared.logging import log_operation_error, log_operation_success

if TYPE_CHECKING:
    from promptvault.config.models.cache_settings import CacheSettings

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class CacheEntry(BaseModel):
    """Schema for a persisted cache entry.

    Attributes:
        key: Cache key the entry was written under (without namespace).
        value: The last successfully fetched payload (JSON-compatible).
        captured_at: Capture time in epoch seconds.
        version: Version tag active when the entry was written.
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "key": "items",
                "value": [{"id": "a", "category": "Creative"}],
                "captured_at": 1735689600.0,
                "version": "v1",
            },
        },
    )

    key: str = Field(..., min_length=1, description="Cache key without namespace")
    value: Any = Field(..., description="Cached payload")
    captured_at: float = Field(..., description="Capture time in epoch seconds")
    version: str = Field(..., min_length=1, description="Version tag at write time")

    def age(self, now: float) -> float:
        """Seconds elapsed since the entry was captured."""
        return now - self.captured_at


@dataclass
class CacheStatistics:
    """Hit/miss counters for one cache manager instance."""

    hits: int = 0
    misses: int = 0
    writes: int = 0
    failed_writes: int = 0
    failed_reads: int = 0

    @property
    def hit_ratio(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0

    def to_dict(self) -> dict[str, float]:
        data: dict[str, float] = dict(asdict(self))
        data["hit_ratio"] = round(self.hit_ratio, 4)
        return data


@dataclass
class CacheInfo:
    """Snapshot of the entries in the reserved namespace."""

    version_tag: str
    freshness_window: float
    total_entries: int = 0
    fresh_entries: int = 0
    expired_entries: int = 0
    superseded_entries: int = 0
    unreadable_entries: int = 0
    statistics: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class ContentCacheManager:
    """Versioned, freshness-bounded cache over a durable key-value store.

    The manager is constructed explicitly and injected into whatever needs
    it; it has no module-level instance and does nothing on import. The
    application shell calls :meth:`initialize` once at startup and
    :meth:`invalidate_all` on sign-out.

    All operations run on the caller's thread without locking. Two fetches
    racing for the same key both ``put``; the last write wins.

    Args:
        store: Durable key-value store that owns the persisted entries.
        version_tag: Active version tag.
        freshness_window: Default maximum entry age in seconds. An entry
            is fresh while its age is strictly below the window, so 0
            disables serving from cache altogether.
        freshness_overrides: Per key-prefix windows, e.g.
            ``{"timeline-": 600}``. The longest matching prefix wins.
        namespace: Reserved key prefix inside the store.
        clock: Time source returning epoch seconds.
    """

    STORAGE_FAILURE_LOG_LEVEL = logging.WARNING
    DECODE_FAILURE_LOG_LEVEL = logging.INFO

    def __init__(
        self,
        store: KeyValueStore,
        *,
        version_tag: str = Cache.VERSION_TAG,
        freshness_window: float = Cache.FRESHNESS_WINDOW,
        freshness_overrides: Mapping[str, float] | None = None,
        namespace: str = Cache.NAMESPACE,
        clock: Clock = time.time,
    ) -> None:
        self._validate_tag(version_tag, operation="initialize_cache")
        self._validate_window(freshness_window, "freshness_window")
        overrides = dict(freshness_overrides or {})
        for prefix, window in overrides.items():
            self._validate_window(window, f"freshness_overrides[{prefix}]")

        self._store = store
        self._version_tag = version_tag
        self._freshness_window = float(freshness_window)
        self._freshness_overrides = overrides
        self._namespace = namespace
        self._clock = clock
        self.statistics = CacheStatistics()

        logger.debug(
            "Initialized ContentCacheManager (namespace=%s, version=%s, window=%ss)",
            namespace,
            version_tag,
            freshness_window,
        )

    @classmethod
    def from_settings(
        cls,
        store: KeyValueStore,
        settings: CacheSettings,
        clock: Clock = time.time,
    ) -> ContentCacheManager:
        """Build a manager from the cache section of the settings."""
        return cls(
            store,
            version_tag=settings.version_tag,
            freshness_window=settings.freshness_window,
            freshness_overrides=settings.freshness_overrides(),
            clock=clock,
        )

    # ------------------------------------------------------------------
    # Keys and policy
    # ------------------------------------------------------------------

    @property
    def version_tag(self) -> str:
        return self._version_tag

    @property
    def namespace_prefix(self) -> str:
        return f"{self._namespace}{Cache.SEPARATOR}"

    def storage_key(self, key: str, version_tag: str | None = None) -> str:
        """Return the store key for ``key`` under the given (or active) tag."""
        self._validate_key(key)
        tag = version_tag or self._version_tag
        return f"{self.namespace_prefix}{tag}{Cache.SEPARATOR}{key}"

    def _split_storage_key(self, storage_key: str) -> tuple[str, str] | None:
        """Split a namespaced store key into (version_tag, key)."""
        if not storage_key.startswith(self.namespace_prefix):
            return None
        rest = storage_key[len(self.namespace_prefix) :]
        tag, sep, key = rest.partition(Cache.SEPARATOR)
        if not sep or not tag or not key:
            return None
        return tag, key

    def freshness_window_for(self, key: str) -> float:
        """Freshness window applying to ``key``."""
        best_prefix = ""
        window = self._freshness_window
        for prefix, override in self._freshness_overrides.items():
            if key.startswith(prefix) and len(prefix) > len(best_prefix):
                best_prefix = prefix
                window = float(override)
        return window

    def is_fresh(self, entry: CacheEntry, now: float | None = None) -> bool:
        current = self._clock() if now is None else now
        return entry.age(current) < self.freshness_window_for(entry.key)

    @staticmethod
    def _validate_key(key: str) -> None:
        if not isinstance(key, str) or not key.strip():
            raise create_validation_error(
                "Cache key must be a non-empty string",
                field="key",
                operation="validate_key",
            )

    @staticmethod
    def _validate_window(window: float, name: str) -> None:
        if window < 0:
            raise create_validation_error(
                f"{name} must be >= 0 seconds, got {window}",
                field=name,
                operation="validate_freshness_window",
            )

    @staticmethod
    def _validate_tag(tag: str, operation: str) -> None:
        if not isinstance(tag, str) or not tag.strip() or Cache.SEPARATOR in tag:
            raise DomainError(
                ErrorCode.INVALID_VERSION_TAG,
                f"Invalid version tag {tag!r}: must be non-empty and must not contain "
                f"'{Cache.SEPARATOR}'",
                ErrorContext(operation=operation),
            )

    # ------------------------------------------------------------------
    # Failure handling
    # ------------------------------------------------------------------

    def _log_failure(self, error: PromptVaultError, operation: str) -> None:
        level = (
            self.STORAGE_FAILURE_LOG_LEVEL
            if isinstance(error, StorageUnavailableError)
            else self.DECODE_FAILURE_LOG_LEVEL
        )
        log_operation_error(logger, error, operation=operation, level=level)

    def _reject_value(
        self,
        key: str,
        message: str,
        original_error: Exception | None = None,
    ) -> bool:
        self.statistics.failed_writes += 1
        error = DomainError(
            ErrorCode.CACHE_SERIALIZATION_ERROR,
            message,
            ErrorContext(operation="cache_put", additional_data={"key": key}),
            original_error=original_error,
        )
        self._log_failure(error, "cache_put")
        return False

    def _as_storage_error(
        self,
        error: Exception,
        key: str,
        operation: str,
    ) -> StorageUnavailableError:
        if isinstance(error, StorageUnavailableError):
            return error
        return create_storage_unavailable_error(
            f"Durable store failed during {operation}: {error!s}",
            key=key,
            operation=operation,
            original_error=error,
        )

    def _discard(self, storage_key: str) -> bool:
        """Opportunistically remove an entry; failures are only logged."""
        try:
            self._store.remove_item(storage_key)
        except Exception as e:  # noqa: BLE001
            self._log_failure(self._as_storage_error(e, storage_key, "cache_discard"), "cache_discard")
            return False
        return True

    def _decode(self, raw: str, storage_key: str) -> CacheEntry:
        try:
            return CacheEntry.model_validate(orjson.loads(raw))
        except (orjson.JSONDecodeError, ValidationError) as e:
            raise create_deserialization_error(
                f"Stored cache entry could not be decoded: {e!s}",
                key=storage_key,
                operation="cache_get",
                original_error=e,
            ) from e

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def get_entry(self, key: str) -> CacheEntry | None:
        """Look up the entry for ``key`` under the active version tag.

        Returns:
            The entry when present and fresh, otherwise None. Expired and
            unreadable entries are removed on the way out.

        Raises:
            DomainError: If ``key`` is empty.
        """
        storage_key = self.storage_key(key)

        try:
            raw = self._store.get_item(storage_key)
        except Exception as e:  # noqa: BLE001
            self.statistics.failed_reads += 1
            self.statistics.misses += 1
            self._log_failure(self._as_storage_error(e, storage_key, "cache_get"), "cache_get")
            return None

        if raw is None:
            self.statistics.misses += 1
            return None

        try:
            entry = self._decode(raw, storage_key)
        except DeserializationError as e:
            self.statistics.failed_reads += 1
            self.statistics.misses += 1
            self._log_failure(e, "cache_get")
            self._discard(storage_key)
            return None

        if entry.version != self._version_tag or entry.key != key:
            logger.debug("Cache entry under '%s' belongs to another key or version", storage_key)
            self.statistics.misses += 1
            return None

        if not self.is_fresh(entry):
            logger.debug("Cache entry expired for key '%s'", key)
            self.statistics.misses += 1
            self._discard(storage_key)
            return None

        self.statistics.hits += 1
        logger.debug("Cache hit for key '%s'", key)
        return entry

    def get(self, key: str) -> Any | None:
        """Return the cached value for ``key`` or None on a miss."""
        entry = self.get_entry(key)
        return entry.value if entry is not None else None

    def put(self, key: str, value: Any) -> bool:
        """Write ``value`` under ``key`` with a capture time of now.

        The write fully replaces any previous entry for the key. Only plain
        JSON values are accepted, so ``get`` returns exactly what was put.

        Returns:
            True when the entry reached the durable store, False when the
            value is not plain JSON or the store failed. Failures are
            logged, not raised.

        Raises:
            DomainError: If ``key`` is empty.
        """
        storage_key = self.storage_key(key)
        entry = CacheEntry(
            key=key,
            value=value,
            captured_at=self._clock(),
            version=self._version_tag,
        )

        try:
            payload = entry.model_dump_json()
        except PydanticSerializationError as e:
            return self._reject_value(
                key,
                f"Failed to serialize cache value for key '{key}': {e!s}",
                original_error=e,
            )

        # NaN, infinities, tuples and non-string keys would read back changed
        if orjson.loads(payload)["value"] != value:
            return self._reject_value(
                key,
                f"Cache value for key '{key}' is not a plain JSON value",
            )

        try:
            self._store.set_item(storage_key, payload)
        except Exception as e:  # noqa: BLE001
            self.statistics.failed_writes += 1
            self._log_failure(self._as_storage_error(e, storage_key, "cache_put"), "cache_put")
            return False

        self.statistics.writes += 1
        log_operation_success(
            logger,
            operation="cache_put",
            duration_ms=0,
            context={"key": key, "version": self._version_tag, "size": len(payload)},
        )
        return True

    def delete(self, key: str) -> bool:
        """Remove the entry for ``key`` under the active tag."""
        storage_key = self.storage_key(key)
        try:
            present = self._store.get_item(storage_key) is not None
        except Exception as e:  # noqa: BLE001
            self._log_failure(self._as_storage_error(e, storage_key, "cache_delete"), "cache_delete")
            return False
        return present and self._discard(storage_key)

    def _namespace_keys(self, operation: str) -> list[str] | None:
        try:
            keys = self._store.keys()
        except Exception as e:  # noqa: BLE001
            self._log_failure(self._as_storage_error(e, self.namespace_prefix, operation), operation)
            return None
        return [k for k in keys if k.startswith(self.namespace_prefix)]

    def invalidate_all(self) -> int:
        """Remove every entry in the reserved namespace, whatever its tag.

        Returns:
            Number of entries removed.
        """
        keys = self._namespace_keys("cache_invalidate_all")
        if keys is None:
            return 0

        removed = sum(1 for storage_key in keys if self._discard(storage_key))
        logger.info("Cleared %d content cache entries", removed)
        return removed

    def bump_version(self, new_tag: str) -> str:
        """Switch the active version tag.

        Entries written under the previous tag stay in the store but are
        never looked up again; :meth:`purge_stale` reclaims them.

        Returns:
            The previous version tag.

        Raises:
            DomainError: If ``new_tag`` is empty or contains the separator.
        """
        self._validate_tag(new_tag, operation="bump_version")
        previous = self._version_tag
        if new_tag == previous:
            logger.debug("Version tag already '%s'", new_tag)
            return previous

        self._version_tag = new_tag
        logger.info("Content cache version tag changed from '%s' to '%s'", previous, new_tag)
        return previous

    def initialize(self, *, clear_on_load: bool) -> int:
        """Startup hook: clear the cache when clear-on-load is enabled.

        Returns:
            Number of entries removed (0 when nothing was cleared).
        """
        if not clear_on_load:
            logger.debug("Keeping cached content from previous sessions")
            return 0
        return self.invalidate_all()

    def purge_stale(self) -> int:
        """Remove superseded, expired and unreadable entries.

        Returns:
            Number of entries removed.
        """
        keys = self._namespace_keys("cache_purge_stale")
        if keys is None:
            return 0

        now = self._clock()
        purged = 0
        for storage_key in keys:
            if self._classify(storage_key, now) != Cache.STATE_FRESH and self._discard(storage_key):
                purged += 1

        logger.info("Purged %d stale content cache entries", purged)
        return purged

    def _classify(self, storage_key: str, now: float) -> str:
        parts = self._split_storage_key(storage_key)
        if parts is None:
            return Cache.STATE_UNREADABLE
        tag, _key = parts
        if tag != self._version_tag:
            return Cache.STATE_SUPERSEDED

        try:
            raw = self._store.get_item(storage_key)
            if raw is None:
                return Cache.STATE_UNREADABLE
            entry = self._decode(raw, storage_key)
        except DeserializationError:
            return Cache.STATE_UNREADABLE
        except Exception as e:  # noqa: BLE001
            self._log_failure(self._as_storage_error(e, storage_key, "cache_classify"), "cache_classify")
            return Cache.STATE_UNREADABLE

        return Cache.STATE_FRESH if self.is_fresh(entry, now) else Cache.STATE_EXPIRED

    def info(self) -> CacheInfo:
        """Count the entries in the reserved namespace by state."""
        info = CacheInfo(
            version_tag=self._version_tag,
            freshness_window=self._freshness_window,
            statistics=self.statistics.to_dict(),
        )
        keys = self._namespace_keys("cache_info")
        if keys is None:
            return info

        now = self._clock()
        for storage_key in keys:
            info.total_entries += 1
            state = self._classify(storage_key, now)
            if state == Cache.STATE_FRESH:
                info.fresh_entries += 1
            elif state == Cache.STATE_EXPIRED:
                info.expired_entries += 1
            elif state == Cache.STATE_SUPERSEDED:
                info.superseded_entries += 1
            else:
                info.unreadable_entries += 1
        return info


__all__ = [
    "CacheEntry",
    "CacheInfo",
    "CacheStatistics",
    "ContentCacheManager",
]
