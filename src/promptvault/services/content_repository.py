"""Cache-aside data access for prompts and timeline prompts.

The repository is the data-fetch layer the UI talks to. Each read first
asks the content cache; on a miss it calls the remote service, stores the
result and returns it. When the service fails the repository logs the
error and returns the fixed fallback data instead. Fallbacks are never
written to the cache.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from promptvault.services.content_cache import ContentCacheManager
from promptvault.services.content_client import ContentServiceClient
from promptvault.shared.constants import CacheKeys, FallbackContent
from promptvault.shared.errors import (
    ContentServiceError,
    SecurityError,
    create_deserialization_error,
)
from promptvault.shared.logging import (
    log_operation_error,
    log_operation_start,
    log_operation_success,
)
from promptvault.shared.models import (
    LabelList,
    Prompt,
    PromptList,
    PromptRecord,
    TimelinePrompt,
    TimelinePromptList,
    TimelinePromptRecord,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Unconfigured credentials count as a remote failure: cache hits and
# fallbacks are still served.
REMOTE_ERRORS = (ContentServiceError, SecurityError)


class ContentRepository:
    """Read access to public content with client-side caching.

    Args:
        client: Remote content service client.
        cache: Content cache manager, or None to always go to the network.
        client_factory: Builds the client on first network access when
            ``client`` is not given.
    """

    def __init__(
        self,
        client: ContentServiceClient | None = None,
        cache: ContentCacheManager | None = None,
        *,
        client_factory: Callable[[], ContentServiceClient] | None = None,
    ) -> None:
        if client is None and client_factory is None:
            raise ValueError("ContentRepository needs a client or a client_factory")
        self._client = client
        self._client_factory = client_factory
        self.cache = cache

    @property
    def client(self) -> ContentServiceClient:
        """The remote client, built on first use.

        Raises:
            SecurityError: If the service credentials are not configured.
        """
        if self._client is None:
            self._client = self._client_factory()
        return self._client

    # ------------------------------------------------------------------
    # Cache plumbing
    # ------------------------------------------------------------------

    def _read_cache(self, key: str, adapter: TypeAdapter[T]) -> T | None:
        """Return the cached value for ``key`` validated by ``adapter``.

        A payload that no longer matches the content models is logged,
        dropped from the cache and reported as a miss.
        """
        if self.cache is None:
            return None

        value = self.cache.get(key)
        if value is None:
            return None

        try:
            return adapter.validate_python(value)
        except ValidationError as e:
            error = create_deserialization_error(
                f"Cached payload for '{key}' does not match the content model",
                key=key,
                operation="read_cache",
                original_error=e,
            )
            log_operation_error(logger, error, level=logging.INFO)
            self.cache.delete(key)
            return None

    def _write_cache(self, key: str, adapter: TypeAdapter[T], value: T) -> None:
        if self.cache is None:
            return
        self.cache.put(key, adapter.dump_python(value, mode="json"))

    def _cached(
        self,
        key: str,
        adapter: TypeAdapter[T],
        fetch: Callable[[], T],
        fallback: Callable[[], T],
        operation: str,
    ) -> T:
        """Serve ``key`` from cache, else fetch and cache, else fall back."""
        cached = self._read_cache(key, adapter)
        if cached is not None:
            logger.debug("Serving '%s' from cache", key)
            return cached

        log_operation_start(logger, operation, {"key": key})
        started = time.perf_counter()
        try:
            result = fetch()
        except REMOTE_ERRORS as e:
            log_operation_error(logger, e, operation=operation, level=logging.WARNING)
            return fallback()

        self._write_cache(key, adapter, result)
        log_operation_success(
            logger,
            operation=operation,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
            result_info={"key": key},
        )
        return result

    def _uncached(self, fetch: Callable[[], T], fallback: Callable[[], T], operation: str) -> T:
        try:
            return fetch()
        except REMOTE_ERRORS as e:
            log_operation_error(logger, e, operation=operation, level=logging.WARNING)
            return fallback()

    def _lookup_record(
        self,
        record_id: str,
        collection_key: str,
        collection_adapter: TypeAdapter[list[Any]],
        record_key: str,
        record_adapter: TypeAdapter[T],
        fetch: Callable[[str], T | None],
        operation: str,
    ) -> T | None:
        # The cached collection answers most lookups without a request
        collection = self._read_cache(collection_key, collection_adapter)
        if collection:
            for record in collection:
                if record.id == record_id:
                    return record

        cached = self._read_cache(record_key, record_adapter)
        if cached is not None:
            return cached

        try:
            record = fetch(record_id)
        except REMOTE_ERRORS as e:
            log_operation_error(logger, e, operation=operation, level=logging.WARNING)
            return None

        if record is not None:
            self._write_cache(record_key, record_adapter, record)
        return record

    # ------------------------------------------------------------------
    # Prompts
    # ------------------------------------------------------------------

    def get_items(self) -> list[Prompt]:
        return self._cached(
            CacheKeys.ITEMS,
            PromptList,
            lambda: self.client.fetch_items(),
            list,
            "get_items",
        )

    def get_item(self, item_id: str) -> Prompt | None:
        return self._lookup_record(
            item_id,
            CacheKeys.ITEMS,
            PromptList,
            CacheKeys.item(item_id),
            PromptRecord,
            lambda record_id: self.client.fetch_item(record_id),
            "get_item",
        )

    def search_items(self, query: str) -> list[Prompt]:
        """Search prompts by title or description; results are not cached."""
        return self._uncached(lambda: self.client.search_items(query), list, "search_items")

    def get_categories(self) -> list[str]:
        return self._cached(
            CacheKeys.CATEGORIES,
            LabelList,
            lambda: self.client.fetch_item_categories(),
            lambda: list(FallbackContent.CATEGORIES),
            "get_categories",
        )

    def get_styles(self) -> list[str]:
        return self._cached(
            CacheKeys.STYLES,
            LabelList,
            lambda: self.client.fetch_item_styles(),
            lambda: list(FallbackContent.STYLES),
            "get_styles",
        )

    # ------------------------------------------------------------------
    # Timeline prompts
    # ------------------------------------------------------------------

    def get_timeline_items(self) -> list[TimelinePrompt]:
        return self._cached(
            CacheKeys.TIMELINE_ITEMS,
            TimelinePromptList,
            lambda: self.client.fetch_timeline_items(),
            list,
            "get_timeline_items",
        )

    def get_timeline_item(self, item_id: str) -> TimelinePrompt | None:
        return self._lookup_record(
            item_id,
            CacheKeys.TIMELINE_ITEMS,
            TimelinePromptList,
            CacheKeys.timeline_item(item_id),
            TimelinePromptRecord,
            lambda record_id: self.client.fetch_timeline_item(record_id),
            "get_timeline_item",
        )

    def search_timeline_items(
        self,
        query: str = "",
        category: str | None = None,
        base_style: str | None = None,
    ) -> list[TimelinePrompt]:
        """Filter timeline prompts; with no filters this is the cached list."""
        if not (query or category or base_style):
            return self.get_timeline_items()
        return self._uncached(
            lambda: self.client.search_timeline_items(query, category, base_style),
            list,
            "search_timeline_items",
        )

    def get_timeline_categories(self) -> list[str]:
        return self._cached(
            CacheKeys.TIMELINE_CATEGORIES,
            LabelList,
            lambda: self.client.fetch_timeline_categories(),
            lambda: list(FallbackContent.TIMELINE_CATEGORIES),
            "get_timeline_categories",
        )

    def get_timeline_styles(self) -> list[str]:
        return self._cached(
            CacheKeys.TIMELINE_STYLES,
            LabelList,
            lambda: self.client.fetch_timeline_styles(),
            lambda: list(FallbackContent.TIMELINE_STYLES),
            "get_timeline_styles",
        )


__all__ = ["ContentRepository"]
