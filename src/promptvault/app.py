"""Application shell and lifecycle hooks.

The content cache reacts to three lifecycle events: application load,
sign-out and an explicit cache-clear request. Nothing happens at import
time; the shell wires the cache to the hooks when it is constructed and
the caller triggers startup with :meth:`PromptVaultApp.start`.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from enum import Enum
from typing import Any

from promptvault.config.models.settings import Settings
from promptvault.services.content_cache import ContentCacheManager
from promptvault.services.content_repository import ContentRepository

logger = logging.getLogger(__name__)

Handler = Callable[[], Any]


class LifecycleEvent(str, Enum):
    """Events the application shell emits."""

    APP_LOAD = "app_load"
    SIGN_OUT = "sign_out"
    CACHE_CLEAR_REQUESTED = "cache_clear_requested"


class LifecycleHooks:
    """Minimal synchronous event registry.

    Handlers run in subscription order on the caller's thread; an
    exception in a handler propagates to the code that emitted the event.
    """

    def __init__(self) -> None:
        self._handlers: dict[LifecycleEvent, list[Handler]] = defaultdict(list)

    def subscribe(self, event: LifecycleEvent, handler: Handler) -> Callable[[], None]:
        """Register ``handler`` for ``event``.

        Returns:
            A callable that removes the subscription again.
        """
        self._handlers[event].append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers[event]:
                self._handlers[event].remove(handler)

        return unsubscribe

    def emit(self, event: LifecycleEvent) -> list[Any]:
        """Run every handler subscribed to ``event`` and collect the results."""
        handlers = list(self._handlers[event])
        logger.debug("Emitting %s to %d handler(s)", event.value, len(handlers))
        return [handler() for handler in handlers]

    def handler_count(self, event: LifecycleEvent) -> int:
        return len(self._handlers[event])


class PromptVaultApp:
    """Application shell owning the content cache lifecycle.

    Args:
        settings: Loaded application settings.
        hooks: Lifecycle event registry.
        cache: Content cache manager, or None when caching is disabled.
        repository_factory: Builds the content repository on first use.
    """

    def __init__(
        self,
        settings: Settings,
        hooks: LifecycleHooks,
        cache: ContentCacheManager | None,
        repository_factory: Callable[[], ContentRepository],
    ) -> None:
        self.settings = settings
        self.hooks = hooks
        self.cache = cache
        self._repository_factory = repository_factory
        self._repository: ContentRepository | None = None
        self._started = False

        if cache is not None:
            hooks.subscribe(
                LifecycleEvent.APP_LOAD,
                lambda: cache.initialize(clear_on_load=self.settings.cache.clear_on_load),
            )
            hooks.subscribe(LifecycleEvent.SIGN_OUT, cache.invalidate_all)
            hooks.subscribe(LifecycleEvent.CACHE_CLEAR_REQUESTED, cache.invalidate_all)

    @property
    def started(self) -> bool:
        return self._started

    @property
    def repository(self) -> ContentRepository:
        if self._repository is None:
            self._repository = self._repository_factory()
        return self._repository

    @staticmethod
    def _removed(results: list[Any]) -> int:
        return sum(r for r in results if isinstance(r, int) and not isinstance(r, bool))

    def start(self) -> int:
        """Run the one-time startup initialization.

        Returns:
            Number of cache entries cleared on load. Calling ``start``
            again is a no-op returning 0.
        """
        if self._started:
            logger.debug("Application already started")
            return 0
        self._started = True
        cleared = self._removed(self.hooks.emit(LifecycleEvent.APP_LOAD))
        logger.info("%s started (cleared %d cache entries)", self.settings.app.name, cleared)
        return cleared

    def sign_out(self) -> int:
        cleared = self._removed(self.hooks.emit(LifecycleEvent.SIGN_OUT))
        logger.info("Signed out; cleared %d cache entries", cleared)
        return cleared

    def clear_cache(self) -> int:
        """Handle an explicit cache-clear request."""
        return self._removed(self.hooks.emit(LifecycleEvent.CACHE_CLEAR_REQUESTED))


__all__ = [
    "LifecycleEvent",
    "LifecycleHooks",
    "PromptVaultApp",
]
