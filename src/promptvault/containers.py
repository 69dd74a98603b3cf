"""Dependency Injection container for PromptVault.

This module provides a centralized DI container using dependency-injector
to construct the content cache explicitly and hand it to its consumers.

The container manages:
- Settings (Singleton)
- Durable key-value store, selected by ``cache.backend``
- Content cache manager (Singleton)
- Remote content service client (Singleton)
- Content repository (Factory)
- Lifecycle hooks and the application shell
"""

from __future__ import annotations

import time

from dependency_injector import containers, providers

from promptvault.app import LifecycleHooks, PromptVaultApp
from promptvault.config.loader import load_settings
from promptvault.services import (
    ContentCacheManager,
    ContentRepository,
    ContentServiceClient,
    JSONFileKeyValueStore,
    MemoryKeyValueStore,
)


class Container(containers.DeclarativeContainer):
    """Dependency Injection container for PromptVault services.

    Example:
        >>> container = Container()
        >>> container.config.override(providers.Object(Settings()))
        >>> app = container.app()
        >>> app.start()
        >>> prompts = app.repository.get_items()
    """

    # Configuration
    config = providers.Singleton(load_settings)
    clock = providers.Object(time.time)

    # Durable store
    memory_store = providers.Singleton(
        MemoryKeyValueStore,
        quota_bytes=providers.Callable(lambda config: config.cache.quota_bytes, config=config),
    )
    file_store = providers.Singleton(
        JSONFileKeyValueStore,
        path=providers.Callable(lambda config: config.cache.resolved_store_path(), config=config),
    )
    key_value_store = providers.Selector(
        providers.Callable(lambda config: config.cache.backend, config=config),
        memory=memory_store,
        file=file_store,
    )

    # Content cache
    content_cache = providers.Singleton(
        ContentCacheManager.from_settings,
        store=key_value_store,
        settings=providers.Callable(lambda config: config.cache, config=config),
        clock=clock,
    )
    active_cache = providers.Selector(
        providers.Callable(
            lambda config: "enabled" if config.cache.enabled else "disabled",
            config=config,
        ),
        enabled=content_cache,
        disabled=providers.Object(None),
    )

    # Remote content service
    content_client = providers.Singleton(
        ContentServiceClient.from_settings,
        settings=providers.Callable(lambda config: config.supabase, config=config),
    )

    content_repository = providers.Factory(
        ContentRepository,
        cache=active_cache,
        client_factory=content_client.provider,
    )

    # Application shell
    lifecycle_hooks = providers.Singleton(LifecycleHooks)

    app = providers.Singleton(
        PromptVaultApp,
        settings=config,
        hooks=lifecycle_hooks,
        cache=active_cache,
        repository_factory=content_repository.provider,
    )


__all__ = ["Container"]
