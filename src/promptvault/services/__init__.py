"""Services module for PromptVault.

This module contains the durable key-value stores, the content cache
manager, the remote content service client and the cache-aside
repository built on top of them.
"""

from .content_cache import CacheEntry, CacheInfo, CacheStatistics, ContentCacheManager
from .content_client import ContentServiceClient
from .content_repository import ContentRepository
from .storage import JSONFileKeyValueStore, KeyValueStore, MemoryKeyValueStore

__all__ = [
    "CacheEntry",
    "CacheInfo",
    "CacheStatistics",
    "ContentCacheManager",
    "ContentRepository",
    "ContentServiceClient",
    "JSONFileKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
]
