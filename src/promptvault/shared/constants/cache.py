"""
Cache Configuration Constants

This module provides the content cache policy constants: freshness
windows, the version tag, the reserved store namespace and the
well-known cache keys for both content kinds.
"""

from .system import BASE_MINUTE


class Cache:
    """Content cache policy constants."""

    # Freshness windows (seconds)
    FRESHNESS_WINDOW = 5 * BASE_MINUTE
    TIMELINE_FRESHNESS_WINDOW = 5 * BASE_MINUTE

    # Version tag embedded in every store key
    VERSION_TAG = "v1"

    # Reserved namespace inside the durable store
    NAMESPACE = "promptvault"
    SEPARATOR = ":"

    # Store backends
    BACKEND_MEMORY = "memory"
    BACKEND_FILE = "file"

    # Entry states reported by CacheInfo
    STATE_FRESH = "fresh"
    STATE_EXPIRED = "expired"
    STATE_SUPERSEDED = "superseded"
    STATE_UNREADABLE = "unreadable"


class CacheKeys:
    """Well-known cache keys.

    Collections are stored under fixed names; single records under
    "<kind>:<id>". Every timeline key starts with TIMELINE_PREFIX so the
    timeline freshness window can be applied by prefix.
    """

    TIMELINE_PREFIX = "timeline-"

    ITEMS = "items"
    CATEGORIES = "categories"
    STYLES = "styles"
    ITEM_RECORD = "item"

    TIMELINE_ITEMS = "timeline-items"
    TIMELINE_CATEGORIES = "timeline-categories"
    TIMELINE_STYLES = "timeline-styles"
    TIMELINE_ITEM_RECORD = "timeline-item"

    @staticmethod
    def item(item_id: str) -> str:
        """Key of a single flat item."""
        return f"{CacheKeys.ITEM_RECORD}{Cache.SEPARATOR}{item_id}"

    @staticmethod
    def timeline_item(item_id: str) -> str:
        """Key of a single timeline item."""
        return f"{CacheKeys.TIMELINE_ITEM_RECORD}{Cache.SEPARATOR}{item_id}"
