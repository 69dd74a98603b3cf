"""
PromptVault - Prompt library client

A client for a hosted prompt library with a versioned, freshness-bounded
content cache in front of the remote content service.
"""

__version__ = "0.1.0"

from .services import ContentCacheManager, ContentRepository, ContentServiceClient

__all__ = [
    "ContentCacheManager",
    "ContentRepository",
    "ContentServiceClient",
]
