"""
Remote Content Service Constants

Endpoints, query strings, headers and timeouts used by the
content service client, plus the fallback data served when the
service cannot be reached.
"""

from typing import ClassVar


class ContentServiceConfig:
    """Remote content service configuration."""

    REST_PATH = "/rest/v1/"

    # Request timeouts (seconds)
    COLLECTION_TIMEOUT = 10
    RECORD_TIMEOUT = 15

    # Transport retries
    RETRY_ATTEMPTS = 3
    RETRY_BACKOFF_FACTOR = 0.5
    RETRY_STATUS_FORCELIST: ClassVar[tuple[int, ...]] = (429, 502, 503, 504)


class ContentTables:
    """Tables exposed by the hosted backend."""

    ITEMS = "prompts"
    TIMELINE_ITEMS = "timeline_prompts"


class QueryParams:
    """PostgREST query fragments."""

    SELECT_ALL = "*"
    PUBLIC_ONLY = "eq.true"
    NEWEST_FIRST = "created_at.desc"


class HTTPHeaders:
    """HTTP header names and values."""

    API_KEY = "apikey"
    AUTHORIZATION = "Authorization"
    BEARER = "Bearer {token}"
    CONTENT_TYPE = "Content-Type"
    ACCEPT = "Accept"
    APPLICATION_JSON = "application/json"


class FallbackContent:
    """Fallback lists served when the remote service fails."""

    CATEGORIES: ClassVar[list[str]] = [
        "Business",
        "Creative",
        "Education",
        "Entertainment",
        "Technical",
    ]
    STYLES: ClassVar[list[str]] = ["Action", "Drama", "Comedy", "Horror"]

    TIMELINE_CATEGORIES: ClassVar[list[str]] = [
        "Creative",
        "Cinematic",
        "Nature",
        "Urban",
        "Abstract",
        "Documentary",
        "Animation",
        "Experimental",
    ]
    TIMELINE_STYLES: ClassVar[list[str]] = [
        "cinematic",
        "dramatic",
        "atmospheric",
        "vibrant",
        "moody",
        "ethereal",
        "gritty",
        "stylized",
        "realistic",
        "surreal",
    ]


class ContentDefaults:
    """Defaults applied while normalizing backend rows."""

    ASPECT_RATIO = "16:9"
