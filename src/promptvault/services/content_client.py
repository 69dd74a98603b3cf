"""HTTP client for the hosted content backend.

The backend exposes its tables through a PostgREST-style REST API under
``<base_url>/rest/v1/``. Every request carries the project's anonymous key
both as the ``apikey`` header and as a bearer token.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

import requests
from pydantic import ValidationError
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from promptvault.shared.constants import (
    ContentServiceConfig,
    ContentTables,
    HTTPHeaders,
    QueryParams,
)
from promptvault.shared.errors import (
    ContentServiceError,
    ErrorCode,
    ErrorContext,
    SecurityError,
)
from promptvault.shared.logging import log_api_call
from promptvault.shared.models import (
    Prompt,
    PromptList,
    TimelinePrompt,
    TimelinePromptList,
)

if TYPE_CHECKING:
    from promptvault.config.models.api_settings import SupabaseSettings

logger = logging.getLogger(__name__)

HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_CLIENT_ERROR = 400
HTTP_SERVER_ERROR = 500


class ContentServiceClient:
    """Read-only client for public prompts and timeline prompts.

    Transport retries (connection errors and the statuses in
    ``ContentServiceConfig.RETRY_STATUS_FORCELIST``) are handled by a
    urllib3 ``Retry`` policy mounted on the session. Anything that still
    fails surfaces as :class:`ContentServiceError`.

    Args:
        base_url: Project URL of the hosted backend.
        api_key: Anonymous (public) API key.
        timeout: Timeout in seconds for collection requests.
        record_timeout: Timeout in seconds for single-record and search requests.
        retry_attempts: Total transport retries per request.
        session: Optional pre-built session (tests inject a mock here).

    Raises:
        SecurityError: If the URL or the API key is missing.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = ContentServiceConfig.COLLECTION_TIMEOUT,
        record_timeout: float = ContentServiceConfig.RECORD_TIMEOUT,
        retry_attempts: int = ContentServiceConfig.RETRY_ATTEMPTS,
        session: requests.Session | None = None,
    ) -> None:
        if not base_url or not api_key:
            raise SecurityError(
                ErrorCode.MISSING_CONFIG,
                "Content service URL and API key are required. "
                "Set SUPABASE_URL and SUPABASE_ANON_KEY.",
                ErrorContext(operation="content_client_init"),
            )

        self.base_url = base_url.rstrip("/") + ContentServiceConfig.REST_PATH
        self.timeout = timeout
        self.record_timeout = record_timeout
        self.session = session or self._create_session(retry_attempts)
        self.session.headers.update(
            {
                HTTPHeaders.API_KEY: api_key,
                HTTPHeaders.AUTHORIZATION: HTTPHeaders.BEARER.format(token=api_key),
                HTTPHeaders.CONTENT_TYPE: HTTPHeaders.APPLICATION_JSON,
                HTTPHeaders.ACCEPT: HTTPHeaders.APPLICATION_JSON,
            }
        )

        logger.info("Content service client initialized for %s", self.base_url)

    @classmethod
    def from_settings(cls, settings: SupabaseSettings) -> ContentServiceClient:
        return cls(
            settings.url,
            settings.anon_key,
            timeout=settings.timeout,
            record_timeout=settings.record_timeout,
            retry_attempts=settings.retry_attempts,
        )

    @staticmethod
    def _create_session(retry_attempts: int) -> requests.Session:
        session = requests.Session()
        retry_strategy = Retry(
            total=retry_attempts,
            status_forcelist=list(ContentServiceConfig.RETRY_STATUS_FORCELIST),
            backoff_factor=ContentServiceConfig.RETRY_BACKOFF_FACTOR,
            allowed_methods=["HEAD", "GET", "OPTIONS"],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    def close(self) -> None:
        self.session.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request(
        self,
        table: str,
        params: dict[str, str],
        timeout: float,
    ) -> list[dict[str, Any]]:
        """GET ``table`` with ``params`` and return the decoded row list."""
        url = self.base_url + table
        context = ErrorContext(
            operation="content_request",
            additional_data={"table": table},
        )
        started = time.perf_counter()

        try:
            response = self.session.get(url, params=params, timeout=timeout)
        except requests.exceptions.Timeout as e:
            raise ContentServiceError(
                ErrorCode.API_TIMEOUT,
                f"Request to '{table}' timed out after {timeout} seconds",
                context,
                original_error=e,
            ) from e
        except requests.exceptions.RequestException as e:
            raise ContentServiceError(
                ErrorCode.NETWORK_ERROR,
                f"Network error while requesting '{table}': {e!s}",
                context,
                original_error=e,
            ) from e

        duration_ms = (time.perf_counter() - started) * 1000
        log_api_call(
            logger,
            endpoint=table,
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2),
        )
        self._raise_for_status(response, table, context)

        try:
            payload = response.json()
        except ValueError as e:
            raise ContentServiceError(
                ErrorCode.INVALID_RESPONSE,
                f"Response from '{table}' is not valid JSON",
                context,
                original_error=e,
                status_code=response.status_code,
            ) from e

        if not isinstance(payload, list):
            raise ContentServiceError(
                ErrorCode.INVALID_RESPONSE,
                f"Expected a list of rows from '{table}', got {type(payload).__name__}",
                context,
                status_code=response.status_code,
            )
        return payload

    @staticmethod
    def _raise_for_status(
        response: requests.Response,
        table: str,
        context: ErrorContext,
    ) -> None:
        status = response.status_code
        if status < HTTP_CLIENT_ERROR:
            return

        if status in (HTTP_UNAUTHORIZED, HTTP_FORBIDDEN):
            code = ErrorCode.API_AUTHENTICATION_FAILED
        elif status >= HTTP_SERVER_ERROR:
            code = ErrorCode.API_SERVER_ERROR
        else:
            code = ErrorCode.API_REQUEST_FAILED

        raise ContentServiceError(
            code,
            f"Request to '{table}' failed with status {status}",
            context,
            status_code=status,
        )

    @staticmethod
    def _validate(adapter: Any, rows: list[dict[str, Any]], table: str) -> Any:
        try:
            return adapter.validate_python(rows)
        except ValidationError as e:
            raise ContentServiceError(
                ErrorCode.INVALID_RESPONSE,
                f"Rows from '{table}' do not match the content model: "
                f"{e.error_count()} error(s)",
                ErrorContext(operation="validate_rows", additional_data={"table": table}),
                original_error=e,
            ) from e

    @staticmethod
    def _distinct(rows: list[dict[str, Any]], column: str) -> list[str]:
        values = {row.get(column) for row in rows}
        return sorted(v for v in values if isinstance(v, str) and v)

    @staticmethod
    def _search_filter(query: str) -> str:
        # Quoted operands may contain PostgREST delimiters such as , . : ( )
        escaped = query.replace("\\", "\\\\").replace('"', '\\"')
        pattern = f'"*{escaped}*"'
        return f"(title.ilike.{pattern},description.ilike.{pattern})"

    @staticmethod
    def _public_rows(**extra: str) -> dict[str, str]:
        params = {
            "select": QueryParams.SELECT_ALL,
            "is_public": QueryParams.PUBLIC_ONLY,
            "order": QueryParams.NEWEST_FIRST,
        }
        params.update(extra)
        return params

    # ------------------------------------------------------------------
    # Prompts
    # ------------------------------------------------------------------

    def fetch_items(self) -> list[Prompt]:
        """All public prompts, newest first."""
        rows = self._request(
            ContentTables.ITEMS,
            self._public_rows(),
            self.timeout,
        )
        return self._validate(PromptList, rows, ContentTables.ITEMS)

    def fetch_item(self, item_id: str) -> Prompt | None:
        """A single public prompt, or None when it does not exist."""
        rows = self._request(
            ContentTables.ITEMS,
            {
                "select": QueryParams.SELECT_ALL,
                "id": f"eq.{item_id}",
                "is_public": QueryParams.PUBLIC_ONLY,
            },
            self.record_timeout,
        )
        prompts = self._validate(PromptList, rows, ContentTables.ITEMS)
        return prompts[0] if prompts else None

    def search_items(self, query: str) -> list[Prompt]:
        """Prompts whose title or description contains ``query``."""
        params = {
            "select": QueryParams.SELECT_ALL,
            "or": self._search_filter(query),
            "order": QueryParams.NEWEST_FIRST,
        }
        rows = self._request(ContentTables.ITEMS, params, self.record_timeout)
        return self._validate(PromptList, rows, ContentTables.ITEMS)

    def fetch_item_categories(self) -> list[str]:
        rows = self._request(
            ContentTables.ITEMS,
            {"select": "category", "is_public": QueryParams.PUBLIC_ONLY},
            self.timeout,
        )
        return self._distinct(rows, "category")

    def fetch_item_styles(self) -> list[str]:
        rows = self._request(
            ContentTables.ITEMS,
            {"select": "style", "is_public": QueryParams.PUBLIC_ONLY},
            self.timeout,
        )
        return self._distinct(rows, "style")

    # ------------------------------------------------------------------
    # Timeline prompts
    # ------------------------------------------------------------------

    def fetch_timeline_items(self) -> list[TimelinePrompt]:
        """All public timeline prompts, newest first."""
        rows = self._request(
            ContentTables.TIMELINE_ITEMS,
            self._public_rows(),
            self.record_timeout,
        )
        return self._validate(TimelinePromptList, rows, ContentTables.TIMELINE_ITEMS)

    def fetch_timeline_item(self, item_id: str) -> TimelinePrompt | None:
        rows = self._request(
            ContentTables.TIMELINE_ITEMS,
            {
                "select": QueryParams.SELECT_ALL,
                "id": f"eq.{item_id}",
                "is_public": QueryParams.PUBLIC_ONLY,
            },
            self.record_timeout,
        )
        prompts = self._validate(TimelinePromptList, rows, ContentTables.TIMELINE_ITEMS)
        return prompts[0] if prompts else None

    def search_timeline_items(
        self,
        query: str = "",
        category: str | None = None,
        base_style: str | None = None,
    ) -> list[TimelinePrompt]:
        """Public timeline prompts filtered by text, category and base style.

        Empty filters are not sent, so calling this with no arguments is
        equivalent to :meth:`fetch_timeline_items`.
        """
        extra: dict[str, str] = {}
        if query:
            extra["or"] = self._search_filter(query)
        if category:
            extra["category"] = f"eq.{category}"
        if base_style:
            extra["base_style"] = f"eq.{base_style}"

        rows = self._request(
            ContentTables.TIMELINE_ITEMS,
            self._public_rows(**extra),
            self.record_timeout,
        )
        return self._validate(TimelinePromptList, rows, ContentTables.TIMELINE_ITEMS)

    def fetch_timeline_categories(self) -> list[str]:
        rows = self._request(
            ContentTables.TIMELINE_ITEMS,
            {"select": "category", "is_public": QueryParams.PUBLIC_ONLY},
            self.record_timeout,
        )
        return self._distinct(rows, "category")

    def fetch_timeline_styles(self) -> list[str]:
        rows = self._request(
            ContentTables.TIMELINE_ITEMS,
            {"select": "base_style", "is_public": QueryParams.PUBLIC_ONLY},
            self.record_timeout,
        )
        return self._distinct(rows, "base_style")


__all__ = ["ContentServiceClient"]
