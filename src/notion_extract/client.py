"""Notion Extract Client - Rate-limited, caching Notion API wrapper returning raw JSON text."""

import json
import logging
import time
from typing import Any, Callable

from notion_client import Client, APIResponseError
from notion_client.errors import HTTPResponseError

from notion_extract.config import NotionConfig

logger = logging.getLogger(__name__)

NOTION_VERSION = "2022-06-28"

# Rate limiting: max 3 requests/second
MIN_REQUEST_INTERVAL = 0.35
MAX_RETRIES = 5


def to_response_text(response: dict[str, Any]) -> str:
    """Serialize an API response to the compact form the Notion API sends."""
    return json.dumps(response, separators=(",", ":"), ensure_ascii=False)


class RateLimitedNotionClient:
    """Wrapper around Notion client with rate limiting, retries and caching.

    Every method returns the response as compact JSON text, ready for the
    extraction functions in ``notion_extract.records`` and
    ``notion_extract.properties``.

    Attributes:
        notion: The underlying notion_client.Client instance.
        cache_duration: Seconds to keep database query responses (0 = off).
        request_count: Total number of API requests made.
    """

    def __init__(self, notion: Client, cache_duration: float = 0):
        """Initialize the rate-limited client.

        Args:
            notion: A configured notion_client.Client instance.
            cache_duration: Seconds to cache database query responses.
        """
        self.notion = notion
        self.cache_duration = max(cache_duration, 0)
        self._cache: dict[tuple[str, str], tuple[str, float]] = {}
        self._last_request_time: float = 0
        self.request_count: int = 0

    def _wait_for_rate_limit(self) -> None:
        """Wait if needed to respect rate limit."""
        elapsed = time.time() - self._last_request_time
        if elapsed < MIN_REQUEST_INTERVAL:
            time.sleep(MIN_REQUEST_INTERVAL - elapsed)
        self._last_request_time = time.time()
        self.request_count += 1

    def _handle_rate_limit_error(self, e: APIResponseError | HTTPResponseError, attempt: int) -> bool:
        """Handle API errors with exponential backoff (429, 502, 503, 504).

        Args:
            e: The API response error (APIResponseError or HTTPResponseError).
            attempt: Current retry attempt number (0-indexed).

        Returns:
            True if should retry, False if should give up.
        """
        retryable_statuses = {429, 502, 503, 504}
        if e.status not in retryable_statuses:
            return False
        if attempt >= MAX_RETRIES - 1:
            logger.error(f"Max retry attempts reached after {e.status} errors")
            return False
        wait_time = 2 ** attempt
        logger.warning(f"API error {e.status}, waiting {wait_time}s before retry (attempt {attempt + 1}/{MAX_RETRIES})...")
        time.sleep(wait_time)
        return True

    def _request(self, call: Callable[[], dict[str, Any]], description: str) -> str:
        """Run an API call with rate limiting and retries, returning its text.

        Raises:
            APIResponseError: On non-retryable API errors or after retries exhausted.
            Exception: If all retries fail.
        """
        for attempt in range(MAX_RETRIES):
            self._wait_for_rate_limit()
            try:
                return to_response_text(call())
            except (APIResponseError, HTTPResponseError) as e:
                if self._handle_rate_limit_error(e, attempt):
                    continue
                raise
        raise Exception(f"Failed to {description} after {MAX_RETRIES} retries")

    def search(self, query: str = "", object_type: str | None = None) -> str:
        """Search pages and databases shared with the integration.

        Args:
            query: Text to match against titles ("" lists everything).
            object_type: Optional "page" or "database" filter.

        Returns:
            Raw search response JSON.
        """
        body: dict[str, Any] = {}
        if query:
            body["query"] = query
        if object_type:
            body["filter"] = {"property": "object", "value": object_type}
        logger.debug(f"Searching Notion (query={query!r}, type={object_type})")
        return self._request(lambda: self.notion.search(**body), "search")

    def query_database(self, database_id: str, filter: dict[str, Any] | None = None) -> str:
        """Query a database, using the response cache when enabled.

        Args:
            database_id: The Notion database ID.
            filter: Optional query body (filter, sorts, page_size ...).

        Returns:
            Raw query response JSON.
        """
        body = filter or {}
        cache_key = (database_id, json.dumps(body, sort_keys=True))

        now = time.time()
        self._drop_expired(now)
        cached = self._cache.get(cache_key)
        if cached:
            logger.debug(f"Cache hit for database {database_id}")
            return cached[0]

        text = self._request(
            lambda: self.notion.request(
                path=f"databases/{database_id}/query", method="POST", body=body
            ),
            f"query database {database_id}",
        )
        if self.cache_duration > 0:
            self._cache[cache_key] = (text, time.time() + self.cache_duration)
        return text

    def get_page(self, page_id: str) -> str:
        """Get a single page by ID.

        Returns:
            Raw page JSON.
        """
        return self._request(
            lambda: self.notion.pages.retrieve(page_id=page_id),
            f"get page {page_id}",
        )

    def _drop_expired(self, now: float) -> None:
        """Remove cache entries whose expiry has passed."""
        expired = [key for key, (_, expiry) in self._cache.items() if expiry <= now]
        for key in expired:
            del self._cache[key]

    def clear_cache(self) -> None:
        """Clear the query response cache."""
        self._cache.clear()


def get_notion_client(config: NotionConfig | None = None) -> RateLimitedNotionClient:
    """Factory function to create a configured RateLimitedNotionClient.

    Args:
        config: Connection settings. Read from the environment when omitted.

    Returns:
        A configured RateLimitedNotionClient instance.

    Raises:
        ValueError: If no config is given and NOTION_API_TOKEN is not set,
            or the given config has no API key.
    """
    if config is None:
        config = NotionConfig.from_env()
    if not config.is_valid():
        raise ValueError("NotionConfig is invalid. Please set the API key.")
    notion = Client(auth=config.api_key, notion_version=NOTION_VERSION)
    return RateLimitedNotionClient(notion, cache_duration=config.cache_duration)
