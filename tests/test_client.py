"""Tests for notion_extract.client module (with a mocked notion_client.Client)."""

import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from notion_client import APIResponseError

from notion_extract import client as client_module
from notion_extract.client import (
    MAX_RETRIES,
    RateLimitedNotionClient,
    get_notion_client,
    to_response_text,
)
from notion_extract.config import NotionConfig
from notion_extract.records import parse_databases


def api_error(status: int) -> APIResponseError:
    """Build an APIResponseError carrying only a status code."""
    error = APIResponseError.__new__(APIResponseError)
    error.status = status
    return error


@pytest.fixture(autouse=True)
def clock(monkeypatch):
    """Replace the client's clock: sleeps are recorded and advance time."""
    fake = SimpleNamespace(now=1000.0, sleeps=[])

    def sleep(seconds):
        fake.sleeps.append(seconds)
        fake.now += seconds

    monkeypatch.setattr(client_module, "time", SimpleNamespace(time=lambda: fake.now, sleep=sleep))
    return fake


@pytest.fixture
def notion():
    """A stand-in for notion_client.Client."""
    return MagicMock()


class TestToResponseText:
    """Tests for to_response_text function."""

    def test_compact(self):
        """Responses are serialized without spaces, keys in order."""
        text = to_response_text({"object": "page", "id": "é"})
        assert text == '{"object":"page","id":"é"}'


class TestSearch:
    """Tests for RateLimitedNotionClient.search."""

    def test_returns_text(self, notion):
        """The response comes back as parseable text."""
        notion.search.return_value = {
            "object": "list",
            "results": [{"object": "database", "id": "abc-123", "title": [{"plain_text": "Tasks"}]}],
        }
        client = RateLimitedNotionClient(notion)

        text = client.search(object_type="database")

        notion.search.assert_called_once_with(filter={"property": "object", "value": "database"})
        assert parse_databases(text) == [{"id": "abc123", "title": "Tasks"}]
        assert client.request_count == 1

    def test_query_argument(self, notion):
        """A search query is passed through."""
        notion.search.return_value = {"results": []}
        RateLimitedNotionClient(notion).search("roadmap")
        notion.search.assert_called_once_with(query="roadmap")


class TestRetries:
    """Tests for retry handling."""

    def test_retry_on_rate_limit(self, notion, clock):
        """429 errors are retried with exponential backoff."""
        notion.pages.retrieve.side_effect = [api_error(429), api_error(503), {"object": "page", "id": "p"}]
        client = RateLimitedNotionClient(notion)

        assert json.loads(client.get_page("p")) == {"object": "page", "id": "p"}
        assert notion.pages.retrieve.call_count == 3
        assert 1 in clock.sleeps and 2 in clock.sleeps

    def test_non_retryable_raises(self, notion):
        """Other API errors propagate immediately."""
        notion.pages.retrieve.side_effect = api_error(404)
        client = RateLimitedNotionClient(notion)

        with pytest.raises(APIResponseError):
            client.get_page("missing")
        assert notion.pages.retrieve.call_count == 1

    def test_gives_up_after_max_retries(self, notion):
        """The last error is raised once retries are exhausted."""
        notion.pages.retrieve.side_effect = [api_error(429)] * MAX_RETRIES
        client = RateLimitedNotionClient(notion)

        with pytest.raises(APIResponseError):
            client.get_page("p")
        assert notion.pages.retrieve.call_count == MAX_RETRIES


class TestQueryDatabase:
    """Tests for query_database caching."""

    def test_request_path(self, notion):
        """The query endpoint is called with the filter as body."""
        notion.request.return_value = {"results": []}
        body = {"filter": {"property": "Done", "checkbox": {"equals": True}}}

        RateLimitedNotionClient(notion).query_database("db-1", body)

        notion.request.assert_called_once_with(path="databases/db-1/query", method="POST", body=body)

    def test_cached(self, notion):
        """Repeated queries are served from the cache."""
        notion.request.return_value = {"results": []}
        client = RateLimitedNotionClient(notion, cache_duration=300)

        first = client.query_database("db-1")
        second = client.query_database("db-1")

        assert first == second
        assert notion.request.call_count == 1

    def test_cache_key_includes_filter(self, notion):
        """Different filters are cached separately."""
        notion.request.return_value = {"results": []}
        client = RateLimitedNotionClient(notion, cache_duration=300)

        client.query_database("db-1")
        client.query_database("db-1", {"page_size": 10})

        assert notion.request.call_count == 2

    def test_cache_disabled(self, notion):
        """A zero cache duration always hits the API."""
        notion.request.return_value = {"results": []}
        client = RateLimitedNotionClient(notion, cache_duration=0)

        client.query_database("db-1")
        client.query_database("db-1")

        assert notion.request.call_count == 2

    def test_cache_expires(self, notion, clock):
        """Entries past their expiry are refetched."""
        notion.request.return_value = {"results": []}
        client = RateLimitedNotionClient(notion, cache_duration=10)

        client.query_database("db-1")
        clock.now += 11
        client.query_database("db-1")

        assert notion.request.call_count == 2

    def test_expired_entries_dropped(self, notion, clock):
        """Expired entries are removed from the cache, not just skipped."""
        notion.request.return_value = {"results": []}
        client = RateLimitedNotionClient(notion, cache_duration=10)

        client.query_database("db-1")
        clock.now += 11
        client.query_database("db-2")

        assert list(client._cache) == [("db-2", "{}")]

    def test_clear_cache(self, notion):
        """clear_cache forces the next query to hit the API."""
        notion.request.return_value = {"results": []}
        client = RateLimitedNotionClient(notion, cache_duration=300)

        client.query_database("db-1")
        client.clear_cache()
        client.query_database("db-1")

        assert notion.request.call_count == 2


class TestGetNotionClient:
    """Tests for get_notion_client factory."""

    def test_from_config(self):
        """A valid config produces a client with its cache duration."""
        client = get_notion_client(NotionConfig(api_key="secret_abc", cache_duration=60))
        assert isinstance(client, RateLimitedNotionClient)
        assert client.cache_duration == 60

    def test_invalid_config(self):
        """A config without API key is rejected."""
        with pytest.raises(ValueError):
            get_notion_client(NotionConfig())
