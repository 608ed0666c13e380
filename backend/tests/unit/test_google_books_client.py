"""Unit tests for the GoogleBooksClient."""

import httpx
import pytest

from bookhub.domain.exceptions import CatalogLookupError
from bookhub.infrastructure.google_books import GoogleBooksClient


# ── Helpers ──


def _client(handler) -> GoogleBooksClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GoogleBooksClient(base_url="https://books.test/v1", http_client=http_client)


@pytest.mark.asyncio
async def test_search_returns_items():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"items": [{"id": "v1", "volumeInfo": {"title": "Dune"}}]})

    items = await _client(handler).search("dune", max_results=5)

    assert items == [{"id": "v1", "volumeInfo": {"title": "Dune"}}]
    assert seen[0].url.path == "/v1/volumes"
    assert seen[0].url.params["q"] == "dune"
    assert seen[0].url.params["maxResults"] == "5"


@pytest.mark.asyncio
async def test_search_without_items_is_empty():
    items = await _client(lambda request: httpx.Response(200, json={"totalItems": 0})).search("zzz")
    assert items == []


@pytest.mark.asyncio
async def test_error_status_raises_lookup_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"error": {"message": "Quota exceeded"}})

    with pytest.raises(CatalogLookupError) as exc_info:
        await _client(handler).search("dune")

    assert exc_info.value.status_code == 429
    assert exc_info.value.message == "Quota exceeded"


@pytest.mark.asyncio
async def test_network_failure_maps_to_503():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(CatalogLookupError) as exc_info:
        await _client(handler).search("dune")

    assert exc_info.value.status_code == 503


def test_provider_name():
    assert GoogleBooksClient().provider_name == "google_books"
