"""Google Books API client — implements the BookCatalogProvider interface.

Communicates with the public Google Books API
(https://www.googleapis.com/books/v1) using httpx.
"""

import logging
from typing import Any

import httpx

from bookhub.application.interfaces import BookCatalogProvider
from bookhub.domain.exceptions import CatalogLookupError

logger = logging.getLogger(__name__)


class GoogleBooksClient(BookCatalogProvider):
    """Infrastructure adapter — searches volumes on Google Books."""

    def __init__(
        self,
        base_url: str = "https://www.googleapis.com/books/v1",
        timeout: float = 15.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._http_client = http_client

    @property
    def provider_name(self) -> str:
        return "google_books"

    async def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or create a new one."""
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=self._timeout)

    async def search(self, query: str, max_results: int = 20) -> list[dict[str, Any]]:
        url = f"{self._base_url}/volumes"
        params = {"q": query, "maxResults": max_results, "printType": "books"}

        client = await self._get_client()
        should_close = self._http_client is None

        try:
            try:
                response = await client.get(url, params=params)
            except httpx.HTTPError as exc:
                logger.warning("Google Books request failed: %s", exc)
                raise CatalogLookupError(503, str(exc)) from exc

            if response.status_code != 200:
                self._raise_lookup_error(response)

            data = response.json()
            return list(data.get("items") or [])

        finally:
            if should_close:
                await client.aclose()

    @staticmethod
    def _raise_lookup_error(response: httpx.Response) -> None:
        """Parse an error response from Google Books and raise CatalogLookupError."""
        try:
            body = response.json()
            message = body.get("error", {}).get("message", response.text)
        except Exception:
            message = response.text
        logger.warning("Google Books returned %d: %s", response.status_code, message)
        raise CatalogLookupError(response.status_code, message)
