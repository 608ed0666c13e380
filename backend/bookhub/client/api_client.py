"""HTTP client for the catalog REST API, used as the cache's fetcher."""

import logging

import httpx

from bookhub.application.schemas import BookResponse
from bookhub.domain.entities import Book

logger = logging.getLogger(__name__)


class CatalogApiError(Exception):
    """The catalog API could not be reached or answered with an error."""

    def __init__(self, status_code: int | None, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"Catalog API error ({status_code}): {message}")


class CatalogApiClient:
    """Reads books over HTTP. Browsing never depends on the real-time channel."""

    def __init__(
        self,
        base_url: str = "http://localhost:8020",
        api_prefix: str = "/api/v1",
        *,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._prefix = "/" + api_prefix.strip("/")
        self._owns_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=httpx.AsyncHTTPTransport(retries=2),
        )

    async def list_books(self, skip: int = 0, limit: int = 100) -> list[Book]:
        body = await self._get("/books", params={"skip": skip, "limit": limit})
        return [BookResponse.model_validate(item).to_entity() for item in body]

    async def get_book(self, book_id: str) -> Book | None:
        try:
            body = await self._get(f"/books/{book_id}")
        except CatalogApiError as exc:
            if exc.status_code == 404:
                return None
            raise
        return BookResponse.model_validate(body).to_entity()

    async def _get(self, path: str, params: dict | None = None):
        try:
            response = await self._http_client.get(f"{self._prefix}{path}", params=params)
        except httpx.HTTPError as exc:
            logger.warning("Catalog request %s failed: %s", path, exc)
            raise CatalogApiError(None, str(exc)) from exc

        if response.status_code != 200:
            raise CatalogApiError(response.status_code, response.text)
        return response.json()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http_client.aclose()
