"""Application service for importing books from an external catalog.

Imported volumes go through ``BookService.create_book`` so they are
broadcast exactly like books created by hand.
"""

import logging
import math
import re
from datetime import datetime, timezone

from bookhub.application.interfaces import BookCatalogProvider, BookRepository
from bookhub.application.schemas import BookCreate, BookImportRequest, VolumeSearchResult
from bookhub.application.services.book_service import BookService
from bookhub.domain.entities import Book
from bookhub.domain.exceptions import DuplicateEntityError

logger = logging.getLogger(__name__)

_YEAR_RE = re.compile(r"^\s*(\d{4})")


class BookImportService:
    """Maps Google Books volumes onto catalog books and rejects duplicates."""

    def __init__(
        self,
        provider: BookCatalogProvider,
        repository: BookRepository,
        book_service: BookService,
        *,
        default_price: int = 399,
        default_stock: int = 25,
        usd_to_inr_rate: float = 83.0,
    ):
        self._provider = provider
        self._repository = repository
        self._book_service = book_service
        self._default_price = default_price
        self._default_stock = default_stock
        self._usd_to_inr_rate = usd_to_inr_rate

    async def search(self, query: str, max_results: int = 20) -> list[VolumeSearchResult]:
        if not query.strip():
            raise ValueError("Search query is required")
        volumes = await self._provider.search(query.strip(), max_results=max_results)
        logger.info(
            "Catalog search via %s for %r returned %d volumes",
            self._provider.provider_name,
            query,
            len(volumes),
        )
        return [VolumeSearchResult.model_validate(v) for v in volumes]

    async def import_volume(self, request: BookImportRequest) -> Book:
        data = self.build_book_data(request)
        info = request.volume_info

        existing = await self._repository.find_duplicate(
            isbn=data.isbn,
            title=(info.title or "").strip(),
            author=(info.authors[0] if info.authors else "").strip(),
            year=data.year,
        )
        if existing is not None:
            raise DuplicateEntityError("Book", "title", data.title, existing=existing)

        return await self._book_service.create_book(data)

    def build_book_data(self, request: BookImportRequest) -> BookCreate:
        info = request.volume_info
        thumbnail = info.image_links.thumbnail if info.image_links else None

        return BookCreate(
            title=info.title or "Untitled",
            author=info.authors[0] if info.authors else "Unknown Author",
            genre=info.categories[0] if info.categories else "General",
            year=self._parse_year(info.published_date),
            price=self._convert_price(request),
            isbn=self._pick_isbn(request) or None,
            stock=self._default_stock,
            description=info.description or None,
            cover_url=thumbnail.replace("http:", "https:", 1) if thumbnail else None,
        )

    @staticmethod
    def _pick_isbn(request: BookImportRequest) -> str:
        identifiers = {i.type: i.identifier for i in request.volume_info.industry_identifiers}
        return identifiers.get("ISBN_13") or identifiers.get("ISBN_10") or ""

    @staticmethod
    def _parse_year(published_date: str | None) -> int:
        if published_date:
            match = _YEAR_RE.match(published_date)
            if match:
                return int(match.group(1))
        return datetime.now(timezone.utc).year

    def _convert_price(self, request: BookImportRequest) -> int:
        list_price = request.sale_info.list_price if request.sale_info else None
        if list_price is None or not list_price.amount:
            return self._default_price
        if list_price.currency_code == "INR":
            return _round_half_up(list_price.amount)
        if list_price.currency_code == "USD":
            return _round_half_up(list_price.amount * self._usd_to_inr_rate)
        return self._default_price


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)
