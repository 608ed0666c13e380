"""Storefront classification of books by their timestamps.

A book is a "new arrival" while it is younger than the new-arrival window,
and "recently updated" when its content changed after creation and the change
is inside the recently-updated window. Both rely on ``updated_at`` moving
only on content changes.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from bookhub.domain.entities import Book

NEW_ARRIVAL_WINDOW = timedelta(days=30)
RECENTLY_UPDATED_WINDOW = timedelta(days=14)

_UNIT_SECONDS = {
    "seconds": 1,
    "minutes": 60,
    "hours": 60 * 60,
    "days": 24 * 60 * 60,
    "months": 30 * 24 * 60 * 60,
}


@dataclass(frozen=True)
class BookBadges:
    is_new: bool
    is_updated: bool


def duration_from_unit(amount: float, unit: str) -> timedelta:
    """Turn a settings pair like ``(2, "months")`` into a window; unknown units count as days."""
    return timedelta(seconds=amount * _UNIT_SECONDS.get(unit, _UNIT_SECONDS["days"]))


def classify(
    book: Book,
    now: datetime | None = None,
    *,
    new_arrival: timedelta = NEW_ARRIVAL_WINDOW,
    recently_updated: timedelta = RECENTLY_UPDATED_WINDOW,
) -> BookBadges:
    now = now or datetime.now(timezone.utc)
    is_new = now - book.created_at <= new_arrival
    is_updated = book.updated_at > book.created_at and now - book.updated_at <= recently_updated
    return BookBadges(is_new=is_new, is_updated=is_updated)


def sort_by_recent_activity(books: Iterable[Book]) -> list[Book]:
    """Most recently created or changed first."""
    return sorted(books, key=lambda book: max(book.updated_at, book.created_at), reverse=True)
