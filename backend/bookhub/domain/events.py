"""Catalog change events — the unit of real-time fan-out.

A ``ChangeEvent`` is one of three variants. Created/Updated carry the full
post-commit ``Book``; Deleted carries a tombstone with just enough to name the
book in a notification. Events are fire-and-forget: at-most-once, best-effort
delivery with no acknowledgment or replay.
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from bookhub.domain.entities import Book


class ChangeKind(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


@dataclass(frozen=True)
class BookCreated:
    kind: ClassVar[ChangeKind] = ChangeKind.CREATED

    book: Book

    @property
    def book_id(self) -> str | None:
        return self.book.id


@dataclass(frozen=True)
class BookUpdated:
    kind: ClassVar[ChangeKind] = ChangeKind.UPDATED

    book: Book

    @property
    def book_id(self) -> str | None:
        return self.book.id


@dataclass(frozen=True)
class BookDeleted:
    """Tombstone for a removed book. Not enough to rebuild the entity."""

    kind: ClassVar[ChangeKind] = ChangeKind.DELETED

    id: str
    title: str | None = None
    author: str | None = None

    @property
    def book_id(self) -> str:
        return self.id


ChangeEvent = BookCreated | BookUpdated | BookDeleted
