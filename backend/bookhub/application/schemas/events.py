"""Wire schemas for the real-time channel.

Change events travel as ``(event name, JSON payload)`` pairs. The event name
is the variant tag; each variant has its own payload schema, and encoding or
decoding happens only here.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from bookhub.application.schemas.book import BookResponse
from bookhub.domain.events import BookCreated, BookDeleted, BookUpdated, ChangeEvent

CONNECTION_SUCCESS = "connection:success"
BOOK_CREATED = "book:created"
BOOK_UPDATED = "book:updated"
BOOK_DELETED = "book:deleted"

CHANGE_EVENT_NAMES = (BOOK_CREATED, BOOK_UPDATED, BOOK_DELETED)


class ConnectionSuccessPayload(BaseModel):
    """Sent once to every newly connected client."""

    id: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    message: str = "Real-time connection established"

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class BookDeletedPayload(BaseModel):
    id: str
    title: str | None = None
    author: str | None = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


def encode_change_event(event: ChangeEvent) -> tuple[str, dict[str, Any]]:
    """Serialize a change event into its wire name and payload."""
    if isinstance(event, BookCreated):
        return BOOK_CREATED, BookResponse.from_entity(event.book).to_wire()
    if isinstance(event, BookUpdated):
        return BOOK_UPDATED, BookResponse.from_entity(event.book).to_wire()
    if isinstance(event, BookDeleted):
        payload = BookDeletedPayload(id=event.id, title=event.title, author=event.author)
        return BOOK_DELETED, payload.to_wire()
    raise TypeError(f"Unsupported change event: {type(event).__name__}")


def decode_change_event(name: str, payload: dict[str, Any]) -> ChangeEvent:
    """Parse a wire payload back into a change event.

    Raises ``ValueError`` for unknown event names and pydantic's
    ``ValidationError`` (a ``ValueError`` subclass) for malformed payloads.
    """
    if name == BOOK_CREATED:
        return BookCreated(BookResponse.model_validate(payload).to_entity())
    if name == BOOK_UPDATED:
        return BookUpdated(BookResponse.model_validate(payload).to_entity())
    if name == BOOK_DELETED:
        tombstone = BookDeletedPayload.model_validate(payload)
        return BookDeleted(id=tombstone.id, title=tombstone.title, author=tombstone.author)
    raise ValueError(f"Unknown change event: {name}")
