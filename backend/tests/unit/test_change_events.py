"""Unit tests for the wire encoding of catalog change events."""

import pytest
from pydantic import ValidationError

from bookhub.application.schemas import (
    BOOK_CREATED,
    BOOK_DELETED,
    BOOK_UPDATED,
    ConnectionSuccessPayload,
    decode_change_event,
    encode_change_event,
)
from bookhub.domain.entities import Book
from bookhub.domain.events import BookCreated, BookDeleted, BookUpdated, ChangeKind


def _book() -> Book:
    return Book(
        id="b-1",
        title="Neuromancer",
        author="William Gibson",
        genre="Science Fiction",
        year=1984,
        price=450,
        cover_url="https://covers.example/neuromancer.jpg",
        stock=7,
    )


def test_created_payload_is_full_camel_case_book():
    name, payload = encode_change_event(BookCreated(_book()))

    assert name == BOOK_CREATED
    assert payload["id"] == "b-1"
    assert payload["coverUrl"] == "https://covers.example/neuromancer.jpg"
    assert {"createdAt", "updatedAt", "stock", "price"} <= set(payload)
    assert "cover_url" not in payload


def test_updated_event_decodes_to_entity():
    book = _book()
    name, payload = encode_change_event(BookUpdated(book))

    event = decode_change_event(name, payload)

    assert name == BOOK_UPDATED
    assert isinstance(event, BookUpdated)
    assert event.kind is ChangeKind.UPDATED
    assert event.book.content() == book.content()
    assert event.book.updated_at == book.updated_at


def test_deleted_payload_is_a_tombstone():
    name, payload = encode_change_event(BookDeleted(id="b-1", title="Neuromancer", author="William Gibson"))
    assert name == BOOK_DELETED
    assert payload == {"id": "b-1", "title": "Neuromancer", "author": "William Gibson"}

    _, bare = encode_change_event(BookDeleted(id="b-2"))
    assert bare == {"id": "b-2"}


def test_unknown_event_name_is_rejected():
    with pytest.raises(ValueError):
        decode_change_event("book:archived", {"id": "x"})


def test_malformed_payload_is_rejected():
    with pytest.raises(ValidationError):
        decode_change_event(BOOK_CREATED, {"id": "x"})


def test_connection_success_payload():
    payload = ConnectionSuccessPayload(id="sid-1").to_wire()
    assert payload["id"] == "sid-1"
    assert payload["message"] == "Real-time connection established"
    assert isinstance(payload["timestamp"], str)
