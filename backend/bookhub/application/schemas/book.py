"""Pydantic DTOs (Data Transfer Objects) for the Book feature.

JSON uses camelCase field names (``coverUrl``, ``createdAt``...) so the
HTTP body and the real-time payload of a book are the same document.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from bookhub.domain.entities import Book


class BookCreate(BaseModel):
    """Schema for creating a new book."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=500, examples=["The Hobbit"])
    author: str = Field(..., min_length=1, max_length=255, examples=["J.R.R. Tolkien"])
    genre: str = Field(..., min_length=1, max_length=100, examples=["Fantasy"])
    year: int = Field(..., le=9999, examples=[1937])
    price: int = Field(..., ge=0, description="Price in minor currency units", examples=[599])
    isbn: str | None = Field(None, max_length=32)
    cover_url: str | None = None
    description: str | None = None
    stock: int = Field(0, ge=0)


class BookUpdate(BaseModel):
    """Schema for updating an existing book — all fields optional."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str | None = Field(None, min_length=1, max_length=500)
    author: str | None = Field(None, min_length=1, max_length=255)
    genre: str | None = Field(None, min_length=1, max_length=100)
    year: int | None = Field(None, le=9999)
    price: int | None = Field(None, ge=0)
    isbn: str | None = Field(None, max_length=32)
    cover_url: str | None = None
    description: str | None = None
    stock: int | None = Field(None, ge=0)

    def changes(self) -> dict[str, Any]:
        """Only the fields the caller actually sent."""
        return self.model_dump(exclude_unset=True)


class BookResponse(BaseModel):
    """Schema returned to the client — and broadcast as ``book:created``/``book:updated``."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: str
    title: str
    author: str
    genre: str
    year: int
    price: int
    isbn: str | None = None
    cover_url: str | None = None
    description: str | None = None
    stock: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, book: Book) -> "BookResponse":
        return cls.model_validate(book, from_attributes=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    def to_entity(self) -> Book:
        return Book(**self.model_dump())


class DeleteResponse(BaseModel):
    success: bool = True
