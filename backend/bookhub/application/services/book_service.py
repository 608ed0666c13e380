"""Application service (use case) for catalog operations.

Every write follows the same order: persist, commit, then broadcast the
committed entity. A validation error, a missing book or a persistence
failure raises before the broadcaster is reached, and the broadcaster never
raises back into the write.
"""

import logging

from bookhub.application.interfaces import BookRepository, ChangeBroadcaster
from bookhub.application.schemas import BookCreate, BookUpdate
from bookhub.domain.entities import Book
from bookhub.domain.exceptions import EntityNotFoundError

logger = logging.getLogger(__name__)


class BookService:
    """Orchestrates catalog business logic. Depends on the repository and broadcaster ports (DI)."""

    def __init__(self, repository: BookRepository, broadcaster: ChangeBroadcaster):
        self._repository = repository
        self._broadcaster = broadcaster

    async def get_book(self, book_id: str) -> Book:
        book = await self._repository.get_by_id(book_id)
        if book is None:
            raise EntityNotFoundError("Book", book_id)
        return book

    async def list_books(self, skip: int = 0, limit: int = 100) -> list[Book]:
        return await self._repository.get_all(skip=skip, limit=limit)

    async def create_book(self, data: BookCreate) -> Book:
        book = Book(**data.model_dump())
        created = await self._repository.create(book)
        await self._repository.commit()

        await self._broadcaster.emit_created(created)
        return created

    async def update_book(self, book_id: str, data: BookUpdate) -> Book:
        book = await self.get_book(book_id)
        changed = book.apply_changes(**data.changes())
        updated = await self._repository.update(book)
        await self._repository.commit()

        if not changed:
            logger.debug("Update of book %s carried no content change", book_id)
        await self._broadcaster.emit_updated(updated)
        return updated

    async def delete_book(self, book_id: str) -> Book:
        """Delete a book and return the pre-deletion snapshot used for the tombstone."""
        book = await self.get_book(book_id)
        deleted = await self._repository.delete(book_id)
        if not deleted:
            # Removed concurrently between the read and the delete
            raise EntityNotFoundError("Book", book_id)
        await self._repository.commit()

        await self._broadcaster.emit_deleted(book_id, book.title, book.author)
        return book
