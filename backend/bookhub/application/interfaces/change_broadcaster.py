"""Abstract interface (port) for pushing catalog changes to connected clients."""

from abc import ABC, abstractmethod

from bookhub.domain.entities import Book
from bookhub.domain.events import BookCreated, BookDeleted, BookUpdated, ChangeEvent


class ChangeBroadcaster(ABC):
    """Fan-out of committed catalog changes to every connected channel.

    Implementations must never raise: a broadcast is a side effect of a
    mutation that has already committed.
    """

    @abstractmethod
    async def publish(self, event: ChangeEvent) -> None:
        """Push one change event to all connected clients."""
        ...

    async def emit_created(self, book: Book) -> None:
        await self.publish(BookCreated(book))

    async def emit_updated(self, book: Book) -> None:
        await self.publish(BookUpdated(book))

    async def emit_deleted(
        self, book_id: str, title: str | None = None, author: str | None = None
    ) -> None:
        await self.publish(BookDeleted(id=book_id, title=title, author=author))
