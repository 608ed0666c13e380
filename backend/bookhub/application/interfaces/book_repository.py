"""Abstract repository interfaces (ports) — define the contract, not the implementation."""

from abc import ABC, abstractmethod

from bookhub.domain.entities import Book


class BookRepository(ABC):
    """Port for catalog persistence — implemented in the infrastructure layer."""

    @abstractmethod
    async def get_by_id(self, book_id: str) -> Book | None:
        """Retrieve a single book by its ID."""
        ...

    @abstractmethod
    async def get_all(self, skip: int = 0, limit: int = 100) -> list[Book]:
        """Retrieve a paginated list of books, most recent activity first."""
        ...

    @abstractmethod
    async def find_duplicate(
        self,
        *,
        isbn: str | None,
        title: str,
        author: str,
        year: int,
    ) -> Book | None:
        """Find a book with the same ISBN, or the same title/author/year."""
        ...

    @abstractmethod
    async def create(self, book: Book) -> Book:
        """Persist a new book and return it with server-assigned fields."""
        ...

    @abstractmethod
    async def update(self, book: Book) -> Book:
        """Write every field of an existing book, including ``updated_at``."""
        ...

    @abstractmethod
    async def delete(self, book_id: str) -> bool:
        """Delete a book. Returns True if deleted, False if not found."""
        ...

    @abstractmethod
    async def commit(self) -> None:
        """Make pending writes durable."""
        ...
