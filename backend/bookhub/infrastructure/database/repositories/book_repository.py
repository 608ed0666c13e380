"""Concrete repository implementation backed by SQLAlchemy."""

from datetime import datetime, timezone

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from bookhub.application.interfaces import BookRepository
from bookhub.domain.entities import Book
from bookhub.infrastructure.database.models import BookModel


def _as_utc(value: datetime) -> datetime:
    """SQLite drops tzinfo on the way back; every stored timestamp is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SQLAlchemyBookRepository(BookRepository):
    """Implements the BookRepository port using SQLAlchemy async sessions."""

    def __init__(self, session: AsyncSession):
        self._session = session

    def _to_entity(self, model: BookModel) -> Book:
        """Map ORM model → domain entity."""
        return Book(
            id=model.id,
            title=model.title,
            author=model.author,
            genre=model.genre,
            year=model.year,
            price=model.price,
            isbn=model.isbn,
            cover_url=model.cover_url,
            description=model.description,
            stock=model.stock,
            created_at=_as_utc(model.created_at),
            updated_at=_as_utc(model.updated_at),
        )

    def _to_model(self, entity: Book) -> BookModel:
        """Map domain entity → ORM model (for creation)."""
        model = BookModel(
            title=entity.title,
            author=entity.author,
            genre=entity.genre,
            year=entity.year,
            price=entity.price,
            isbn=entity.isbn,
            cover_url=entity.cover_url,
            description=entity.description,
            stock=entity.stock,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
        if entity.id is not None:
            model.id = entity.id
        return model

    async def get_by_id(self, book_id: str) -> Book | None:
        result = await self._session.get(BookModel, book_id)
        return self._to_entity(result) if result else None

    async def get_all(self, skip: int = 0, limit: int = 100) -> list[Book]:
        stmt = (
            select(BookModel)
            .order_by(BookModel.updated_at.desc(), BookModel.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(row) for row in result.scalars().all()]

    async def find_duplicate(
        self,
        *,
        isbn: str | None,
        title: str,
        author: str,
        year: int,
    ) -> Book | None:
        conditions = []
        if isbn:
            conditions.append(BookModel.isbn == isbn)
        if title and author:
            conditions.append(
                (func.lower(func.trim(BookModel.title)) == title.strip().lower())
                & (func.lower(func.trim(BookModel.author)) == author.strip().lower())
                & (BookModel.year == year)
            )
        if not conditions:
            return None

        stmt = select(BookModel).where(or_(*conditions)).limit(1)
        result = await self._session.execute(stmt)
        model = result.scalars().first()
        return self._to_entity(model) if model else None

    async def create(self, book: Book) -> Book:
        model = self._to_model(book)
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)

    async def update(self, book: Book) -> Book:
        model = await self._session.get(BookModel, book.id)
        if model is None:
            raise ValueError(f"Book {book.id} not found in database")
        for name in Book.CONTENT_FIELDS:
            setattr(model, name, getattr(book, name))
        model.updated_at = book.updated_at
        await self._session.flush()
        return self._to_entity(model)

    async def delete(self, book_id: str) -> bool:
        model = await self._session.get(BookModel, book_id)
        if model is None:
            return False
        await self._session.delete(model)
        await self._session.flush()
        return True

    async def commit(self) -> None:
        await self._session.commit()
