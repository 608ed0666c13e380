from .book_repository import SQLAlchemyBookRepository

__all__ = [
    "SQLAlchemyBookRepository",
]
