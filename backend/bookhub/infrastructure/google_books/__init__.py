from .google_books_client import GoogleBooksClient

__all__ = [
    "GoogleBooksClient",
]
