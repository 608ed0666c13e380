from .book import BookModel

__all__ = [
    "BookModel",
]
