from .book_repository import BookRepository
from .book_catalog_provider import BookCatalogProvider
from .change_broadcaster import ChangeBroadcaster

__all__ = [
    "BookRepository",
    "BookCatalogProvider",
    "ChangeBroadcaster",
]
