from .book_service import BookService
from .book_import_service import BookImportService

__all__ = [
    "BookService",
    "BookImportService",
]
