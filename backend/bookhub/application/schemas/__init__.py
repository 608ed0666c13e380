from .book import BookCreate, BookUpdate, BookResponse, DeleteResponse
from .events import (
    BOOK_CREATED,
    BOOK_DELETED,
    BOOK_UPDATED,
    CHANGE_EVENT_NAMES,
    CONNECTION_SUCCESS,
    BookDeletedPayload,
    ConnectionSuccessPayload,
    decode_change_event,
    encode_change_event,
)
from .google_books import BookImportRequest, VolumeInfo, SaleInfo, VolumeSearchResult

__all__ = [
    "BookCreate",
    "BookUpdate",
    "BookResponse",
    "DeleteResponse",
    "BOOK_CREATED",
    "BOOK_DELETED",
    "BOOK_UPDATED",
    "CHANGE_EVENT_NAMES",
    "CONNECTION_SUCCESS",
    "BookDeletedPayload",
    "ConnectionSuccessPayload",
    "decode_change_event",
    "encode_change_event",
    "BookImportRequest",
    "VolumeInfo",
    "SaleInfo",
    "VolumeSearchResult",
]
