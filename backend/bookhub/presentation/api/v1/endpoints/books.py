"""Book catalog endpoints.

Write endpoints respond with the same committed entity that the service
broadcasts, so the HTTP body and the ``book:*`` payload never disagree.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from bookhub.application.schemas import (
    BookCreate,
    BookImportRequest,
    BookResponse,
    BookUpdate,
    DeleteResponse,
    VolumeSearchResult,
)
from bookhub.application.services import BookImportService, BookService
from bookhub.domain.exceptions import CatalogLookupError, DuplicateEntityError, EntityNotFoundError
from bookhub.infrastructure.dependencies import get_book_import_service, get_book_service

router = APIRouter(prefix="/books", tags=["Books"])


@router.get("", response_model=list[BookResponse])
async def list_books(
    skip: int = 0,
    limit: int = 100,
    service: BookService = Depends(get_book_service),
) -> list[BookResponse]:
    """Retrieve a paginated list of books."""
    books = await service.list_books(skip=skip, limit=limit)
    return [BookResponse.from_entity(b) for b in books]


@router.get("/search", response_model=list[VolumeSearchResult])
async def search_books(
    q: str = "",
    service: BookImportService = Depends(get_book_import_service),
) -> list[VolumeSearchResult]:
    """Search Google Books for volumes that can be imported (up to 20 results)."""
    try:
        return await service.search(q)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except CatalogLookupError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)


@router.post("/import", response_model=BookResponse, status_code=status.HTTP_201_CREATED)
async def import_book(
    data: BookImportRequest,
    service: BookImportService = Depends(get_book_import_service),
) -> BookResponse:
    """Import a Google Books volume into the catalog."""
    try:
        book = await service.import_volume(data)
    except DuplicateEntityError as e:
        existing = BookResponse.from_entity(e.existing).to_wire() if e.existing else None
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": "Book already exists in catalog", "existingBook": existing},
        )
    return BookResponse.from_entity(book)


@router.get("/{book_id}", response_model=BookResponse)
async def get_book(
    book_id: str,
    service: BookService = Depends(get_book_service),
) -> BookResponse:
    """Retrieve a single book by ID."""
    try:
        book = await service.get_book(book_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return BookResponse.from_entity(book)


@router.post("", response_model=BookResponse, status_code=status.HTTP_201_CREATED)
async def create_book(
    data: BookCreate,
    service: BookService = Depends(get_book_service),
) -> BookResponse:
    """Create a new book and broadcast ``book:created``."""
    book = await service.create_book(data)
    return BookResponse.from_entity(book)


@router.put("/{book_id}", response_model=BookResponse)
async def update_book(
    book_id: str,
    data: BookUpdate,
    service: BookService = Depends(get_book_service),
) -> BookResponse:
    """Update an existing book and broadcast ``book:updated``."""
    try:
        book = await service.update_book(book_id, data)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return BookResponse.from_entity(book)


@router.delete("/{book_id}", response_model=DeleteResponse)
async def delete_book(
    book_id: str,
    service: BookService = Depends(get_book_service),
) -> DeleteResponse:
    """Delete a book by ID and broadcast ``book:deleted``."""
    try:
        await service.delete_book(book_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return DeleteResponse()
