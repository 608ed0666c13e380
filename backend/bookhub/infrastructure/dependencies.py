"""FastAPI dependency injection — wires infrastructure to application layer."""

from collections.abc import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from bookhub.config import get_settings
from bookhub.application.services import BookImportService, BookService
from bookhub.infrastructure.database.session import get_db_session
from bookhub.infrastructure.database.repositories import SQLAlchemyBookRepository
from bookhub.infrastructure.google_books import GoogleBooksClient
from bookhub.infrastructure.realtime import BroadcastHub, SocketIOChangeBroadcaster


def get_broadcast_hub(request: Request) -> BroadcastHub | None:
    """The application's hub, created in ``create_app`` and kept on ``app.state``."""
    return getattr(request.app.state, "broadcast_hub", None)


async def get_book_service(
    session: AsyncSession = Depends(get_db_session),
    hub: BroadcastHub | None = Depends(get_broadcast_hub),
) -> AsyncGenerator[BookService, None]:
    """Provides a BookService with its repository and broadcaster wired up."""
    repository = SQLAlchemyBookRepository(session)
    yield BookService(repository, SocketIOChangeBroadcaster(hub))


async def get_book_import_service(
    session: AsyncSession = Depends(get_db_session),
    hub: BroadcastHub | None = Depends(get_broadcast_hub),
) -> AsyncGenerator[BookImportService, None]:
    """Provides a BookImportService backed by Google Books."""
    settings = get_settings()

    repository = SQLAlchemyBookRepository(session)
    book_service = BookService(repository, SocketIOChangeBroadcaster(hub))
    provider = GoogleBooksClient(
        base_url=settings.google_books_base_url,
        timeout=settings.google_books_timeout,
    )

    yield BookImportService(
        provider=provider,
        repository=repository,
        book_service=book_service,
        default_price=settings.import_default_price,
        default_stock=settings.import_default_stock,
        usd_to_inr_rate=settings.usd_to_inr_rate,
    )
