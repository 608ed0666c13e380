"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

import socketio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import func, select

from bookhub.config import get_settings
from bookhub.domain.entities import Book
from bookhub.infrastructure.database import Base, BookModel, engine
from bookhub.infrastructure.database.session import async_session_factory
from bookhub.infrastructure.database.repositories import SQLAlchemyBookRepository
from bookhub.infrastructure.logging.log_config import setup_logging
from bookhub.infrastructure.realtime import BroadcastHub
from bookhub.presentation.api.error_handlers import setup_exception_handlers
from bookhub.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)

_SAMPLE_BOOKS: tuple[dict, ...] = (
    {
        "title": "To Kill a Mockingbird",
        "author": "Harper Lee",
        "genre": "Fiction",
        "year": 1960,
        "price": 499,
        "isbn": "978-0061120084",
        "stock": 45,
        "description": "A classic novel of modern American literature",
    },
    {
        "title": "1984",
        "author": "George Orwell",
        "genre": "Science Fiction",
        "year": 1949,
        "price": 399,
        "isbn": "978-0451524935",
        "stock": 32,
        "description": "A dystopian social science fiction novel",
    },
    {
        "title": "Pride and Prejudice",
        "author": "Jane Austen",
        "genre": "Romance",
        "year": 1813,
        "price": 349,
        "isbn": "978-0141439518",
        "stock": 28,
        "description": "A romantic novel of manners",
    },
    {
        "title": "The Great Gatsby",
        "author": "F. Scott Fitzgerald",
        "genre": "Fiction",
        "year": 1925,
        "price": 449,
        "isbn": "978-0743273565",
        "stock": 51,
        "description": "A novel about the American Dream in the Jazz Age",
    },
)


async def _seed_catalog() -> None:
    """Populate an empty catalog with sample books.

    Idempotent — does nothing once the ``books`` table has any rows.
    """
    try:
        async with async_session_factory() as session:
            count = await session.scalar(select(func.count()).select_from(BookModel))
            if count:
                logger.debug("Catalog already has %d books — skipping seed", count)
                return

            repository = SQLAlchemyBookRepository(session)
            for data in _SAMPLE_BOOKS:
                await repository.create(Book(**data))
            await repository.commit()
            logger.info("Seeded catalog with %d sample books", len(_SAMPLE_BOOKS))
    except Exception as exc:
        logger.warning("Could not seed catalog: %s", exc)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — create tables, seed the catalog, start the broadcast hub."""
    settings = get_settings()
    setup_logging()

    # 1. Create all database tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # 2. Seed sample books into an empty catalog
    if settings.seed_catalog:
        await _seed_catalog()

    # 3. Start accepting real-time connections and broadcasts
    hub: BroadcastHub = app.state.broadcast_hub
    hub.start()

    yield

    # Shutdown
    await hub.shutdown()


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # One hub per application; dependencies read it from app.state
    app.state.broadcast_hub = BroadcastHub(
        cors_origins=settings.cors_origins,
        ping_interval=settings.realtime_ping_interval,
        ping_timeout=settings.realtime_ping_timeout,
        max_http_buffer_size=settings.realtime_max_http_buffer_size,
        allow_upgrades=settings.realtime_allow_upgrades,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)

    # Mount API routes
    app.include_router(api_router)

    return app


def create_asgi_app(api: FastAPI) -> socketio.ASGIApp:
    """Serve the Socket.IO channel and the REST API from one origin."""
    settings = get_settings()
    hub: BroadcastHub = api.state.broadcast_hub
    return hub.asgi_app(api, socketio_path=settings.realtime_path)


api = create_app()
app = create_asgi_app(api)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "bookhub.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
