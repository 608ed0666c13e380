"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from bookhub.presentation.api.v1.endpoints.health import router as health_router
from bookhub.presentation.api.v1.endpoints.books import router as books_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(books_router)
