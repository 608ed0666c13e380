"""Health check endpoint — no dependencies, always available."""

from fastapi import APIRouter, Depends

from bookhub.config import get_settings
from bookhub.infrastructure.dependencies import get_broadcast_hub
from bookhub.infrastructure.realtime import BroadcastHub

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(hub: BroadcastHub | None = Depends(get_broadcast_hub)) -> dict:
    """Returns the current application health status."""
    settings = get_settings()
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.app_env,
        "realtime": {
            "running": hub.is_running if hub else False,
            "clients": hub.client_count if hub else 0,
        },
    }
