"""Fixtures that run the real application."""

import asyncio
import socket

import pytest_asyncio
import uvicorn
from httpx import ASGITransport, AsyncClient

from bookhub.infrastructure.database import engine
from bookhub.main import create_app, create_asgi_app


class BroadcastRecorder:
    """Wraps a hub's ``emit`` and keeps every event that went through it."""

    def __init__(self, hub):
        self.events: list[tuple[str, dict]] = []
        self._emit = hub.emit
        hub.emit = self._record

    async def _record(self, event: str, data: dict) -> bool:
        self.events.append((event, data))
        return await self._emit(event, data)

    def named(self, event: str) -> list[dict]:
        return [data for name, data in self.events if name == event]


@pytest_asyncio.fixture
async def app():
    """FastAPI app with its lifespan running (tables created, hub started)."""
    api = create_app()
    async with api.router.lifespan_context(api):
        yield api
    await engine.dispose()


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def broadcasts(app) -> BroadcastRecorder:
    return BroadcastRecorder(app.state.broadcast_hub)


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest_asyncio.fixture
async def live_server():
    """Serve API and Socket.IO with uvicorn on a free port; yields the base URL."""
    api = create_app()
    port = _free_port()
    config = uvicorn.Config(
        create_asgi_app(api),
        host="127.0.0.1",
        port=port,
        lifespan="on",
        log_level="warning",
        timeout_graceful_shutdown=5,
    )
    server = uvicorn.Server(config)
    task = asyncio.create_task(server.serve())

    for _ in range(200):
        if server.started:
            break
        await asyncio.sleep(0.05)
    assert server.started, "uvicorn did not start"

    yield f"http://127.0.0.1:{port}"

    server.should_exit = True
    await asyncio.wait_for(task, 15)
    await engine.dispose()
