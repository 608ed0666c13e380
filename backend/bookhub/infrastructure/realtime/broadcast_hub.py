"""Broadcast hub — process-wide Socket.IO server for real-time catalog updates.

The hub is created once per application (``create_app``), started in the
lifespan and shut down when the application stops. It is handed to the
code that needs it explicitly, never looked up as a module global.

Clients negotiate transports themselves: they open with HTTP long-polling
and upgrade to a WebSocket on the same session id when possible.
"""

from datetime import datetime, timezone
from typing import Any

import socketio

from bookhub.application.schemas import CONNECTION_SUCCESS, ConnectionSuccessPayload
from bookhub.infrastructure.logging.colored_logger import ChannelLogger, ChannelStage

TRANSPORTS = ["polling", "websocket"]


class BroadcastHub:
    """Owns the Socket.IO server and the set of connected sessions.

    Each connected client has its own outbound queue inside the Socket.IO
    server; ``emit`` enqueues onto every one of them and returns without
    waiting for delivery.
    """

    def __init__(
        self,
        *,
        cors_origins: list[str] | str = "*",
        ping_interval: int = 25,
        ping_timeout: int = 60,
        max_http_buffer_size: int = 1_000_000,
        allow_upgrades: bool = True,
        server: socketio.AsyncServer | None = None,
    ) -> None:
        self._server = server or socketio.AsyncServer(
            async_mode="asgi",
            cors_allowed_origins=cors_origins,
            ping_interval=ping_interval,
            ping_timeout=ping_timeout,
            max_http_buffer_size=max_http_buffer_size,
            allow_upgrades=allow_upgrades,
            transports=list(TRANSPORTS),
            always_connect=True,
            logger=False,
            engineio_logger=False,
        )
        self._sessions: set[str] = set()
        self._running = False
        self._log = ChannelLogger("BroadcastHub")

        self._server.on("connect", self._on_connect)
        self._server.on("disconnect", self._on_disconnect)
        self._server.on("ping", self._on_ping)

    # ── Lifecycle ────────────────────────────────────────────────────

    @property
    def server(self) -> socketio.AsyncServer:
        return self._server

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def client_count(self) -> int:
        return len(self._sessions)

    def asgi_app(self, other_asgi_app: Any, socketio_path: str = "socket.io") -> socketio.ASGIApp:
        """Mount the hub in front of another ASGI app (the REST API)."""
        return socketio.ASGIApp(
            self._server,
            other_asgi_app=other_asgi_app,
            socketio_path=socketio_path,
        )

    def start(self) -> None:
        self._running = True
        self._log.event(ChannelStage.LIFECYCLE, "Hub initialized and ready")

    async def shutdown(self) -> None:
        """Stop accepting broadcasts and disconnect all connected clients."""
        self._running = False
        for sid in list(self._sessions):
            await self._server.disconnect(sid)
        self._sessions.clear()
        self._log.event(ChannelStage.LIFECYCLE, "Hub closed")

    # ── Fan-out ──────────────────────────────────────────────────────

    async def emit(self, event: str, data: dict[str, Any]) -> bool:
        """Push ``event`` to every connected client. Returns False when not running."""
        if not self._running:
            self._log.warning(f"Cannot broadcast {event} - hub not running")
            return False

        await self._server.emit(event, data)
        self._log.event(
            ChannelStage.BROADCAST,
            f"{event} - {_describe(data)}",
            clients=self.client_count,
        )
        return True

    # ── Socket.IO handlers ───────────────────────────────────────────

    async def _on_connect(self, sid: str, environ: dict, auth: Any = None) -> bool:
        if not self._running:
            self._log.warning("Refusing connection - hub not running", sid=sid)
            return False

        self._sessions.add(sid)
        self._log.event(
            ChannelStage.CONNECT,
            f"Client connected: {sid}",
            transport=self._server.transport(sid),
            clients=self.client_count,
        )

        payload = ConnectionSuccessPayload(id=sid)
        await self._server.emit(CONNECTION_SUCCESS, payload.to_wire(), to=sid)
        return True

    async def _on_disconnect(self, sid: str, reason: Any = None) -> None:
        self._sessions.discard(sid)
        self._log.event(
            ChannelStage.DISCONNECT,
            f"Client disconnected: {sid}",
            reason=reason or "unknown",
            clients=self.client_count,
        )

    async def _on_ping(self, sid: str, data: Any = None) -> None:
        timestamp = int(datetime.now(timezone.utc).timestamp() * 1000)
        await self._server.emit("pong", {"timestamp": timestamp}, to=sid)


def _describe(data: dict[str, Any]) -> str:
    title = data.get("title")
    author = data.get("author")
    if title and author:
        return f'"{title}" by {author}'
    return str(title or data.get("id", ""))
