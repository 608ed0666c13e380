"""Storefront side of the real-time channel.

``CatalogChannel`` wraps a ``socketio.AsyncClient`` with the library's own
reconnection switched off and runs a bounded reconnection loop instead, so
every lifecycle step (attempt numbers, the terminal failure, the transport
upgrade) is visible to listeners. ``ChannelRegistry`` owns the one channel a
storefront process keeps open.
"""

import asyncio
import inspect
import logging
from collections import defaultdict
from collections.abc import Callable
from enum import Enum
from typing import Any

import socketio
from socketio.exceptions import ConnectionError as SocketIOConnectionError

from bookhub.application.schemas import CHANGE_EVENT_NAMES, CONNECTION_SUCCESS
from bookhub.client.backoff import Backoff
from bookhub.client.config import ChannelConfig

logger = logging.getLogger(__name__)

# Disconnect reasons as listeners see them
SERVER_DISCONNECT = "io server disconnect"
CLIENT_DISCONNECT = "io client disconnect"
TRANSPORT_CLOSE = "transport close"
TRANSPORT_ERROR = "transport error"

_REASONS = {
    "server disconnect": SERVER_DISCONNECT,
    "client disconnect": CLIENT_DISCONNECT,
    "transport close": TRANSPORT_CLOSE,
    "transport error": TRANSPORT_ERROR,
}

_CONNECT_ERRORS = (SocketIOConnectionError, asyncio.TimeoutError, OSError)

Listener = Callable[..., Any]


class ChannelState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    RECONNECTING = "reconnecting"
    OFFLINE = "offline"
    CLOSED = "closed"


class ChannelClosedError(RuntimeError):
    """Raised when connecting a channel that was already torn down."""


def _default_client() -> socketio.AsyncClient:
    return socketio.AsyncClient(reconnection=False, logger=False, engineio_logger=False)


def normalise_reason(reason: Any) -> str:
    """Map the transport library's disconnect reason onto the listener vocabulary."""
    if reason is None:
        return TRANSPORT_CLOSE
    return _REASONS.get(str(reason), str(reason))


class CatalogChannel:
    """One logical, self-reconnecting connection to the catalog server.

    Listener events:
        ``connect``, ``disconnect`` (reason), ``connect_error`` (exception),
        ``reconnect_attempt`` (n), ``reconnect`` (n), ``reconnect_failed``,
        ``upgrade`` (transport name), plus every server event
        (``connection:success``, ``book:created``, ``book:updated``,
        ``book:deleted``) with its raw payload.

    Connection problems are logged and reported to listeners, never raised.
    Once the reconnection attempts are spent the channel goes OFFLINE and stays
    there.
    """

    def __init__(
        self,
        config: ChannelConfig | None = None,
        *,
        client_factory: Callable[[], Any] | None = None,
        backoff: Backoff | None = None,
    ) -> None:
        self._config = config or ChannelConfig()
        self._backoff = backoff or Backoff(
            self._config.reconnection_delay,
            self._config.reconnection_delay_max,
            jitter=self._config.randomization_factor,
        )
        self._sio = (client_factory or _default_client)()

        self._listeners: dict[str, list[Listener]] = defaultdict(list)
        self._listener_tasks: set[asyncio.Task] = set()
        self._reconnect_task: asyncio.Task | None = None

        self._state = ChannelState.IDLE
        self._transport: str | None = None
        self._upgraded = False
        self._closing = False

        self._sio.on("connect", self._on_connect)
        self._sio.on("disconnect", self._on_disconnect)
        for name in (CONNECTION_SUCCESS, *CHANGE_EVENT_NAMES):
            self._sio.on(name, self._forwarder(name))

    # ── State ────────────────────────────────────────────────────────

    @property
    def state(self) -> ChannelState:
        return self._state

    @property
    def connected(self) -> bool:
        return self._state is ChannelState.CONNECTED

    @property
    def sid(self) -> str | None:
        return self._sio.get_sid() if self.connected else None

    @property
    def transport(self) -> str | None:
        """Name of the active transport, ``None`` while not connected."""
        return self._transport if self.connected else None

    @property
    def url(self) -> str:
        return self._config.server_url

    # ── Listeners ────────────────────────────────────────────────────

    def on(self, event: str, listener: Listener) -> Listener:
        self._listeners[event].append(listener)
        return listener

    def off(self, event: str, listener: Listener | None = None) -> None:
        """Remove one listener, or every listener of ``event`` when none is given."""
        if listener is None:
            self._listeners.pop(event, None)
            return
        listeners = self._listeners.get(event, [])
        if listener in listeners:
            listeners.remove(listener)

    def _emit(self, event: str, *args: Any) -> None:
        for listener in list(self._listeners.get(event, ())):
            try:
                result = listener(*args)
            except Exception:
                logger.exception("Listener for %s failed", event)
                continue
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._listener_tasks.add(task)
                task.add_done_callback(self._listener_done)

    def _listener_done(self, task: asyncio.Task) -> None:
        self._listener_tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Async listener failed", exc_info=task.exception())

    def _forwarder(self, event: str) -> Callable[..., None]:
        def forward(data: Any = None) -> None:
            self._emit(event, data)

        return forward

    def _set_state(self, state: ChannelState) -> None:
        if state is not self._state:
            logger.debug("Channel %s -> %s", self._state.value, state.value)
            self._state = state

    # ── Connecting ───────────────────────────────────────────────────

    async def connect(self) -> "CatalogChannel":
        """Open the channel. Calling it on a live or retrying channel is a no-op."""
        if self._state is ChannelState.CLOSED:
            raise ChannelClosedError("channel was closed; acquire a new one")
        if self._state in (
            ChannelState.CONNECTING,
            ChannelState.CONNECTED,
            ChannelState.RECONNECTING,
            ChannelState.OFFLINE,
        ):
            return self

        self._set_state(ChannelState.CONNECTING)
        logger.info("Connecting to %s (transports=%s)", self.url, self._config.transports)
        try:
            await self._attempt_connect()
        except _CONNECT_ERRORS as exc:
            self._connect_failed(exc)
            if self._config.reconnection and self._config.reconnection_attempts:
                self._start_reconnecting()
            else:
                self._go_offline()
        return self

    async def _attempt_connect(self) -> None:
        await asyncio.wait_for(
            self._sio.connect(
                self.url,
                transports=list(self._config.transports),
                socketio_path=self._config.path,
                wait_timeout=self._config.timeout,
            ),
            timeout=self._config.timeout,
        )
        # The upgrade can finish after the namespace handshake
        if self.connected:
            self._refresh_transport()

    def _connect_failed(self, exc: BaseException) -> None:
        if self._state is ChannelState.CONNECTING:
            self._set_state(ChannelState.DISCONNECTED)
        logger.warning("Connection error: %s", exc or type(exc).__name__)
        self._emit("connect_error", exc)

    def _start_reconnecting(self) -> None:
        self._set_state(ChannelState.RECONNECTING)
        if self._reconnect_task is not None and not self._reconnect_task.done():
            return
        self._reconnect_task = asyncio.get_running_loop().create_task(self._reconnect_loop())

    async def _reconnect_loop(self) -> None:
        for attempt in range(1, self._config.reconnection_attempts + 1):
            await asyncio.sleep(self._backoff.duration(attempt))
            if self._closing:
                return

            self._set_state(ChannelState.RECONNECTING)
            logger.info("Reconnection attempt %d...", attempt)
            self._emit("reconnect_attempt", attempt)
            try:
                await self._attempt_connect()
            except _CONNECT_ERRORS as exc:
                self._connect_failed(exc)
                continue

            if self.connected:
                logger.info("Reconnected after %d attempts", attempt)
                self._emit("reconnect", attempt)
                return

        self._go_offline()
        logger.error("Reconnection failed after all attempts")
        self._emit("reconnect_failed")

    def _go_offline(self) -> None:
        self._set_state(ChannelState.OFFLINE)
        self._transport = None

    # ── Transport library callbacks ──────────────────────────────────

    def _on_connect(self) -> None:
        self._set_state(ChannelState.CONNECTED)
        self._upgraded = False
        self._transport = self._config.transports[0]
        logger.info("Connected (sid=%s)", self._sio.get_sid())
        self._emit("connect")
        self._refresh_transport()

    def _on_disconnect(self, reason: Any = None) -> None:
        if self._state is not ChannelState.CONNECTED:
            return
        reason = normalise_reason(reason)
        self._set_state(ChannelState.DISCONNECTED)
        self._transport = None
        logger.info("Disconnected: %s", reason)
        self._emit("disconnect", reason)

        if reason == SERVER_DISCONNECT:
            logger.warning("Server disconnected the channel; manual reconnection required")
            return
        if self._closing or reason == CLIENT_DISCONNECT:
            return
        if self._config.reconnection and self._config.reconnection_attempts:
            self._start_reconnecting()

    def _refresh_transport(self) -> None:
        current = self._sio.transport()
        if not current or current == self._transport:
            return
        self._transport = current
        # Polling to websocket happens at most once per connection
        if not self._upgraded and current == "websocket":
            self._upgraded = True
            logger.info("Transport upgraded to: %s", current)
            self._emit("upgrade", current)

    # ── Outbound / teardown ──────────────────────────────────────────

    async def send(self, event: str, data: Any = None) -> bool:
        if not self.connected:
            logger.warning("Cannot send %s - channel not connected", event)
            return False
        await self._sio.emit(event, data)
        return True

    async def disconnect(self) -> None:
        """Tear the channel down for good and stop any pending reconnection."""
        if self._state is ChannelState.CLOSED:
            return
        self._closing = True

        task = self._reconnect_task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        await self._sio.disconnect()
        # Not every library version reports its own disconnect
        self._on_disconnect(CLIENT_DISCONNECT)

        self._set_state(ChannelState.CLOSED)
        self._transport = None
        logger.info("Channel closed")


class ChannelRegistry:
    """Owns the single channel of a storefront process.

    ``acquire`` hands back the same channel until ``release`` tears it down;
    the next ``acquire`` after that starts from fresh state.
    """

    def __init__(
        self,
        config: ChannelConfig | None = None,
        *,
        channel_factory: Callable[[ChannelConfig], CatalogChannel] | None = None,
    ) -> None:
        self._config = config or ChannelConfig()
        self._channel_factory = channel_factory or CatalogChannel
        self._channel: CatalogChannel | None = None
        self._lock = asyncio.Lock()

    @property
    def current(self) -> CatalogChannel | None:
        return self._channel

    def is_connected(self) -> bool:
        return self._channel is not None and self._channel.connected

    async def acquire(self) -> CatalogChannel:
        async with self._lock:
            if self._channel is None:
                logger.info("Initializing connection to: %s", self._config.server_url)
                self._channel = self._channel_factory(self._config)
            channel = self._channel
        await channel.connect()
        return channel

    async def release(self) -> None:
        async with self._lock:
            channel, self._channel = self._channel, None
        if channel is not None:
            logger.info("Disconnecting...")
            await channel.disconnect()
