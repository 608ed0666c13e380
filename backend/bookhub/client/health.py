"""Connection health indicator: Live/Offline plus the active transport."""

from collections.abc import Callable
from dataclasses import dataclass

from bookhub.client.channel import CatalogChannel


@dataclass(frozen=True)
class HealthStatus:
    connected: bool = False
    transport: str = ""

    @property
    def label(self) -> str:
        return "Live" if self.connected else "Offline"

    @property
    def transport_hint(self) -> str | None:
        return "WS" if self.connected and self.transport == "websocket" else None

    def __str__(self) -> str:
        hint = self.transport_hint
        return f"{self.label} ({hint})" if hint else self.label


class ConnectionHealth:
    """Derived view of a channel's state.

    ``mount`` reads the channel's current state straight away, so an
    indicator created after the channel connected shows Live immediately.
    """

    def __init__(self, channel: CatalogChannel) -> None:
        self._channel = channel
        self._status = HealthStatus()
        self._subscribers: list[Callable[[HealthStatus], None]] = []
        self._mounted = False

    @property
    def status(self) -> HealthStatus:
        return self._status

    def mount(self) -> HealthStatus:
        if not self._mounted:
            self._channel.on("connect", self._on_connect)
            self._channel.on("disconnect", self._on_disconnect)
            self._channel.on("upgrade", self._on_upgrade)
            self._mounted = True
        self._set(HealthStatus(self._channel.connected, self._channel.transport or ""))
        return self._status

    def unmount(self) -> None:
        if not self._mounted:
            return
        self._channel.off("connect", self._on_connect)
        self._channel.off("disconnect", self._on_disconnect)
        self._channel.off("upgrade", self._on_upgrade)
        self._mounted = False

    def subscribe(self, callback: Callable[[HealthStatus], None]) -> Callable[[], None]:
        """Register ``callback`` for status changes; returns the unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _on_connect(self) -> None:
        self._set(HealthStatus(True, self._channel.transport or ""))

    def _on_disconnect(self, reason: str | None = None) -> None:
        self._set(HealthStatus(False, ""))

    def _on_upgrade(self, transport: str) -> None:
        self._set(HealthStatus(self._channel.connected, transport))

    def _set(self, status: HealthStatus) -> None:
        if status == self._status:
            return
        self._status = status
        for callback in list(self._subscribers):
            callback(status)
