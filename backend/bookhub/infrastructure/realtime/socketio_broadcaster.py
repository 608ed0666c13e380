"""ChangeBroadcaster adapter that fans catalog changes out through the BroadcastHub."""

import logging

from bookhub.application.interfaces import ChangeBroadcaster
from bookhub.application.schemas import encode_change_event
from bookhub.domain.events import ChangeEvent
from bookhub.infrastructure.realtime.broadcast_hub import BroadcastHub

logger = logging.getLogger(__name__)


class SocketIOChangeBroadcaster(ChangeBroadcaster):
    """Infrastructure adapter — best-effort, at-most-once fan-out.

    Runs after the mutation has committed, so every failure here is logged
    and swallowed: a missing hub, an encoding problem or a push error must
    never turn a successful write into an error response.
    """

    def __init__(self, hub: BroadcastHub | None):
        self._hub = hub

    async def publish(self, event: ChangeEvent) -> None:
        if self._hub is None:
            logger.warning("Cannot broadcast %s - no broadcast hub configured", event.kind.value)
            return

        try:
            name, payload = encode_change_event(event)
            await self._hub.emit(name, payload)
        except Exception:
            logger.exception("Broadcast of %s event for book %s failed", event.kind.value, event.book_id)
