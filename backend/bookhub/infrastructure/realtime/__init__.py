from .broadcast_hub import BroadcastHub
from .socketio_broadcaster import SocketIOChangeBroadcaster

__all__ = [
    "BroadcastHub",
    "SocketIOChangeBroadcaster",
]
