"""Toast notifications for catalog changes."""

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from bookhub.domain.events import BookCreated, BookDeleted, BookUpdated, ChangeEvent

logger = logging.getLogger(__name__)


class Priority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


@dataclass(frozen=True)
class Notification:
    title: str
    description: str
    duration: float = 1.0  # seconds on screen
    priority: Priority = Priority.LOW


class NotificationUnavailableError(RuntimeError):
    """The notification surface is not mounted."""


class Notifier(Protocol):
    def notify(self, notification: Notification) -> None: ...


class NotificationQueue:
    """Bounded queue of pending toasts, drained by whatever renders them.

    ``notify`` raises ``NotificationUnavailableError`` while the queue is not
    mounted. When full, the oldest toast is dropped.
    """

    def __init__(self, maxlen: int = 20, *, mounted: bool = True) -> None:
        self._pending: deque[Notification] = deque(maxlen=maxlen)
        self._mounted = mounted

    @property
    def mounted(self) -> bool:
        return self._mounted

    def mount(self) -> None:
        self._mounted = True

    def unmount(self) -> None:
        self._mounted = False
        self._pending.clear()

    def notify(self, notification: Notification) -> None:
        if not self._mounted:
            raise NotificationUnavailableError("notification surface not mounted")
        self._pending.append(notification)
        logger.debug("Queued notification: %s", notification.title)

    def drain(self) -> list[Notification]:
        drained = list(self._pending)
        self._pending.clear()
        return drained

    def __len__(self) -> int:
        return len(self._pending)


def describe_change(event: ChangeEvent) -> Notification:
    """Build the storefront toast for a catalog change."""
    if isinstance(event, BookCreated):
        book = event.book
        return Notification(
            title="Catalog Updated",
            description=f'"{book.title}" by {book.author} has been added to the catalog',
        )
    if isinstance(event, BookUpdated):
        book = event.book
        return Notification(
            title="Book Information Updated",
            description=f'"{book.title}" by {book.author}',
        )
    if isinstance(event, BookDeleted):
        info = f'"{event.title}" by {event.author}' if event.title and event.author else "A book"
        return Notification(
            title="Book Removed",
            description=f"{info} is no longer available in the catalog",
        )
    raise TypeError(f"Unsupported change event: {type(event).__name__}")
