"""Keeps a storefront's cached catalog in step with server-side changes.

Every received change event marks the book list stale. Created and updated
payloads carry the full book, so the detail entry for that book is replaced
directly; a deletion drops it. The list is still refetched so membership and
ordering come from the server. A reconnection refetches everything, because
events sent while the channel was down are gone for good. Detail entries
filled from events can only heal that way when a ``fetch_book`` callable is
given; without one they are dropped on reconnection.
"""

import logging
from collections.abc import Awaitable, Callable
from functools import partial
from typing import Any

from bookhub.application.schemas import CHANGE_EVENT_NAMES, decode_change_event
from bookhub.client.cache import QueryCache, QueryCacheEntry, QueryKey
from bookhub.client.channel import CatalogChannel
from bookhub.client.notifications import Notifier, describe_change
from bookhub.domain.entities import Book
from bookhub.domain.events import BookCreated, BookDeleted, BookUpdated, ChangeEvent

logger = logging.getLogger(__name__)

BOOKS_KEY: QueryKey = ("books",)

BookFetcher = Callable[[str], Awaitable[Book | None]]


def book_key(book_id: str) -> QueryKey:
    return (*BOOKS_KEY, book_id)


class CatalogReconciler:
    """Wires channel events to cache invalidation and toasts."""

    def __init__(
        self,
        channel: CatalogChannel,
        cache: QueryCache,
        notifier: Notifier | None = None,
        *,
        fetch_book: BookFetcher | None = None,
    ) -> None:
        self._channel = channel
        self._cache = cache
        self._notifier = notifier
        self._fetch_book = fetch_book
        self._handlers: dict[str, Any] = {}
        self._seen_connection = False
        self._attached = False

    @property
    def attached(self) -> bool:
        return self._attached

    def attach(self) -> None:
        if self._attached:
            return
        for name in CHANGE_EVENT_NAMES:
            self._handlers[name] = self._channel.on(name, self._change_handler(name))
        self._handlers["connect"] = self._channel.on("connect", self._on_connect)
        # A channel that is already up counts as the first connection
        self._seen_connection = self._channel.connected
        self._attached = True

    def detach(self) -> None:
        for name, handler in self._handlers.items():
            self._channel.off(name, handler)
        self._handlers.clear()
        self._attached = False

    def track(self, book_id: str) -> QueryCacheEntry:
        """Detail entry for one book, refetchable when ``fetch_book`` is set."""
        if self._fetch_book is None:
            return self._cache.register(book_key(book_id))
        return self._cache.register(
            book_key(book_id),
            partial(self._fetch_book, book_id),
            drop_when_missing=True,
        )

    def _change_handler(self, name: str):
        def handle(payload: Any = None) -> None:
            self._on_change(name, payload)

        return handle

    def _on_change(self, name: str, payload: Any) -> None:
        try:
            event = decode_change_event(name, payload or {})
        except ValueError as exc:
            logger.warning("Ignoring malformed %s payload: %s", name, exc)
            self._cache.invalidate(BOOKS_KEY)
            return
        self.apply(event)

    def apply(self, event: ChangeEvent) -> None:
        """Reconcile the cache with one change, then surface a toast."""
        logger.info("[Real-time] %s: %s", event.kind.value, _label(event))

        if isinstance(event, (BookCreated, BookUpdated)):
            self.track(event.book.id).set_data(event.book)
        elif isinstance(event, BookDeleted):
            self._cache.remove(book_key(event.id))
        self._cache.invalidate(BOOKS_KEY, exact=True)

        if self._notifier is None:
            return
        try:
            self._notifier.notify(describe_change(event))
        except Exception as exc:
            logger.debug("Notification dropped: %s", exc)

    def _on_connect(self) -> None:
        if not self._seen_connection:
            self._seen_connection = True
            return
        logger.info("[Real-time] Reconnected - refreshing data...")
        for entry in self._cache.matching(BOOKS_KEY):
            # Nothing could ever bring these back to fresh
            if entry.fetcher is None:
                self._cache.remove(entry.key)
        self._cache.invalidate(BOOKS_KEY)


def _label(event: ChangeEvent) -> str:
    if isinstance(event, BookDeleted):
        return event.title or event.id
    return event.book.title
