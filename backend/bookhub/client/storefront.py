"""Storefront session: one channel, one cache, reconciled together."""

import logging

from bookhub.client.api_client import CatalogApiClient
from bookhub.client.cache import QueryCache, QueryCacheEntry
from bookhub.client.channel import CatalogChannel, ChannelRegistry
from bookhub.client.config import ChannelConfig
from bookhub.client.health import ConnectionHealth
from bookhub.client.notifications import NotificationQueue
from bookhub.client.reconciler import BOOKS_KEY, CatalogReconciler

logger = logging.getLogger(__name__)


class CatalogSync:
    """Assembles the client pieces for one storefront process.

    The book list is loaded over HTTP on ``start`` whatever the channel
    does; the channel only tells the cache when to look again.
    """

    def __init__(
        self,
        config: ChannelConfig | None = None,
        *,
        registry: ChannelRegistry | None = None,
        api: CatalogApiClient | None = None,
        notifications: NotificationQueue | None = None,
    ) -> None:
        self.config = config or ChannelConfig()
        self.registry = registry or ChannelRegistry(self.config)
        self.api = api or CatalogApiClient(
            self.config.server_url,
            self.config.api_prefix,
            timeout=self.config.timeout,
        )
        self.cache = QueryCache()
        self.notifications = notifications or NotificationQueue()
        self.channel: CatalogChannel | None = None
        self.health: ConnectionHealth | None = None
        self._reconciler: CatalogReconciler | None = None

    @property
    def books(self) -> QueryCacheEntry:
        return self.cache.register(BOOKS_KEY, self.api.list_books)

    async def start(self) -> "CatalogSync":
        self.books.refresh()

        self.channel = await self.registry.acquire()
        self._reconciler = CatalogReconciler(
            self.channel, self.cache, self.notifications, fetch_book=self.api.get_book
        )
        self._reconciler.attach()
        self.health = ConnectionHealth(self.channel)
        self.health.mount()
        logger.info("Storefront sync started (%s)", self.health.status)
        return self

    async def close(self) -> None:
        if self.health is not None:
            self.health.unmount()
        if self._reconciler is not None:
            self._reconciler.detach()
        await self.registry.release()
        self.cache.clear()
        await self.api.aclose()
        self.channel = None
