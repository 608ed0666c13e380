from .api_client import CatalogApiClient, CatalogApiError
from .backoff import Backoff
from .cache import CacheState, QueryCache, QueryCacheEntry
from .channel import CatalogChannel, ChannelRegistry, ChannelState
from .config import ChannelConfig
from .health import ConnectionHealth, HealthStatus
from .notifications import Notification, NotificationQueue, describe_change
from .reconciler import BOOKS_KEY, CatalogReconciler, book_key
from .storefront import CatalogSync

__all__ = [
    "CatalogApiClient",
    "CatalogApiError",
    "Backoff",
    "CacheState",
    "QueryCache",
    "QueryCacheEntry",
    "CatalogChannel",
    "ChannelRegistry",
    "ChannelState",
    "ChannelConfig",
    "ConnectionHealth",
    "HealthStatus",
    "Notification",
    "NotificationQueue",
    "describe_change",
    "BOOKS_KEY",
    "CatalogReconciler",
    "book_key",
    "CatalogSync",
]
