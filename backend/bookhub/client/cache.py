"""Client-side query cache with coalesced refetching.

Each entry moves FRESH -> STALE on invalidation and STALE -> REFETCHING ->
FRESH when its fetcher succeeds. At most one refetch per entry is in flight;
invalidations that land while it runs set a dirty flag and cause exactly one
more refetch once it finishes.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

QueryKey = tuple[str, ...]
Fetcher = Callable[[], Awaitable[Any]]


class CacheState(str, Enum):
    FRESH = "fresh"
    STALE = "stale"
    REFETCHING = "refetching"


class QueryCacheEntry:
    """Cached result of one logical query.

    Entries without a fetcher only hold data pushed in with ``set_data``;
    invalidating them marks them stale and nothing else. A failed refetch
    leaves the entry STALE with the last known data and ``last_error`` set.
    When ``on_missing`` is given, a refetch that returns ``None`` hands the
    entry to it instead of storing the empty result.
    """

    def __init__(
        self,
        key: QueryKey,
        fetcher: Fetcher | None = None,
        *,
        on_missing: Callable[["QueryCacheEntry"], None] | None = None,
    ) -> None:
        self.key = key
        self.fetcher = fetcher
        self.on_missing = on_missing
        self.data: Any = None
        self.state = CacheState.STALE
        self.last_error: BaseException | None = None
        self.fetch_count = 0
        self._dirty = False
        self._task: asyncio.Task | None = None

    @property
    def is_fetching(self) -> bool:
        return self._task is not None and not self._task.done()

    def invalidate(self) -> None:
        if self.state is CacheState.REFETCHING:
            self._dirty = True
            return
        self.state = CacheState.STALE
        self._schedule()

    def refresh(self) -> None:
        """Fetch now unless a fetch is already pending."""
        self.invalidate()

    def set_data(self, data: Any) -> None:
        self.data = data
        self.last_error = None
        if self.state is CacheState.REFETCHING:
            # The in-flight result may predate this value
            self._dirty = True
        else:
            self.state = CacheState.FRESH

    def _schedule(self) -> None:
        if self.fetcher is None or self.is_fetching:
            return
        self._task = asyncio.get_running_loop().create_task(self._refetch())

    async def _refetch(self) -> None:
        while True:
            self.state = CacheState.REFETCHING
            self._dirty = False
            self.fetch_count += 1
            try:
                data = await self.fetcher()
            except asyncio.CancelledError:
                self.state = CacheState.STALE
                raise
            except Exception as exc:
                self.last_error = exc
                logger.warning("Refetch of %s failed: %s", "/".join(self.key), exc)
                if self._dirty:
                    continue
                self.state = CacheState.STALE
                return

            self.last_error = None
            if self._dirty:
                self.data = data
                continue
            if data is None and self.on_missing is not None:
                self.state = CacheState.STALE
                self.on_missing(self)
                return
            self.data = data
            self.state = CacheState.FRESH
            return

    async def wait_idle(self) -> None:
        """Wait until no refetch is pending or running."""
        while self.is_fetching:
            await asyncio.wait({self._task})

    def cancel(self) -> None:
        if self.is_fetching:
            self._task.cancel()


class QueryCache:
    """Keyed collection of ``QueryCacheEntry`` objects.

    Keys are tuples; invalidating ``("books",)`` without ``exact`` also
    invalidates every key that starts with it, such as ``("books", "<id>")``.
    """

    def __init__(self) -> None:
        self._entries: dict[QueryKey, QueryCacheEntry] = {}

    def __contains__(self, key: QueryKey) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def register(
        self,
        key: QueryKey,
        fetcher: Fetcher | None = None,
        *,
        drop_when_missing: bool = False,
    ) -> QueryCacheEntry:
        """Return the entry for ``key``, creating it on first use.

        With ``drop_when_missing`` the entry leaves the cache as soon as a
        refetch comes back with ``None``.
        """
        entry = self._entries.get(key)
        if entry is None:
            entry = QueryCacheEntry(key, fetcher)
            self._entries[key] = entry
        elif fetcher is not None and entry.fetcher is None:
            entry.fetcher = fetcher
        if drop_when_missing:
            entry.on_missing = self._drop
        return entry

    def _drop(self, entry: QueryCacheEntry) -> None:
        if self._entries.get(entry.key) is entry:
            del self._entries[entry.key]
            logger.debug("Dropped %s: no longer on the server", "/".join(entry.key))

    def get(self, key: QueryKey) -> QueryCacheEntry | None:
        return self._entries.get(key)

    def data(self, key: QueryKey, default: Any = None) -> Any:
        entry = self._entries.get(key)
        return entry.data if entry is not None else default

    def remove(self, key: QueryKey) -> bool:
        entry = self._entries.pop(key, None)
        if entry is None:
            return False
        entry.cancel()
        return True

    def set_data(self, key: QueryKey, data: Any) -> QueryCacheEntry:
        entry = self.register(key)
        entry.set_data(data)
        return entry

    def matching(self, key: QueryKey, *, exact: bool = False) -> list[QueryCacheEntry]:
        if exact:
            return [self._entries[key]] if key in self._entries else []
        return [
            entry for entry_key, entry in self._entries.items()
            if entry_key[: len(key)] == key
        ]

    def invalidate(self, key: QueryKey, *, exact: bool = False) -> int:
        """Invalidate matching entries and return how many matched."""
        matches = self.matching(key, exact=exact)
        for entry in matches:
            entry.invalidate()
        return len(matches)

    def invalidate_all(self) -> int:
        return self.invalidate((), exact=False)

    async def wait_idle(self) -> None:
        for entry in list(self._entries.values()):
            await entry.wait_idle()

    def clear(self) -> None:
        for entry in self._entries.values():
            entry.cancel()
        self._entries.clear()
