"""Unit tests for CatalogReconciler: change events in, cache updates and toasts out."""

import asyncio

import pytest

from bookhub.application.schemas import encode_change_event
from bookhub.client import (
    BOOKS_KEY,
    CacheState,
    CatalogReconciler,
    NotificationQueue,
    QueryCache,
    book_key,
)
from bookhub.domain.entities import Book
from bookhub.domain.events import BookCreated, BookDeleted, BookUpdated


def _book(book_id: str = "b1", title: str = "Dune", author: str = "Frank Herbert") -> Book:
    return Book(
        id=book_id,
        title=title,
        author=author,
        genre="Science Fiction",
        year=1965,
        price=599,
        stock=3,
    )


class ListFetcher:
    def __init__(self):
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        return [f"snapshot-{self.calls}"]


@pytest.fixture
def cache() -> QueryCache:
    return QueryCache()


@pytest.fixture
def list_fetcher(cache: QueryCache) -> ListFetcher:
    fetcher = ListFetcher()
    cache.register(BOOKS_KEY, fetcher)
    return fetcher


@pytest.fixture
def notifications() -> NotificationQueue:
    return NotificationQueue()


def _send(sio, event) -> None:
    name, payload = encode_change_event(event)
    sio.server_event(name, payload)


@pytest.mark.asyncio
async def test_created_event_updates_detail_and_refetches_list(
    make_channel, fake_sio, cache, list_fetcher, notifications
):
    channel = make_channel(fake_sio)
    CatalogReconciler(channel, cache, notifications).attach()
    await channel.connect()

    _send(fake_sio, BookCreated(_book()))
    await cache.wait_idle()

    detail = cache.get(book_key("b1"))
    assert detail.state is CacheState.FRESH
    assert detail.data.title == "Dune"
    assert list_fetcher.calls == 1
    assert cache.data(BOOKS_KEY) == ["snapshot-1"]

    [toast] = notifications.drain()
    assert toast.title == "Catalog Updated"
    assert toast.description == '"Dune" by Frank Herbert has been added to the catalog'


@pytest.mark.asyncio
async def test_rapid_updates_trigger_a_single_list_refetch(
    make_channel, fake_sio, cache, list_fetcher, notifications
):
    channel = make_channel(fake_sio)
    CatalogReconciler(channel, cache, notifications).attach()
    await channel.connect()

    for price in range(5):
        book = _book()
        book.price = 100 + price
        _send(fake_sio, BookUpdated(book))
    await cache.wait_idle()

    assert list_fetcher.calls == 1
    assert cache.data(book_key("b1")).price == 104
    assert len(notifications) == 5


@pytest.mark.asyncio
async def test_deleted_event_drops_detail_entry(make_channel, fake_sio, cache, list_fetcher, notifications):
    channel = make_channel(fake_sio)
    CatalogReconciler(channel, cache, notifications).attach()
    await channel.connect()
    cache.set_data(book_key("b1"), _book())

    fake_sio.server_event("book:deleted", {"id": "b1"})
    await cache.wait_idle()

    assert book_key("b1") not in cache
    assert list_fetcher.calls == 1
    [toast] = notifications.drain()
    assert toast.title == "Book Removed"
    assert toast.description == "A book is no longer available in the catalog"


@pytest.mark.asyncio
async def test_unmounted_notifications_do_not_block_invalidation(make_channel, fake_sio, cache, list_fetcher):
    channel = make_channel(fake_sio)
    notifications = NotificationQueue(mounted=False)
    CatalogReconciler(channel, cache, notifications).attach()
    await channel.connect()

    _send(fake_sio, BookDeleted(id="b1", title="Dune", author="Frank Herbert"))
    await cache.wait_idle()

    assert list_fetcher.calls == 1


@pytest.mark.asyncio
async def test_malformed_payload_still_invalidates(make_channel, fake_sio, cache, list_fetcher, notifications):
    channel = make_channel(fake_sio)
    CatalogReconciler(channel, cache, notifications).attach()
    await channel.connect()

    fake_sio.server_event("book:updated", {"id": "b1", "title": "missing fields"})
    await cache.wait_idle()

    assert list_fetcher.calls == 1
    assert book_key("b1") not in cache
    assert len(notifications) == 0


@pytest.mark.asyncio
async def test_first_connect_does_not_refetch(make_channel, fake_sio, cache, list_fetcher):
    channel = make_channel(fake_sio)
    CatalogReconciler(channel, cache).attach()

    await channel.connect()
    await cache.wait_idle()

    assert list_fetcher.calls == 0


class BookStore:
    """Server-side state as seen through ``fetch_book``."""

    def __init__(self, *books: Book):
        self.books = {book.id: book for book in books}
        self.requests: list[str] = []

    async def __call__(self, book_id: str) -> Book | None:
        self.requests.append(book_id)
        return self.books.get(book_id)


async def _drop_and_reconnect(channel, fake_sio, cache) -> None:
    reconnected = asyncio.Event()
    channel.on("reconnect", lambda attempt: reconnected.set())
    fake_sio.drop("transport error")
    await asyncio.wait_for(reconnected.wait(), 1)
    await cache.wait_idle()


@pytest.mark.asyncio
async def test_reconnect_refetches_everything(make_channel, fake_sio, cache, list_fetcher):
    store = BookStore(_book())
    channel = make_channel(fake_sio)
    await channel.connect()
    # Attached to a live channel: that connection counts as the first one
    CatalogReconciler(channel, cache, fetch_book=store).attach()
    _send(fake_sio, BookCreated(_book()))
    await cache.wait_idle()
    store.books["b1"] = _book(title="Dune Messiah")

    await _drop_and_reconnect(channel, fake_sio, cache)

    detail = cache.get(book_key("b1"))
    assert list_fetcher.calls == 2
    assert store.requests == ["b1"]
    assert detail.state is CacheState.FRESH
    assert detail.data.title == "Dune Messiah"


@pytest.mark.asyncio
async def test_book_deleted_while_offline_leaves_cache_on_reconnect(make_channel, fake_sio, cache, list_fetcher):
    store = BookStore(_book())
    channel = make_channel(fake_sio)
    await channel.connect()
    CatalogReconciler(channel, cache, fetch_book=store).attach()
    _send(fake_sio, BookCreated(_book()))
    await cache.wait_idle()
    del store.books["b1"]

    await _drop_and_reconnect(channel, fake_sio, cache)

    assert book_key("b1") not in cache
    assert store.requests == ["b1"]


@pytest.mark.asyncio
async def test_reconnect_without_book_fetcher_drops_pushed_details(make_channel, fake_sio, cache, list_fetcher):
    channel = make_channel(fake_sio)
    await channel.connect()
    CatalogReconciler(channel, cache).attach()
    cache.set_data(book_key("b1"), _book())

    await _drop_and_reconnect(channel, fake_sio, cache)

    assert list_fetcher.calls == 1
    assert book_key("b1") not in cache
    assert cache.get(BOOKS_KEY).state is CacheState.FRESH


@pytest.mark.asyncio
async def test_detach_stops_reconciling(make_channel, fake_sio, cache, list_fetcher):
    channel = make_channel(fake_sio)
    reconciler = CatalogReconciler(channel, cache)
    reconciler.attach()
    await channel.connect()

    reconciler.detach()
    _send(fake_sio, BookCreated(_book()))
    await cache.wait_idle()

    assert not reconciler.attached
    assert list_fetcher.calls == 0
    assert book_key("b1") not in cache
