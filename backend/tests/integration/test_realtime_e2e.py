"""End-to-end tests: a live server, real Socket.IO clients and the storefront sync."""

import asyncio

import httpx
import pytest

from bookhub.client import CatalogChannel, CatalogSync, ChannelConfig, ConnectionHealth

BOOK = {
    "title": "Parable of the Sower",
    "author": "Octavia E. Butler",
    "genre": "Science Fiction",
    "year": 1993,
    "price": 380,
}


def _config(url: str) -> ChannelConfig:
    return ChannelConfig(server_url=url, reconnection=False, timeout=5.0)


def _collect(channel: CatalogChannel, event: str) -> asyncio.Queue:
    queue: asyncio.Queue = asyncio.Queue()
    channel.on(event, queue.put_nowait)
    return queue


@pytest.mark.asyncio
async def test_connection_success_id_matches_client_sid(live_server):
    channel = CatalogChannel(_config(live_server))
    greetings = _collect(channel, "connection:success")
    try:
        await channel.connect()
        payload = await asyncio.wait_for(greetings.get(), 5)
        sid = channel.sid
    finally:
        await channel.disconnect()

    assert payload["id"] == sid
    assert payload["message"] == "Real-time connection established"
    assert "timestamp" in payload


@pytest.mark.asyncio
async def test_transport_upgrades_to_websocket(live_server):
    channel = CatalogChannel(_config(live_server))
    upgrades: list[str] = []
    channel.on("upgrade", upgrades.append)
    try:
        await channel.connect()
        health = ConnectionHealth(channel)
        status = health.mount()
    finally:
        await channel.disconnect()

    assert upgrades == ["websocket"]
    assert str(status) == "Live (WS)"


@pytest.mark.asyncio
async def test_every_client_receives_the_same_event(live_server):
    first = CatalogChannel(_config(live_server))
    second = CatalogChannel(_config(live_server))
    first_events = _collect(first, "book:created")
    second_events = _collect(second, "book:created")
    try:
        await first.connect()
        await second.connect()
        async with httpx.AsyncClient(base_url=live_server) as http:
            response = await http.post("/api/v1/books", json=BOOK)
        assert response.status_code == 201

        received = [
            await asyncio.wait_for(first_events.get(), 5),
            await asyncio.wait_for(second_events.get(), 5),
        ]
    finally:
        await first.disconnect()
        await second.disconnect()

    assert received == [response.json(), response.json()]


@pytest.mark.asyncio
async def test_rejected_write_is_not_broadcast(live_server):
    channel = CatalogChannel(_config(live_server))
    events = _collect(channel, "book:created")
    try:
        await channel.connect()
        async with httpx.AsyncClient(base_url=live_server) as http:
            response = await http.post("/api/v1/books", json={k: v for k, v in BOOK.items() if k != "title"})
        await asyncio.sleep(0.5)
    finally:
        await channel.disconnect()

    assert response.status_code == 400
    assert events.empty()


@pytest.mark.asyncio
async def test_storefront_cache_follows_server_changes(live_server):
    sync = CatalogSync(_config(live_server))
    try:
        await sync.start()
        await sync.books.wait_idle()
        assert sync.health.status.connected

        async with httpx.AsyncClient(base_url=live_server) as http:
            created = (await http.post("/api/v1/books", json={**BOOK, "title": "Kindred"})).json()

        for _ in range(100):
            await sync.books.wait_idle()
            if created["id"] in {book.id for book in sync.books.data or []}:
                break
            await asyncio.sleep(0.05)

        assert created["id"] in {book.id for book in sync.books.data}
        toasts = sync.notifications.drain()
        assert any(toast.title == "Catalog Updated" for toast in toasts)
    finally:
        await sync.close()


@pytest.mark.asyncio
async def test_reconnect_picks_up_changes_missed_while_offline(live_server):
    config = ChannelConfig(
        server_url=live_server,
        reconnection_delay=0.1,
        reconnection_delay_max=0.2,
        randomization_factor=0,
        timeout=5.0,
    )
    sync = CatalogSync(config)
    try:
        await sync.start()
        await sync.books.wait_idle()
        reconnects = _collect(sync.channel, "reconnect")

        # Lose the engine.io connection the way a network failure would
        eio = sync.channel._sio.eio
        await eio.disconnect(abort=True, reason=eio.reason.TRANSPORT_ERROR)
        assert not sync.channel.connected

        async with httpx.AsyncClient(base_url=live_server) as http:
            response = await http.post("/api/v1/books", json={**BOOK, "title": "Wild Seed"})
        assert response.status_code == 201
        missed = response.json()

        await asyncio.wait_for(reconnects.get(), 5)
        for _ in range(100):
            await sync.books.wait_idle()
            if missed["id"] in {book.id for book in sync.books.data or []}:
                break
            await asyncio.sleep(0.05)

        assert sync.channel.connected
        assert missed["id"] in {book.id for book in sync.books.data}
    finally:
        await sync.close()
