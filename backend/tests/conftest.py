"""Shared test configuration.

The database URL and seeding flag must be in the environment before any
``bookhub`` module is imported, because the engine is created at import time.
"""

import os
import tempfile
from pathlib import Path

_TEST_DB = Path(tempfile.mkdtemp(prefix="bookhub-tests-")) / "bookhub.db"
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DB}"
os.environ["APP_ENV"] = "test"
os.environ["SEED_CATALOG"] = "false"

import pytest  # noqa: E402

from bookhub.client import Backoff, CatalogChannel, ChannelConfig  # noqa: E402
from fakes import FakeSocketIOClient  # noqa: E402


@pytest.fixture
def channel_config() -> ChannelConfig:
    return ChannelConfig(server_url="http://catalog.test", reconnection_attempts=3)


@pytest.fixture
def fake_sio() -> FakeSocketIOClient:
    return FakeSocketIOClient()


@pytest.fixture
def make_channel(channel_config):
    """Build a channel around a given fake client, with no backoff delay."""

    def factory(sio: FakeSocketIOClient, config: ChannelConfig | None = None) -> CatalogChannel:
        return CatalogChannel(
            config or channel_config,
            client_factory=lambda: sio,
            backoff=Backoff(0, 0, jitter=0),
        )

    return factory
