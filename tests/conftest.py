# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Shared pytest fixtures used across multiple test modules."""

from collections.abc import Callable, Iterator
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from cloudstream.config import Credentials
from cloudstream.dotenv_loader import reset_dotenv_state
from cloudstream.logging import SecretFilter


#: Fixed instant injected as the transfer clock.
FIXED_NOW = datetime(
    2006, 1, 2, 15, 4, 5, tzinfo=timezone(timedelta(hours=-7))
)

#: ``FIXED_NOW`` formatted as the Date header.
FIXED_DATE = "Mon, 02 Jan 2006 15:04:05 -0700"


@pytest.fixture(autouse=True)
def _isolate_global_state(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Reset registered secrets, dotenv state and env overrides."""
    for var in (
        "CLOUDSTREAM_ACCESS_KEY",
        "CLOUDSTREAM_SECRET",
        "CLOUDSTREAM_ENDPOINT",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(SecretFilter, "_secrets", set())
    monkeypatch.setattr(SecretFilter, "_pattern", None)
    reset_dotenv_state()
    yield
    reset_dotenv_state()


@pytest.fixture
def credentials() -> Credentials:
    """Credentials pointing at a fake endpoint."""
    return Credentials(
        access_key="GOOG1EXAMPLE",
        secret="long-secret-provided-by-google",
        endpoint="https://storage.example.test",
    )


@pytest.fixture
def make_client() -> Iterator[
    Callable[[Callable[[httpx.Request], httpx.Response]], httpx.Client]
]:
    """Build ``httpx.Client`` instances backed by a MockTransport.

    Clients are closed at teardown.
    """
    clients: list[httpx.Client] = []

    def _make(
        handler: Callable[[httpx.Request], httpx.Response],
    ) -> httpx.Client:
        client = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()
