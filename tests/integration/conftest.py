# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Fixtures for end-to-end transfers against a live fake backend."""

from collections.abc import Iterator
from pathlib import Path

import pytest

from cloudstream.config import Credentials
from tests.integration.storage_server import FakeStorageServer, RejectingServer


@pytest.fixture
def storage_server() -> Iterator[FakeStorageServer]:
    """Running fake storage backend."""
    server = FakeStorageServer(
        credentials=Credentials(
            access_key="GOOG1INTEGRATION",
            secret="integration-secret",
        )
    )
    server.start()
    yield server
    server.stop()


@pytest.fixture
def rejecting_server() -> Iterator[RejectingServer]:
    """Backend that refuses uploads before reading the body."""
    server = RejectingServer()
    server.start()
    yield server
    server.stop()


@pytest.fixture
def server_config(tmp_path: Path, storage_server: FakeStorageServer) -> Path:
    """cloudstream.conf pointing at ``storage_server``."""
    path = tmp_path / "cloudstream.conf"
    path.write_text(
        "accesskey GOOG1INTEGRATION\n"
        "secret integration-secret\n"
        f"endpoint {storage_server.endpoint}\n"
    )
    return path
