"""Shared fixtures for freezer tests."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

import pytest

from freezer.client.api import RequestDispatcher
from freezer.core.config import ServerCapabilities, Session
from freezer.core.crypto import encrypt_string

TEST_KEY = bytes(range(32))

EntryFactory = Callable[..., dict[str, Any]]


@pytest.fixture
def encryption_key() -> bytes:
    """Fixed 32-byte name encryption key."""
    return TEST_KEY


@pytest.fixture
def session(encryption_key: bytes) -> Session:
    """Session against the mocked http://test server."""
    return Session(
        host_uri="http://test",
        token="token123",
        encryption_key=encryption_key,
        capabilities=ServerCapabilities(chunk_size=4),
    )


@pytest.fixture
def dispatcher(session: Session) -> Iterator[RequestDispatcher]:
    """Dispatcher bound to the test session."""
    with RequestDispatcher(session) as d:
        yield d


@pytest.fixture
def catalog_entry(encryption_key: bytes) -> EntryFactory:
    """Build a catalog JSON entry with an encrypted file name."""

    def _entry(file_id: int, name: str, version: int, **extra: Any) -> dict[str, Any]:
        return {
            "fileID": file_id,
            "fileName": encrypt_string(name, encryption_key),
            "currentVersion": {"versionNumber": version, "chunkCount": 1},
            **extra,
        }

    return _entry
