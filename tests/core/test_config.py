"""Tests for core configuration classes."""

from __future__ import annotations

import dataclasses
from pathlib import Path

import pytest

from freezer.core.config import ServerCapabilities, Session


def make_session(**overrides: object) -> Session:
    """Create a Session for testing."""
    values: dict[str, object] = {
        "host_uri": "https://example.com",
        "token": "test-token",
        "encryption_key": b"k" * 32,
    }
    values.update(overrides)
    return Session(**values)  # type: ignore[arg-type]


class TestSession:
    """Tests for Session class."""

    def test_init_basic(self) -> None:
        """Should initialize with required fields and defaults."""
        session = make_session()
        assert session.host_uri == "https://example.com"
        assert session.token == "test-token"
        assert session.timeout == 30.0
        assert session.chunk_size == 0
        assert session.tls_enabled is False

    def test_url_trailing_slash_removed(self) -> None:
        """Should strip trailing slash from host URI."""
        session = make_session(host_uri="https://example.com/")
        assert session.host_uri == "https://example.com"

    def test_is_immutable(self) -> None:
        """Components must not be able to change the session."""
        session = make_session()
        with pytest.raises(dataclasses.FrozenInstanceError):
            session.token = "other"  # type: ignore[misc]

    def test_url_joins_paths(self) -> None:
        """API paths are joined onto the host."""
        session = make_session()
        assert session.url("/api/files") == "https://example.com/api/files"
        assert session.url("api/files") == "https://example.com/api/files"

    def test_url_keeps_absolute(self) -> None:
        """Absolute URLs pass through unchanged."""
        session = make_session()
        assert session.url("http://other/x") == "http://other/x"

    def test_tls_enabled_needs_both_paths(self) -> None:
        """TLS is only enabled with a certificate and a key."""
        assert make_session(tls_cert="c.pem").tls_enabled is False
        session = make_session(tls_cert="c.pem", tls_key="k.pem")
        assert session.tls_enabled is True
        assert session.tls_cert == Path("c.pem")

    def test_key_not_in_repr(self) -> None:
        """The encryption key is not printed."""
        assert "kkkk" not in repr(make_session())


class TestServerCapabilities:
    """Tests for ServerCapabilities parsing."""

    def test_from_dict(self) -> None:
        """Should read the chunk size."""
        assert ServerCapabilities.from_dict({"chunkSize": 1024}).chunk_size == 1024

    def test_from_empty(self) -> None:
        """Missing capabilities default to zero chunk size."""
        assert ServerCapabilities.from_dict(None).chunk_size == 0
