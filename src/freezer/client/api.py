"""HTTP request dispatch for the freezer server API.

This module provides:
- RequestDispatcher: the single path every remote call goes through
- RawBody / JsonBody: request body variants
- FileRecord / VersionRecord: response shapes shared by the client modules
- build_http_client: plain or mutual-TLS httpx client construction
"""

from __future__ import annotations

import json
import logging
import ssl
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

import httpx

from freezer.core.config import DEFAULT_TIMEOUT, Session
from freezer.core.errors import (
    RemoteStatusError,
    SerializationError,
    TLSConfigError,
    TransportError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RawBody:
    """Request body sent byte-for-byte with no content type."""

    data: bytes


@dataclass(frozen=True)
class JsonBody:
    """Request body serialized to JSON."""

    value: Any


RequestBody = RawBody | JsonBody


@dataclass(frozen=True)
class VersionRecord:
    """One stored version of a file."""

    version_number: int
    version_id: int | None = None
    chunk_count: int = 0
    last_mod: int = 0
    file_hash: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VersionRecord:
        """Create from API response dictionary."""
        return cls(
            version_number=int(data["versionNumber"]),
            version_id=data.get("versionID"),
            chunk_count=int(data.get("chunkCount") or 0),
            last_mod=int(data.get("lastMod") or 0),
            file_hash=data.get("fileHash") or "",
        )


@dataclass(frozen=True)
class FileRecord:
    """Catalog entry for a file. ``file_name`` is ciphertext."""

    file_id: int
    file_name: str
    current_version: VersionRecord
    is_dir: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FileRecord:
        """Create from API response dictionary."""
        file_name = data["fileName"]
        if not isinstance(file_name, str):
            raise TypeError(f"fileName must be a string, got {type(file_name).__name__}")
        return cls(
            file_id=int(data["fileID"]),
            file_name=file_name,
            current_version=VersionRecord.from_dict(data["currentVersion"]),
            is_dir=bool(data.get("isDir", False)),
        )


def parse_model(factory: Callable[[Any], T], data: Any, what: str) -> T:
    """Build a response model, turning shape mismatches into SerializationError."""
    try:
        return factory(data)
    except (KeyError, TypeError, ValueError) as e:
        raise SerializationError(f"Unexpected response shape from {what}: {e!r}") from e


def decode_json(raw: bytes, what: str) -> Any:
    """Decode a JSON response body.

    Raises:
        SerializationError: If the body is not valid JSON.
    """
    try:
        return json.loads(raw)
    except ValueError as e:
        raise SerializationError(f"Poorly formatted response to {what}: {e}") from e


def encode_body(body: RequestBody | None) -> tuple[bytes | None, dict[str, str]]:
    """Turn a request body variant into content bytes and extra headers."""
    if body is None:
        return None, {}
    if isinstance(body, RawBody):
        return body.data, {}
    if isinstance(body, JsonBody):
        try:
            content = json.dumps(body.value).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Failed to JSON serialize the request body: {e}") from e
        return content, {"Content-Type": "application/json"}
    raise TypeError(f"Unsupported request body type: {type(body).__name__}")


def build_http_client(
    tls_cert: Path | None = None,
    tls_key: Path | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> httpx.Client:
    """Create the HTTP client used for every request.

    When both a certificate and a key are given, the client presents
    them to the server and trusts only the same certificate as root.
    Otherwise a plain client is returned.

    Raises:
        TLSConfigError: If the certificate or key cannot be loaded.
    """
    if tls_cert is None or tls_key is None:
        return httpx.Client(timeout=timeout)

    try:
        context = ssl.create_default_context(cafile=str(tls_cert))
        context.load_cert_chain(certfile=str(tls_cert), keyfile=str(tls_key))
    except (OSError, ValueError) as e:
        raise TLSConfigError(
            f"Unable to load the TLS certificate {tls_cert} with key {tls_key}: {e}"
        ) from e
    return httpx.Client(verify=context, timeout=timeout)


def check_response(method: str, url: str, response: httpx.Response) -> bytes:
    """Return the body of a 200 response, raise RemoteStatusError otherwise."""
    body = response.content
    if response.status_code != 200:
        raise RemoteStatusError(
            method,
            url,
            response.status_code,
            response.reason_phrase,
            body.decode("utf-8", errors="replace"),
        )
    return body


class RequestDispatcher:
    """Authenticated HTTP dispatcher for one session.

    Holds a single httpx client for the lifetime of a command. Every
    call is a single attempt: no retries, exactly 200 means success.
    """

    def __init__(self, session: Session, client: httpx.Client | None = None) -> None:
        """Initialize the dispatcher.

        Args:
            session: Authenticated session settings.
            client: Pre-built client (mainly for tests). Built from the
                session's TLS settings when omitted.

        Raises:
            TLSConfigError: If the session's certificate or key is unusable.
        """
        self._session = session
        if client is None:
            client = build_http_client(
                session.tls_cert if session.tls_enabled else None,
                session.tls_key if session.tls_enabled else None,
                session.timeout,
            )
        self._client = client

    @property
    def session(self) -> Session:
        """Session this dispatcher authenticates with."""
        return self._session

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> RequestDispatcher:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    def dispatch(
        self,
        url: str,
        method: str,
        body: RequestBody | None = None,
        *,
        token: str | None = None,
        timeout: float | None = None,
    ) -> bytes:
        """Send one authenticated request and return the raw response body.

        Args:
            url: Absolute URL or API path relative to the session host.
            method: HTTP method.
            body: RawBody, JsonBody or None.
            token: Bearer token; defaults to the session token.
            timeout: Per-call timeout in seconds overriding the client default.

        Returns:
            Raw response body of a 200 response.

        Raises:
            SerializationError: If a JsonBody cannot be serialized.
            TransportError: If no response was received.
            RemoteStatusError: If the status is anything but 200.
        """
        target = self._session.url(url)
        content, headers = encode_body(body)
        headers["Authorization"] = f"Bearer {self._session.token if token is None else token}"

        extra: dict[str, Any] = {}
        if timeout is not None:
            extra["timeout"] = timeout

        logger.debug("%s %s", method, target)
        try:
            response = self._client.request(
                method, target, content=content, headers=headers, **extra
            )
        except httpx.RequestError as e:
            raise TransportError(method, target, str(e)) from e

        logger.debug("%s %s -> %d", method, target, response.status_code)
        return check_response(method, target, response)

    def dispatch_json(
        self,
        url: str,
        method: str,
        body: RequestBody | None = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Dispatch a request and decode its JSON response."""
        raw = self.dispatch(url, method, body, timeout=timeout)
        return decode_json(raw, f"{method} {self._session.url(url)}")
