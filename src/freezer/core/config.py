"""Session configuration shared by every freezer component.

A Session is created once by the login step and handed to every
component explicitly. It is frozen: nothing below the command layer
may change the host, token or key of a running command.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class ServerCapabilities:
    """Capabilities advertised by the server at login.

    Attributes:
        chunk_size: Size in bytes of every chunk except a file's last one.
    """

    chunk_size: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ServerCapabilities:
        """Create from the login response ``capabilities`` object."""
        if not data:
            return cls()
        return cls(chunk_size=int(data.get("chunkSize", 0)))


@dataclass(frozen=True)
class Session:
    """Authenticated connection settings for one command invocation.

    Attributes:
        host_uri: Base URL of the server (e.g., "https://freezer.example.com").
        token: Bearer token returned by login.
        encryption_key: 32-byte key used to encrypt and decrypt file names.
        capabilities: Server capabilities returned by login.
        tls_cert: Optional PEM client certificate (also the trusted root).
        tls_key: Optional PEM private key for tls_cert.
        timeout: Default request timeout in seconds.
    """

    host_uri: str
    token: str
    encryption_key: bytes = field(repr=False)
    capabilities: ServerCapabilities = field(default_factory=ServerCapabilities)
    tls_cert: Path | None = None
    tls_key: Path | None = None
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        """Normalize host URI and certificate paths."""
        object.__setattr__(self, "host_uri", self.host_uri.rstrip("/"))
        if self.tls_cert is not None:
            object.__setattr__(self, "tls_cert", Path(self.tls_cert))
        if self.tls_key is not None:
            object.__setattr__(self, "tls_key", Path(self.tls_key))

    @property
    def tls_enabled(self) -> bool:
        """True when both a client certificate and key are configured."""
        return self.tls_cert is not None and self.tls_key is not None

    @property
    def chunk_size(self) -> int:
        """Chunk size advertised by the server."""
        return self.capabilities.chunk_size

    def url(self, path: str) -> str:
        """Build an absolute URL for an API path."""
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.host_uri}/{path.lstrip('/')}"
