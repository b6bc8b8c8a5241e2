"""Exception hierarchy for freezer.

Every error raised by the library derives from FreezerError so the
command layer can report it and pick an exit code in one place.
"""

from __future__ import annotations

from pathlib import Path


class FreezerError(Exception):
    """Base exception for all freezer errors."""


class ValidationError(FreezerError):
    """User supplied input could not be used (bad number, bad pattern)."""


class ChunkReadError(FreezerError):
    """Reading a local file chunk failed.

    Attributes:
        path: File being read.
        offset: Byte offset the read was attempted at.
    """

    def __init__(self, message: str, path: Path | str, offset: int) -> None:
        super().__init__(message)
        self.path = Path(path)
        self.offset = offset


class TruncatedFileError(ChunkReadError):
    """Local file is shorter than the expected chunk count accounts for."""

    def __init__(self, path: Path | str, chunk_number: int, offset: int) -> None:
        super().__init__(
            f"Unexpected EOF while reading chunk {chunk_number} of {path} "
            f"at offset {offset}",
            path,
            offset,
        )
        self.chunk_number = chunk_number


class TLSConfigError(FreezerError):
    """Client certificate or key could not be loaded."""


class SerializationError(FreezerError):
    """A request body could not be encoded or a response body decoded."""


class TransportError(FreezerError):
    """The HTTP request never produced a response."""

    def __init__(self, method: str, url: str, reason: str) -> None:
        super().__init__(f"Failed to make the HTTP {method} request to {url}: {reason}")
        self.method = method
        self.url = url


class RemoteStatusError(FreezerError):
    """Server answered with a status other than 200.

    Attributes:
        method: HTTP method of the request.
        url: Target URL.
        status: HTTP status code.
        body: Raw response body decoded as text.
    """

    def __init__(
        self,
        method: str,
        url: str,
        status: int,
        reason: str,
        body: str,
    ) -> None:
        super().__init__(
            f"Failed to make the HTTP {method} request to {url} "
            f"(status: {status} {reason}): {body}"
        )
        self.method = method
        self.url = url
        self.status = status
        self.reason = reason
        self.body = body


class ServerRejectedError(FreezerError):
    """Server answered 200 but reported a failed status flag."""


class AuthenticationError(FreezerError):
    """Login succeeded but the derived encryption key does not match."""


class NotFoundError(FreezerError):
    """No catalog entry decrypts to the requested file name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Could not find the file: {name}")
        self.name = name


class DecryptionError(FreezerError):
    """A stored file name could not be decrypted with the session key."""


class InvalidRangeError(FreezerError):
    """A version range cannot be pruned."""

    def __init__(
        self,
        message: str,
        min_version: int,
        max_version: int,
        current_version: int,
    ) -> None:
        super().__init__(message)
        self.min_version = min_version
        self.max_version = max_version
        self.current_version = current_version
