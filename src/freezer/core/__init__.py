"""Core module - Session config, errors, chunking and name encryption."""

from freezer.core.chunking import (
    CONTINUE,
    STOP,
    ChunkDescriptor,
    ChunkStream,
    expected_chunk_count,
    get_chunk_hash,
)
from freezer.core.config import ServerCapabilities, Session
from freezer.core.crypto import (
    decrypt_string,
    derive_key,
    encrypt_string,
    key_fingerprint,
    user_salt,
)
from freezer.core.errors import (
    AuthenticationError,
    ChunkReadError,
    DecryptionError,
    FreezerError,
    InvalidRangeError,
    NotFoundError,
    RemoteStatusError,
    SerializationError,
    ServerRejectedError,
    TLSConfigError,
    TransportError,
    TruncatedFileError,
    ValidationError,
)

__all__ = [
    # Chunking
    "CONTINUE",
    "STOP",
    "ChunkDescriptor",
    "ChunkStream",
    "expected_chunk_count",
    "get_chunk_hash",
    # Config
    "ServerCapabilities",
    "Session",
    # Crypto
    "decrypt_string",
    "derive_key",
    "encrypt_string",
    "key_fingerprint",
    "user_salt",
    # Errors
    "AuthenticationError",
    "ChunkReadError",
    "DecryptionError",
    "FreezerError",
    "InvalidRangeError",
    "NotFoundError",
    "RemoteStatusError",
    "SerializationError",
    "ServerRejectedError",
    "TLSConfigError",
    "TransportError",
    "TruncatedFileError",
    "ValidationError",
]
