"""Client module - Request dispatch, catalog lookup and file operations."""

from freezer.client.api import (
    FileRecord,
    JsonBody,
    RawBody,
    RequestDispatcher,
    VersionRecord,
)
from freezer.client.auth import authenticate
from freezer.client.catalog import FileResolver
from freezer.client.files import FileOps
from freezer.client.versions import (
    LATEST_MINUS_ONE,
    PruneOutcome,
    VersionPruner,
    parse_max_version,
)

__all__ = [
    # Dispatch
    "FileRecord",
    "JsonBody",
    "RawBody",
    "RequestDispatcher",
    "VersionRecord",
    # Login
    "authenticate",
    # Operations
    "FileOps",
    "FileResolver",
    "LATEST_MINUS_ONE",
    "PruneOutcome",
    "VersionPruner",
    "parse_max_version",
]
