"""File-level operations composed from the catalog, pruner and dispatcher.

This module provides:
- FileOps: remove by name / id / pattern, list versions, missing chunks
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from freezer.client.api import (
    FileRecord,
    RequestDispatcher,
    VersionRecord,
    parse_model,
)
from freezer.client.catalog import FileResolver, compile_pattern
from freezer.client.versions import VersionPruner, versions_path
from freezer.core.chunking import ChunkDescriptor, ChunkStream
from freezer.core.errors import SerializationError

logger = logging.getLogger(__name__)


def file_path(file_id: int) -> str:
    """API path of a single file."""
    return f"/api/file/{file_id}"


class FileOps:
    """Whole-file operations against the remote catalog.

    Example:
        with RequestDispatcher(session) as dispatcher:
            ops = FileOps(dispatcher)
            ops.remove("notes/todo.txt", dry_run=True)
    """

    def __init__(self, dispatcher: RequestDispatcher) -> None:
        self._dispatcher = dispatcher
        self.resolver = FileResolver(dispatcher)
        self.pruner = VersionPruner(dispatcher, self.resolver)

    def remove(self, name: str, dry_run: bool = False) -> FileRecord:
        """Remove the file whose plaintext name is ``name``.

        Returns:
            The resolved record (also in a dry run, where nothing is deleted).

        Raises:
            NotFoundError: If no catalog entry matches.
            DecryptionError: If the catalog cannot be decrypted.
            RemoteStatusError: If the delete request is refused.
        """
        record = self.resolver.resolve(name)
        if not dry_run:
            self._dispatcher.dispatch(file_path(record.file_id), "DELETE")
            logger.info("Removed file %s (id %d)", name, record.file_id)
        return record

    def remove_by_id(self, file_id: int) -> None:
        """Remove a file directly by its id."""
        self._dispatcher.dispatch(file_path(file_id), "DELETE")
        logger.info("Removed file by id %d", file_id)

    def remove_matching(self, pattern: str, dry_run: bool = False) -> list[str]:
        """Remove every file whose plaintext name matches ``pattern``.

        Stops at the first failed delete.

        Returns:
            Plaintext names removed (or that would be, in a dry run),
            in catalog order.

        Raises:
            ValidationError: If the pattern is invalid.
            DecryptionError: If any catalog entry fails to decrypt.
            RemoteStatusError: If a delete request is refused.
        """
        compiled = compile_pattern(pattern)
        removed: list[str] = []
        for plaintext, record in self.resolver.match(compiled):
            if not dry_run:
                self._dispatcher.dispatch(file_path(record.file_id), "DELETE")
                logger.info("Removed file %s (id %d)", plaintext, record.file_id)
            removed.append(plaintext)
        return removed

    def list_versions(self, name: str) -> list[VersionRecord]:
        """List the stored versions of the file named ``name``."""
        record = self.resolver.resolve(name)
        path = versions_path(record.file_id)
        data = self._dispatcher.dispatch_json(path, "GET")
        if not isinstance(data, dict):
            raise SerializationError(f"Poorly formatted response to GET {path}: {data!r}")
        return [parse_model(VersionRecord.from_dict, v, path) for v in data.get("versions") or []]

    def _fetch_file(self, file_id: int) -> tuple[str, dict[str, Any]]:
        path = file_path(file_id)
        data = self._dispatcher.dispatch_json(path, "GET")
        if not isinstance(data, dict):
            raise SerializationError(f"Poorly formatted response to GET {path}: {data!r}")
        return path, data

    def missing_chunks(self, file_id: int) -> list[int]:
        """Chunk numbers the server does not yet store for a file."""
        path, data = self._fetch_file(file_id)
        return parse_missing_chunks(data, path)

    def chunks_to_upload(
        self,
        file_id: int,
        local_path: Path | str,
        chunk_size: int | None = None,
    ) -> Iterator[ChunkDescriptor]:
        """Read the local chunks the server reports as missing.

        The chunk table is sized from the server's ``currentVersion.chunkCount``
        when the file response carries it, so a local file shorter than the
        remote version raises TruncatedFileError. Without it the table is
        sized from the local file.

        Args:
            file_id: Remote file id.
            local_path: Local copy of the file.
            chunk_size: Chunk size; defaults to the server's advertised size.

        Yields:
            The missing chunks, in chunk number order.

        Raises:
            TruncatedFileError: If the local file ends before a missing chunk.
            ValidationError: If a missing chunk lies outside the chunk table.
        """
        path, data = self._fetch_file(file_id)
        missing = parse_missing_chunks(data, path)
        size = chunk_size or self._dispatcher.session.chunk_size
        chunk_count = remote_chunk_count(data)
        if chunk_count is None:
            stream = ChunkStream.for_file(local_path, size)
        else:
            stream = ChunkStream(local_path, size, chunk_count)
        logger.debug(
            "File %d is missing %d of %d chunks", file_id, len(missing), stream.chunk_count
        )
        yield from stream.select(missing)


def parse_missing_chunks(data: dict[str, Any], path: str) -> list[int]:
    """Extract the ``missingChunks`` list; null or absent means none."""
    chunks = data.get("missingChunks") or []
    if not isinstance(chunks, list) or not all(
        isinstance(n, int) and not isinstance(n, bool) for n in chunks
    ):
        raise SerializationError(f"Invalid missing chunk list from GET {path}: {chunks!r}")
    return list(chunks)


def remote_chunk_count(data: dict[str, Any]) -> int | None:
    """Chunk count of the current version, if the file response reports one."""
    current = data.get("currentVersion")
    if not isinstance(current, dict):
        return None
    count = current.get("chunkCount")
    if isinstance(count, int) and not isinstance(count, bool):
        return count
    return None
