"""Fixed-size chunk reading for freezer.

The server stores a file as a table of fixed-size chunks. This module
provides:
- ChunkStream: lazy, restartable sequence of a local file's chunks
- Strict EOF accounting against the chunk count the server expects
- Selection of the chunks the server reports as missing
"""

from __future__ import annotations

import contextlib
import hashlib
import logging
import math
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from freezer.core.errors import ChunkReadError, TruncatedFileError, ValidationError

logger = logging.getLogger(__name__)

# Visitor return values
CONTINUE = True
STOP = False

ChunkVisitor = Callable[[int, bytes], bool]


@dataclass(frozen=True)
class ChunkDescriptor:
    """One chunk of a local file."""

    chunk_number: int
    data: bytes

    @property
    def size(self) -> int:
        """Return the size of this chunk in bytes."""
        return len(self.data)

    @property
    def hash(self) -> str:
        """SHA-256 hex digest of the chunk data."""
        return get_chunk_hash(self.data)


def get_chunk_hash(data: bytes) -> str:
    """Compute SHA-256 hash of data.

    Args:
        data: Raw bytes to hash.

    Returns:
        Hex-encoded SHA-256 hash string (64 characters).
    """
    return hashlib.sha256(data).hexdigest()


def expected_chunk_count(size: int, chunk_size: int) -> int:
    """Number of chunks a file of ``size`` bytes is split into."""
    if chunk_size <= 0:
        raise ValidationError(f"Chunk size must be positive, got {chunk_size}")
    return math.ceil(size / chunk_size)


class ChunkStream:
    """Ordered fixed-size chunks of a local file.

    Every iteration re-opens the file, so one stream can be walked
    several times. Chunks come out numbered from 0. Only the last
    expected chunk may be shorter than ``chunk_size``; a short read
    anywhere else means the local file is smaller than the remote chunk
    table and raises TruncatedFileError.
    """

    def __init__(self, path: Path | str, chunk_size: int, chunk_count: int) -> None:
        if chunk_size <= 0:
            raise ValidationError(f"Chunk size must be positive, got {chunk_size}")
        if chunk_count < 0:
            raise ValidationError(f"Chunk count cannot be negative, got {chunk_count}")
        self.path = Path(path)
        self.chunk_size = chunk_size
        self.chunk_count = chunk_count

    @classmethod
    def for_file(cls, path: Path | str, chunk_size: int) -> ChunkStream:
        """Create a stream whose chunk count matches the file's current size.

        Raises:
            ChunkReadError: If the file cannot be stat'ed.
        """
        path = Path(path)
        try:
            size = path.stat().st_size
        except OSError as e:
            raise ChunkReadError(f"Failed to open the file {path}: {e}", path, 0) from e
        return cls(path, chunk_size, expected_chunk_count(size, chunk_size))

    def __iter__(self) -> Iterator[ChunkDescriptor]:
        try:
            f = self.path.open("rb")
        except OSError as e:
            raise ChunkReadError(
                f"Failed to open the file {self.path}: {e}", self.path, 0
            ) from e

        with f:
            for chunk_number in range(self.chunk_count):
                offset = chunk_number * self.chunk_size
                data = self._read_chunk(f, offset)
                is_last = chunk_number + 1 == self.chunk_count
                if not data or (len(data) < self.chunk_size and not is_last):
                    raise TruncatedFileError(self.path, chunk_number, offset + len(data))
                yield ChunkDescriptor(chunk_number=chunk_number, data=data)

    def _read_chunk(self, f: BinaryIO, offset: int) -> bytes:
        """Read up to chunk_size bytes, stopping early only at EOF."""
        buffer = bytearray()
        while len(buffer) < self.chunk_size:
            try:
                block = f.read(self.chunk_size - len(buffer))
            except OSError as e:
                position = offset + len(buffer)
                raise ChunkReadError(
                    f"An error occurred while reading {self.chunk_size} bytes "
                    f"from the file {self.path} at offset {position}: {e}",
                    self.path,
                    position,
                ) from e
            if not block:
                break
            buffer += block
        return bytes(buffer)

    def for_each(self, visitor: ChunkVisitor) -> None:
        """Call ``visitor(chunk_number, data)`` for each chunk in order.

        The visitor returns CONTINUE (True) to keep going or STOP (False)
        to end the walk early. Exceptions raised by the visitor propagate.
        The file is closed on every exit path.
        """
        with contextlib.closing(iter(self)) as chunks:
            for chunk in chunks:
                if not visitor(chunk.chunk_number, chunk.data):
                    logger.debug("Chunk walk of %s stopped at chunk %d", self.path, chunk.chunk_number)
                    break

    def select(self, chunk_numbers: Iterable[int]) -> Iterator[ChunkDescriptor]:
        """Yield only the chunks whose numbers are in ``chunk_numbers``.

        Reading stops as soon as every requested chunk has been produced.

        Raises:
            ValidationError: If a requested number is outside the chunk table.
        """
        wanted = set(chunk_numbers)
        if not wanted:
            return
        out_of_range = sorted(n for n in wanted if n < 0 or n >= self.chunk_count)
        if out_of_range:
            raise ValidationError(
                f"Chunks {out_of_range} are outside the {self.chunk_count}-chunk table of {self.path}"
            )
        with contextlib.closing(iter(self)) as chunks:
            for chunk in chunks:
                if chunk.chunk_number in wanted:
                    wanted.discard(chunk.chunk_number)
                    yield chunk
                    if not wanted:
                        break
