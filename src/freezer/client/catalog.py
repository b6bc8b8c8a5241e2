"""Remote file catalog lookup by plaintext name.

File names are stored encrypted on the server, so it cannot filter by
name. Every lookup fetches the whole catalog and decrypts entries in
server order until one matches. Nothing is cached between calls.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator

from freezer.client.api import FileRecord, RequestDispatcher, parse_model
from freezer.core.crypto import decrypt_string
from freezer.core.errors import NotFoundError, SerializationError, ValidationError

logger = logging.getLogger(__name__)

CATALOG_PATH = "/api/files"


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a user supplied file name pattern.

    Raises:
        ValidationError: If the pattern is not a valid regular expression.
    """
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ValidationError(f"Failed to compile the regular expression {pattern!r}: {e}") from e


class FileResolver:
    """Resolves plaintext file names against the remote catalog."""

    def __init__(self, dispatcher: RequestDispatcher) -> None:
        self._dispatcher = dispatcher

    def fetch_catalog(self) -> list[FileRecord]:
        """Fetch every file record of the user in one request.

        Raises:
            RemoteStatusError: If the server refuses the request.
            SerializationError: If the response is malformed.
        """
        data = self._dispatcher.dispatch_json(CATALOG_PATH, "GET")
        if isinstance(data, dict) and "files" in data:
            files = data["files"] if data["files"] is not None else []
        else:
            files = data
        if not isinstance(files, list):
            raise SerializationError(
                f"Poorly formatted response to GET {CATALOG_PATH}: expected a file list, got {data!r}"
            )
        records = [parse_model(FileRecord.from_dict, f, CATALOG_PATH) for f in files]
        logger.debug("Fetched catalog of %d files", len(records))
        return records

    def iter_plaintext(self) -> Iterator[tuple[str, FileRecord]]:
        """Yield ``(plaintext_name, record)`` for the catalog in server order.

        Raises:
            DecryptionError: As soon as any entry fails to decrypt.
        """
        key = self._dispatcher.session.encryption_key
        for record in self.fetch_catalog():
            yield decrypt_string(record.file_name, key), record

    def resolve(self, name: str) -> FileRecord:
        """Find the catalog entry whose decrypted name equals ``name``.

        Raises:
            NotFoundError: If no entry matches.
            DecryptionError: If an entry scanned before the match fails to decrypt.
        """
        for plaintext, record in self.iter_plaintext():
            if plaintext == name:
                logger.debug("Resolved %s to file id %d", name, record.file_id)
                return record
        raise NotFoundError(name)

    def match(self, pattern: str | re.Pattern[str]) -> list[tuple[str, FileRecord]]:
        """Return every ``(plaintext_name, record)`` whose name matches ``pattern``.

        Raises:
            ValidationError: If ``pattern`` is not a valid regular expression.
            DecryptionError: If any entry fails to decrypt.
        """
        compiled = compile_pattern(pattern) if isinstance(pattern, str) else pattern
        return [
            (plaintext, record)
            for plaintext, record in self.iter_plaintext()
            if compiled.search(plaintext)
        ]
