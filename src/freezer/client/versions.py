"""Version range pruning for single files and regex-matched batches.

The current version of a file is never prunable: every range must end
strictly below it. Batches accept a relative maximum ("latest-minus-one",
also spelled "H~") that resolves per file to its current version minus one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from freezer.client.api import FileRecord, JsonBody, RequestDispatcher, decode_json
from freezer.client.catalog import FileResolver, compile_pattern
from freezer.core.errors import (
    FreezerError,
    InvalidRangeError,
    SerializationError,
    ServerRejectedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

LATEST_MINUS_ONE = "latest-minus-one"
RELATIVE_SENTINELS = frozenset({LATEST_MINUS_ONE, "H~"})

# A parsed max version: a literal number, or None for the relative sentinel
MaxVersion = int | None


def parse_max_version(value: str | int) -> MaxVersion:
    """Parse a user supplied maximum version.

    Returns:
        The literal version number, or None for the relative sentinel.

    Raises:
        ValidationError: If ``value`` is neither the sentinel nor an integer.
    """
    if isinstance(value, int):
        return value
    text = value.strip()
    if text in RELATIVE_SENTINELS:
        return None
    try:
        return int(text)
    except ValueError as e:
        raise ValidationError(
            f"Failed to parse the supplied max version as a number: {value!r}"
        ) from e


def resolve_max_version(max_version: MaxVersion, current_version: int) -> int:
    """Turn a parsed max version into a number for one file."""
    if max_version is None:
        return current_version - 1
    return max_version


def versions_path(file_id: int) -> str:
    """API path of a file's version collection."""
    return f"/api/file/{file_id}/versions"


@dataclass
class PruneOutcome:
    """Result of pruning one file in a batch."""

    file_name: str
    file_id: int
    min_version: int
    max_version: int
    dry_run: bool = False
    error: FreezerError | None = None

    @property
    def ok(self) -> bool:
        """True if the versions were removed (or would be, in a dry run)."""
        return self.error is None


class VersionPruner:
    """Deletes inclusive version ranges of remote files."""

    def __init__(self, dispatcher: RequestDispatcher, resolver: FileResolver | None = None) -> None:
        self._dispatcher = dispatcher
        self._resolver = resolver if resolver is not None else FileResolver(dispatcher)

    @staticmethod
    def validate_range(record: FileRecord, min_version: int, max_version: int) -> None:
        """Check that ``[min_version, max_version]`` can be pruned from ``record``.

        Raises:
            ValidationError: If min_version is negative.
            InvalidRangeError: If the range is empty or reaches the current version.
        """
        current = record.current_version.version_number
        if min_version < 0:
            raise ValidationError(f"The minimum version cannot be negative: {min_version}")
        if max_version >= current:
            raise InvalidRangeError(
                f"The maximum version number ({max_version}) cannot be equal or greater "
                f"than the current version number ({current}) of file {record.file_id}",
                min_version,
                max_version,
                current,
            )
        if min_version > max_version:
            raise InvalidRangeError(
                f"The minimum version ({min_version}) is greater than the "
                f"maximum version ({max_version})",
                min_version,
                max_version,
                current,
            )

    def prune(
        self,
        record: FileRecord,
        min_version: int,
        max_version: int,
        dry_run: bool = False,
    ) -> None:
        """Delete versions ``min_version`` to ``max_version`` (inclusive) of one file.

        A dry run validates the range and sends nothing.

        Raises:
            ValidationError: If min_version is negative.
            InvalidRangeError: If the range cannot be pruned.
            RemoteStatusError: If the server answers with a non-200 status.
            SerializationError: If the response is malformed.
            ServerRejectedError: If the server reports a failed status.
        """
        self.validate_range(record, min_version, max_version)
        if dry_run:
            return

        path = versions_path(record.file_id)
        raw = self._dispatcher.dispatch(
            path,
            "DELETE",
            JsonBody({"minVersion": min_version, "maxVersion": max_version}),
        )
        data = decode_json(raw, f"DELETE {path}")
        if not isinstance(data, dict) or "status" not in data:
            raise SerializationError(f"Poorly formatted response to DELETE {path}: {data!r}")
        if data["status"] is not True:
            raise ServerRejectedError(
                f"The server returned a failed status while deleting versions "
                f"{min_version} to {max_version} of file {record.file_id}"
            )
        logger.info(
            "Removed versions %d to %d of file %d", min_version, max_version, record.file_id
        )

    def prune_by_name(
        self,
        name: str,
        min_version: int,
        max_version: int,
        dry_run: bool = False,
    ) -> FileRecord:
        """Resolve ``name`` and prune its versions.

        Returns:
            The resolved file record.
        """
        record = self._resolver.resolve(name)
        self.prune(record, min_version, max_version, dry_run)
        return record

    def prune_matching(
        self,
        pattern: str,
        min_version: int,
        max_version: str | int,
        dry_run: bool = False,
    ) -> list[PruneOutcome]:
        """Prune a version range from every file whose name matches ``pattern``.

        Files whose resolved range would reach their current version, or
        go negative, are skipped without an outcome. A failure on one file
        is recorded on its outcome and the next file is processed.

        Args:
            pattern: Regular expression searched in plaintext names.
            min_version: First version to delete.
            max_version: Last version to delete, or the relative sentinel.
            dry_run: Validate and report without deleting.

        Returns:
            One outcome per processed file, in catalog order.

        Raises:
            ValidationError: If the pattern or max version cannot be parsed.
            DecryptionError: If any catalog entry fails to decrypt.
        """
        parsed_max = parse_max_version(max_version)
        if min_version < 0:
            raise ValidationError(f"The minimum version cannot be negative: {min_version}")
        if parsed_max is not None and parsed_max < min_version:
            raise ValidationError(
                f"The maximum version ({parsed_max}) is lower than the minimum version ({min_version})"
            )
        compiled = compile_pattern(pattern)

        outcomes: list[PruneOutcome] = []
        for plaintext, record in self._resolver.match(compiled):
            current = record.current_version.version_number
            resolved_max = resolve_max_version(parsed_max, current)
            if resolved_max >= current or resolved_max < min_version:
                logger.debug(
                    "Skipping %s: no prunable versions below current version %d",
                    plaintext,
                    current,
                )
                continue

            outcome = PruneOutcome(
                file_name=plaintext,
                file_id=record.file_id,
                min_version=min_version,
                max_version=resolved_max,
                dry_run=dry_run,
            )
            try:
                self.prune(record, min_version, resolved_max, dry_run)
            except FreezerError as e:
                logger.warning("Failed to remove versions of %s: %s", plaintext, e)
                outcome.error = e
            outcomes.append(outcome)
        return outcomes
