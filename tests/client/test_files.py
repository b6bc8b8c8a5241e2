"""Tests for file-level operations."""

from __future__ import annotations

from pathlib import Path

import pytest

from freezer.client.api import RequestDispatcher
from freezer.client.files import FileOps
from freezer.core.errors import (
    NotFoundError,
    RemoteStatusError,
    SerializationError,
    TruncatedFileError,
    ValidationError,
)

CATALOG_URL = "http://test/api/files"


class TestRemove:
    """Tests for removing files by name and id."""

    def test_remove_by_name(self, httpx_mock, dispatcher: RequestDispatcher, catalog_entry) -> None:  # type: ignore[no-untyped-def]
        """Resolves the name then deletes by id."""
        httpx_mock.add_response(
            method="GET",
            url=CATALOG_URL,
            json={"files": [catalog_entry(1, "a.txt", 1), catalog_entry(2, "b.txt", 1)]},
        )
        httpx_mock.add_response(method="DELETE", url="http://test/api/file/2")

        record = FileOps(dispatcher).remove("b.txt")

        assert record.file_id == 2
        assert [(r.method, str(r.url)) for r in httpx_mock.get_requests()] == [
            ("GET", CATALOG_URL),
            ("DELETE", "http://test/api/file/2"),
        ]

    def test_remove_dry_run(self, httpx_mock, dispatcher: RequestDispatcher, catalog_entry) -> None:  # type: ignore[no-untyped-def]
        """Dry run resolves but does not delete."""
        httpx_mock.add_response(
            method="GET", url=CATALOG_URL, json={"files": [catalog_entry(1, "a.txt", 1)]}
        )

        FileOps(dispatcher).remove("a.txt", dry_run=True)

        assert [r.method for r in httpx_mock.get_requests()] == ["GET"]

    def test_remove_unknown(self, httpx_mock, dispatcher: RequestDispatcher) -> None:  # type: ignore[no-untyped-def]
        """Unknown names fail without deleting."""
        httpx_mock.add_response(method="GET", url=CATALOG_URL, json={"files": []})

        with pytest.raises(NotFoundError):
            FileOps(dispatcher).remove("a.txt")

    def test_remove_by_id(self, httpx_mock, dispatcher: RequestDispatcher) -> None:  # type: ignore[no-untyped-def]
        """Deletes directly by id."""
        httpx_mock.add_response(method="DELETE", url="http://test/api/file/42")

        FileOps(dispatcher).remove_by_id(42)

        assert httpx_mock.get_request().method == "DELETE"

    def test_remove_by_id_refused(self, httpx_mock, dispatcher: RequestDispatcher) -> None:  # type: ignore[no-untyped-def]
        """Non-200 answers propagate."""
        httpx_mock.add_response(
            method="DELETE", url="http://test/api/file/42", status_code=404, text="no such file"
        )

        with pytest.raises(RemoteStatusError) as exc_info:
            FileOps(dispatcher).remove_by_id(42)

        assert exc_info.value.status == 404


class TestRemoveMatching:
    """Tests for removing files by pattern."""

    def test_removes_matches(self, httpx_mock, dispatcher: RequestDispatcher, catalog_entry) -> None:  # type: ignore[no-untyped-def]
        """Every matching file is deleted, in catalog order."""
        httpx_mock.add_response(
            method="GET",
            url=CATALOG_URL,
            json={
                "files": [
                    catalog_entry(1, "a.log", 1),
                    catalog_entry(2, "b.txt", 1),
                    catalog_entry(3, "c.log", 1),
                ]
            },
        )
        httpx_mock.add_response(method="DELETE", url="http://test/api/file/1")
        httpx_mock.add_response(method="DELETE", url="http://test/api/file/3")

        removed = FileOps(dispatcher).remove_matching(r"\.log$")

        assert removed == ["a.log", "c.log"]

    def test_dry_run(self, httpx_mock, dispatcher: RequestDispatcher, catalog_entry) -> None:  # type: ignore[no-untyped-def]
        """Dry run lists matches without deleting."""
        httpx_mock.add_response(
            method="GET", url=CATALOG_URL, json={"files": [catalog_entry(1, "a.log", 1)]}
        )

        assert FileOps(dispatcher).remove_matching("log", dry_run=True) == ["a.log"]
        assert [r.method for r in httpx_mock.get_requests()] == ["GET"]

    def test_stops_at_first_failure(self, httpx_mock, dispatcher: RequestDispatcher, catalog_entry) -> None:  # type: ignore[no-untyped-def]
        """A failed delete stops the removal."""
        httpx_mock.add_response(
            method="GET",
            url=CATALOG_URL,
            json={"files": [catalog_entry(1, "a.log", 1), catalog_entry(2, "b.log", 1)]},
        )
        httpx_mock.add_response(method="DELETE", url="http://test/api/file/1", status_code=500)

        with pytest.raises(RemoteStatusError):
            FileOps(dispatcher).remove_matching("log")

        assert [r.method for r in httpx_mock.get_requests()] == ["GET", "DELETE"]


class TestListVersions:
    """Tests for listing file versions."""

    def test_list_versions(self, httpx_mock, dispatcher: RequestDispatcher, catalog_entry) -> None:  # type: ignore[no-untyped-def]
        """Resolves the file and parses its versions."""
        httpx_mock.add_response(
            method="GET", url=CATALOG_URL, json={"files": [catalog_entry(4, "a.txt", 2)]}
        )
        httpx_mock.add_response(
            method="GET",
            url="http://test/api/file/4/versions",
            json={
                "versions": [
                    {"versionNumber": 1, "versionID": 10, "chunkCount": 3, "fileHash": "h1"},
                    {"versionNumber": 2, "versionID": 11, "chunkCount": 4, "fileHash": "h2"},
                ]
            },
        )

        versions = FileOps(dispatcher).list_versions("a.txt")

        assert [(v.version_number, v.chunk_count, v.file_hash) for v in versions] == [
            (1, 3, "h1"),
            (2, 4, "h2"),
        ]

    def test_malformed_versions(self, httpx_mock, dispatcher: RequestDispatcher, catalog_entry) -> None:  # type: ignore[no-untyped-def]
        """A version without a number is a serialization error."""
        httpx_mock.add_response(
            method="GET", url=CATALOG_URL, json={"files": [catalog_entry(4, "a.txt", 2)]}
        )
        httpx_mock.add_response(
            method="GET", url="http://test/api/file/4/versions", json={"versions": [{}]}
        )

        with pytest.raises(SerializationError):
            FileOps(dispatcher).list_versions("a.txt")


class TestMissingChunks:
    """Tests for missing chunk lookup."""

    def test_missing_chunks(self, httpx_mock, dispatcher: RequestDispatcher) -> None:  # type: ignore[no-untyped-def]
        """Returns the server's missing chunk list."""
        httpx_mock.add_response(
            method="GET",
            url="http://test/api/file/3",
            json={"fileID": 3, "missingChunks": [0, 2]},
        )

        assert FileOps(dispatcher).missing_chunks(3) == [0, 2]

    def test_no_missing_chunks(self, httpx_mock, dispatcher: RequestDispatcher) -> None:  # type: ignore[no-untyped-def]
        """A null list means nothing is missing."""
        httpx_mock.add_response(
            method="GET", url="http://test/api/file/3", json={"missingChunks": None}
        )

        assert FileOps(dispatcher).missing_chunks(3) == []

    def test_chunks_to_upload(self, httpx_mock, dispatcher: RequestDispatcher, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
        """Reads only the missing chunks using the server chunk size."""
        local = tmp_path / "local.bin"
        local.write_bytes(b"aaaabbbbcc")
        httpx_mock.add_response(
            method="GET", url="http://test/api/file/3", json={"missingChunks": [2, 0]}
        )

        chunks = list(FileOps(dispatcher).chunks_to_upload(3, local))

        assert [(c.chunk_number, c.data) for c in chunks] == [(0, b"aaaa"), (2, b"cc")]

    @pytest.mark.parametrize("chunks", [[1.5], [True], ["2"], 3])
    def test_non_integer_missing_chunks(  # type: ignore[no-untyped-def]
        self, httpx_mock, dispatcher: RequestDispatcher, chunks: object
    ) -> None:
        """Chunk numbers must be real integers."""
        httpx_mock.add_response(
            method="GET", url="http://test/api/file/3", json={"missingChunks": chunks}
        )

        with pytest.raises(SerializationError):
            FileOps(dispatcher).missing_chunks(3)

    def test_missing_chunk_past_local_file(  # type: ignore[no-untyped-def]
        self, httpx_mock, dispatcher: RequestDispatcher, tmp_path: Path
    ) -> None:
        """A missing chunk the local file cannot hold is an error, not an empty upload."""
        local = tmp_path / "local.bin"
        local.write_bytes(b"aaaabbbbcc")
        httpx_mock.add_response(
            method="GET", url="http://test/api/file/3", json={"missingChunks": [5]}
        )

        with pytest.raises(ValidationError):
            list(FileOps(dispatcher).chunks_to_upload(3, local))

    def test_server_chunk_count_detects_short_file(  # type: ignore[no-untyped-def]
        self, httpx_mock, dispatcher: RequestDispatcher, tmp_path: Path
    ) -> None:
        """The server's chunk count sizes the table, so a short local copy is truncated."""
        local = tmp_path / "local.bin"
        local.write_bytes(b"aaaabbbbcc")
        httpx_mock.add_response(
            method="GET",
            url="http://test/api/file/3",
            json={"missingChunks": [4], "currentVersion": {"versionNumber": 1, "chunkCount": 6}},
        )

        with pytest.raises(TruncatedFileError) as exc_info:
            list(FileOps(dispatcher).chunks_to_upload(3, local))

        assert exc_info.value.chunk_number == 2
