# tests/test_metadata.py
"""Tests for per-file metadata collection."""

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from structlog.testing import capture_logs

from codeflattener.core.metadata import collect_file_metadata
from codeflattener.core.models import FileRecord, VcsInfo
from codeflattener.core.vcs import NullVcsProvider, VcsProvider
from codeflattener.exceptions import GitError


class FailingVcsProvider(VcsProvider):
    def file_info(self, relative_path: str) -> Optional[VcsInfo]:
        raise GitError("fatal: bad object HEAD")


class FixedVcsProvider(VcsProvider):
    def __init__(self, info: VcsInfo):
        self.info = info
        self.queried = []

    def file_info(self, relative_path: str) -> Optional[VcsInfo]:
        self.queried.append(relative_path)
        return self.info


def _make_file(root: Path, rel: str, content: str = "hello") -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


class TestFilesystemMetadata:
    def test_populates_stat_fields(self, tmp_path: Path):
        file_path = _make_file(tmp_path, "src/app/Main.CS", "0123456789")
        os.utime(file_path, (1_700_000_000, 1_700_000_000))

        record = collect_file_metadata(tmp_path, file_path, NullVcsProvider())

        assert isinstance(record, FileRecord)
        assert record.relative_path == "src/app/Main.CS"
        assert record.absolute_path == file_path.resolve()
        assert record.size_bytes == 10
        assert record.extension == ".CS"
        assert record.last_modified.tzinfo is not None
        assert record.last_modified == datetime.fromtimestamp(1_700_000_000, tz=timezone.utc)
        assert record.related_paths == ()

    def test_file_without_extension(self, tmp_path: Path):
        record = collect_file_metadata(tmp_path, _make_file(tmp_path, "Makefile"))
        assert record.extension == ""
        assert record.directory == ""
        assert record.stem == "Makefile"

    def test_empty_file_has_zero_size(self, tmp_path: Path):
        record = collect_file_metadata(tmp_path, _make_file(tmp_path, "empty.txt", ""))
        assert record.size_bytes == 0


class TestVcsMetadata:
    def test_no_provider_means_no_vcs_info(self, tmp_path: Path):
        record = collect_file_metadata(tmp_path, _make_file(tmp_path, "a.py"))
        assert record.vcs_info is None

    def test_provider_is_queried_with_relative_path(self, tmp_path: Path):
        info = VcsInfo(
            commit_id="abc123", last_author="Alice",
            last_modified_at=datetime(2024, 1, 2, tzinfo=timezone.utc),
            branch="main", remote_url="", contributors=frozenset({"Alice"}),
        )
        provider = FixedVcsProvider(info)

        record = collect_file_metadata(tmp_path, _make_file(tmp_path, "pkg/a.py"), provider)

        assert provider.queried == ["pkg/a.py"]
        assert record.vcs_info == info

    def test_provider_failure_degrades_to_no_vcs_info(self, tmp_path: Path, warnings_logged):
        with capture_logs() as captured:
            record = collect_file_metadata(tmp_path, _make_file(tmp_path, "a.py"), FailingVcsProvider())

        assert record.vcs_info is None
        assert record.size_bytes == 5
        warnings = warnings_logged(captured)
        assert [(w["event"], w["path"]) for w in warnings] == [("vcs_metadata_unavailable", "a.py")]
        assert "bad object HEAD" in warnings[0]["error"]
