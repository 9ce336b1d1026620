# tests/test_relations.py
"""Tests for related-file inference."""

from datetime import datetime, timezone
from pathlib import Path
from typing import List

from structlog.testing import capture_logs

from codeflattener.core.models import FileRecord
from codeflattener.core.relations import find_related


def _record(root: Path, rel: str) -> FileRecord:
    path = root / rel
    return FileRecord(
        relative_path=rel,
        absolute_path=path,
        last_modified=datetime(2024, 1, 1, tzinfo=timezone.utc),
        size_bytes=path.stat().st_size if path.exists() else 0,
        extension=Path(rel).suffix,
    )


def _records(root: Path, structure: dict, make_project) -> List[FileRecord]:
    make_project(root, structure)
    return [_record(root, rel) for rel in structure]


class TestFindRelated:
    def test_same_directory_extension_and_reference(self, tmp_path, make_project):
        records = _records(tmp_path, {
            "a.cs": "var x = new b();",
            "b.cs": "class b {}",
            "c.py": "print(1)",
            "other/qqq.txt": "nothing here",
        }, make_project)
        a = records[0]

        related = find_related(a, records)

        assert "b.cs" in related
        assert "c.py" in related          # same directory
        assert "other/qqq.txt" not in related
        assert "a.cs" not in related

    def test_priority_order_and_deduplication(self, tmp_path, make_project):
        records = _records(tmp_path, {
            "src/main.cs": "uses helper and readme",
            "src/util.cs": "",
            "lib/helper.cs": "",
            "docs/readme.md": "",
        }, make_project)
        main = records[0]

        related = find_related(main, records)

        # same directory first, then same extension, then content references.
        assert related == ["src/util.cs", "lib/helper.cs", "docs/readme.md"]
        assert len(related) == len(set(related))

    def test_extension_comparison_ignores_case(self, tmp_path, make_project):
        records = _records(tmp_path, {"x/One.CS": "", "y/two.cs": ""}, make_project)
        assert find_related(records[0], records) == ["y/two.cs"]

    def test_never_related_to_itself(self, tmp_path, make_project):
        records = _records(tmp_path, {"solo.py": "solo solo solo"}, make_project)
        assert find_related(records[0], records) == []

    def test_unreadable_content_yields_no_references(self, tmp_path, make_project, warnings_logged):
        records = _records(tmp_path, {"a/main.txt": "mentions target", "b/target.md": ""}, make_project)
        (tmp_path / "a" / "main.txt").unlink()

        with capture_logs() as captured:
            assert find_related(records[0], records) == []

        warnings = warnings_logged(captured)
        assert [(w["event"], w["path"]) for w in warnings] == [("relation_content_read_failed", "a/main.txt")]

    def test_content_is_read_at_relation_time(self, tmp_path, make_project):
        records = _records(tmp_path, {"a/main.txt": "nothing", "b/target.md": ""}, make_project)
        (tmp_path / "a" / "main.txt").write_text("now mentions target")

        assert find_related(records[0], records) == ["b/target.md"]

    def test_files_without_extension_share_empty_extension(self, tmp_path, make_project):
        records = _records(tmp_path, {"Makefile": "", "tools/Dockerfile": ""}, make_project)
        assert find_related(records[0], records) == ["tools/Dockerfile"]
