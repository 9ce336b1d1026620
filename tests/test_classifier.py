# tests/test_classifier.py
"""Tests for the text/binary classifier."""

import pytest
from structlog.testing import capture_logs
from pathlib import Path

from codeflattener.core.classifier import (
    MAX_BYTES_TO_READ,
    has_binary_signature,
    is_text_buffer,
    is_text_file,
)


class TestIsTextBuffer:
    def test_empty_buffer_is_text(self):
        assert is_text_buffer(b"") is True

    def test_plain_ascii_paragraph_is_text(self):
        paragraph = (
            b"The quick brown fox jumps over the lazy dog.\n"
            b"\tIndented line with tabs and a carriage return.\r\n"
        ) * 20
        assert is_text_buffer(paragraph) is True

    @pytest.mark.parametrize("signature", [
        b"\x7fELF", b"MZ", b"PK\x03\x04", b"%PDF", b"\x89PNG", b"\xff\xd8\xff", b"GIF8",
    ])
    def test_magic_signatures_are_binary(self, signature):
        assert has_binary_signature(signature + b"plain text afterwards")
        assert is_text_buffer(signature + b"plain text afterwards") is False

    def test_elf_prefix_is_binary(self):
        assert is_text_buffer(bytes([0x7F, 0x45, 0x4C, 0x46, 0x00, 0x01, 0x02])) is False

    def test_forty_percent_control_bytes_is_binary(self):
        buffer = bytes([1, 2, 3, 4, 5, 6] * 7)[:40] + b"a" * 60
        assert is_text_buffer(buffer) is False

    def test_few_control_bytes_is_text(self):
        buffer = b"\x1b[31m" * 5 + b"a" * 200
        assert is_text_buffer(buffer) is True

    def test_null_bytes_over_one_percent_is_binary(self):
        assert is_text_buffer(b"a" * 1000 + b"\x00" * 20) is False

    def test_null_bytes_under_one_percent_is_text(self):
        assert is_text_buffer(b"a" * 1000 + b"\x00" * 5) is True

    def test_whitespace_control_range_is_not_counted(self):
        # bytes 7..14 (bell, backspace, tab, newline, vt, ff, cr, so) are allowed.
        assert is_text_buffer(bytes(range(7, 15)) * 50) is True


class TestIsTextFile:
    def test_zero_byte_file_is_text(self, tmp_path: Path):
        empty = tmp_path / "empty.txt"
        empty.write_bytes(b"")
        assert is_text_file(empty) is True

    def test_text_file(self, tmp_path: Path):
        text_file = tmp_path / "test.txt"
        text_file.write_text("This is a text file\nWith multiple lines\n")
        assert is_text_file(text_file) is True

    def test_binary_file(self, tmp_path: Path):
        binary_file = tmp_path / "test.bin"
        binary_file.write_bytes(bytes([0x7F, 0x45, 0x4C, 0x46, 0x00, 0x01, 0x02]))
        assert is_text_file(binary_file) is False

    def test_only_prefix_is_inspected(self, tmp_path: Path):
        """Binary bytes past the first 8 KiB do not affect classification."""
        mixed = tmp_path / "mixed.dat"
        mixed.write_bytes(b"a" * MAX_BYTES_TO_READ + b"\x00" * 4096)
        assert is_text_file(mixed) is True

    def test_missing_file_is_binary(self, tmp_path: Path, warnings_logged):
        with capture_logs() as captured:
            assert is_text_file(tmp_path / "does_not_exist.txt") is False

        warnings = warnings_logged(captured)
        assert [w["event"] for w in warnings] == ["text_classification_read_failed"]
        assert warnings[0]["path"].endswith("does_not_exist.txt")

    def test_directory_read_failure_is_binary(self, tmp_path: Path):
        assert is_text_file(tmp_path) is False
