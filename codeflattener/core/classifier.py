# codeflattener/core/classifier.py
"""
Heuristic text/binary classification of files from a byte prefix.
"""
from pathlib import Path
from typing import Tuple, Union
import structlog

log = structlog.get_logger(__name__)

MAX_BYTES_TO_READ = 8 * 1024
NULL_BYTE_RATIO_LIMIT = 0.01
NON_PRINTABLE_RATIO_LIMIT = 0.3

BINARY_SIGNATURES: Tuple[Tuple[str, bytes], ...] = (
    ("elf", b"\x7fELF"),
    ("pe_dos", b"MZ"),
    ("zip", b"PK\x03\x04"),
    ("pdf", b"%PDF"),
    ("png", b"\x89PNG"),
    ("jpeg", b"\xff\xd8\xff"),
    ("gif", b"GIF8"),
)


def has_binary_signature(buffer: bytes) -> bool:
    return any(buffer.startswith(signature) for _, signature in BINARY_SIGNATURES)


def _is_non_printable(byte: int) -> bool:
    # control characters outside the 7..14 whitespace/bell range (null is counted separately).
    return byte < 7 or 14 < byte < 32


def is_text_buffer(buffer: bytes) -> bool:
    """Classifies a byte prefix. An empty buffer is text."""
    if not buffer:
        return True
    if has_binary_signature(buffer):
        return False

    null_limit = len(buffer) * NULL_BYTE_RATIO_LIMIT
    non_printable_limit = len(buffer) * NON_PRINTABLE_RATIO_LIMIT
    null_count = 0
    non_printable_count = 0

    for byte in buffer:
        if byte == 0:
            null_count += 1
        elif _is_non_printable(byte):
            non_printable_count += 1

        if null_count > null_limit or non_printable_count > non_printable_limit:
            return False

    return True


def is_text_file(file_path: Union[str, Path]) -> bool:
    """
    Reads at most the first 8 KiB of `file_path` and classifies it.
    Read failures are logged and classified as binary; they never propagate.
    """
    try:
        with open(file_path, "rb") as f_obj:
            buffer = f_obj.read(MAX_BYTES_TO_READ)
    except OSError as e:
        log.warning("text_classification_read_failed", path=str(file_path), error=str(e))
        return False
    return is_text_buffer(buffer)
