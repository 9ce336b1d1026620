# codeflattener/core/processing.py
"""
Reads file content for emission and applies optional whitespace compression.
"""
import re
from typing import Mapping, Optional
import structlog

from codeflattener.core.classifier import is_text_file
from codeflattener.core.models import FileRecord
from codeflattener.util import get_language_identifier, strip_utf8_bom

log = structlog.get_logger(__name__)

_WHITESPACE_RUN = re.compile(r"\s+")
_SPACE_AFTER_OPENER = re.compile(r"(\(|\[|{) ")
_SPACE_BEFORE_CLOSER = re.compile(r" (\)|\]|}|,|;)")


def compress_content(content: str) -> str:
    """Collapses whitespace to single spaces and drops spaces hugging brackets and separators."""
    content = _WHITESPACE_RUN.sub(" ", content)
    content = _SPACE_AFTER_OPENER.sub(r"\1", content)
    content = _SPACE_BEFORE_CLOSER.sub(r"\1", content)
    return content.strip()


def choose_fence(content: str) -> str:
    # a backtick run longer than any run inside the content.
    backtick_seq = "```"
    while backtick_seq in content:
        backtick_seq += "`"
    return backtick_seq


def read_text_content(record: FileRecord) -> Optional[str]:
    # returns decoded text, or None when the file can no longer be read.
    try:
        content_bytes = record.absolute_path.read_bytes()
    except OSError as e:
        log.warning("file_read_error_in_processing", path=record.relative_path, error=str(e))
        return None
    return strip_utf8_bom(content_bytes).decode("utf-8", errors="replace")


def prepare_file_element(record: FileRecord, compress: bool, language_map: Mapping[str, str]) -> dict:
    """Builds the per-file content element consumed by the template context builder."""
    language = get_language_identifier(record.relative_path, language_map)
    is_text = is_text_file(record.absolute_path)

    if is_text:
        content = read_text_content(record)
        if content is None:
            content = f"(file could not be read: {record.size_bytes} bytes)"
        elif compress:
            content = compress_content(content)
    else:
        log.info("binary_file_content_omitted", path=record.relative_path)
        content = f"(binary file omitted: {record.size_bytes} bytes)"

    content = content.rstrip("\n")
    return {
        "record": record,
        "language": language,
        "is_text": is_text,
        "content": content,
        "fence": choose_fence(content),
    }
