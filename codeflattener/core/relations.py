# codeflattener/core/relations.py
"""
Related-file inference. Runs only after every record has been collected.
"""
from typing import Dict, List, Optional, Sequence
import structlog

from codeflattener.core.models import FileRecord

log = structlog.get_logger(__name__)


def _read_content_for_references(record: FileRecord) -> Optional[str]:
    # content is read from disk at relation time; an unreadable file references nothing.
    try:
        return record.absolute_path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        log.warning("relation_content_read_failed", path=record.relative_path, error=str(e))
        return None


def find_related(record: FileRecord, all_records: Sequence[FileRecord]) -> List[str]:
    """
    Returns related relative paths in priority order, without duplicates or `record` itself:
    same directory, then same extension, then files whose name (without extension)
    occurs literally in this file's content.
    """
    others = [r for r in all_records if r.relative_path != record.relative_path]
    extension = record.extension.lower()

    same_directory = [r.relative_path for r in others if r.directory == record.directory]
    same_extension = [r.relative_path for r in others if r.extension.lower() == extension]

    referenced: List[str] = []
    content = _read_content_for_references(record)
    if content:
        referenced = [r.relative_path for r in others if r.stem and r.stem in content]

    # dict preserves first-seen order while dropping duplicates.
    ordered: Dict[str, None] = dict.fromkeys(same_directory + same_extension + referenced)
    return list(ordered)
