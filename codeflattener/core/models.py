# codeflattener/core/models.py
"""Record types produced by the flattening pipeline."""
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import FrozenSet, Optional, Tuple


@dataclass(frozen=True)
class VcsInfo:
    """Version-control facts for one file. Either fully populated or absent on the record."""
    commit_id: str
    last_author: str
    last_modified_at: datetime
    branch: str
    remote_url: str
    contributors: FrozenSet[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class FileRecord:
    """
    Metadata for one discovered file.

    Attributes:
        relative_path: forward-slash path relative to the scan root; unique within a run
        absolute_path: resolved full path
        last_modified: filesystem modification time (timezone-aware, local)
        size_bytes: file size in bytes
        extension: suffix including the leading dot, "" when the file has none
        vcs_info: git provenance, None when unavailable
        related_paths: relative paths of related records, filled in by relation inference
    """
    relative_path: str
    absolute_path: Path
    last_modified: datetime
    size_bytes: int
    extension: str
    vcs_info: Optional[VcsInfo] = None
    related_paths: Tuple[str, ...] = ()

    @property
    def directory(self) -> str:
        # "" for files directly under the scan root.
        head, _, _ = self.relative_path.rpartition("/")
        return head

    @property
    def stem(self) -> str:
        return Path(self.relative_path).stem
