# codeflattener/core/metadata.py
from datetime import datetime
from pathlib import Path
from typing import Optional
import structlog

from codeflattener.core.discovery.walker import relative_posix_path
from codeflattener.core.models import FileRecord, VcsInfo
from codeflattener.core.vcs import NullVcsProvider, VcsProvider
from codeflattener.exceptions import GitError

log = structlog.get_logger(__name__)


def _collect_vcs_info(vcs_provider: VcsProvider, relative_path: str) -> Optional[VcsInfo]:
    # version-control data is best effort: any failure leaves the record without it.
    try:
        return vcs_provider.file_info(relative_path)
    except (GitError, OSError) as e:
        log.warning("vcs_metadata_unavailable", path=relative_path, error=str(e))
        return None


def collect_file_metadata(
    root_dir: Path, file_path: Path, vcs_provider: Optional[VcsProvider] = None
) -> FileRecord:
    """
    Builds the FileRecord for one file from filesystem stat data plus, when a
    provider is given, its version-control history. Stat failures propagate.
    """
    absolute_path = file_path.resolve()
    stat_result = file_path.stat()
    relative_path = relative_posix_path(root_dir, file_path)

    record = FileRecord(
        relative_path=relative_path,
        absolute_path=absolute_path,
        last_modified=datetime.fromtimestamp(stat_result.st_mtime).astimezone(),
        size_bytes=stat_result.st_size,
        extension=file_path.suffix,
        vcs_info=_collect_vcs_info(vcs_provider or NullVcsProvider(), relative_path),
    )
    log.debug("file_metadata_collected", path=relative_path, size=record.size_bytes,
              has_vcs_info=record.vcs_info is not None)
    return record
