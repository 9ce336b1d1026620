# codeflattener/core/discovery/walker.py
import os
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional
import pathspec
import structlog

from codeflattener.config.settings import FlattenConfig
from codeflattener.core.discovery.pattern_matching import is_path_gitignored, should_include

log = structlog.get_logger(__name__)


def relative_posix_path(root_dir: Path, file_path: Path) -> str:
    # root-relative, forward-slash path used as the record key.
    return file_path.relative_to(root_dir).as_posix()


def enumerate_files(root_dir: Path, follow_symlinks: bool = False) -> Iterator[Path]:
    """
    Yields every file under `root_dir`, recursively. Directory and file names are
    visited in sorted order so discovery order is stable between runs.
    """
    log.info("file_enumeration_started", root=str(root_dir))
    for root, dirs, files in os.walk(str(root_dir), topdown=True, followlinks=follow_symlinks):
        dirs.sort()
        for file_name in sorted(files):
            yield Path(root, file_name)


def filter_paths(root_dir: Path, discovered: Iterable[Path], config: FlattenConfig) -> List[Path]:
    # applies include/exclude patterns (and optionally .gitignore) to discovered files.
    gitignore_cache: Dict[Path, Optional[pathspec.PathSpec]] = {}
    kept: List[Path] = []

    for file_path in discovered:
        path_str = relative_posix_path(root_dir, file_path)
        if not should_include(path_str, config.include_patterns, config.exclude_patterns):
            log.debug("path_filtered_out", path=path_str)
            continue
        if config.respect_gitignore and is_path_gitignored(file_path, root_dir, gitignore_cache):
            log.debug("path_gitignored", path=path_str)
            continue
        kept.append(file_path)

    log.info("path_filtering_complete", kept=len(kept))
    return kept
