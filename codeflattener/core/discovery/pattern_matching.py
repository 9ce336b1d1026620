# codeflattener/core/discovery/pattern_matching.py
import re
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional, Sequence
import pathspec
import structlog

log = structlog.get_logger(__name__)

EXTENSION_PATTERN_PREFIX = "*."


@lru_cache(maxsize=512)
def _glob_to_regex(glob_pattern: str) -> "re.Pattern[str]":
    # every character is escaped first, so the result always compiles; only * and ? are wildcards.
    regex = "^" + re.escape(glob_pattern).replace(r"\*", ".*").replace(r"\?", ".") + "$"
    return re.compile(regex, re.IGNORECASE)


def matches_glob(text: str, glob_pattern: str) -> bool:
    # anchored, case-insensitive glob match of a whole string.
    return _glob_to_regex(glob_pattern).match(text) is not None


def matches_include_pattern(relative_path: str, pattern: str) -> bool:
    """
    "*.ext" patterns are a case-insensitive suffix match on the path.
    Other patterns are anchored globs tried against the full relative path, then its file name.
    """
    if pattern.startswith(EXTENSION_PATTERN_PREFIX):
        return relative_path.lower().endswith(pattern[1:].lower())
    if matches_glob(relative_path, pattern):
        return True
    file_name = relative_path.rsplit("/", 1)[-1]
    return matches_glob(file_name, pattern)


def is_excluded(relative_path: str, exclude_patterns: Sequence[str]) -> bool:
    # a path is excluded when any of its segments matches any exclude glob.
    if not exclude_patterns:
        return False
    segments = [s for s in relative_path.replace("\\", "/").split("/") if s]
    return any(matches_glob(segment, pattern) for segment in segments for pattern in exclude_patterns)


def should_include(relative_path: str, include_patterns: Sequence[str], exclude_patterns: Sequence[str]) -> bool:
    # implements the standard filtering logic:
    # 1. it must be on the include list (an empty list accepts everything).
    # 2. it must not be on the exclude list.
    path_str = relative_path.replace("\\", "/")

    is_included = not include_patterns or any(
        matches_include_pattern(path_str, pattern) for pattern in include_patterns
    )
    if not is_included:
        return False
    return not is_excluded(path_str, exclude_patterns)


def load_gitignore_patterns_from_file(gitignore_file_path: Path) -> Optional[pathspec.PathSpec]:
    # loads and compiles .gitignore patterns from a given file.
    if not gitignore_file_path.is_file():
        return None
    try:
        with gitignore_file_path.open("r", encoding="utf-8", errors="ignore") as f_obj:
            return pathspec.PathSpec.from_lines(pathspec.patterns.GitWildMatchPattern, f_obj)
    except Exception as e:
        log.warning("failed_to_parse_gitignore_file", path=str(gitignore_file_path), error=str(e))
    return None


def is_path_gitignored(
    absolute_path_item: Path,
    root_dir: Path,
    gitignore_specs_cache: Dict[Path, Optional[pathspec.PathSpec]],
) -> bool:
    # checks .gitignore files from the item's directory upwards, stopping at the scan root.
    current_dir_to_check = absolute_path_item.parent

    while True:
        if current_dir_to_check not in gitignore_specs_cache:
            gitignore_file = current_dir_to_check / ".gitignore"
            gitignore_specs_cache[current_dir_to_check] = load_gitignore_patterns_from_file(gitignore_file)

        spec = gitignore_specs_cache[current_dir_to_check]
        if spec:
            path_str_for_match = absolute_path_item.relative_to(current_dir_to_check).as_posix()
            if spec.match_file(path_str_for_match):
                return True

        if current_dir_to_check == root_dir or current_dir_to_check.parent == current_dir_to_check:
            break
        current_dir_to_check = current_dir_to_check.parent

    return False
