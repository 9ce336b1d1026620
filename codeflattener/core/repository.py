# codeflattener/core/repository.py
"""Remote repository handling for codeflattener.

Detects git repository URLs and clones them into temporary directories so the
pipeline can run over them like any local tree.
"""

import re
import shutil
import subprocess
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import structlog

from codeflattener.exceptions import GitError

log = structlog.get_logger(__name__)

# Matches the URL forms git itself accepts for remotes:
# - https://host/user/repo(.git), http://..., ssh://..., git://..., file://...
# - scp-like syntax: user@host:path/repo.git
REPOSITORY_URL_PATTERN = re.compile(
    r"^(?:(?:https?|ssh|git|file)://\S+|[\w.\-]+@[\w.\-]+:\S+)$",
    re.IGNORECASE,
)


def is_repository_url(value: str) -> bool:
    """Check if string looks like a clonable git repository URL.

    Args:
        value: String to check (may be a local path or URL)

    Returns:
        True if the string matches a supported URL form
    """
    return bool(REPOSITORY_URL_PATTERN.match(value.strip()))


def clone_repository(url: str, target_dir: Path) -> Path:
    """Clone a git repository into the target directory.

    Full history is fetched so per-file history and blame are available.

    Args:
        url: Repository URL
        target_dir: Directory to clone into (repo will be cloned as 'repo' subdirectory)

    Returns:
        Path to the cloned repository

    Raises:
        GitError: If the URL is not supported, git clone fails or git is not installed
    """
    url = url.strip()
    if not is_repository_url(url):
        raise GitError(f"unsupported repository url: {url!r}")
    clone_path = target_dir / "repo"

    log.info("cloning_repository", url=url, target=str(clone_path))

    try:
        result = subprocess.run(
            ["git", "clone", url, str(clone_path)],
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError:
        raise GitError("git command not found - please install git") from None
    except OSError as e:
        raise GitError(f"failed to run git command: {e}") from e

    if result.returncode != 0:
        error_msg = result.stderr.strip() or result.stdout.strip()
        log.error("git_clone_failed", url=url, error=error_msg)
        raise GitError(f"git clone failed: {error_msg}")

    log.info("clone_successful", url=url, path=str(clone_path))
    return clone_path


@contextmanager
def cloned_repository(url: str) -> Iterator[Path]:
    """Clones `url` into a fresh temporary directory and removes it on exit."""
    temp_dir = Path(tempfile.mkdtemp(prefix="codeflattener-"))
    try:
        yield clone_repository(url, temp_dir)
    finally:
        log.info("removing_temporary_clone", path=str(temp_dir))
        shutil.rmtree(temp_dir, ignore_errors=True)
