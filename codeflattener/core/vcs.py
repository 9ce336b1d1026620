# codeflattener/core/vcs.py
"""
Version-control metadata providers.

`open_vcs_provider` returns a `GitVcsProvider` when the scan root holds a git
repository and a `NullVcsProvider` otherwise, so callers never branch on
whether version control is available. Git is driven through subprocess.
"""
import os
import subprocess
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import FrozenSet, List, Optional, Tuple
import structlog

from codeflattener.core.models import VcsInfo
from codeflattener.exceptions import GitError

log = structlog.get_logger(__name__)

VCS_MARKER_DIR = ".git"
_FIELD_SEP = "\x1f"
# file names are passed as pathspecs; glob characters in them must match literally.
_GIT_ENV_OVERRIDES = {"GIT_LITERAL_PATHSPECS": "1"}


def _run_git_command(
    args: List[str], repo_path: Path, check_exit_code: bool = True
) -> Tuple[bool, str, str]:
    """
    runs a git command via subprocess.
    returns a tuple: (success_flag, stdout_str, stderr_str).
    if `check_exit_code` is true, raises `GitError` on non-zero exit.
    """
    command_parts = ["git"] + [str(arg) for arg in args]
    log.debug("executing_git_command", command=" ".join(command_parts), cwd=str(repo_path))
    try:
        process = subprocess.run(
            command_parts,
            capture_output=True,
            text=True,
            check=False,
            cwd=repo_path,
            env=dict(os.environ, **_GIT_ENV_OVERRIDES),
            encoding="utf-8",
            errors="replace",
        )
    except FileNotFoundError:  # 'git' executable not found
        raise GitError("git command not found. is git installed and in path?") from None
    except OSError as e:
        raise GitError(f"failed to run git command {' '.join(args)}: {e}") from e

    was_successful = process.returncode == 0
    stdout_content = (process.stdout or "").strip()
    stderr_content = (process.stderr or "").strip()

    if not was_successful and check_exit_code:
        raise GitError(
            f"git {' '.join(args)} failed with exit code {process.returncode}: "
            f"{stderr_content or '(empty stderr)'}"
        )
    return was_successful, stdout_content, stderr_content


def check_is_git_repo(path_to_check: Path) -> bool:
    """checks if the given path is inside a git working tree."""
    try:
        is_repo, stdout_str, _ = _run_git_command(
            ["rev-parse", "--is-inside-work-tree"], path_to_check, check_exit_code=False
        )
        return is_repo and stdout_str == "true"
    except GitError as e:
        log.debug("git_error_during_repo_check", path=str(path_to_check), error=str(e))
        return False


def has_commits(repo_path: Path) -> bool:
    """checks whether HEAD resolves to a commit (false in a freshly initialised repository)."""
    try:
        has_head, _, _ = _run_git_command(
            ["rev-parse", "--verify", "-q", "HEAD"], repo_path, check_exit_code=False
        )
        return has_head
    except GitError as e:
        log.debug("git_error_during_head_check", path=str(repo_path), error=str(e))
        return False


class VcsProvider(ABC):
    """Read-only access to version-control facts for files under one scan root."""

    @abstractmethod
    def file_info(self, relative_path: str) -> Optional[VcsInfo]:
        """
        Returns the file's VcsInfo, or None when the file has no history.
        Implementations raise GitError when the repository cannot be queried.
        """
        pass


class NullVcsProvider(VcsProvider):
    """Used when the scan root is not a repository: every file has no VCS info."""

    def file_info(self, relative_path: str) -> Optional[VcsInfo]:
        return None


class GitVcsProvider(VcsProvider):
    """Queries a git working tree through the git command line."""

    def __init__(self, repo_path: Path):
        self.repo_path = repo_path
        self._repository_facts: Optional[Tuple[str, str]] = None

    def latest_commit(self, relative_path: str) -> Optional[Tuple[str, str, datetime]]:
        # (commit id, author name, author timestamp) of the newest commit touching the file.
        _, stdout_str, _ = _run_git_command(
            ["log", "-1", f"--format=%H{_FIELD_SEP}%an{_FIELD_SEP}%aI", "--", relative_path],
            self.repo_path,
        )
        if not stdout_str:
            return None
        try:
            commit_id, author_name, author_date = stdout_str.split(_FIELD_SEP)
            return commit_id, author_name, datetime.fromisoformat(author_date)
        except ValueError as e:
            raise GitError(f"unexpected git log output for {relative_path}: {stdout_str!r}") from e

    def current_branch(self) -> str:
        _, stdout_str, _ = _run_git_command(["rev-parse", "--abbrev-ref", "HEAD"], self.repo_path)
        return stdout_str

    def first_remote_url(self) -> str:
        _, remotes_str, _ = _run_git_command(["remote"], self.repo_path)
        remote_names = [name for name in remotes_str.splitlines() if name.strip()]
        if not remote_names:
            return ""
        _, url_str, _ = _run_git_command(["remote", "get-url", remote_names[0]], self.repo_path)
        return url_str

    def blame_authors(self, relative_path: str) -> FrozenSet[str]:
        # distinct author names across every line of the committed file.
        _, stdout_str, _ = _run_git_command(
            ["blame", "--line-porcelain", "HEAD", "--", relative_path], self.repo_path
        )
        return frozenset(
            line[len("author "):]
            for line in stdout_str.splitlines()
            if line.startswith("author ")
        )

    def _branch_and_remote(self) -> Tuple[str, str]:
        # repository-wide facts are read once per provider.
        if self._repository_facts is None:
            self._repository_facts = (self.current_branch(), self.first_remote_url())
        return self._repository_facts

    def file_info(self, relative_path: str) -> Optional[VcsInfo]:
        latest = self.latest_commit(relative_path)
        if latest is None:
            log.debug("no_git_history_for_file", path=relative_path)
            return None
        commit_id, author_name, authored_at = latest
        branch, remote_url = self._branch_and_remote()
        return VcsInfo(
            commit_id=commit_id,
            last_author=author_name,
            last_modified_at=authored_at,
            branch=branch,
            remote_url=remote_url,
            contributors=self.blame_authors(relative_path),
        )


def open_vcs_provider(root_dir: Path) -> VcsProvider:
    # picks the provider for a scan root; absence of a repository is not an error.
    if not (root_dir / VCS_MARKER_DIR).exists():
        log.debug("no_vcs_marker_found", root=str(root_dir))
        return NullVcsProvider()
    if not check_is_git_repo(root_dir):
        log.warning("vcs_marker_present_but_repository_unusable", root=str(root_dir))
        return NullVcsProvider()
    if not has_commits(root_dir):
        # no file can have history yet.
        log.info("git_repository_has_no_commits", root=str(root_dir))
        return NullVcsProvider()
    log.info("git_repository_detected", root=str(root_dir))
    return GitVcsProvider(root_dir)
