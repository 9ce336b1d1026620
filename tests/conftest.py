import os
import shutil
import subprocess
from pathlib import Path
from typing import Callable, Dict

import pytest
import structlog

from codeflattener import logging_setup


@pytest.fixture
def make_project() -> Callable[[Path, Dict[str, str]], Path]:
    """Returns a helper writing {relative path: text content} under a base directory."""
    def _create(base_path: Path, structure: Dict[str, str]) -> Path:
        for rel_path, content in structure.items():
            file_path = base_path / rel_path
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(content, encoding="utf-8")
        return base_path
    return _create


@pytest.fixture
def git() -> Callable[..., str]:
    """Returns a helper running git in a repository as a given author."""
    if shutil.which("git") is None:
        pytest.skip("git executable not available")

    def _run(repo: Path, *args: str, author: str = "Alice") -> str:
        env = dict(
            os.environ,
            GIT_AUTHOR_NAME=author,
            GIT_AUTHOR_EMAIL=f"{author.lower()}@example.com",
            GIT_COMMITTER_NAME=author,
            GIT_COMMITTER_EMAIL=f"{author.lower()}@example.com",
            GIT_CONFIG_NOSYSTEM="1",
        )
        result = subprocess.run(
            ["git", "-c", "commit.gpgsign=false", *args],
            cwd=repo, env=env, capture_output=True, text=True, check=True,
        )
        return result.stdout.strip()
    return _run


@pytest.fixture
def git_repo(tmp_path: Path, git) -> Path:
    """An initialised repository on branch 'main' with no commits."""
    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init")
    git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
    return repo


@pytest.fixture(autouse=True)
def isolated_user_config(tmp_path: Path, monkeypatch) -> Path:
    """Points the user-global config file at a path that does not exist."""
    user_config = tmp_path / "user-config" / "config.toml"
    monkeypatch.setattr("codeflattener.config.loader.USER_CONFIG_FILE", user_config)
    return user_config


@pytest.fixture(autouse=True)
def uncached_loggers(monkeypatch):
    """Keeps loggers uncached after CLI runs so `capture_logs` sees every event."""
    real_configure_logging = logging_setup.configure_logging

    def _configure(*args, **kwargs):
        real_configure_logging(*args, **kwargs)
        structlog.configure(cache_logger_on_first_use=False)

    monkeypatch.setattr("codeflattener.cli.interface.configure_logging", _configure)


@pytest.fixture
def warnings_logged() -> Callable[[list], list]:
    """Returns a helper selecting the warning events out of `capture_logs` output."""
    def _select(captured: list) -> list:
        return [entry for entry in captured if entry["log_level"] == "warning"]
    return _select
