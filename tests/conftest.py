"""Shared pytest fixtures: isolated home directory, throwaway git repos, scripted answers."""

import shutil
import subprocess
from pathlib import Path
from typing import Callable

import pytest

from ruw.store import IdentityStore

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME (and so ~/.gitconfig, ~/.git-identities) at a temp dir."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    for var in (
        "GIT_CONFIG_GLOBAL",
        "XDG_CONFIG_HOME",
        "GIT_AUTHOR_NAME",
        "GIT_AUTHOR_EMAIL",
        "GIT_COMMITTER_NAME",
        "GIT_COMMITTER_EMAIL",
        "RUW_CONFIG",
        "RUW_IDENTITIES_FILE",
        "RUW_HOOKS_DIR",
        "GITHUB_TOKEN",
    ):
        monkeypatch.delenv(var, raising=False)
    return home_dir


@pytest.fixture
def store(home: Path) -> IdentityStore:
    return IdentityStore(home / ".git-identities")


@pytest.fixture
def two_identities(store: IdentityStore) -> IdentityStore:
    store.path.write_text("1:Alice:a@x.com:Work\n2:Bob:b@x.com:Personal\n")
    return store


def git(*args: str, cwd: Path | None = None) -> str:
    result = subprocess.run(
        ["git", *args], cwd=cwd, capture_output=True, text=True, check=False
    )
    return result.stdout.strip()


@pytest.fixture
def repo(home: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """An empty git repository, also made the current directory."""
    repo_dir = tmp_path / "repo"
    repo_dir.mkdir()
    subprocess.run(["git", "init", "-q", str(repo_dir)], check=True)
    monkeypatch.chdir(repo_dir)
    return repo_dir


@pytest.fixture
def answers() -> Callable[..., Callable[[str], "str | None"]]:
    """Build a line reader that replays the given answers, then reports EOF."""

    def make(*lines: str):
        queue = list(lines)
        prompts = []

        def read_line(prompt: str):
            prompts.append(prompt)
            return queue.pop(0) if queue else None

        read_line.prompts = prompts
        read_line.remaining = queue
        return read_line

    return make
