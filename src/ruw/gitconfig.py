"""git subprocess wrapper: read and write identity keys, manage the global hooks path."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

from ruw.store import Identity

# Which `git config` flag each scope maps to. Local scope writes to the
# repository the command runs in; global scope is the user's ~/.gitconfig.
SCOPES = {
    "local": "--local",
    "global": "--global",
}


class GitError(RuntimeError):
    """A git command exited with an unexpected status."""

    def __init__(self, cmd: list[str], returncode: int, stderr: str) -> None:
        detail = stderr.strip() or f"exit status {returncode}"
        super().__init__(f"{' '.join(cmd)}: {detail}")
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr


def git_available() -> bool:
    return shutil.which("git") is not None


def _git(*args: str, cwd: Path | None = None, ok_codes: tuple[int, ...] = (0,)) -> subprocess.CompletedProcess:
    cmd = ["git", *args]
    result = subprocess.run(
        cmd, cwd=cwd, capture_output=True, text=True,
    )
    if result.returncode not in ok_codes:
        raise GitError(cmd, result.returncode, result.stderr)
    return result


def git_version() -> str:
    return _git("--version").stdout.strip()


def _scope_flag(scope: str) -> str:
    try:
        return SCOPES[scope]
    except KeyError:
        raise ValueError(f"Unknown git config scope: {scope!r}") from None


def get_value(key: str, scope: str | None = None, cwd: Path | None = None) -> str | None:
    """Return a config value, or None if unset.

    scope=None reads the effective value (repository first, then global).
    """
    args = ["config"]
    if scope is not None:
        args.append(_scope_flag(scope))
    args += ["--get", key]
    # git config --get exits 1 when the key is missing
    result = _git(*args, cwd=cwd, ok_codes=(0, 1))
    if result.returncode == 1:
        return None
    return result.stdout.rstrip("\n")


def set_value(key: str, value: str, scope: str, cwd: Path | None = None) -> None:
    _git("config", _scope_flag(scope), key, value, cwd=cwd)


def apply(identity: Identity, scope: str, cwd: Path | None = None) -> None:
    """Write identity's name and email as user.name/user.email at scope."""
    flag = _scope_flag(scope)
    _git("config", flag, "user.name", identity.display_name, cwd=cwd)
    _git("config", flag, "user.email", identity.email, cwd=cwd)


# -- core.hooksPath --

def get_hooks_path() -> str | None:
    return get_value("core.hooksPath", scope="global")


def set_hooks_path(hooks_dir: Path) -> None:
    set_value("core.hooksPath", str(hooks_dir), scope="global")


def unset_hooks_path() -> bool:
    """Remove the global core.hooksPath. Returns True if it was set."""
    # --unset exits 5 when the key does not exist
    result = _git("config", "--global", "--unset", "core.hooksPath", ok_codes=(0, 5))
    return result.returncode == 0
