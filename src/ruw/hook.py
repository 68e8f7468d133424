"""pre-commit hook script: render, install, detect, remove."""

from __future__ import annotations

import shlex
import sys
from pathlib import Path

HOOKS_DIRNAME = ".git-hooks"
HOOK_NAME = "pre-commit"
MARKER = "# ruw managed hook: git identity selector"


def default_hooks_dir() -> Path:
    return Path.home() / HOOKS_DIRNAME


def hook_path(hooks_dir: Path) -> Path:
    return hooks_dir / HOOK_NAME


def render_hook(python: str, store_path: Path) -> str:
    """Build the hook script. It only re-executes `python -m ruw hook`."""
    cmd = " ".join(
        shlex.quote(part)
        for part in (python, "-m", "ruw", "--store", str(store_path), "hook")
    )
    return (
        "#!/bin/sh\n"
        f"{MARKER}\n"
        "# Runs for every repository that uses this directory as core.hooksPath.\n"
        f"exec {cmd}\n"
    )


def is_managed(path: Path) -> bool:
    if not path.is_file():
        return False
    return MARKER in path.read_text(errors="replace")


def install_hook(hooks_dir: Path, store_path: Path, python: str | None = None) -> Path:
    """Write the executable pre-commit hook into hooks_dir. Returns its path."""
    hooks_dir.mkdir(parents=True, exist_ok=True)
    path = hook_path(hooks_dir)
    path.write_text(render_hook(python or sys.executable, store_path))
    path.chmod(0o755)
    return path


def remove_hook(hooks_dir: Path) -> bool:
    """Delete the hook if ruw wrote it. Returns True if a file was removed."""
    path = hook_path(hooks_dir)
    if not is_managed(path):
        return False
    path.unlink()
    return True
