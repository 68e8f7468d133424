""".bashrc management: managed `export NAME="..."` blocks."""

from __future__ import annotations

import re
import shutil
from pathlib import Path

BACKUP_SUFFIX = ".ruw-backup"


def _markers(name: str) -> tuple[str, str]:
    return (f"# >>> ruw managed: {name} >>>", f"# <<< ruw managed: {name} <<<")


def _double_quote(value: str) -> str:
    """Quote value for bash double quotes: escape \\, ", $ and backtick."""
    return '"' + re.sub(r'([\\"$`])', r"\\\1", value) + '"'


def _build_block(name: str, value: str) -> str:
    start, end = _markers(name)
    return f"{start}\nexport {name}={_double_quote(value)}\n{end}"


def _read_shell_config(config_path: Path) -> str:
    if not config_path.exists():
        return ""
    return config_path.read_text()


def _remove_block(name: str, content: str) -> str:
    """Drop the managed block for name, plus any loose `export NAME=` lines."""
    start, end = _markers(name)
    loose = re.compile(rf"^\s*export\s+{re.escape(name)}=")
    lines = content.splitlines(keepends=True)
    result = []
    inside = False
    for line in lines:
        if line.rstrip() == start:
            inside = True
            continue
        if line.rstrip() == end:
            inside = False
            continue
        if not inside and not loose.match(line):
            result.append(line)
    return "".join(result)


def _backup(config_path: Path) -> Path | None:
    """Create a one-time backup of the shell config. Returns backup path or None if already backed up."""
    backup_path = config_path.parent / f"{config_path.name}{BACKUP_SUFFIX}"
    if not backup_path.exists() and config_path.exists():
        shutil.copy2(config_path, backup_path)
        return backup_path
    return None


def set_export(name: str, value: str, config_path: Path) -> None:
    """Write (or replace) the managed export block for name."""
    content = _remove_block(name, _read_shell_config(config_path)).rstrip("\n")

    _backup(config_path)

    if content:
        content += "\n"
    content += f"\n{_build_block(name, value)}\n"
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(content)
