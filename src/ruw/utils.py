"""Email validation, user prompts, and formatting helpers."""

from __future__ import annotations

import re
import sys
from typing import Callable

# Same pattern the shell hook used: one @, dotted domain, alphabetic TLD of 2+ chars.
EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

# A line reader: takes a prompt, returns the typed line or None at EOF.
LineReader = Callable[[str], "str | None"]


def validate_email(email: str) -> bool:
    """Return True if email looks like local-part@domain.tld."""
    return bool(email) and EMAIL_RE.fullmatch(email) is not None


def stdin_reader(prompt: str) -> str | None:
    """Read one line from standard input, returning None at EOF."""
    try:
        return input(prompt)
    except EOFError:
        return None


def ask_yes_no(message: str, read_line: LineReader = stdin_reader) -> bool | None:
    """Strict y/n question that re-asks until answered. Returns None at EOF."""
    while True:
        raw = read_line(f"  > {message} (y/n): ")
        if raw is None:
            return None
        raw = raw.strip().lower()
        if raw in ("y", "yes"):
            return True
        if raw in ("n", "no"):
            return False
        error("Please answer y or n")


def confirm(message: str, default_yes: bool = True) -> bool:
    """Simple y/n confirmation. Returns True/False. 'c' or 'cancel' returns False."""
    suffix = "[Y/n]" if default_yes else "[y/N]"
    raw = stdin_reader(f"{message} {suffix} ")
    if raw is None:
        return False
    raw = raw.strip().lower()
    if raw in ("c", "cancel"):
        return False
    if raw == "":
        return default_yes
    return raw in ("y", "yes")


def prompt_field(
    message: str,
    validate: Callable[[str], str | None],
    read_line: LineReader = stdin_reader,
) -> str | None:
    """Prompt until validate() accepts the stripped answer.

    validate returns an error message for a bad value, or None when it is fine.
    Returns None if the input source hits EOF.
    """
    while True:
        raw = read_line(message)
        if raw is None:
            return None
        value = raw.strip()
        problem = validate(value)
        if problem is None:
            return value
        error(problem)


def print_table(headers: list[str], rows: list[list[str]]) -> None:
    """Print a simple formatted table to stdout."""
    if not rows:
        print("  (none)")
        return

    col_widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            col_widths[i] = max(col_widths[i], len(cell))

    header_line = "  ".join(h.ljust(col_widths[i]) for i, h in enumerate(headers))
    sep_line = "  ".join("-" * col_widths[i] for i in range(len(headers)))
    print(header_line)
    print(sep_line)
    for row in rows:
        print("  ".join(cell.ljust(col_widths[i]) for i, cell in enumerate(row)))


def error(message: str) -> None:
    """Print an error message to stderr."""
    print(f"Error: {message}", file=sys.stderr)


def warn(message: str) -> None:
    """Print a warning to stderr."""
    print(f"Warning: {message}", file=sys.stderr)


def info(message: str) -> None:
    """Print an info message."""
    print(message)
