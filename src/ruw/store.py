"""Identity store: the colon-delimited registry of commit identities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ruw.utils import validate_email

STORE_FILENAME = ".git-identities"
FIELD_SEPARATOR = ":"
FIELD_COUNT = 4


class ValidationError(ValueError):
    """A proposed identity field was rejected."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


@dataclass(frozen=True)
class Identity:
    sequence_number: int
    display_name: str
    email: str
    label: str

    def describe(self) -> str:
        return f"{self.label} ({self.email})"


@dataclass(frozen=True)
class Skipped:
    """A store line that could not be parsed into an Identity."""

    line_number: int
    line: str
    reason: str


def format_line(identity: Identity) -> str:
    return FIELD_SEPARATOR.join(
        [
            str(identity.sequence_number),
            identity.display_name,
            identity.email,
            identity.label,
        ]
    )


def parse_line(line: str, line_number: int) -> Identity | Skipped:
    """Parse one store line. Never raises; bad lines come back as Skipped."""
    stripped = line.rstrip("\r\n")
    if not stripped.strip():
        return Skipped(line_number, stripped, "blank line")

    parts = stripped.split(FIELD_SEPARATOR)
    if len(parts) != FIELD_COUNT:
        return Skipped(line_number, stripped, "wrong field count")

    raw_number, name, email, label = parts
    try:
        number = int(raw_number)
    except ValueError:
        number = 0
    if number < 1:
        return Skipped(line_number, stripped, "sequence number is not a positive integer")

    return Identity(number, name, email, label)


def check_text(field: str, value: str) -> str | None:
    """Return a problem description for a free-text field, or None if acceptable."""
    if not value:
        return f"{field.capitalize()} cannot be empty"
    if FIELD_SEPARATOR in value or "\n" in value:
        return f"{field.capitalize()} cannot contain ':' or line breaks"
    return None


def check_email(value: str) -> str | None:
    if not value:
        return "Email cannot be empty"
    if not validate_email(value):
        return "Invalid email format"
    return None


class IdentityStore:
    """Flat-file registry of identities, one `n:name:email:label` record per line.

    Nothing is cached: every read goes back to the file, so edits made by hand
    or by another process show up on the next call.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        return self.path.is_file()

    def scan(self) -> list[Identity | Skipped]:
        """Read every line as either an Identity or a Skipped record."""
        if not self.exists():
            return []
        text = self.path.read_text(encoding="utf-8", errors="replace")
        return [parse_line(line, i) for i, line in enumerate(text.splitlines(), start=1)]

    def load(self) -> list[Identity]:
        """Return identities in file order. An absent file means uninitialized."""
        return [r for r in self.scan() if isinstance(r, Identity)]

    def skipped(self) -> list[Skipped]:
        # Blank lines are not worth reporting.
        return [
            r for r in self.scan()
            if isinstance(r, Skipped) and r.reason != "blank line"
        ]

    def find(self, sequence_number: int) -> Identity | None:
        for identity in self.load():
            if identity.sequence_number == sequence_number:
                return identity
        return None

    def find_by_email(self, email: str | None) -> Identity | None:
        if not email:
            return None
        for identity in self.load():
            if identity.email == email:
                return identity
        return None

    def next_sequence_number(self) -> int:
        numbers = [i.sequence_number for i in self.load()]
        return max(numbers) + 1 if numbers else 1

    def append(self, display_name: str, email: str, label: str) -> Identity:
        """Validate and append a new identity. Returns the stored record.

        Raises ValidationError naming the first offending field.
        """
        display_name = display_name.strip()
        email = email.strip()
        label = label.strip()

        for field, value in (("label", label), ("name", display_name)):
            problem = check_text(field, value)
            if problem:
                raise ValidationError(field, problem)
        problem = check_email(email)
        if problem:
            raise ValidationError("email", problem)

        identity = Identity(self.next_sequence_number(), display_name, email, label)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        prefix = ""
        if self.exists():
            content = self.path.read_bytes()
            if content and not content.endswith(b"\n"):
                prefix = "\n"
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(f"{prefix}{format_line(identity)}\n")
        return identity

    def reset(self) -> None:
        """Delete the store file so identities can be collected from scratch."""
        if self.exists():
            self.path.unlink()


def default_store_path() -> Path:
    return Path.home() / STORE_FILENAME
