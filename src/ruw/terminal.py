"""Interactive input from the controlling terminal.

git runs hooks with standard input not connected to the user, so the hook
reads answers from the terminal device instead of sys.stdin.
"""

from __future__ import annotations

from pathlib import Path

CONTROLLING_TERMINAL = Path("/dev/tty")


class TerminalUnavailable(OSError):
    """The controlling terminal could not be opened (no TTY attached)."""


class TerminalInput:
    """Line reader bound to the controlling terminal device.

    Use as a context manager; readline() blocks until the user presses Enter.
    There is deliberately no timeout.
    """

    def __init__(self, device: Path | None = None) -> None:
        self.device = device or CONTROLLING_TERMINAL
        self._reader = None
        self._writer = None

    def __enter__(self) -> "TerminalInput":
        self.open()
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def open(self) -> None:
        try:
            self._reader = open(self.device, "r", encoding="utf-8", errors="replace")
            self._writer = open(self.device, "a", encoding="utf-8")
        except OSError as e:
            self.close()
            raise TerminalUnavailable(e.errno, f"cannot open {self.device}: {e.strerror}") from e

    def close(self) -> None:
        for stream in (self._reader, self._writer):
            if stream is not None:
                stream.close()
        self._reader = self._writer = None

    def readline(self, prompt: str = "") -> str | None:
        """Show prompt on the terminal and read one line. Returns None at EOF."""
        if self._reader is None:
            raise TerminalUnavailable(f"{self.device} is not open")
        if prompt:
            self._writer.write(prompt)
            self._writer.flush()
        line = self._reader.readline()
        if line == "":
            return None
        return line.rstrip("\r\n")
