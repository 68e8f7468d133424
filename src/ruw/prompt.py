"""Commit-time identity menu run by the pre-commit hook.

States: MENU is the start; ADDING always returns to MENU; APPLIED and KEPT
end the run. The store is re-read on every pass through MENU.
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Callable

from ruw import gitconfig
from ruw.store import Identity, IdentityStore, ValidationError, check_email, check_text
from ruw.utils import LineReader, error, info, prompt_field

ADD_CHOICE = "a"


class PromptState(enum.Enum):
    MENU = "menu"
    ADDING = "adding"
    APPLIED = "applied"
    KEPT = "kept"


def render_menu(identities: list[Identity], current_email: str | None, current: Identity | None) -> list[str]:
    shown = current_email or "not set"
    suffix = f" ({current.label})" if current else ""
    lines = [
        "",
        f"Current identity: {shown}{suffix}",
        "",
        "Choose commit identity:",
    ]
    lines += [f"{i.sequence_number}) {i.describe()}" for i in identities]
    lines += [
        f"{ADD_CHOICE}) Add new identity",
        "Enter) Keep current",
        "",
    ]
    return lines


class IdentityPrompt:
    """Interactive identity selection for one commit."""

    def __init__(
        self,
        store: IdentityStore,
        read_line: LineReader,
        apply: Callable[..., None] = gitconfig.apply,
        current_email: Callable[[], str | None] | None = None,
        cwd: Path | None = None,
    ) -> None:
        self.store = store
        self.read_line = read_line
        self.apply = apply
        self.cwd = cwd
        self.current_email = current_email or (lambda: gitconfig.get_value("user.email", cwd=cwd))
        self.state = PromptState.MENU
        self.selected: Identity | None = None

    def run(self) -> PromptState:
        while self.state not in (PromptState.APPLIED, PromptState.KEPT):
            if self.state is PromptState.MENU:
                self.state = self._menu()
            else:
                self.state = self._add()
        return self.state

    def _menu(self) -> PromptState:
        identities = self.store.load()
        email = self.current_email()
        for line in render_menu(identities, email, self.store.find_by_email(email)):
            info(line)

        raw = self.read_line("Select: ")
        choice = "" if raw is None else raw.strip()

        if choice.lower() == ADD_CHOICE:
            return PromptState.ADDING

        if not choice:
            info("Keeping current identity")
            return PromptState.KEPT

        identity = None
        # isdigit() also accepts characters such as "²" that int() rejects
        if choice.isascii() and choice.isdecimal():
            identity = self.store.find(int(choice))
        if identity is None:
            error("Invalid choice. Try again.")
            return PromptState.MENU

        self.apply(identity, "local", cwd=self.cwd)
        self.selected = identity
        info(f"Switched to {identity.describe()}")
        return PromptState.APPLIED

    def _add(self) -> PromptState:
        info("")
        info("--- Add New Identity ---")

        label = prompt_field(
            "Enter identity name (e.g., 'Work', 'Personal'): ",
            lambda v: check_text("identity name", v),
            self.read_line,
        )
        name = label and prompt_field(
            "Enter full name for commits: ",
            lambda v: check_text("name", v),
            self.read_line,
        )
        email = name and prompt_field("Enter email for commits: ", check_email, self.read_line)
        if not email:
            # Input ran out mid-way; nothing is written.
            return PromptState.MENU

        try:
            identity = self.store.append(name, email, label)
        except ValidationError as e:
            error(e.message)
            return PromptState.MENU

        info("")
        info(f"Added: {identity.describe()}")
        return PromptState.MENU
