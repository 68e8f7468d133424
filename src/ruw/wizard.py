"""Interactive setup: register identities, install the global pre-commit hook."""

from __future__ import annotations

from pathlib import Path

from ruw import gitconfig
from ruw.hook import hook_path, install_hook
from ruw.store import IdentityStore, ValidationError, check_email, check_text
from ruw.utils import LineReader, ask_yes_no, error, info, prompt_field, stdin_reader, warn

STEPS = 5


def _step(n: int, title: str) -> None:
    info(f"\n[{n}/{STEPS}] {title}...")


def check_git() -> bool:
    _step(1, "Checking Git")
    if not gitconfig.git_available():
        error("Git is not installed. Please install Git first.")
        return False
    info(f"  + Git installed: {gitconfig.git_version()}")
    return True


def keep_existing(store: IdentityStore, read_line: LineReader) -> bool:
    """Offer to keep an existing store. Returns True when collection can be skipped."""
    _step(2, "Checking existing identities")
    identities = store.load()
    if not identities:
        info("  i No existing identities found")
        return False

    info(f"  ! Found existing identities file with {len(identities)} identity/identities")
    info(f"    Location: {store.path}")
    info("")
    info("  Current identities:")
    for identity in identities:
        info(f"    {identity.sequence_number}) {identity.describe()}")
    info("")

    answer = ask_yes_no("Keep existing identities?", read_line)
    if answer is False:
        info("  > Will reconfigure identities")
        store.reset()
        return False
    info("  + Keeping existing identities")
    return True


def collect_identities(store: IdentityStore, read_line: LineReader) -> int:
    """Prompt for identities until the user is done. Returns how many were added."""
    _step(3, "Collecting Git identities")
    info("  i You can add multiple identities (Work, Personal, Client, etc.)")

    added = 0
    while True:
        info(f"\n  --- Identity #{added + 1} ---")
        label = prompt_field(
            "  > Enter identity name (e.g., 'Work', 'Personal', 'Client'): ",
            lambda v: check_text("identity name", v),
            read_line,
        )
        name = label and prompt_field(
            "  > Enter full name for commits: ",
            lambda v: check_text("name", v),
            read_line,
        )
        email = name and prompt_field("  > Enter email for commits: ", check_email, read_line)
        if not email:
            break

        try:
            identity = store.append(name, email, label)
        except ValidationError as e:
            error(e.message)
            continue
        added += 1
        info(f"  + Added: {identity.describe()}")

        more = None
        while more is None:
            raw = read_line("  > Add another identity? (a = add more, x = done): ")
            if raw is None:
                more = False
            elif raw.strip().lower() in ("a", "x"):
                more = raw.strip().lower() == "a"
            else:
                error("Invalid input. Please enter 'a' or 'x'")
        if not more:
            break

    if added:
        info(f"\n  + Saved {added} identity/identities to {store.path}")
    return added


def configure_git(store: IdentityStore, hooks_dir: Path) -> None:
    _step(5, "Configuring Git global hooks")
    previous = gitconfig.get_hooks_path()
    if previous and Path(previous).expanduser() != hooks_dir:
        warn(f"core.hooksPath was {previous}; hooks in that directory will no longer run.")
    gitconfig.set_hooks_path(hooks_dir)
    info(f"  + Set global hooks path: {hooks_dir}")

    identities = store.load()
    if identities:
        # git needs some identity to commit at all; the first one becomes the default.
        first = min(identities, key=lambda i: i.sequence_number)
        gitconfig.apply(first, "global")
        info(f"  + Set default identity: {first.describe()}")


def show_success(store: IdentityStore, hooks_dir: Path) -> None:
    info("")
    info("==========================================")
    info("    Git Identity Manager Installed!")
    info("==========================================")
    info("")
    info("How it works:")
    info("  - On every commit, you'll be prompted to choose an identity")
    info("  - Press Enter to keep current identity, or select a number")
    info("")
    info("Configuration files:")
    info(f"  Identities: {store.path}")
    info(f"  Hook:       {hook_path(hooks_dir)}")
    info("")
    info("To manage identities:")
    info("  List:   ruw list")
    info("  Add:    ruw add")
    info(f"  Edit:   {store.path}")
    info("  Format: number:Full Name:email@example.com:Label")
    info("")
    info("Note: The hook runs on ALL git repositories for this user.")
    info("Commits made without a terminal attached (CI, scripts) keep the current identity;")
    info("with a terminal attached the hook waits for an answer.")


def run_setup(store: IdentityStore, hooks_dir: Path, read_line: LineReader = stdin_reader) -> int:
    info("==========================================")
    info("    Git Identity Manager Setup")
    info("==========================================")

    if not check_git():
        error("Setup failed.")
        return 1

    if not keep_existing(store, read_line):
        if collect_identities(store, read_line) == 0 and not store.load():
            error("Setup failed. At least one identity is required.")
            return 1

    _step(4, "Creating pre-commit hook")
    path = install_hook(hooks_dir, store.path)
    info(f"  + Created pre-commit hook: {path}")

    configure_git(store, hooks_dir)

    show_success(store, hooks_dir)
    return 0
