"""CLI entry point: argparse setup and command dispatch."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from ruw import __version__, gitconfig
from ruw.hook import hook_path, is_managed, remove_hook
from ruw.mcp import reconcile
from ruw.prompt import IdentityPrompt
from ruw.settings import Settings, SettingsError, load_settings
from ruw.store import IdentityStore, ValidationError, check_email, check_text
from ruw.terminal import TerminalInput, TerminalUnavailable
from ruw.utils import error, info, print_table, prompt_field, warn
from ruw.wizard import run_setup


def _settings(args: argparse.Namespace) -> Settings:
    settings = load_settings()
    if args.store:
        settings.identities_file = Path(args.store).expanduser()
    if args.hooks_dir:
        settings.hooks_dir = Path(args.hooks_dir).expanduser()
    return settings


def cmd_setup(args: argparse.Namespace) -> int:
    """Register identities and install the global identity-selection hook."""
    settings = _settings(args)
    return run_setup(IdentityStore(settings.identities_file), settings.hooks_dir)


def cmd_hook(args: argparse.Namespace) -> int:
    """pre-commit entry point: ask which identity this commit should use."""
    settings = _settings(args)
    store = IdentityStore(settings.identities_file)

    if not store.load():
        error(f"No git identities found at {store.path}")
        error("Run 'ruw setup' to configure identities.")
        return 1

    try:
        with TerminalInput() as tty:
            IdentityPrompt(store, tty.readline).run()
    except TerminalUnavailable as e:
        warn(f"{e}; keeping current identity.")
    except KeyboardInterrupt:
        info("")
        return 130
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    """List registered identities."""
    settings = _settings(args)
    store = IdentityStore(settings.identities_file)
    identities = store.load()

    if not identities:
        info(f"No identities registered in {store.path}.")
    else:
        rows = [
            [str(i.sequence_number), i.label, i.display_name, i.email]
            for i in identities
        ]
        print_table(["#", "Label", "Name", "Email"], rows)

    for skipped in store.skipped():
        warn(f"{store.path}:{skipped.line_number}: skipped ({skipped.reason}): {skipped.line}")
    return 0


def cmd_add(args: argparse.Namespace) -> int:
    """Register one more identity, from flags or by prompting."""
    settings = _settings(args)
    store = IdentityStore(settings.identities_file)

    if args.label and args.name and args.email:
        label, name, email = args.label, args.name, args.email
    else:
        label = args.label or prompt_field(
            "Enter identity name (e.g., 'Work', 'Personal'): ",
            lambda v: check_text("identity name", v),
        )
        name = label and (args.name or prompt_field(
            "Enter full name for commits: ",
            lambda v: check_text("name", v),
        ))
        email = name and (args.email or prompt_field("Enter email for commits: ", check_email))
        if not email:
            info("Cancelled.")
            return 1

    try:
        identity = store.append(name, email, label)
    except ValidationError as e:
        error(e.message)
        return 1

    info(f"Added {identity.sequence_number}) {identity.describe()}")
    return 0


def cmd_uninstall(args: argparse.Namespace) -> int:
    """Remove the hook and the global core.hooksPath. The identities file is kept."""
    settings = _settings(args)

    if remove_hook(settings.hooks_dir):
        info(f"Removed {hook_path(settings.hooks_dir)}")
    else:
        info(f"No ruw hook found in {settings.hooks_dir}")

    if not gitconfig.git_available():
        error("Git is not installed.")
        return 1

    current = gitconfig.get_hooks_path()
    if current and Path(current).expanduser() == settings.hooks_dir:
        gitconfig.unset_hooks_path()
        info("Unset global core.hooksPath")
    elif current:
        info(f"Leaving core.hooksPath alone ({current})")

    info(f"Identities kept in {settings.identities_file}")
    return 0


def cmd_config(args: argparse.Namespace) -> int:
    """Show the effective configuration."""
    settings = _settings(args)
    hook_file = hook_path(settings.hooks_dir)
    installed = "installed" if is_managed(hook_file) else "not installed"

    info("ruw configuration:")
    info(f"  config file:     {settings.config_file}")
    info(f"  identities file: {settings.identities_file}")
    info(f"  hooks dir:       {settings.hooks_dir} (hook {installed})")
    info(f"  bashrc:          {settings.bashrc}")
    info(f"  mcp scope:       {settings.mcp_scope}")
    info("  mcp servers:")
    for s in settings.mcp_servers:
        token = f" [needs {s.token_env}]" if s.token_env else ""
        info(f"    {s.name} ({s.transport}) {s.target()}{token}")
    return 0


def cmd_mcp(args: argparse.Namespace) -> int:
    """Check and add the expected Claude Code MCP servers."""
    settings = _settings(args)
    return reconcile(
        settings.mcp_servers,
        settings.mcp_scope,
        settings.bashrc,
        check_only=args.check,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ruw",
        description="Per-commit git identity selection and Claude Code MCP setup",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument("--store", help="Path to the identities file (default: ~/.git-identities)")
    parser.add_argument("--hooks-dir", help="Global hooks directory (default: ~/.git-hooks)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # setup
    subparsers.add_parser("setup", help="Register identities and install the pre-commit hook")

    # hook
    subparsers.add_parser("hook", help="Run the identity menu (invoked by the pre-commit hook)")

    # list
    subparsers.add_parser("list", help="List registered identities")

    # add
    p_add = subparsers.add_parser("add", help="Register a new identity")
    p_add.add_argument("--label", help="Short tag shown in the menu, e.g. Work")
    p_add.add_argument("--name", help="Full name used as user.name")
    p_add.add_argument("--email", help="Address used as user.email")

    # uninstall
    subparsers.add_parser("uninstall", help="Remove the hook and the global hooks path")

    # config
    subparsers.add_parser("config", help="Show configuration")

    # mcp
    p_mcp = subparsers.add_parser("mcp", help="Configure missing Claude Code MCP servers")
    p_mcp.add_argument("--check", action="store_true", help="Only report; exit 1 if any are missing")

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    dispatch = {
        "setup": cmd_setup,
        "hook": cmd_hook,
        "list": cmd_list,
        "add": cmd_add,
        "uninstall": cmd_uninstall,
        "config": cmd_config,
        "mcp": cmd_mcp,
    }

    handler = dispatch.get(args.command)
    if handler is None:
        parser.print_help()
        sys.exit(1)

    try:
        code = handler(args)
    except SettingsError as e:
        error(str(e))
        code = 1
    except gitconfig.GitError as e:
        error(str(e))
        code = 1
    sys.exit(code)
