"""Claude Code MCP servers: compare the expected set against `claude mcp list` and add what is missing."""

from __future__ import annotations

import getpass
import os
import re
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from ruw.shell import set_export
from ruw.utils import confirm, error, info, warn

DEFAULT_SCOPE = "user"
TRANSPORTS = ("stdio", "http")

CONNECTED = "connected"
FAILED = "failed"
MISSING = "missing"

# `claude mcp list` prints one server per line: "<name>: <target> - <status>"
_LIST_LINE_RE = re.compile(r"^(?P<name>[A-Za-z0-9][A-Za-z0-9_.@/-]*):\s+(?P<rest>.+)$")


@dataclass(frozen=True)
class McpServer:
    name: str
    transport: str = "stdio"
    url: str | None = None
    command: list[str] = field(default_factory=list)
    token_env: str | None = None

    def problem(self) -> str | None:
        """Describe what is wrong with this definition, or None."""
        if self.transport not in TRANSPORTS:
            return f"unknown transport {self.transport!r} (expected one of {', '.join(TRANSPORTS)})"
        if self.transport == "http" and not self.url:
            return "http transport needs a url"
        if self.transport == "stdio" and not self.command:
            return "stdio transport needs a command"
        return None

    def target(self) -> str:
        return self.url if self.transport == "http" else " ".join(self.command)


DEFAULT_SERVERS = (
    McpServer(
        name="better-auth",
        transport="http",
        url="https://mcp.chonkie.ai/better-auth/better-auth-builder/mcp",
    ),
    McpServer(
        name="sequential-thinking",
        command=["npx", "@modelcontextprotocol/server-sequential-thinking"],
    ),
    McpServer(
        name="github",
        command=["npx", "@modelcontextprotocol/server-github"],
        token_env="GITHUB_TOKEN",
    ),
)


def claude_available() -> bool:
    return shutil.which("claude") is not None


def _claude(*args: str) -> subprocess.CompletedProcess:
    return subprocess.run(["claude", *args], capture_output=True, text=True)


def parse_mcp_list(output: str) -> dict[str, str]:
    """Map server name -> connected/failed from `claude mcp list` output."""
    statuses = {}
    for line in output.splitlines():
        match = _LIST_LINE_RE.match(line.strip())
        if not match:
            continue
        rest = match.group("rest")
        statuses[match.group("name")] = CONNECTED if "Connected" in rest else FAILED
    return statuses


def server_status(statuses: dict[str, str], name: str) -> str:
    return statuses.get(name, MISSING)


def missing_servers(expected: list[McpServer], statuses: dict[str, str]) -> list[McpServer]:
    """Expected servers that are absent or not connected, in declared order."""
    return [s for s in expected if server_status(statuses, s.name) != CONNECTED]


def add_command(server: McpServer, scope: str) -> list[str]:
    cmd = ["claude", "mcp", "add", server.name, "--scope", scope]
    if server.transport == "http":
        return cmd + ["--transport", "http", server.url]
    return cmd + ["--", *server.command]


def list_statuses() -> dict[str, str]:
    # A failing `claude mcp list` just means nothing is configured yet.
    return parse_mcp_list(_claude("mcp", "list").stdout or "")


def _collect_token(
    server: McpServer,
    bashrc: Path,
    read_secret: Callable[[str], str],
) -> bool:
    """Ask for the server's token and persist it. Returns False if none was given."""
    env = server.token_env
    try:
        token = read_secret(f"  > Enter {env} for {server.name}: ").strip()
    except EOFError:
        token = ""
    if not token:
        warn(f"No {env} provided, skipping {server.name}")
        return False
    set_export(env, token, bashrc)
    os.environ[env] = token
    info(f"  + Saved {env} to {bashrc}")
    return True


def install_server(
    server: McpServer,
    scope: str,
    bashrc: Path,
    read_secret: Callable[[str], str] = getpass.getpass,
) -> bool:
    """Replace any stale registration of server and add it again. Returns True on success."""
    info(f"\n  > Installing {server.name}...")
    # Clear a failed registration first; it is fine if there is none.
    _claude("mcp", "remove", server.name, "--scope", scope)

    if server.token_env and not _collect_token(server, bashrc, read_secret):
        return False

    cmd = add_command(server, scope)
    result = _claude(*cmd[1:])
    if result.returncode != 0:
        error(f"claude mcp add {server.name} failed: {(result.stderr or '').strip()}")
        return False
    info(f"  + Added {server.name}")
    return True


def reconcile(
    servers: list[McpServer],
    scope: str,
    bashrc: Path,
    check_only: bool = False,
    read_secret: Callable[[str], str] = getpass.getpass,
    ask: Callable[[str], bool] = confirm,
) -> int:
    """Bring the configured MCP servers in line with the expected list. Returns an exit code."""
    if not claude_available():
        error("claude is not installed or not on PATH.")
        return 1

    info(f"Checking MCP servers ({scope} scope)...")
    statuses = list_statuses()
    missing = missing_servers(servers, statuses)

    for s in servers:
        info(f"  {s.name}: {server_status(statuses, s.name)}")

    if not missing:
        info("All MCP servers already configured.")
        return 0

    info(f"{len(missing)} MCP server(s) missing: {' '.join(s.name for s in missing)}")
    if check_only:
        return 1

    if not ask("Configure missing MCP servers?"):
        info("Cancelled.")
        return 0

    failures = [s.name for s in missing if not install_server(s, scope, bashrc, read_secret)]
    if failures:
        warn(f"Not configured: {', '.join(failures)}")
        return 1
    return 0
