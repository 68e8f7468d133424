"""Tests for ruw.mcp"""

import subprocess

import pytest

from ruw import mcp
from ruw.mcp import (
    CONNECTED,
    DEFAULT_SERVERS,
    FAILED,
    MISSING,
    McpServer,
    add_command,
    missing_servers,
    parse_mcp_list,
    server_status,
)

LIST_OUTPUT = """Checking MCP server health...

sequential-thinking: npx @modelcontextprotocol/server-sequential-thinking - ✓ Connected
better-auth: https://mcp.chonkie.ai/better-auth/better-auth-builder/mcp (HTTP) - ✗ Failed to connect
"""


def test_parse_mcp_list():
    assert parse_mcp_list(LIST_OUTPUT) == {
        "sequential-thinking": CONNECTED,
        "better-auth": FAILED,
    }


def test_status_is_per_server_line():
    statuses = parse_mcp_list(LIST_OUTPUT)
    assert server_status(statuses, "sequential-thinking") == CONNECTED
    assert server_status(statuses, "better-auth") == FAILED
    assert server_status(statuses, "github") == MISSING


def test_parse_empty_output():
    assert parse_mcp_list("No MCP servers configured. Use `claude mcp add` to add a server.") == {}


def test_missing_servers_keeps_declared_order():
    statuses = parse_mcp_list(LIST_OUTPUT)
    assert [s.name for s in missing_servers(list(DEFAULT_SERVERS), statuses)] == [
        "better-auth",
        "github",
    ]


def test_add_command_http():
    server = McpServer("docs", transport="http", url="https://example.com/mcp")
    assert add_command(server, "user") == [
        "claude", "mcp", "add", "docs", "--scope", "user",
        "--transport", "http", "https://example.com/mcp",
    ]


def test_add_command_stdio():
    server = McpServer("st", command=["npx", "pkg"])
    assert add_command(server, "project") == [
        "claude", "mcp", "add", "st", "--scope", "project", "--", "npx", "pkg",
    ]


def test_server_problem():
    assert McpServer("a", command=["x"]).problem() is None
    assert McpServer("a").problem() == "stdio transport needs a command"
    assert "unknown transport" in McpServer("a", transport="ws").problem()


class FakeClaude:
    """Stands in for the claude binary; records every invocation."""

    def __init__(self, list_output="", fail_add=()):
        self.calls = []
        self.list_output = list_output
        self.fail_add = set(fail_add)

    def __call__(self, *args):
        self.calls.append(list(args))
        code = 0
        if args[:2] == ("mcp", "add") and args[2] in self.fail_add:
            code = 1
        stdout = self.list_output if args[:2] == ("mcp", "list") else ""
        return subprocess.CompletedProcess(["claude", *args], code, stdout, "boom" if code else "")


@pytest.fixture
def fake_claude(monkeypatch):
    def install(**kwargs):
        fake = FakeClaude(**kwargs)
        monkeypatch.setattr(mcp, "_claude", fake)
        monkeypatch.setattr(mcp, "claude_available", lambda: True)
        return fake

    return install


def test_reconcile_requires_claude(monkeypatch, tmp_path, capsys):
    monkeypatch.setattr(mcp, "claude_available", lambda: False)
    assert mcp.reconcile(list(DEFAULT_SERVERS), "user", tmp_path / ".bashrc") == 1
    assert "claude is not installed" in capsys.readouterr().err


def test_reconcile_nothing_missing(fake_claude, tmp_path, capsys):
    fake = fake_claude(list_output="a: npx a - ✓ Connected\n")
    servers = [McpServer("a", command=["npx", "a"])]
    assert mcp.reconcile(servers, "user", tmp_path / ".bashrc") == 0
    assert fake.calls == [["mcp", "list"]]
    assert "All MCP servers already configured." in capsys.readouterr().out


def test_reconcile_check_only(fake_claude, tmp_path):
    fake = fake_claude(list_output="")
    servers = [McpServer("a", command=["npx", "a"])]
    assert mcp.reconcile(servers, "user", tmp_path / ".bashrc", check_only=True) == 1
    assert fake.calls == [["mcp", "list"]]


def test_reconcile_declined(fake_claude, tmp_path):
    fake = fake_claude()
    servers = [McpServer("a", command=["npx", "a"])]
    assert mcp.reconcile(servers, "user", tmp_path / ".bashrc", ask=lambda m: False) == 0
    assert fake.calls == [["mcp", "list"]]


def test_reconcile_adds_missing(fake_claude, tmp_path, monkeypatch):
    # setenv first so the value the code exports is undone after the test
    monkeypatch.setenv("GITHUB_TOKEN", "stale")
    fake = fake_claude(list_output=LIST_OUTPUT)
    bashrc = tmp_path / ".bashrc"

    code = mcp.reconcile(
        list(DEFAULT_SERVERS), "user", bashrc,
        read_secret=lambda prompt: "ghp_secret",
        ask=lambda m: True,
    )

    assert code == 0
    assert fake.calls == [
        ["mcp", "list"],
        ["mcp", "remove", "better-auth", "--scope", "user"],
        ["mcp", "add", "better-auth", "--scope", "user", "--transport", "http",
         "https://mcp.chonkie.ai/better-auth/better-auth-builder/mcp"],
        ["mcp", "remove", "github", "--scope", "user"],
        ["mcp", "add", "github", "--scope", "user", "--", "npx", "@modelcontextprotocol/server-github"],
    ]
    assert 'export GITHUB_TOKEN="ghp_secret"' in bashrc.read_text()
    assert mcp.os.environ["GITHUB_TOKEN"] == "ghp_secret"


def test_reconcile_skips_server_without_token(fake_claude, tmp_path, capsys):
    fake = fake_claude()
    servers = [McpServer("gh", command=["npx", "gh"], token_env="GITHUB_TOKEN")]
    code = mcp.reconcile(
        servers, "user", tmp_path / ".bashrc",
        read_secret=lambda prompt: "", ask=lambda m: True,
    )
    assert code == 1
    assert ["mcp", "add", "gh", "--scope", "user", "--", "npx", "gh"] not in fake.calls
    assert not (tmp_path / ".bashrc").exists()
    assert "No GITHUB_TOKEN provided" in capsys.readouterr().err


def test_reconcile_reports_failed_add(fake_claude, tmp_path, capsys):
    fake_claude(fail_add={"a"})
    servers = [McpServer("a", command=["npx", "a"]), McpServer("b", command=["npx", "b"])]
    code = mcp.reconcile(servers, "user", tmp_path / ".bashrc", ask=lambda m: True)
    assert code == 1
    err = capsys.readouterr().err
    assert "claude mcp add a failed: boom" in err
    assert "Not configured: a" in err
