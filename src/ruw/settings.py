"""Configuration: built-in defaults, ~/.config/ruw/config.toml, environment overrides."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from ruw.hook import default_hooks_dir
from ruw.mcp import DEFAULT_SCOPE, DEFAULT_SERVERS, McpServer
from ruw.store import default_store_path

CONFIG_ENV = "RUW_CONFIG"
STORE_ENV = "RUW_IDENTITIES_FILE"
HOOKS_DIR_ENV = "RUW_HOOKS_DIR"


class SettingsError(ValueError):
    """The configuration file exists but cannot be used."""


@dataclass
class Settings:
    identities_file: Path
    hooks_dir: Path
    bashrc: Path
    config_file: Path
    mcp_scope: str = DEFAULT_SCOPE
    mcp_servers: list[McpServer] = field(default_factory=lambda: list(DEFAULT_SERVERS))


def default_config_path() -> Path:
    raw = os.environ.get(CONFIG_ENV)
    if raw:
        return Path(raw).expanduser()
    return Path.home() / ".config" / "ruw" / "config.toml"


def _read_toml(path: Path) -> dict:
    if not path.is_file():
        return {}
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise SettingsError(f"{path}: {e}") from e


def _parse_servers(path: Path, table: dict) -> list[McpServer]:
    servers = []
    for name, spec in table.items():
        if not isinstance(spec, dict):
            raise SettingsError(f"{path}: [mcp.servers.{name}] must be a table")
        transport = spec.get("transport", "stdio")
        command = spec.get("command", [])
        if isinstance(command, str):
            command = command.split()
        server = McpServer(
            name=name,
            transport=transport,
            url=spec.get("url"),
            command=list(command),
            token_env=spec.get("token_env"),
        )
        problem = server.problem()
        if problem:
            raise SettingsError(f"{path}: [mcp.servers.{name}] {problem}")
        servers.append(server)
    return servers


def load_settings(config_path: Path | None = None) -> Settings:
    """Resolve settings. Later sources win: defaults, config file, environment."""
    config_path = config_path or default_config_path()
    data = _read_toml(config_path)

    paths = data.get("paths", {})
    mcp = data.get("mcp", {})

    settings = Settings(
        identities_file=Path(paths.get("identities_file", default_store_path())).expanduser(),
        hooks_dir=Path(paths.get("hooks_dir", default_hooks_dir())).expanduser(),
        bashrc=Path(paths.get("bashrc", Path.home() / ".bashrc")).expanduser(),
        config_file=config_path,
        mcp_scope=mcp.get("scope", DEFAULT_SCOPE),
    )
    if "servers" in mcp:
        settings.mcp_servers = _parse_servers(config_path, mcp["servers"])

    if os.environ.get(STORE_ENV):
        settings.identities_file = Path(os.environ[STORE_ENV]).expanduser()
    if os.environ.get(HOOKS_DIR_ENV):
        settings.hooks_dir = Path(os.environ[HOOKS_DIR_ENV]).expanduser()

    return settings
