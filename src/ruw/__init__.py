"""ruw: git identity selection hook and Claude Code MCP setup for a developer workstation."""

__version__ = "0.3.0"
