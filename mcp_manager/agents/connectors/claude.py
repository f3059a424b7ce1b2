import sys
from pathlib import Path

from mcp_manager.agents.connectors.common import JsonAgentConnector
from mcp_manager.models import AgentType

CLAUDE_CONFIG_FILENAME = "claude_desktop_config.json"


def default_claude_config_path(home: Path | None = None) -> Path:
    home = home or Path.home()
    if sys.platform == "win32":
        return home / "AppData" / "Roaming" / "Claude" / CLAUDE_CONFIG_FILENAME
    if sys.platform == "darwin":
        return home / "Library" / "Application Support" / "Claude" / CLAUDE_CONFIG_FILENAME
    return home / ".config" / "Claude" / CLAUDE_CONFIG_FILENAME


class ClaudeConnector(JsonAgentConnector):
    """Claude Desktop keeps the server's string map as-is."""

    AGENT_TYPE = AgentType.CLAUDE

    @classmethod
    def create_default(cls, home: Path | None = None) -> "ClaudeConnector":
        return cls(config_path=default_claude_config_path(home))

    def is_agent_installed(self) -> bool:
        return self.config_path.exists()
