from pathlib import Path

from mcp_manager.agents.connectors.common import JsonAgentConnector
from mcp_manager.models import AgentType


def default_copilot_config_path(home: Path | None = None) -> Path:
    return (home or Path.home()) / ".vscode" / "mcp" / "config.json"


class CopilotConnector(JsonAgentConnector):
    AGENT_TYPE = AgentType.GITHUB_COPILOT

    @classmethod
    def create_default(cls, home: Path | None = None) -> "CopilotConnector":
        return cls(config_path=default_copilot_config_path(home))

    def is_agent_installed(self) -> bool:
        # ~/.vscode exists once VS Code has been run.
        return self.config_path.parent.parent.is_dir()
