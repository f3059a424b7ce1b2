from abc import ABC, abstractmethod
from pathlib import Path

from mcp_manager.models import Agent, AgentType, Configuration


class IAgentConnector(ABC):
    """Reads and writes one agent's native MCP configuration file."""

    @property
    @abstractmethod
    def agent_type(self) -> AgentType:
        raise NotImplementedError

    @abstractmethod
    def is_agent_installed(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def get_configuration_path(self) -> Path:
        raise NotImplementedError

    @abstractmethod
    def get_configured_server_ids(self) -> list[str]:
        raise NotImplementedError

    @abstractmethod
    def add_server_to_agent(
        self, server_id: str, config: Configuration | None = None
    ) -> bool:
        raise NotImplementedError

    @abstractmethod
    def remove_server_from_agent(self, server_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def set_server_enabled(self, server_id: str, enabled: bool) -> bool:
        raise NotImplementedError


class IAgentManager(ABC):
    @abstractmethod
    def detect_installed_agents(self) -> list[Agent]:
        raise NotImplementedError

    @abstractmethod
    def get_agent_by_id(self, agent_id: str) -> Agent | None:
        raise NotImplementedError

    def get_agent_server_ids(self, agent_id: str) -> list[str]:
        agent = self.get_agent_by_id(agent_id)
        return list(agent.configured_server_ids) if agent is not None else []
