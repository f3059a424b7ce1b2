import logging
from typing import Iterable

from mcp_manager.agents.agent_type import agent_id_for, agent_label
from mcp_manager.agents.interfaces import IAgentConnector, IAgentManager
from mcp_manager.models import Agent

logger = logging.getLogger(__name__)


class AgentManager(IAgentManager):
    """Detects agents through their connectors.

    Every lookup re-reads the connectors, so ``configured_server_ids`` always
    reflects the agent's config file at call time.
    """

    def __init__(self, connectors: Iterable[IAgentConnector]) -> None:
        self._connectors = list(connectors)

    def detect_installed_agents(self) -> list[Agent]:
        agents: list[Agent] = []
        for connector in self._connectors:
            if not connector.is_agent_installed():
                continue
            agents.append(
                Agent(
                    id=agent_id_for(connector.agent_type),
                    name=agent_label(connector.agent_type),
                    type=connector.agent_type,
                    is_detected=True,
                    config_path=str(connector.get_configuration_path()),
                    configured_server_ids=list(connector.get_configured_server_ids()),
                )
            )
        logger.debug("Detected %d agent(s)", len(agents))
        return agents

    def get_agent_by_id(self, agent_id: str) -> Agent | None:
        for agent in self.detect_installed_agents():
            if agent.id == agent_id:
                return agent
        return None
