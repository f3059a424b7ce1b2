from mcp_manager.agents.framework import (
    create_default_connectors,
    create_registered_connector,
    list_registered_connectors,
)
from mcp_manager.agents.interfaces import IAgentConnector, IAgentManager
from mcp_manager.agents.manager import AgentManager

__all__ = [
    "AgentManager",
    "IAgentConnector",
    "IAgentManager",
    "create_default_connectors",
    "create_registered_connector",
    "list_registered_connectors",
]
