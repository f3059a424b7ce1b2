from mcp_manager.servers.interfaces import IServerManager, IServerRepository
from mcp_manager.servers.manager import ServerManager
from mcp_manager.servers.repository import (
    InMemoryServerRepository,
    JsonServerRepository,
)

__all__ = [
    "IServerManager",
    "IServerRepository",
    "InMemoryServerRepository",
    "JsonServerRepository",
    "ServerManager",
]
