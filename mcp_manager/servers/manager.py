import logging
from dataclasses import replace

from mcp_manager.models import Configuration, McpServer
from mcp_manager.servers.interfaces import IServerManager, IServerRepository
from mcp_manager.servers.repository import InMemoryServerRepository
from mcp_manager.utils import utc_now

logger = logging.getLogger(__name__)


class ServerManager(IServerManager):
    def __init__(self, repository: IServerRepository | None = None) -> None:
        self._repository = repository or InMemoryServerRepository()

    def get_installed_servers(self) -> list[McpServer]:
        return self._repository.get_all()

    def get_server_by_id(self, server_id: str) -> McpServer | None:
        return self._repository.get_by_id(server_id)

    def install_server(self, server: McpServer) -> bool:
        if self._repository.exists(server.id):
            logger.debug("Server %s is already installed", server.id)
            return False
        server.is_installed = True
        server.installed_at = utc_now()
        self._repository.add(server)
        logger.info("Installed server %s", server.id)
        return True

    def uninstall_server(self, server_id: str) -> bool:
        removed = self._repository.delete(server_id)
        if removed:
            logger.info("Uninstalled server %s", server_id)
        return removed

    def update_server_configuration(
        self, server_id: str, configuration: Configuration
    ) -> bool:
        server = self._repository.get_by_id(server_id)
        if server is None:
            return False
        return self._repository.update(replace(server, configuration=dict(configuration)))
