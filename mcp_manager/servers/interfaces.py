from abc import ABC, abstractmethod

from mcp_manager.models import Configuration, McpServer


class IServerRepository(ABC):
    @abstractmethod
    def get_all(self) -> list[McpServer]:
        raise NotImplementedError

    @abstractmethod
    def get_by_id(self, server_id: str) -> McpServer | None:
        raise NotImplementedError

    @abstractmethod
    def add(self, server: McpServer) -> None:
        raise NotImplementedError

    @abstractmethod
    def update(self, server: McpServer) -> bool:
        raise NotImplementedError

    @abstractmethod
    def delete(self, server_id: str) -> bool:
        raise NotImplementedError

    def exists(self, server_id: str) -> bool:
        return self.get_by_id(server_id) is not None


class IServerManager(ABC):
    @abstractmethod
    def get_installed_servers(self) -> list[McpServer]:
        raise NotImplementedError

    @abstractmethod
    def get_server_by_id(self, server_id: str) -> McpServer | None:
        raise NotImplementedError

    @abstractmethod
    def install_server(self, server: McpServer) -> bool:
        raise NotImplementedError

    @abstractmethod
    def uninstall_server(self, server_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def update_server_configuration(
        self, server_id: str, configuration: Configuration
    ) -> bool:
        raise NotImplementedError
