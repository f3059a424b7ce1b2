import threading
from abc import ABC, abstractmethod

from mcp_manager.models import Configuration, ServerInstallation


class IInstallationRepository(ABC):
    """Owns every ``ServerInstallation`` record."""

    @abstractmethod
    def list_all(self) -> list[ServerInstallation]:
        raise NotImplementedError

    @abstractmethod
    def add(self, installation: ServerInstallation) -> None:
        raise NotImplementedError

    @abstractmethod
    def save(self, installation: ServerInstallation) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove(self, installation_id: str) -> bool:
        raise NotImplementedError

    def get(self, installation_id: str) -> ServerInstallation | None:
        for installation in self.list_all():
            if installation.id == installation_id:
                return installation
        return None

    def find(self, server_id: str, agent_id: str) -> ServerInstallation | None:
        for installation in self.list_all():
            if installation.server_id == server_id and installation.agent_id == agent_id:
                return installation
        return None


class IInstallationManager(ABC):
    @property
    @abstractmethod
    def lock(self) -> "threading.RLock":
        """Guards read-modify-write sequences on installation records."""
        raise NotImplementedError

    @abstractmethod
    def get_all_installations(self) -> list[ServerInstallation]:
        raise NotImplementedError

    @abstractmethod
    def get_installations_by_server_id(self, server_id: str) -> list[ServerInstallation]:
        raise NotImplementedError

    @abstractmethod
    def get_installations_by_agent_id(self, agent_id: str) -> list[ServerInstallation]:
        raise NotImplementedError

    @abstractmethod
    def get_installation(self, installation_id: str) -> ServerInstallation | None:
        raise NotImplementedError

    @abstractmethod
    def add_server_to_agent(
        self,
        server_id: str,
        agent_id: str,
        config: Configuration | None = None,
        *,
        write_agent_config: bool = True,
    ) -> ServerInstallation:
        """Track ``server_id`` for an agent.

        With ``write_agent_config=False`` only the record is created and the
        agent file is left alone.
        """
        raise NotImplementedError

    @abstractmethod
    def remove_server_from_agent(self, server_id: str, agent_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def toggle_server_enabled(self, server_id: str, agent_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def update_installation_config(
        self, installation_id: str, config: Configuration
    ) -> bool:
        raise NotImplementedError

    @abstractmethod
    def apply_installation_config(self, installation_id: str) -> bool:
        raise NotImplementedError
