"""Installation lifecycle across agents.

Two rules keep agent config files free of duplicates:

* at most one installation record exists per ``(server_id, agent_id)``;
  adding an existing pair returns the stored record without connector I/O;
* the connector write is skipped when the agent's file already lists the
  server, or when the caller asks for a record only (``write_agent_config``);
  the record is still created so local state matches disk.

Check-then-act sequences run under one re-entrant lock.
"""

import logging
import threading
from dataclasses import replace
from typing import Iterable

from mcp_manager.agents.interfaces import IAgentConnector, IAgentManager
from mcp_manager.errors import AgentNotFoundError, ConnectorNotFoundError
from mcp_manager.installations.interfaces import (
    IInstallationManager,
    IInstallationRepository,
)
from mcp_manager.installations.repository import InMemoryInstallationRepository
from mcp_manager.models import Agent, AgentType, Configuration, ServerInstallation
from mcp_manager.utils import utc_now

logger = logging.getLogger(__name__)


class InstallationManager(IInstallationManager):
    def __init__(
        self,
        agent_manager: IAgentManager,
        connectors: Iterable[IAgentConnector],
        repository: IInstallationRepository | None = None,
    ) -> None:
        self._agent_manager = agent_manager
        self._connectors: dict[AgentType, IAgentConnector] = {}
        for connector in connectors:
            self._connectors.setdefault(connector.agent_type, connector)
        self._repository = repository or InMemoryInstallationRepository()
        self._lock = threading.RLock()

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def connector_for(self, agent_type: AgentType) -> IAgentConnector | None:
        return self._connectors.get(agent_type)

    def get_all_installations(self) -> list[ServerInstallation]:
        with self._lock:
            return self._repository.list_all()

    def get_installations_by_server_id(self, server_id: str) -> list[ServerInstallation]:
        with self._lock:
            return [i for i in self._repository.list_all() if i.server_id == server_id]

    def get_installations_by_agent_id(self, agent_id: str) -> list[ServerInstallation]:
        with self._lock:
            return [i for i in self._repository.list_all() if i.agent_id == agent_id]

    def get_installation(self, installation_id: str) -> ServerInstallation | None:
        with self._lock:
            return self._repository.get(installation_id)

    def add_server_to_agent(
        self,
        server_id: str,
        agent_id: str,
        config: Configuration | None = None,
        *,
        write_agent_config: bool = True,
    ) -> ServerInstallation:
        agent = self._agent_manager.get_agent_by_id(agent_id)
        if agent is None:
            raise AgentNotFoundError(agent_id)
        connector = self.connector_for(agent.type)
        if connector is None:
            raise ConnectorNotFoundError(agent.type.value)

        with self._lock:
            existing = self._repository.find(server_id, agent_id)
            if existing is not None:
                logger.debug(
                    "Server %s already tracked for agent %s", server_id, agent_id
                )
                return existing

            if not write_agent_config:
                logger.debug(
                    "Linking server %s to %s without a config write", server_id, agent.name
                )
            elif server_id in agent.configured_server_ids:
                logger.info(
                    "Server %s already present in %s config, skipping write",
                    server_id,
                    agent.name,
                )
            else:
                connector.add_server_to_agent(
                    server_id, dict(config) if config is not None else None
                )

            installation = ServerInstallation(
                server_id=server_id,
                agent_id=agent_id,
                is_enabled=True,
                agent_specific_config=dict(config or {}),
            )
            self._repository.add(installation)
            logger.info("Installed server %s for agent %s", server_id, agent_id)
            return installation

    def remove_server_from_agent(self, server_id: str, agent_id: str) -> bool:
        resolved = self._resolve(agent_id)
        if resolved is None:
            return False
        _, connector = resolved

        with self._lock:
            connector.remove_server_from_agent(server_id)
            installation = self._repository.find(server_id, agent_id)
            if installation is not None:
                self._repository.remove(installation.id)
        logger.info("Removed server %s from agent %s", server_id, agent_id)
        return True

    def toggle_server_enabled(self, server_id: str, agent_id: str) -> bool:
        with self._lock:
            installation = self._repository.find(server_id, agent_id)
            if installation is None:
                return False
            resolved = self._resolve(agent_id)
            if resolved is None:
                return False
            _, connector = resolved

            updated = replace(
                installation,
                is_enabled=not installation.is_enabled,
                updated_at=utc_now(),
            )
            self._repository.save(updated)

            # The flag stays flipped if the connector write fails.
            connector.set_server_enabled(server_id, updated.is_enabled)
            logger.info(
                "Server %s %s for agent %s",
                server_id,
                "enabled" if updated.is_enabled else "disabled",
                agent_id,
            )
            return True

    def update_installation_config(
        self, installation_id: str, config: Configuration
    ) -> bool:
        with self._lock:
            installation = self._repository.get(installation_id)
            if installation is None:
                return False
            self._repository.save(
                replace(
                    installation,
                    agent_specific_config=dict(config),
                    updated_at=utc_now(),
                )
            )
            return True

    def apply_installation_config(self, installation_id: str) -> bool:
        """Rewrite the agent's file entry from the installation's config."""
        with self._lock:
            installation = self._repository.get(installation_id)
            if installation is None:
                return False
            resolved = self._resolve(installation.agent_id)
            if resolved is None:
                return False
            _, connector = resolved
            return connector.add_server_to_agent(
                installation.server_id, dict(installation.agent_specific_config)
            )

    def _resolve(self, agent_id: str) -> tuple[Agent, IAgentConnector] | None:
        agent = self._agent_manager.get_agent_by_id(agent_id)
        if agent is None:
            return None
        connector = self.connector_for(agent.type)
        if connector is None:
            return None
        return agent, connector
