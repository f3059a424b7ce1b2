"""Reconcile manager state with the servers already configured in agents.

Each pass walks the detected agents, makes sure every server id found in an
agent's file is known to the server manager, and links it to that agent.
Servers that were never installed through this tool get a minimal
auto-discovered entry.
"""

import logging
import threading

from mcp_manager.agents.interfaces import IAgentManager
from mcp_manager.constants import AUTO_DISCOVERED_TAG, DEFAULT_SYNC_INTERVAL_SECONDS
from mcp_manager.errors import McpManagerError
from mcp_manager.installations.interfaces import IInstallationManager
from mcp_manager.models import Agent, McpServer, SyncReport
from mcp_manager.servers.interfaces import IServerManager

logger = logging.getLogger(__name__)


class AgentServerSyncService:
    def __init__(
        self,
        agent_manager: IAgentManager,
        server_manager: IServerManager,
        installation_manager: IInstallationManager,
    ) -> None:
        self._agent_manager = agent_manager
        self._server_manager = server_manager
        self._installation_manager = installation_manager
        self._pass_lock = threading.Lock()

    def sync(self) -> SyncReport:
        # Periodic passes and watcher passes may run on different threads.
        with self._pass_lock:
            return self._sync_pass()

    def _sync_pass(self) -> SyncReport:
        agents = self._agent_manager.detect_installed_agents()
        if not agents:
            logger.debug("No agents detected for server sync")
            return SyncReport(processed=0, new_servers=0)

        processed = 0
        new_servers = 0
        linked = 0
        errors: list[str] = []

        for agent in agents:
            for server_id in agent.configured_server_ids:
                processed += 1
                try:
                    actual_id, created = self._resolve_server(agent, server_id)
                    if created:
                        new_servers += 1
                    # A name match lives in the agent file under another id.
                    if self._ensure_linked(
                        agent, actual_id, write_agent_config=actual_id == server_id
                    ):
                        linked += 1
                except (McpManagerError, OSError) as exc:
                    logger.warning(
                        "Failed to sync server %s from %s: %s", server_id, agent.name, exc
                    )
                    errors.append(f"{agent.id}/{server_id}: {exc}")

        if new_servers:
            logger.info(
                "Agent server sync completed: %d server(s) processed, %d new",
                processed,
                new_servers,
            )
        else:
            logger.debug(
                "Agent server sync completed: %d server(s) checked, no new servers",
                processed,
            )
        return SyncReport(
            processed=processed,
            new_servers=new_servers,
            linked=linked,
            errors=tuple(errors),
        )

    def run_forever(
        self,
        interval: float = DEFAULT_SYNC_INTERVAL_SECONDS,
        stop_event: threading.Event | None = None,
    ) -> None:
        """Run a pass immediately, then every ``interval`` seconds until stopped."""
        stop_event = stop_event or threading.Event()
        logger.info("Agent server sync starting")
        while not stop_event.is_set():
            try:
                self.sync()
            except (McpManagerError, OSError) as exc:
                logger.error("Agent server sync pass failed: %s", exc)
            stop_event.wait(interval)
        logger.info("Agent server sync stopping")

    def _resolve_server(self, agent: Agent, server_id: str) -> tuple[str, bool]:
        if self._server_manager.get_server_by_id(server_id) is not None:
            return server_id, False

        wanted = server_id.casefold()
        for server in self._server_manager.get_installed_servers():
            if server.name.casefold() == wanted:
                logger.info(
                    "Server named '%s' already exists as '%s', using existing server",
                    server_id,
                    server.id,
                )
                return server.id, False

        installed = self._server_manager.install_server(
            McpServer(
                id=server_id,
                name=server_id,
                description=f"Auto-discovered from {agent.name}",
                version="unknown",
                author="Unknown",
                tags=[AUTO_DISCOVERED_TAG, agent.type.value],
            )
        )
        if installed:
            logger.info("Auto-installed server '%s' from %s", server_id, agent.name)
        return server_id, installed

    def _ensure_linked(
        self, agent: Agent, server_id: str, write_agent_config: bool = True
    ) -> bool:
        installations = self._installation_manager.get_installations_by_server_id(server_id)
        if any(item.agent_id == agent.id for item in installations):
            return False
        self._installation_manager.add_server_to_agent(
            server_id, agent.id, write_agent_config=write_agent_config
        )
        logger.info("Linked server '%s' to %s", server_id, agent.name)
        return True
