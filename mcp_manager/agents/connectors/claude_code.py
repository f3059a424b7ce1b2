"""Claude Code connector.

Servers live in ``~/.claude.json`` (user-level ``mcpServers`` plus
per-project ``projects.<path>.mcpServers``). Older installs only have
``~/.claude/settings.json``; it is read as well and written to when the user
config does not exist.
"""

import logging
from pathlib import Path
from typing import Any

from mcp_manager.agents.connectors.common import (
    MCP_SERVERS_KEY,
    build_stdio_entry,
    load_json_object,
    server_table,
)
from mcp_manager.agents.framework import RegisteredAgentConnector
from mcp_manager.errors import StoreFileError
from mcp_manager.models import AgentType, Configuration
from mcp_manager.utils import write_json

logger = logging.getLogger(__name__)


class ClaudeCodeConnector(RegisteredAgentConnector):
    AGENT_TYPE = AgentType.CLAUDE_CODE

    def __init__(self, home: Path, project_dir: Path | None = None) -> None:
        self._home = home
        self._project_dir = project_dir

    @classmethod
    def create_default(cls, home: Path | None = None) -> "ClaudeCodeConnector":
        return cls(home=home or Path.home())

    @property
    def user_config_path(self) -> Path:
        return self._home / ".claude.json"

    @property
    def settings_dir(self) -> Path:
        return self._home / ".claude"

    @property
    def settings_path(self) -> Path:
        return self.settings_dir / "settings.json"

    @property
    def project_dir(self) -> Path:
        return self._project_dir or Path.cwd()

    def is_agent_installed(self) -> bool:
        return self.settings_dir.is_dir() or self.user_config_path.exists()

    def get_configuration_path(self) -> Path:
        if self.user_config_path.exists():
            return self.user_config_path
        return self.settings_path

    def get_configured_server_ids(self) -> list[str]:
        server_ids: list[str] = []

        def _collect(servers: Any) -> None:
            if not isinstance(servers, dict):
                return
            for key in servers:
                if key not in server_ids:
                    server_ids.append(key)

        if self.user_config_path.exists():
            try:
                payload = load_json_object(self.user_config_path)
            except StoreFileError as exc:
                logger.warning("Cannot read Claude Code user config: %s", exc)
            else:
                _collect(payload.get(MCP_SERVERS_KEY))
                projects = payload.get("projects")
                if isinstance(projects, dict):
                    for key in self._project_keys():
                        project = projects.get(key)
                        if isinstance(project, dict):
                            _collect(project.get(MCP_SERVERS_KEY))

        if self.settings_path.exists():
            try:
                settings = load_json_object(self.settings_path)
            except StoreFileError as exc:
                logger.warning("Cannot read Claude Code settings: %s", exc)
            else:
                _collect(settings.get(MCP_SERVERS_KEY))

        return server_ids

    def add_server_to_agent(
        self, server_id: str, config: Configuration | None = None
    ) -> bool:
        if self.user_config_path.exists():
            payload = load_json_object(self.user_config_path)
            server_table(payload)[server_id] = self._user_entry(server_id, config)
            write_json(self.user_config_path, payload)
            return True

        settings = load_json_object(self.settings_path)
        server_table(settings)[server_id] = build_stdio_entry(server_id, config)
        write_json(self.settings_path, settings)
        return True

    def remove_server_from_agent(self, server_id: str) -> bool:
        for path in (self.user_config_path, self.settings_path):
            if not path.exists():
                continue
            payload = load_json_object(path)
            servers = payload.get(MCP_SERVERS_KEY)
            if isinstance(servers, dict) and server_id in servers:
                del servers[server_id]
                write_json(path, payload)
                return True
        return False

    def set_server_enabled(self, server_id: str, enabled: bool) -> bool:
        for path in (self.user_config_path, self.settings_path):
            if not path.exists():
                continue
            payload = load_json_object(path)
            servers = payload.get(MCP_SERVERS_KEY)
            if not isinstance(servers, dict):
                continue
            entry = servers.get(server_id)
            if not isinstance(entry, dict):
                continue
            if enabled:
                entry.pop("disabled", None)
            else:
                entry["disabled"] = True
            write_json(path, payload)
            return True
        return False

    def _project_keys(self) -> list[str]:
        current = str(self.project_dir)
        keys = [current, current.replace("\\", "/"), current.replace("/", "\\")]
        return list(dict.fromkeys(keys))

    @staticmethod
    def _user_entry(server_id: str, config: Configuration | None) -> dict[str, Any]:
        server_type = (config or {}).get("type", "stdio")
        if server_type == "http":
            entry: dict[str, Any] = {"type": "http"}
            url = (config or {}).get("url")
            if url:
                entry["url"] = url
            return entry
        return {"type": "stdio", **build_stdio_entry(server_id, config)}
