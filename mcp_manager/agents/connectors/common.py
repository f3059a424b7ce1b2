"""Shared plumbing for connectors backed by a JSON config file."""

import json
import logging
from abc import abstractmethod
from pathlib import Path
from typing import Any

from mcp_manager.agents.framework import RegisteredAgentConnector
from mcp_manager.errors import InvalidJsonFormatError, InvalidStoreSchemaError
from mcp_manager.models import Configuration
from mcp_manager.utils import read_json_safe, write_json

logger = logging.getLogger(__name__)

MCP_SERVERS_KEY = "mcpServers"


def split_args(value: str) -> list[str]:
    return [part for part in value.split(" ") if part]


def parse_env(value: str | None) -> dict[str, str]:
    if not value:
        return {}
    try:
        payload = json.loads(value)
    except json.JSONDecodeError:
        logger.warning("Ignoring env value that is not a JSON object: %s", value)
        return {}
    if not isinstance(payload, dict):
        return {}
    return {str(k): str(v) for k, v in payload.items()}


def build_stdio_entry(
    server_id: str,
    config: Configuration | None,
    *,
    default_command: str = "npx",
) -> dict[str, Any]:
    config = config or {}
    entry: dict[str, Any] = {
        "command": config.get("command") or default_command,
        "args": split_args(config.get("args", f"-y {server_id}")),
    }
    env = parse_env(config.get("env"))
    if env:
        entry["env"] = env
    return entry


def load_json_object(path: Path) -> dict[str, Any]:
    payload, error = read_json_safe(path)
    if error is not None:
        raise InvalidJsonFormatError(path, error)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise InvalidStoreSchemaError(path, "must be a JSON object")
    return payload


def server_table(payload: dict[str, Any], key: str = MCP_SERVERS_KEY) -> dict[str, Any]:
    servers = payload.get(key)
    if not isinstance(servers, dict):
        servers = {}
        payload[key] = servers
    return servers


class JsonAgentConnector(RegisteredAgentConnector):
    """Connector whose servers live under ``mcpServers`` in one JSON file."""

    def __init__(self, config_path: Path) -> None:
        self._config_path = config_path

    @property
    def config_path(self) -> Path:
        return self._config_path

    @abstractmethod
    def is_agent_installed(self) -> bool:
        raise NotImplementedError

    def get_configuration_path(self) -> Path:
        return self.config_path

    def build_entry(self, server_id: str, config: Configuration | None) -> Any:
        return dict(config or {})

    def apply_enabled(self, entry: dict[str, Any], enabled: bool) -> None:
        entry["enabled"] = "true" if enabled else "false"

    def get_configured_server_ids(self) -> list[str]:
        try:
            payload = load_json_object(self.config_path)
        except (InvalidJsonFormatError, InvalidStoreSchemaError) as exc:
            logger.warning("Cannot read %s config: %s", self.agent_type.value, exc)
            return []
        servers = payload.get(MCP_SERVERS_KEY)
        return list(servers) if isinstance(servers, dict) else []

    def add_server_to_agent(
        self, server_id: str, config: Configuration | None = None
    ) -> bool:
        payload = load_json_object(self.config_path)
        server_table(payload)[server_id] = self.build_entry(server_id, config)
        write_json(self.config_path, payload)
        logger.debug("Wrote server %s to %s", server_id, self.config_path)
        return True

    def remove_server_from_agent(self, server_id: str) -> bool:
        if not self.config_path.exists():
            return False
        payload = load_json_object(self.config_path)
        servers = payload.get(MCP_SERVERS_KEY)
        if not isinstance(servers, dict) or server_id not in servers:
            return False
        del servers[server_id]
        write_json(self.config_path, payload)
        return True

    def set_server_enabled(self, server_id: str, enabled: bool) -> bool:
        if not self.config_path.exists():
            return False
        payload = load_json_object(self.config_path)
        servers = payload.get(MCP_SERVERS_KEY)
        if not isinstance(servers, dict) or not isinstance(servers.get(server_id), dict):
            return False
        self.apply_enabled(servers[server_id], enabled)
        write_json(self.config_path, payload)
        return True
