import json
import logging
import re
import tomllib
from pathlib import Path
from typing import Any

from mcp_manager.agents.connectors.common import build_stdio_entry
from mcp_manager.agents.framework import RegisteredAgentConnector
from mcp_manager.errors import InvalidStoreSchemaError, InvalidTomlFormatError, StoreFileError
from mcp_manager.models import AgentType, Configuration

logger = logging.getLogger(__name__)

MCP_SERVERS_TABLE = "mcp_servers"

_BARE_KEY = re.compile(r"^[A-Za-z0-9_-]+$")


def _toml_key(key: str) -> str:
    return key if _BARE_KEY.match(key) else json.dumps(key, ensure_ascii=False)


def _dump_toml_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, list):
        return "[" + ", ".join(_dump_toml_value(item) for item in value) + "]"
    if isinstance(value, dict):
        items = ", ".join(
            f"{_toml_key(str(k))} = {_dump_toml_value(v)}"
            for k, v in value.items()
            if v is not None
        )
        return "{ " + items + " }" if items else "{}"
    return json.dumps(str(value), ensure_ascii=False)


def _dump_table(lines: list[str], path: list[str], table: dict[str, Any]) -> None:
    scalars = [
        (key, value)
        for key, value in table.items()
        if value is not None and not isinstance(value, dict)
    ]
    tables = [(key, value) for key, value in table.items() if isinstance(value, dict)]

    if path and (scalars or not tables):
        lines.append("[" + ".".join(_toml_key(part) for part in path) + "]")
    for key, value in scalars:
        lines.append(f"{_toml_key(key)} = {_dump_toml_value(value)}")
    if scalars or (path and not tables):
        lines.append("")

    for key, value in tables:
        _dump_table(lines, [*path, key], value)


def dump_toml(payload: dict[str, Any]) -> str:
    lines: list[str] = []
    _dump_table(lines, [], payload)
    return "\n".join(lines).strip() + "\n"


class CodexConnector(RegisteredAgentConnector):
    """OpenAI Codex: ``[mcp_servers.<id>]`` tables in ``~/.codex/config.toml``."""

    AGENT_TYPE = AgentType.OPENAI_CODEX

    def __init__(self, root: Path) -> None:
        self._root = root

    @classmethod
    def create_default(cls, home: Path | None = None) -> "CodexConnector":
        return cls(root=(home or Path.home()) / ".codex")

    @property
    def root(self) -> Path:
        return self._root

    @property
    def config_path(self) -> Path:
        return self.root / "config.toml"

    def is_agent_installed(self) -> bool:
        return self.config_path.exists() or self.root.is_dir()

    def get_configuration_path(self) -> Path:
        return self.config_path

    def load_config(self) -> dict[str, Any]:
        if not self.config_path.exists() or self.config_path.stat().st_size == 0:
            return {}
        try:
            payload = tomllib.loads(self.config_path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as exc:
            raise InvalidTomlFormatError(self.config_path, str(exc)) from exc
        if not isinstance(payload, dict):
            raise InvalidStoreSchemaError(self.config_path, "must be a TOML table")
        return payload

    def save_config(self, payload: dict[str, Any]) -> None:
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        self.config_path.write_text(dump_toml(payload), encoding="utf-8")

    def get_configured_server_ids(self) -> list[str]:
        try:
            payload = self.load_config()
        except StoreFileError as exc:
            logger.warning("Cannot read Codex config: %s", exc)
            return []
        servers = payload.get(MCP_SERVERS_TABLE)
        return list(servers) if isinstance(servers, dict) else []

    def add_server_to_agent(
        self, server_id: str, config: Configuration | None = None
    ) -> bool:
        payload = self.load_config()
        servers = payload.get(MCP_SERVERS_TABLE)
        if not isinstance(servers, dict):
            servers = {}
            payload[MCP_SERVERS_TABLE] = servers
        servers[server_id] = self._entry(server_id, config)
        self.save_config(payload)
        return True

    def remove_server_from_agent(self, server_id: str) -> bool:
        if not self.config_path.exists():
            return False
        payload = self.load_config()
        servers = payload.get(MCP_SERVERS_TABLE)
        if not isinstance(servers, dict) or server_id not in servers:
            return False
        del servers[server_id]
        self.save_config(payload)
        return True

    def set_server_enabled(self, server_id: str, enabled: bool) -> bool:
        if not self.config_path.exists():
            return False
        payload = self.load_config()
        servers = payload.get(MCP_SERVERS_TABLE)
        if not isinstance(servers, dict) or not isinstance(servers.get(server_id), dict):
            return False
        servers[server_id]["enabled"] = enabled
        self.save_config(payload)
        return True

    @staticmethod
    def _entry(server_id: str, config: Configuration | None) -> dict[str, Any]:
        url = (config or {}).get("url")
        if url:
            entry: dict[str, Any] = {"url": url}
        else:
            entry = build_stdio_entry(server_id, config)
        entry["enabled"] = True
        return entry
