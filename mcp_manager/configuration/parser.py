import json
import uuid
from dataclasses import dataclass
from typing import Any

from mcp_manager.models import Configuration, McpServer

DEFAULT_VERSION = "1.0.0"
DEFAULT_AUTHOR = "Custom"
DEFAULT_NAME = "Custom MCP Server"


@dataclass(frozen=True)
class ParseResult:
    success: bool
    server: McpServer | None = None
    error: str = ""


def generate_server_id() -> str:
    return f"custom-{uuid.uuid4().hex}"[:20]


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, (list, dict)):
        return json.dumps(value)
    return str(value)


class ConfigurationParser:
    """Builds an ``McpServer`` from configuration text pasted by the user.

    Accepted shapes: a full document with ``mcpServers`` (the first server is
    used), a single command-style entry, or a plain key/value object.
    """

    def parse_configuration(
        self, config_text: str | None, server_id: str | None = None
    ) -> ParseResult:
        if config_text is None or not config_text.strip():
            return ParseResult(False, error="Configuration text cannot be empty")

        try:
            root = json.loads(config_text)
        except json.JSONDecodeError as exc:
            return ParseResult(False, error=f"Invalid JSON: {exc}")

        if not isinstance(root, dict):
            return ParseResult(False, error="Unrecognized configuration format")
        if "mcpServers" in root:
            return self._parse_full(root["mcpServers"])
        if "command" in root:
            return self._parse_command_entry(root, server_id)
        return self._parse_simple(root, server_id)

    def create_server_from_manual_input(
        self,
        server_id: str,
        name: str,
        description: str,
        command: str,
        args: str,
        env_vars: dict[str, str] | None = None,
        version: str | None = None,
        author: str | None = None,
    ) -> McpServer:
        configuration: Configuration = {"command": command, "args": args}
        if env_vars:
            configuration["env"] = json.dumps(env_vars)
        return McpServer(
            id=server_id.strip() or generate_server_id(),
            name=name,
            description=description,
            version=version or DEFAULT_VERSION,
            author=author or DEFAULT_AUTHOR,
            configuration=configuration,
        )

    def _parse_full(self, servers: Any) -> ParseResult:
        if not isinstance(servers, dict):
            return ParseResult(False, error="mcpServers must be an object")
        if not servers:
            return ParseResult(False, error="No servers found in configuration")

        server_id, entry = next(iter(servers.items()))
        if not isinstance(entry, dict):
            return ParseResult(False, error=f"Server entry must be an object: {server_id}")
        if "command" in entry:
            return self._parse_command_entry(entry, server_id)
        return self._parse_simple(entry, server_id)

    def _parse_command_entry(
        self, entry: dict[str, Any], server_id: str | None
    ) -> ParseResult:
        configuration: Configuration = {"command": _stringify(entry.get("command"))}

        args = entry.get("args")
        if isinstance(args, list):
            configuration["args"] = " ".join(_stringify(item) for item in args)
        elif args is not None:
            configuration["args"] = _stringify(args)

        if "env" in entry:
            configuration["env"] = json.dumps(entry["env"])

        for key, value in entry.items():
            configuration.setdefault(key, _stringify(value))

        return ParseResult(True, server=self._new_server(server_id, configuration))

    def _parse_simple(
        self, entry: dict[str, Any], server_id: str | None
    ) -> ParseResult:
        configuration = {key: _stringify(value) for key, value in entry.items()}
        return ParseResult(True, server=self._new_server(server_id, configuration))

    @staticmethod
    def _new_server(server_id: str | None, configuration: Configuration) -> McpServer:
        return McpServer(
            id=server_id or generate_server_id(),
            name=server_id or DEFAULT_NAME,
            description=DEFAULT_NAME,
            version=DEFAULT_VERSION,
            author=DEFAULT_AUTHOR,
            configuration=configuration,
        )
