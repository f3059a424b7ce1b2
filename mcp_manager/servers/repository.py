from pathlib import Path

from mcp_manager.errors import InvalidJsonFormatError, InvalidStoreSchemaError
from mcp_manager.models import McpServer
from mcp_manager.schemas import SERVERS_SCHEMA, format_schema_error, schema_validator
from mcp_manager.servers.interfaces import IServerRepository
from mcp_manager.utils import read_json_safe, write_json


class InMemoryServerRepository(IServerRepository):
    def __init__(self, servers: list[McpServer] | None = None) -> None:
        self._servers: dict[str, McpServer] = {}
        for server in servers or []:
            self._servers[server.id] = server

    def get_all(self) -> list[McpServer]:
        return list(self._servers.values())

    def get_by_id(self, server_id: str) -> McpServer | None:
        return self._servers.get(server_id)

    def add(self, server: McpServer) -> None:
        self._servers[server.id] = server

    def update(self, server: McpServer) -> bool:
        if server.id not in self._servers:
            return False
        self._servers[server.id] = server
        return True

    def delete(self, server_id: str) -> bool:
        return self._servers.pop(server_id, None) is not None


class JsonServerRepository(InMemoryServerRepository):
    """Installed servers persisted to ``servers.json``."""

    def __init__(self, path: Path) -> None:
        self._path = path
        super().__init__(self._load())

    @property
    def path(self) -> Path:
        return self._path

    def add(self, server: McpServer) -> None:
        previous = dict(self._servers)
        super().add(server)
        self._commit(previous)

    def update(self, server: McpServer) -> bool:
        previous = dict(self._servers)
        updated = super().update(server)
        if updated:
            self._commit(previous)
        return updated

    def delete(self, server_id: str) -> bool:
        previous = dict(self._servers)
        deleted = super().delete(server_id)
        if deleted:
            self._commit(previous)
        return deleted

    def _load(self) -> list[McpServer]:
        payload, error = read_json_safe(self._path)
        if error is not None:
            raise InvalidJsonFormatError(self._path, error)
        if payload is None:
            return []
        issue = next(iter(schema_validator(SERVERS_SCHEMA).iter_errors(payload)), None)
        if issue is not None:
            raise InvalidStoreSchemaError(self._path, format_schema_error(issue))
        return [McpServer.from_dict(item) for item in payload["servers"]]

    def _commit(self, previous: dict[str, McpServer]) -> None:
        try:
            write_json(self._path, {"servers": [item.as_dict() for item in self.get_all()]})
        except OSError:
            self._servers = previous
            raise
