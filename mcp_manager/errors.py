from pathlib import Path


class McpManagerError(Exception):
    """Base user-facing application error."""


class AgentNotFoundError(McpManagerError):
    def __init__(self, agent_id: str) -> None:
        self.agent_id = agent_id
        super().__init__(f"Agent {agent_id} not found")


class ConnectorNotFoundError(McpManagerError):
    def __init__(self, agent_type: str) -> None:
        self.agent_type = agent_type
        super().__init__(f"No connector found for agent type {agent_type}")


class ServerNotFoundError(McpManagerError):
    def __init__(self, server_id: str) -> None:
        self.server_id = server_id
        super().__init__(f"Server {server_id} not found")


class StoreFileError(McpManagerError):
    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{message}: {path}")


class InvalidJsonFormatError(StoreFileError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Invalid JSON format ({detail})")


class InvalidStoreSchemaError(StoreFileError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Invalid store schema ({detail})")


class InvalidTomlFormatError(StoreFileError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Invalid TOML format ({detail})")
