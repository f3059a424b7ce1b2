from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from mcp_manager.utils import format_timestamp, new_id, parse_timestamp, utc_now


Configuration = dict[str, str]


class AgentType(str, Enum):
    CLAUDE = "claude"
    GITHUB_COPILOT = "githubcopilot"
    OPENAI_CODEX = "openaicodex"
    CLAUDE_CODE = "claudecode"
    OTHER = "other"


@dataclass
class McpServer:
    id: str
    name: str = ""
    description: str = ""
    version: str = ""
    author: str = ""
    repository_url: str = ""
    install_command: str = ""
    tags: list[str] = field(default_factory=list)
    is_installed: bool = False
    installed_at: datetime | None = None
    configuration: Configuration = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "version": self.version,
            "author": self.author,
            "repositoryUrl": self.repository_url,
            "installCommand": self.install_command,
            "tags": list(self.tags),
            "isInstalled": self.is_installed,
            "installedAt": format_timestamp(self.installed_at),
            "configuration": dict(self.configuration),
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "McpServer":
        return cls(
            id=payload["id"],
            name=payload.get("name", ""),
            description=payload.get("description", ""),
            version=payload.get("version", ""),
            author=payload.get("author", ""),
            repository_url=payload.get("repositoryUrl", ""),
            install_command=payload.get("installCommand", ""),
            tags=list(payload.get("tags", [])),
            is_installed=bool(payload.get("isInstalled", False)),
            installed_at=parse_timestamp(payload.get("installedAt")),
            configuration=dict(payload.get("configuration", {})),
        )


@dataclass
class Agent:
    id: str
    name: str
    type: AgentType
    is_detected: bool = False
    config_path: str = ""
    configured_server_ids: list[str] = field(default_factory=list)


@dataclass
class ServerInstallation:
    """Tracks that a server is configured for an agent.

    An empty ``agent_specific_config`` means the installation defers to the
    server's global configuration.
    """

    server_id: str
    agent_id: str
    is_enabled: bool = False
    agent_specific_config: Configuration = field(default_factory=dict)
    id: str = field(default_factory=new_id)
    installed_at: datetime = field(default_factory=utc_now)
    updated_at: datetime | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "serverId": self.server_id,
            "agentId": self.agent_id,
            "isEnabled": self.is_enabled,
            "installedAt": format_timestamp(self.installed_at),
            "updatedAt": format_timestamp(self.updated_at),
            "agentSpecificConfig": dict(self.agent_specific_config),
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "ServerInstallation":
        return cls(
            id=payload["id"],
            server_id=payload["serverId"],
            agent_id=payload["agentId"],
            is_enabled=bool(payload.get("isEnabled", False)),
            installed_at=parse_timestamp(payload.get("installedAt")) or utc_now(),
            updated_at=parse_timestamp(payload.get("updatedAt")),
            agent_specific_config=dict(payload.get("agentSpecificConfig", {})),
        )


@dataclass
class ConfigurationValidationResult:
    is_valid: bool = True
    errors: list[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        self.is_valid = False
        self.errors.append(message)


@dataclass
class PropagationResult:
    updated_ids: list[str] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)


@dataclass(frozen=True)
class SyncReport:
    processed: int
    new_servers: int
    linked: int = 0
    errors: tuple[str, ...] = ()
