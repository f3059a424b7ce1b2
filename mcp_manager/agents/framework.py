from abc import ABCMeta, abstractmethod
from pathlib import Path
from typing import Any, ClassVar, cast

from mcp_manager.agents.agent_type import agent_metadata
from mcp_manager.agents.interfaces import IAgentConnector
from mcp_manager.models import AgentType


class ConnectorRegistryMeta(ABCMeta):
    _registry: dict[AgentType, type["RegisteredAgentConnector"]] = {}

    def __new__(
        mcls,
        name: str,
        bases: tuple[type, ...],
        namespace: dict[str, Any],
        **kwargs: Any,
    ):
        cls = super().__new__(mcls, name, bases, namespace, **kwargs)
        agent_type = getattr(cls, "AGENT_TYPE", None)
        is_abstract = bool(getattr(cls, "__abstractmethods__", False))
        if agent_type is not None and not is_abstract:
            mcls._registry[agent_type] = cast(type["RegisteredAgentConnector"], cls)
        return cls


class RegisteredAgentConnector(IAgentConnector, metaclass=ConnectorRegistryMeta):
    AGENT_TYPE: ClassVar[AgentType | None] = None

    @property
    def agent_type(self) -> AgentType:
        if self.AGENT_TYPE is None:
            raise NotImplementedError(f"{type(self).__name__} has no AGENT_TYPE")
        return self.AGENT_TYPE

    @classmethod
    @abstractmethod
    def create_default(cls, home: Path | None = None) -> "RegisteredAgentConnector":
        raise NotImplementedError


def list_registered_connectors() -> list[AgentType]:
    _load_registered_modules()
    return sorted(ConnectorRegistryMeta._registry.keys(), key=lambda item: item.value)


def create_registered_connector(
    agent_type: AgentType, home: Path | None = None
) -> RegisteredAgentConnector:
    _load_registered_modules()
    connector_class = ConnectorRegistryMeta._registry.get(agent_type)
    if connector_class is None:
        raise KeyError(f"No connector registered for: {agent_type.value}")
    return connector_class.create_default(home=home)


def create_default_connectors(home: Path | None = None) -> list[IAgentConnector]:
    return [
        create_registered_connector(agent_type, home=home)
        for agent_type in list_registered_connectors()
        if agent_metadata(agent_type).connectable
    ]


def _load_registered_modules() -> None:
    from mcp_manager.agents.loader import load_connector_modules

    load_connector_modules()
