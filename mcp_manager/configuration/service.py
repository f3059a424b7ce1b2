"""Configuration comparison, propagation and validation.

Propagation is compare-and-swap like: an installation only receives a new
global configuration when its own configuration equals the previous global
one. Installations that were customized per agent keep their values.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Mapping

from mcp_manager.constants import EMPTY_CONFIGURATION_TEXT
from mcp_manager.errors import McpManagerError
from mcp_manager.installations.interfaces import IInstallationManager
from mcp_manager.models import (
    Configuration,
    ConfigurationValidationResult,
    McpServer,
    PropagationResult,
    ServerInstallation,
)

logger = logging.getLogger(__name__)


class IConfigurationService(ABC):
    @abstractmethod
    def are_configurations_equal(
        self, first: Mapping[str, Any] | None, second: Mapping[str, Any] | None
    ) -> bool:
        raise NotImplementedError

    @abstractmethod
    def get_effective_configuration(
        self, server: McpServer, installation: ServerInstallation | None
    ) -> Configuration:
        raise NotImplementedError

    @abstractmethod
    def does_agent_config_match_global(
        self, server: McpServer, installation: ServerInstallation
    ) -> bool:
        raise NotImplementedError

    @abstractmethod
    def propagate_configuration_update(
        self,
        server_id: str,
        old_global_config: Configuration | None,
        new_global_config: Configuration | None,
        *,
        apply_to_agents: bool = False,
    ) -> PropagationResult:
        raise NotImplementedError

    @abstractmethod
    def validate_configuration(
        self, config: Mapping[Any, Any] | None
    ) -> ConfigurationValidationResult:
        raise NotImplementedError

    @abstractmethod
    def serialize_configuration(self, config: Mapping[str, str] | None) -> str:
        raise NotImplementedError

    @abstractmethod
    def deserialize_configuration(self, text: str | None) -> Configuration | None:
        raise NotImplementedError


class ConfigurationService(IConfigurationService):
    def __init__(self, installation_manager: IInstallationManager) -> None:
        self._installation_manager = installation_manager

    def are_configurations_equal(
        self, first: Mapping[str, Any] | None, second: Mapping[str, Any] | None
    ) -> bool:
        # None and {} both mean "no entries".
        first = first or {}
        second = second or {}
        if len(first) != len(second):
            return False
        for key, value in first.items():
            if key not in second or second[key] != value:
                return False
        return True

    def get_effective_configuration(
        self, server: McpServer, installation: ServerInstallation | None
    ) -> Configuration:
        if installation is not None and installation.agent_specific_config:
            return dict(installation.agent_specific_config)
        return dict(server.configuration or {})

    def does_agent_config_match_global(
        self, server: McpServer, installation: ServerInstallation
    ) -> bool:
        return self.are_configurations_equal(
            server.configuration or {}, installation.agent_specific_config or {}
        )

    def propagate_configuration_update(
        self,
        server_id: str,
        old_global_config: Configuration | None,
        new_global_config: Configuration | None,
        *,
        apply_to_agents: bool = False,
    ) -> PropagationResult:
        """Push ``new_global_config`` to installations still equal to the old one.

        Updates are applied one by one without rollback. A failing
        installation is recorded in ``failures`` and the loop moves on, so
        ``updated_ids`` is exactly what changed.
        """
        result = PropagationResult()
        manager = self._installation_manager

        for installation in manager.get_installations_by_server_id(server_id):
            try:
                updated = self._swap_if_tracking(
                    installation.id, old_global_config, new_global_config
                )
                if not updated:
                    continue
                result.updated_ids.append(installation.id)
                if apply_to_agents:
                    manager.apply_installation_config(installation.id)
            except (McpManagerError, OSError) as exc:
                logger.warning(
                    "Failed to propagate configuration to installation %s: %s",
                    installation.id,
                    exc,
                )
                result.failures[installation.id] = str(exc)

        logger.info(
            "Propagated configuration for %s to %d installation(s), %d failure(s)",
            server_id,
            len(result.updated_ids),
            len(result.failures),
        )
        return result

    def _swap_if_tracking(
        self,
        installation_id: str,
        old_global_config: Configuration | None,
        new_global_config: Configuration | None,
    ) -> bool:
        manager = self._installation_manager
        with manager.lock:
            # Re-read so the comparison sees the state the update replaces.
            current = manager.get_installation(installation_id)
            if current is None:
                return False
            if not self.are_configurations_equal(
                current.agent_specific_config, old_global_config
            ):
                return False
            return manager.update_installation_config(
                installation_id, dict(new_global_config or {})
            )

    def validate_configuration(
        self, config: Mapping[Any, Any] | None
    ) -> ConfigurationValidationResult:
        result = ConfigurationValidationResult()

        if config is None:
            result.add_error("Configuration cannot be null")
            return result

        for key, value in config.items():
            if not isinstance(key, str) or not key.strip():
                result.add_error("Configuration keys cannot be null or empty")
            if value is None:
                result.add_error(f"Configuration value for key '{key}' cannot be null")

        return result

    def serialize_configuration(self, config: Mapping[str, str] | None) -> str:
        if not config:
            return EMPTY_CONFIGURATION_TEXT
        return json.dumps(dict(config), indent=2)

    def deserialize_configuration(self, text: str | None) -> Configuration | None:
        """Parse serialized configuration.

        Blank input gives ``{}``; malformed input gives ``None``.
        """
        if text is None or not text.strip():
            return {}
        try:
            payload = json.loads(text)
        except json.JSONDecodeError:
            return None
        if payload is None:
            return {}
        if not isinstance(payload, dict):
            return None
        if not all(isinstance(value, str) for value in payload.values()):
            return None
        return dict(payload)
