from mcp_manager.installations.interfaces import (
    IInstallationManager,
    IInstallationRepository,
)
from mcp_manager.installations.manager import InstallationManager
from mcp_manager.installations.repository import (
    InMemoryInstallationRepository,
    JsonInstallationRepository,
)

__all__ = [
    "IInstallationManager",
    "IInstallationRepository",
    "InMemoryInstallationRepository",
    "InstallationManager",
    "JsonInstallationRepository",
]
