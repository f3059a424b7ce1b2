from mcp_manager.sync.service import AgentServerSyncService
from mcp_manager.sync.watcher import ConfigurationChange, ConfigurationWatcher

__all__ = ["AgentServerSyncService", "ConfigurationChange", "ConfigurationWatcher"]
