from typing import Final


APP_DIRNAME: Final[str] = "mcp-manager"
HOME_ENV_VAR: Final[str] = "MCP_MANAGER_HOME"

SERVERS_FILENAME: Final[str] = "servers.json"
INSTALLATIONS_FILENAME: Final[str] = "installations.json"

EMPTY_CONFIGURATION_TEXT: Final[str] = "{}"

AUTO_DISCOVERED_TAG: Final[str] = "auto-discovered"
DEFAULT_SYNC_INTERVAL_SECONDS: Final[int] = 300
DEFAULT_WATCH_POLL_SECONDS: Final[float] = 1.0
DEFAULT_WATCH_DEBOUNCE_SECONDS: Final[float] = 0.1
CLAUDE_USER_CONFIG_FILENAME: Final[str] = ".claude.json"
