from mcp_manager.configuration.parser import ConfigurationParser, ParseResult
from mcp_manager.configuration.service import (
    ConfigurationService,
    IConfigurationService,
)

__all__ = [
    "ConfigurationParser",
    "ConfigurationService",
    "IConfigurationService",
    "ParseResult",
]
