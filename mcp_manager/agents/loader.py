"""Imports the connector modules so their classes register themselves."""

import importlib
from functools import lru_cache

CONNECTOR_PACKAGE = "mcp_manager.agents.connectors"
CONNECTOR_MODULES: tuple[str, ...] = ("claude", "claude_code", "codex", "copilot")


@lru_cache(maxsize=1)
def load_connector_modules() -> tuple[str, ...]:
    """Import every connector module once and return the loaded module names."""
    loaded = []
    for name in CONNECTOR_MODULES:
        module = importlib.import_module(f"{CONNECTOR_PACKAGE}.{name}")
        loaded.append(module.__name__)
    return tuple(loaded)
