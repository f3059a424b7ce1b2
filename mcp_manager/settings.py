"""Runtime settings for the MCP manager."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from mcp_manager.constants import (
    APP_DIRNAME,
    HOME_ENV_VAR,
    INSTALLATIONS_FILENAME,
    SERVERS_FILENAME,
)


@dataclass(frozen=True)
class RuntimeSettings:
    home_dir: Path

    @property
    def servers_file(self) -> Path:
        return self.home_dir / SERVERS_FILENAME

    @property
    def installations_file(self) -> Path:
        return self.home_dir / INSTALLATIONS_FILENAME


def _default_home_dir() -> Path:
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / APP_DIRNAME


def load_settings() -> RuntimeSettings:
    return RuntimeSettings(home_dir=_default_home_dir())
