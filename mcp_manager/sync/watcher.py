"""Watch agent config files and report edits made outside this tool.

Files are compared by modification time and size on every poll. Editors
often write a file several times in a row, so a detected change waits for
the debounce period and is merged with anything else that changed meanwhile.
"""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from mcp_manager.agents.interfaces import IAgentManager
from mcp_manager.constants import (
    CLAUDE_USER_CONFIG_FILENAME,
    DEFAULT_WATCH_DEBOUNCE_SECONDS,
    DEFAULT_WATCH_POLL_SECONDS,
)
from mcp_manager.errors import McpManagerError
from mcp_manager.models import AgentType

logger = logging.getLogger(__name__)

FileStamp = tuple[int, int]


@dataclass(frozen=True)
class ConfigurationChange:
    agent_id: str
    path: Path


def _stamp(path: Path) -> FileStamp | None:
    try:
        stat = path.stat()
    except OSError:
        return None
    return stat.st_mtime_ns, stat.st_size


class ConfigurationWatcher:
    def __init__(
        self,
        agent_manager: IAgentManager,
        *,
        home: Path | None = None,
        poll_interval: float = DEFAULT_WATCH_POLL_SECONDS,
        debounce: float = DEFAULT_WATCH_DEBOUNCE_SECONDS,
    ) -> None:
        self._agent_manager = agent_manager
        self._home = home or Path.home()
        self._poll_interval = poll_interval
        self._debounce = debounce
        self._watched: dict[Path, str] = {}
        self._stamps: dict[Path, FileStamp | None] = {}
        self._started = False

    @property
    def is_watching(self) -> bool:
        return self._started

    def watched_paths(self) -> dict[Path, str]:
        """Config files of detected agents mapped to the owning agent id."""
        paths: dict[Path, str] = {}
        for agent in self._agent_manager.detect_installed_agents():
            if agent.config_path:
                paths.setdefault(Path(agent.config_path), agent.id)
        # Claude Code keeps user-level servers here even when it reports its
        # settings file as the config path.
        user_config = self._home / CLAUDE_USER_CONFIG_FILENAME
        if user_config.exists():
            paths.setdefault(user_config, AgentType.CLAUDE_CODE.value)
        return paths

    def start(self) -> None:
        self._watched = self.watched_paths()
        self._stamps = {path: _stamp(path) for path in self._watched}
        if not self._started:
            for path, agent_id in self._watched.items():
                logger.info("Watching configuration for agent %s at %s", agent_id, path)
        self._started = True

    def _refresh(self) -> None:
        # Pick up agents whose files appeared since the last pass. Known files
        # keep their stamps so edits made during a pass are still reported.
        watched = self.watched_paths()
        for path, agent_id in watched.items():
            if path not in self._stamps:
                self._stamps[path] = _stamp(path)
                logger.info("Watching configuration for agent %s at %s", agent_id, path)
        self._watched = watched

    def stop(self) -> None:
        self._started = False
        self._watched = {}
        self._stamps = {}

    def poll(self) -> list[ConfigurationChange]:
        changes: list[ConfigurationChange] = []
        for path, agent_id in self._watched.items():
            current = _stamp(path)
            if current != self._stamps.get(path):
                self._stamps[path] = current
                changes.append(ConfigurationChange(agent_id=agent_id, path=path))
        return changes

    def run(
        self,
        on_change: Callable[[list[ConfigurationChange]], None],
        stop_event: threading.Event | None = None,
    ) -> None:
        """Call ``on_change`` after each settled burst of edits until stopped."""
        stop_event = stop_event or threading.Event()
        if not self._started:
            self.start()
        try:
            while not stop_event.wait(self._poll_interval):
                changes = self.poll()
                if not changes:
                    continue
                if self._debounce > 0:
                    stop_event.wait(self._debounce)
                changes = _merge(changes, self.poll())
                for change in changes:
                    logger.info(
                        "Configuration file changed for agent %s at %s",
                        change.agent_id,
                        change.path,
                    )
                try:
                    on_change(changes)
                except (McpManagerError, OSError) as exc:
                    logger.error("Handling configuration change failed: %s", exc)
                self._refresh()
        finally:
            self.stop()


def _merge(
    first: list[ConfigurationChange], second: list[ConfigurationChange]
) -> list[ConfigurationChange]:
    merged = list(first)
    for change in second:
        if change not in merged:
            merged.append(change)
    return merged
