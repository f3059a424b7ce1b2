import json
import logging
import threading
from pathlib import Path

import pytest

from mcp_manager.agents import AgentManager
from mcp_manager.agents.connectors import ClaudeConnector
from mcp_manager.installations import InstallationManager
from mcp_manager.servers import ServerManager
from mcp_manager.sync import AgentServerSyncService, ConfigurationChange, ConfigurationWatcher


@pytest.fixture
def claude_file(tmp_path: Path, write_json) -> Path:
    path = ClaudeConnector.create_default(home=tmp_path).config_path
    write_json(path, {"mcpServers": {"github": {"command": "npx"}}})
    return path


@pytest.fixture
def claude_agents(claude_file: Path) -> AgentManager:
    return AgentManager([ClaudeConnector(config_path=claude_file)])


def _edit(path: Path, servers: dict) -> None:
    # A longer payload changes the size even when mtime resolution is coarse.
    path.write_text(json.dumps({"mcpServers": servers}, indent=2), encoding="utf-8")


def test_watched_paths_cover_agents_and_user_claude_config(
    tmp_path: Path, claude_file: Path, claude_agents, write_json
) -> None:
    watcher = ConfigurationWatcher(claude_agents, home=tmp_path)
    assert watcher.watched_paths() == {claude_file: "claude"}

    write_json(tmp_path / ".claude.json", {"mcpServers": {}})
    assert watcher.watched_paths() == {
        claude_file: "claude",
        tmp_path / ".claude.json": "claudecode",
    }


def test_poll_reports_edited_file(tmp_path: Path, claude_file: Path, claude_agents) -> None:
    watcher = ConfigurationWatcher(claude_agents, home=tmp_path)
    watcher.start()

    assert watcher.poll() == []

    _edit(claude_file, {"github": {"command": "npx"}, "postgres": {"command": "uvx"}})

    assert watcher.poll() == [ConfigurationChange("claude", claude_file)]
    assert watcher.poll() == []


def test_poll_reports_deleted_file(tmp_path: Path, claude_file: Path, claude_agents) -> None:
    watcher = ConfigurationWatcher(claude_agents, home=tmp_path)
    watcher.start()

    claude_file.unlink()

    assert watcher.poll() == [ConfigurationChange("claude", claude_file)]


def test_edit_triggers_sync_pass(tmp_path: Path, claude_file: Path, claude_agents) -> None:
    connectors = [ClaudeConnector(config_path=claude_file)]
    servers = ServerManager()
    installations = InstallationManager(claude_agents, connectors)
    service = AgentServerSyncService(claude_agents, servers, installations)
    service.sync()

    watcher = ConfigurationWatcher(claude_agents, home=tmp_path, poll_interval=0.01, debounce=0)
    watcher.start()
    _edit(claude_file, {"github": {"command": "npx"}, "postgres": {"command": "uvx"}})

    stop_event = threading.Event()
    seen: list[list[ConfigurationChange]] = []

    def _on_change(changes: list[ConfigurationChange]) -> None:
        seen.append(changes)
        service.sync()
        stop_event.set()

    runner = threading.Thread(target=watcher.run, args=(_on_change, stop_event))
    runner.start()
    runner.join(timeout=5)
    stop_event.set()

    assert not runner.is_alive()
    assert seen == [[ConfigurationChange("claude", claude_file)]]
    assert servers.get_server_by_id("postgres") is not None
    assert [item.server_id for item in installations.get_installations_by_agent_id("claude")] == [
        "github",
        "postgres",
    ]
    assert watcher.is_watching is False


def test_failed_handler_keeps_watching(
    tmp_path: Path, claude_file: Path, claude_agents, caplog
) -> None:
    watcher = ConfigurationWatcher(claude_agents, home=tmp_path, poll_interval=0.01, debounce=0)
    watcher.start()
    stop_event = threading.Event()
    calls = []

    def _on_change(changes: list[ConfigurationChange]) -> None:
        calls.append(changes)
        if len(calls) == 1:
            _edit(claude_file, {"a": {"command": "npx"}, "b": {"command": "npx"}, "c": {}})
            raise OSError("permission denied")
        stop_event.set()

    _edit(claude_file, {"github": {"command": "npx"}, "postgres": {"command": "uvx"}})
    runner = threading.Thread(target=watcher.run, args=(_on_change, stop_event))
    with caplog.at_level(logging.ERROR, logger="mcp_manager"):
        runner.start()
        runner.join(timeout=5)
    stop_event.set()

    assert len(calls) == 2
    assert "permission denied" in caplog.text
