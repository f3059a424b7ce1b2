from dataclasses import replace
from pathlib import Path

import pytest

from mcp_manager.errors import InvalidJsonFormatError, InvalidStoreSchemaError
from mcp_manager.installations import JsonInstallationRepository
from mcp_manager.models import McpServer, ServerInstallation
from mcp_manager.servers import JsonServerRepository


def test_installation_repository_missing_file_is_empty(tmp_path: Path) -> None:
    repository = JsonInstallationRepository(tmp_path / "installations.json")
    assert repository.list_all() == []


def test_installation_repository_empty_file_is_empty(tmp_path: Path) -> None:
    path = tmp_path / "installations.json"
    path.write_text("", encoding="utf-8")
    assert JsonInstallationRepository(path).list_all() == []


def test_installation_repository_persists_records(tmp_path: Path, read_json) -> None:
    path = tmp_path / "installations.json"
    repository = JsonInstallationRepository(path)
    installation = ServerInstallation(
        server_id="github", agent_id="claude", is_enabled=True,
        agent_specific_config={"command": "npx"},
    )

    repository.add(installation)

    payload = read_json(path)
    assert payload["installations"][0]["serverId"] == "github"
    assert payload["installations"][0]["agentSpecificConfig"] == {"command": "npx"}

    reloaded = JsonInstallationRepository(path).get(installation.id)
    assert reloaded is not None
    assert reloaded.agent_id == "claude"
    assert reloaded.is_enabled is True
    assert reloaded.installed_at == installation.installed_at


def test_installation_repository_save_and_remove(tmp_path: Path) -> None:
    path = tmp_path / "installations.json"
    repository = JsonInstallationRepository(path)
    installation = ServerInstallation(server_id="github", agent_id="claude")
    repository.add(installation)

    repository.save(replace(installation, is_enabled=True))
    assert JsonInstallationRepository(path).find("github", "claude").is_enabled is True

    assert repository.remove(installation.id) is True
    assert repository.remove(installation.id) is False
    assert JsonInstallationRepository(path).list_all() == []


def test_installation_repository_rejects_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "installations.json"
    path.write_text("{broken", encoding="utf-8")
    with pytest.raises(InvalidJsonFormatError):
        JsonInstallationRepository(path)


def test_installation_repository_rejects_bad_schema(tmp_path: Path, write_json) -> None:
    path = tmp_path / "installations.json"
    write_json(path, {"installations": [{"id": "x", "serverId": "github"}]})
    with pytest.raises(InvalidStoreSchemaError, match="agentId"):
        JsonInstallationRepository(path)


def test_server_repository_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "servers.json"
    repository = JsonServerRepository(path)
    repository.add(
        McpServer(
            id="github",
            name="GitHub",
            tags=["git"],
            configuration={"command": "npx", "args": "-y github"},
        )
    )

    reloaded = JsonServerRepository(path)
    server = reloaded.get_by_id("github")
    assert server is not None
    assert server.name == "GitHub"
    assert server.tags == ["git"]
    assert server.configuration == {"command": "npx", "args": "-y github"}
    assert reloaded.exists("github")
    assert not reloaded.exists("missing")


def test_server_repository_update_and_delete(tmp_path: Path) -> None:
    path = tmp_path / "servers.json"
    repository = JsonServerRepository(path)
    repository.add(McpServer(id="github"))

    assert repository.update(McpServer(id="github", name="Renamed")) is True
    assert repository.update(McpServer(id="missing")) is False
    assert JsonServerRepository(path).get_by_id("github").name == "Renamed"

    assert repository.delete("github") is True
    assert repository.delete("github") is False
    assert JsonServerRepository(path).get_all() == []


def test_server_repository_rejects_non_string_configuration(
    tmp_path: Path, write_json
) -> None:
    path = tmp_path / "servers.json"
    write_json(path, {"servers": [{"id": "github", "configuration": {"port": 1}}]})
    with pytest.raises(InvalidStoreSchemaError):
        JsonServerRepository(path)


def test_installation_repository_rolls_back_failed_write(tmp_path: Path, monkeypatch) -> None:
    path = tmp_path / "installations.json"
    repository = JsonInstallationRepository(path)
    installation = ServerInstallation(server_id="github", agent_id="claude")
    repository.add(installation)

    def _fail(target, payload) -> None:
        raise OSError("disk full")

    monkeypatch.setattr("mcp_manager.installations.repository.write_json", _fail)

    with pytest.raises(OSError):
        repository.save(replace(installation, is_enabled=True))
    with pytest.raises(OSError):
        repository.add(ServerInstallation(server_id="postgres", agent_id="claude"))
    with pytest.raises(OSError):
        repository.remove(installation.id)

    assert repository.list_all() == [installation]
    assert repository.get(installation.id).is_enabled is False


def test_server_repository_rolls_back_failed_write(tmp_path: Path, monkeypatch) -> None:
    repository = JsonServerRepository(tmp_path / "servers.json")
    server = McpServer(id="github", configuration={"command": "npx"})
    repository.add(server)

    def _fail(target, payload) -> None:
        raise OSError("disk full")

    monkeypatch.setattr("mcp_manager.servers.repository.write_json", _fail)

    with pytest.raises(OSError):
        repository.update(replace(server, configuration={"command": "uvx"}))
    with pytest.raises(OSError):
        repository.delete("github")

    assert repository.get_by_id("github").configuration == {"command": "npx"}
