import sys
import json
from pathlib import Path
from typing import Any

from click.testing import CliRunner
import pytest


def _ensure_repo_on_path() -> None:
    repo_root = Path(__file__).resolve().parent.parent
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


_ensure_repo_on_path()

from mcp_manager.agents import AgentManager  # noqa: E402
from mcp_manager.agents.interfaces import IAgentConnector  # noqa: E402
from mcp_manager.configuration import ConfigurationService  # noqa: E402
from mcp_manager.installations import (  # noqa: E402
    InMemoryInstallationRepository,
    InstallationManager,
)
from mcp_manager.models import AgentType, Configuration  # noqa: E402


class FakeConnector(IAgentConnector):
    """Records connector calls instead of touching agent files."""

    def __init__(
        self,
        agent_type: AgentType = AgentType.CLAUDE,
        server_ids: list[str] | None = None,
        installed: bool = True,
    ) -> None:
        self._agent_type = agent_type
        self.installed = installed
        self.servers: dict[str, dict[str, str]] = {sid: {} for sid in server_ids or []}
        self.enabled: dict[str, bool] = {}
        self.calls: list[tuple[Any, ...]] = []
        self.fail_writes = False

    @property
    def agent_type(self) -> AgentType:
        return self._agent_type

    def is_agent_installed(self) -> bool:
        return self.installed

    def get_configuration_path(self) -> Path:
        return Path("/fake") / f"{self._agent_type.value}.json"

    def get_configured_server_ids(self) -> list[str]:
        return list(self.servers)

    def add_server_to_agent(
        self, server_id: str, config: Configuration | None = None
    ) -> bool:
        self.calls.append(("add", server_id, config))
        if self.fail_writes:
            raise OSError("disk full")
        self.servers[server_id] = dict(config or {})
        return True

    def remove_server_from_agent(self, server_id: str) -> bool:
        self.calls.append(("remove", server_id))
        return self.servers.pop(server_id, None) is not None

    def set_server_enabled(self, server_id: str, enabled: bool) -> bool:
        self.calls.append(("enabled", server_id, enabled))
        self.enabled[server_id] = enabled
        return server_id in self.servers

    def add_calls(self) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == "add"]


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / ".config"))
    monkeypatch.delenv("MCP_MANAGER_HOME", raising=False)
    monkeypatch.setattr(Path, "home", lambda: tmp_path)


@pytest.fixture
def write_json():
    def _write(path: Path, payload: dict) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload), encoding="utf-8")

    return _write


@pytest.fixture
def read_json():
    def _read(path: Path) -> Any:
        return json.loads(path.read_text(encoding="utf-8"))

    return _read


@pytest.fixture
def manager_root(tmp_path: Path) -> Path:
    return tmp_path / ".config" / "mcp-manager"


@pytest.fixture
def claude_connector() -> FakeConnector:
    return FakeConnector(AgentType.CLAUDE)


@pytest.fixture
def codex_connector() -> FakeConnector:
    return FakeConnector(AgentType.OPENAI_CODEX)


@pytest.fixture
def installation_repository() -> InMemoryInstallationRepository:
    return InMemoryInstallationRepository()


@pytest.fixture
def agent_manager(claude_connector, codex_connector) -> AgentManager:
    return AgentManager([claude_connector, codex_connector])


@pytest.fixture
def installation_manager(
    agent_manager, claude_connector, codex_connector, installation_repository
) -> InstallationManager:
    return InstallationManager(
        agent_manager=agent_manager,
        connectors=[claude_connector, codex_connector],
        repository=installation_repository,
    )


@pytest.fixture
def configuration_service(installation_manager) -> ConfigurationService:
    return ConfigurationService(installation_manager)


@pytest.fixture
def cli_runner(tmp_path: Path) -> CliRunner:
    class HomeCliRunner(CliRunner):
        def invoke(self, cli: Any, args: Any = None, **kwargs: Any):  # type: ignore[override]
            env = dict(kwargs.pop("env", {}) or {})
            env.setdefault("HOME", str(tmp_path))
            env.setdefault("XDG_CONFIG_HOME", str(tmp_path / ".config"))
            kwargs["env"] = env
            return super().invoke(cli, args=args, **kwargs)

    return HomeCliRunner()


@pytest.fixture
def make_connector():
    def _make(
        agent_type: AgentType = AgentType.CLAUDE,
        server_ids: list[str] | None = None,
        installed: bool = True,
    ) -> FakeConnector:
        return FakeConnector(agent_type, server_ids=server_ids, installed=installed)

    return _make
