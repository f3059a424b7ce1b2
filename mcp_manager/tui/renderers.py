from rich.console import Console

from mcp_manager.models import (
    Agent,
    McpServer,
    PropagationResult,
    ServerInstallation,
    SyncReport,
)
from mcp_manager.sync.watcher import ConfigurationChange
from mcp_manager.tui.enums import UIStyle
from mcp_manager.tui.sections import UISection
from mcp_manager.tui.tables import (
    AgentTable,
    ConfigurationTable,
    InstallationTable,
    ResultTable,
    ServerTable,
)
from mcp_manager.utils import compact_home_path


class ManagerConsoleUI:
    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render_servers(self, servers: list[McpServer]) -> None:
        if not servers:
            self.console.print(
                UISection.message("servers", "No servers installed.", style=UIStyle.YELLOW.value)
            )
            return
        self.console.print(
            UISection.panel("servers", ServerTable.servers_table(servers), style=UIStyle.BLUE.value)
        )

    def render_server(
        self, server: McpServer, installations: list[ServerInstallation]
    ) -> None:
        self.console.print(
            UISection.panel(server.id, ServerTable.details_table(server), style=UIStyle.BLUE.value)
        )
        self.render_configuration("configuration", server.configuration)
        if installations:
            self.console.print(
                UISection.panel(
                    "installations",
                    InstallationTable.installations_table(installations),
                    style=UIStyle.CYAN.value,
                )
            )

    def render_configuration(self, title: str, config: dict[str, str]) -> None:
        if not config:
            self.console.print(UISection.message(title, "(empty)", style=UIStyle.DIM.value))
            return
        self.console.print(
            UISection.panel(title, ConfigurationTable.key_values(config), style=UIStyle.CYAN.value)
        )

    def render_agents(self, agents: list[Agent]) -> None:
        if not agents:
            self.console.print(
                UISection.message("agents", "No agents detected.", style=UIStyle.YELLOW.value)
            )
            return
        self.console.print(
            UISection.panel("agents", AgentTable.agents_table(agents), style=UIStyle.BLUE.value)
        )

    def render_installations(
        self, installations: list[ServerInstallation], customized: set[str] | None = None
    ) -> None:
        if not installations:
            self.console.print(
                UISection.message(
                    "installations", "No installations recorded.", style=UIStyle.YELLOW.value
                )
            )
            return
        self.console.print(
            UISection.panel(
                "installations",
                InstallationTable.installations_table(installations, customized),
                style=UIStyle.BLUE.value,
            )
        )

    def render_message(self, title: str, message: str, success: bool = True) -> None:
        style = UIStyle.GREEN.value if success else UIStyle.YELLOW.value
        self.console.print(UISection.message(title, message, style=style))

    def render_propagation(self, result: PropagationResult) -> None:
        style = UIStyle.RED.value if result.has_failures else UIStyle.GREEN.value
        self.console.print(
            UISection.panel("propagation", ResultTable.propagation_table(result), style=style)
        )
        if result.failures:
            self.console.print(
                UISection.bullets(
                    "failures",
                    (f"{key}: {error}" for key, error in result.failures.items()),
                )
            )

    def render_sync_report(self, report: SyncReport) -> None:
        style = UIStyle.RED.value if report.errors else UIStyle.GREEN.value
        self.console.print(UISection.panel("sync", ResultTable.sync_table(report), style=style))
        if report.errors:
            self.console.print(UISection.bullets("errors", report.errors))

    def render_changes(self, changes: list[ConfigurationChange]) -> None:
        self.console.print(
            UISection.bullets(
                "changed",
                (f"{change.agent_id}: {compact_home_path(change.path)}" for change in changes),
                style=UIStyle.MAGENTA.value,
            )
        )
