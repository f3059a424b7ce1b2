from rich.table import Column, Table

from mcp_manager.models import Agent, McpServer, PropagationResult, ServerInstallation, SyncReport
from mcp_manager.tui.enums import UIStyle, enabled_style
from mcp_manager.utils import compact_home_path, format_timestamp


def _styled(text: str, style: str) -> str:
    return f"[{style}]{text}[/{style}]"


class ServerTable:
    @staticmethod
    def servers_table(servers: list[McpServer]) -> Table:
        table = Table(
            Column(header="Id", width=24, overflow="ellipsis"),
            Column(header="Name", overflow="ellipsis"),
            Column(header="Version", width=10),
            Column(header="Tags", overflow="fold"),
            Column(header="Keys", width=6, justify="right"),
            expand=True,
            header_style="bold",
        )
        for server in sorted(servers, key=lambda item: item.id):
            table.add_row(
                server.id,
                server.name,
                server.version,
                ", ".join(server.tags),
                str(len(server.configuration)),
            )
        return table

    @staticmethod
    def details_table(server: McpServer) -> Table:
        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold")
        table.add_column()
        table.add_row("Id", server.id)
        table.add_row("Name", server.name)
        table.add_row("Description", server.description)
        table.add_row("Version", server.version)
        table.add_row("Author", server.author)
        if server.repository_url:
            table.add_row("Repository", server.repository_url)
        if server.install_command:
            table.add_row("Install", server.install_command)
        table.add_row("Installed", format_timestamp(server.installed_at) or "")
        return table


class ConfigurationTable:
    @staticmethod
    def key_values(config: dict[str, str]) -> Table:
        table = Table(
            Column(header="Key", width=20),
            Column(header="Value", overflow="fold"),
            expand=True,
            header_style="bold",
        )
        for key, value in config.items():
            table.add_row(key, value)
        return table


class AgentTable:
    @staticmethod
    def agents_table(agents: list[Agent]) -> Table:
        table = Table(
            Column(header="Id", width=14),
            Column(header="Agent", width=18),
            Column(header="Servers", width=8, justify="right"),
            Column(header="Config", overflow="ellipsis"),
            expand=True,
            header_style="bold",
        )
        for agent in agents:
            table.add_row(
                agent.id,
                agent.name,
                str(len(agent.configured_server_ids)),
                compact_home_path(agent.config_path),
            )
        return table


class InstallationTable:
    @staticmethod
    def installations_table(
        installations: list[ServerInstallation], customized: set[str] | None = None
    ) -> Table:
        customized = customized or set()
        table = Table(
            Column(header="Server", width=24, overflow="ellipsis"),
            Column(header="Agent", width=14),
            Column(header="Enabled", width=8),
            Column(header="Config", width=10),
            Column(header="Id", overflow="ellipsis"),
            expand=True,
            header_style="bold",
        )
        for item in installations:
            enabled = "yes" if item.is_enabled else "no"
            config = (
                _styled("custom", UIStyle.MAGENTA.value)
                if item.id in customized
                else _styled("global", UIStyle.DIM.value)
            )
            table.add_row(
                item.server_id,
                item.agent_id,
                _styled(enabled, enabled_style(item.is_enabled)),
                config,
                item.id,
            )
        return table


class ResultTable:
    @staticmethod
    def propagation_table(result: PropagationResult) -> Table:
        table = Table(show_header=False, box=None)
        table.add_row("[bold]updated[/bold]", str(len(result.updated_ids)))
        table.add_row("[bold]failed[/bold]", str(len(result.failures)))
        return table

    @staticmethod
    def sync_table(report: SyncReport) -> Table:
        table = Table(show_header=False, box=None)
        table.add_row("[bold]processed[/bold]", str(report.processed))
        table.add_row("[bold]new servers[/bold]", str(report.new_servers))
        table.add_row("[bold]linked[/bold]", str(report.linked))
        table.add_row("[bold]errors[/bold]", str(len(report.errors)))
        return table
