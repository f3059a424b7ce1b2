import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from mcp_manager.agents import AgentManager, create_default_connectors
from mcp_manager.configuration import ConfigurationParser, ConfigurationService
from mcp_manager.constants import DEFAULT_SYNC_INTERVAL_SECONDS
from mcp_manager.errors import McpManagerError, ServerNotFoundError
from mcp_manager.installations import InstallationManager, JsonInstallationRepository
from mcp_manager.logging_service import configure_logging
from mcp_manager.models import McpServer, ServerInstallation
from mcp_manager.servers import JsonServerRepository, ServerManager
from mcp_manager.settings import RuntimeSettings, load_settings
from mcp_manager.sync import AgentServerSyncService, ConfigurationChange, ConfigurationWatcher
from mcp_manager.tui import ManagerConsoleUI
from mcp_manager.utils import parse_key_values


@dataclass
class ManagerServices:
    settings: RuntimeSettings
    agents: AgentManager
    servers: ServerManager
    installations: InstallationManager
    configuration: ConfigurationService

    def require_server(self, server_id: str) -> McpServer:
        server = self.servers.get_server_by_id(server_id)
        if server is None:
            raise ServerNotFoundError(server_id)
        return server

    def require_installation(self, server_id: str, agent_id: str) -> ServerInstallation:
        for item in self.installations.get_installations_by_agent_id(agent_id):
            if item.server_id == server_id:
                return item
        raise click.ClickException(
            f"Server {server_id} is not installed for agent {agent_id}"
        )

    def customized_ids(self, installations: list[ServerInstallation]) -> set[str]:
        customized: set[str] = set()
        for item in installations:
            server = self.servers.get_server_by_id(item.server_id)
            if server is not None and not self.configuration.does_agent_config_match_global(
                server, item
            ):
                customized.add(item.id)
        return customized


def build_services(settings: RuntimeSettings | None = None) -> ManagerServices:
    settings = settings or load_settings()
    connectors = create_default_connectors(home=Path.home())
    agents = AgentManager(connectors)
    installations = InstallationManager(
        agent_manager=agents,
        connectors=connectors,
        repository=JsonInstallationRepository(settings.installations_file),
    )
    return ManagerServices(
        settings=settings,
        agents=agents,
        servers=ServerManager(JsonServerRepository(settings.servers_file)),
        installations=installations,
        configuration=ConfigurationService(installations),
    )


def _services(ctx: click.Context) -> ManagerServices:
    root = ctx.find_root()
    if root.obj.get("services") is None:
        root.obj["services"] = build_services()
    return root.obj["services"]


def _key_values(values: tuple[str, ...]) -> dict[str, str]:
    try:
        return parse_key_values(values)
    except ValueError as exc:
        raise click.BadParameter(str(exc))


def _set_option(help_text: str):
    return click.option(
        "--set",
        "assignments",
        multiple=True,
        metavar="KEY=VALUE",
        help=help_text,
    )


class ManagerGroup(click.Group):
    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except McpManagerError as exc:
            raise click.ClickException(str(exc)) from exc


@click.group(cls=ManagerGroup, context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Install MCP servers into AI agents and keep their configuration in sync."""
    configure_logging(verbose)
    ctx.obj = {}


@cli.group(help="Manage installed MCP servers.")
def servers() -> None:
    pass


@servers.command("list", help="List installed servers.")
@click.pass_context
def servers_list(ctx: click.Context) -> None:
    ui = ManagerConsoleUI(Console())
    ui.render_servers(_services(ctx).servers.get_installed_servers())


@servers.command("show", help="Show a server and where it is installed.")
@click.argument("server_id")
@click.pass_context
def servers_show(ctx: click.Context, server_id: str) -> None:
    ui = ManagerConsoleUI(Console())
    services = _services(ctx)
    server = services.require_server(server_id)
    ui.render_server(server, services.installations.get_installations_by_server_id(server_id))


@servers.command("add", help="Register a server from options or pasted JSON.")
@click.option("--id", "server_id", default="", help="Server id (generated when omitted).")
@click.option("--name", default="", help="Display name.")
@click.option("--description", default="", help="Short description.")
@click.option("--command", "command", default=None, help="Executable to launch.")
@click.option("--args", "args", default="", help="Space separated arguments.")
@click.option("--env", "env", multiple=True, metavar="KEY=VALUE", help="Environment variable.")
@click.option(
    "--from-json",
    "json_file",
    type=click.File("r", encoding="utf-8"),
    default=None,
    help="Read an agent style server entry from a file ('-' for stdin).",
)
@click.pass_context
def servers_add(
    ctx: click.Context,
    server_id: str,
    name: str,
    description: str,
    command: Optional[str],
    args: str,
    env: tuple[str, ...],
    json_file,
) -> None:
    ui = ManagerConsoleUI(Console())
    parser = ConfigurationParser()

    if json_file is not None:
        result = parser.parse_configuration(json_file.read(), server_id or None)
        if not result.success or result.server is None:
            raise click.ClickException(result.error)
        server = result.server
        if name:
            server.name = name
        if description:
            server.description = description
    elif command:
        server = parser.create_server_from_manual_input(
            server_id=server_id,
            name=name or server_id,
            description=description,
            command=command,
            args=args,
            env_vars=_key_values(env),
        )
    else:
        raise click.UsageError("Provide --command or --from-json.")

    if not _services(ctx).servers.install_server(server):
        raise click.ClickException(f"Server already installed: {server.id}")
    ui.render_message("servers", f"Server added: [bold]{server.id}[/bold]")


@servers.command("remove", help="Remove a server from every agent and forget it.")
@click.argument("server_id")
@click.pass_context
def servers_remove(ctx: click.Context, server_id: str) -> None:
    ui = ManagerConsoleUI(Console())
    services = _services(ctx)
    services.require_server(server_id)
    for item in services.installations.get_installations_by_server_id(server_id):
        services.installations.remove_server_from_agent(server_id, item.agent_id)
    services.servers.uninstall_server(server_id)
    ui.render_message("servers", f"Server removed: [bold]{server_id}[/bold]", success=False)


@servers.command("configure", help="Update a server's global configuration.")
@click.argument("server_id")
@_set_option("Set a configuration key.")
@click.option("--unset", "removals", multiple=True, metavar="KEY", help="Remove a key.")
@click.option(
    "--apply",
    "apply_to_agents",
    is_flag=True,
    help="Also rewrite the config files of updated agents.",
)
@click.pass_context
def servers_configure(
    ctx: click.Context,
    server_id: str,
    assignments: tuple[str, ...],
    removals: tuple[str, ...],
    apply_to_agents: bool,
) -> None:
    ui = ManagerConsoleUI(Console())
    services = _services(ctx)
    server = services.require_server(server_id)

    old_config = dict(server.configuration)
    new_config = {**old_config, **_key_values(assignments)}
    for key in removals:
        new_config.pop(key, None)

    validation = services.configuration.validate_configuration(new_config)
    if not validation.is_valid:
        raise click.ClickException("; ".join(validation.errors))

    if services.configuration.are_configurations_equal(old_config, new_config):
        ui.render_message("configure", "Configuration unchanged.", success=False)
        return

    services.servers.update_server_configuration(server_id, new_config)
    result = services.configuration.propagate_configuration_update(
        server_id, old_config, new_config, apply_to_agents=apply_to_agents
    )
    ui.render_configuration("configuration", new_config)
    ui.render_propagation(result)
    if result.has_failures:
        raise click.exceptions.Exit(1)


@cli.group(help="Inspect detected agents.")
def agents() -> None:
    pass


@agents.command("list", help="List detected agents and their configured servers.")
@click.pass_context
def agents_list(ctx: click.Context) -> None:
    ui = ManagerConsoleUI(Console())
    ui.render_agents(_services(ctx).agents.detect_installed_agents())


@cli.command(help="Install a server into an agent.")
@click.argument("server_id")
@click.argument("agent_id")
@_set_option("Override a configuration key for this agent.")
@click.pass_context
def install(
    ctx: click.Context, server_id: str, agent_id: str, assignments: tuple[str, ...]
) -> None:
    ui = ManagerConsoleUI(Console())
    services = _services(ctx)
    server = services.require_server(server_id)
    config = {**server.configuration, **_key_values(assignments)}
    installation = services.installations.add_server_to_agent(server_id, agent_id, config)
    ui.render_message(
        "install",
        f"Server [bold]{server_id}[/bold] installed for {agent_id} ({installation.id})",
    )


@cli.command(help="Remove a server from an agent.")
@click.argument("server_id")
@click.argument("agent_id")
@click.pass_context
def uninstall(ctx: click.Context, server_id: str, agent_id: str) -> None:
    ui = ManagerConsoleUI(Console())
    if not _services(ctx).installations.remove_server_from_agent(server_id, agent_id):
        raise click.ClickException(f"Agent {agent_id} not found")
    ui.render_message(
        "uninstall", f"Server [bold]{server_id}[/bold] removed from {agent_id}", success=False
    )


@cli.command(help="Enable or disable a server for an agent.")
@click.argument("server_id")
@click.argument("agent_id")
@click.pass_context
def toggle(ctx: click.Context, server_id: str, agent_id: str) -> None:
    ui = ManagerConsoleUI(Console())
    services = _services(ctx)
    if not services.installations.toggle_server_enabled(server_id, agent_id):
        raise click.ClickException(
            f"Server {server_id} is not installed for agent {agent_id}"
        )
    installation = services.require_installation(server_id, agent_id)
    state = "enabled" if installation.is_enabled else "disabled"
    ui.render_message("toggle", f"Server [bold]{server_id}[/bold] {state} for {agent_id}")


@cli.group(help="Inspect and customize per-agent installations.")
def installations() -> None:
    pass


@installations.command("list", help="List installation records.")
@click.option("--server", "server_id", default=None, help="Only this server.")
@click.option("--agent", "agent_id", default=None, help="Only this agent.")
@click.pass_context
def installations_list(
    ctx: click.Context, server_id: Optional[str], agent_id: Optional[str]
) -> None:
    ui = ManagerConsoleUI(Console())
    services = _services(ctx)
    items = services.installations.get_all_installations()
    if server_id:
        items = [item for item in items if item.server_id == server_id]
    if agent_id:
        items = [item for item in items if item.agent_id == agent_id]
    ui.render_installations(items, services.customized_ids(items))


@installations.command("configure", help="Customize a server's configuration for one agent.")
@click.argument("server_id")
@click.argument("agent_id")
@_set_option("Set a configuration key.")
@click.option("--unset", "removals", multiple=True, metavar="KEY", help="Remove a key.")
@click.pass_context
def installations_configure(
    ctx: click.Context,
    server_id: str,
    agent_id: str,
    assignments: tuple[str, ...],
    removals: tuple[str, ...],
) -> None:
    ui = ManagerConsoleUI(Console())
    services = _services(ctx)
    server = services.require_server(server_id)
    installation = services.require_installation(server_id, agent_id)

    base = services.configuration.get_effective_configuration(server, installation)
    new_config = {**base, **_key_values(assignments)}
    for key in removals:
        new_config.pop(key, None)

    validation = services.configuration.validate_configuration(new_config)
    if not validation.is_valid:
        raise click.ClickException("; ".join(validation.errors))

    services.installations.update_installation_config(installation.id, new_config)
    services.installations.apply_installation_config(installation.id)
    ui.render_configuration(f"{server_id} @ {agent_id}", new_config)


@installations.command("reset", help="Make an installation follow the global configuration again.")
@click.argument("server_id")
@click.argument("agent_id")
@click.pass_context
def installations_reset(ctx: click.Context, server_id: str, agent_id: str) -> None:
    ui = ManagerConsoleUI(Console())
    services = _services(ctx)
    server = services.require_server(server_id)
    installation = services.require_installation(server_id, agent_id)

    services.installations.update_installation_config(
        installation.id, dict(server.configuration)
    )
    services.installations.apply_installation_config(installation.id)
    ui.render_configuration(f"{server_id} @ {agent_id}", server.configuration)


@cli.command(help="Import servers already configured in detected agents.")
@click.option(
    "--watch",
    is_flag=True,
    help="Keep running: sync when an agent config file changes and every --interval seconds.",
)
@click.option(
    "--interval",
    type=click.FloatRange(min=1),
    default=DEFAULT_SYNC_INTERVAL_SECONDS,
    show_default=True,
    help="Seconds between full passes with --watch.",
)
@click.pass_context
def sync(ctx: click.Context, watch: bool, interval: float) -> None:
    ui = ManagerConsoleUI(Console())
    services = _services(ctx)
    service = AgentServerSyncService(
        agent_manager=services.agents,
        server_manager=services.servers,
        installation_manager=services.installations,
    )
    if watch:
        _watch(ui, services, service, interval)
        return

    report = service.sync()
    ui.render_sync_report(report)
    if report.errors:
        raise click.exceptions.Exit(1)


def _watch(
    ui: ManagerConsoleUI,
    services: ManagerServices,
    service: AgentServerSyncService,
    interval: float,
) -> None:
    stop_event = threading.Event()
    periodic = threading.Thread(
        target=service.run_forever,
        kwargs={"interval": interval, "stop_event": stop_event},
        name="mcp-manager-sync",
        daemon=True,
    )
    watcher = ConfigurationWatcher(services.agents)

    def _on_change(changes: list[ConfigurationChange]) -> None:
        ui.render_changes(changes)
        ui.render_sync_report(service.sync())

    periodic.start()
    try:
        watcher.run(_on_change, stop_event)
    except KeyboardInterrupt:
        pass
    finally:
        stop_event.set()
        periodic.join(timeout=5)


def main() -> int:
    # Without standalone mode click returns the code of a raised Exit.
    try:
        code = cli(standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.exceptions.Abort:
        return 130
    return code if isinstance(code, int) else 0


if __name__ == "__main__":
    raise SystemExit(main())
