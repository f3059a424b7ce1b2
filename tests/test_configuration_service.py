import json

import pytest

from mcp_manager.models import McpServer, ServerInstallation


def test_equal_configurations_ignore_order(configuration_service) -> None:
    first = {"command": "npx", "args": "-y github"}
    second = {"args": "-y github", "command": "npx"}
    assert configuration_service.are_configurations_equal(first, first)
    assert configuration_service.are_configurations_equal(first, second)
    assert configuration_service.are_configurations_equal(second, first)


@pytest.mark.parametrize(
    "first,second",
    [
        ({"a": "1"}, {"a": "1", "b": "2"}),
        ({"a": "1", "b": "2"}, {"a": "1"}),
        ({"a": "1"}, {"a": "2"}),
        ({"a": "1"}, {"b": "1"}),
        ({"a": "x"}, {"a": "X"}),
        ({"a": "x"}, {"a": "x "}),
    ],
)
def test_unequal_configurations(configuration_service, first, second) -> None:
    assert not configuration_service.are_configurations_equal(first, second)


def test_none_and_empty_configurations_are_equal(configuration_service) -> None:
    assert configuration_service.are_configurations_equal(None, None)
    assert configuration_service.are_configurations_equal(None, {})
    assert configuration_service.are_configurations_equal({}, None)
    assert not configuration_service.are_configurations_equal(None, {"a": "1"})


def test_effective_configuration_prefers_agent_specific(configuration_service) -> None:
    server = McpServer(id="github", configuration={"command": "npx"})
    installation = ServerInstallation(
        server_id="github", agent_id="claude", agent_specific_config={"command": "uvx"}
    )

    effective = configuration_service.get_effective_configuration(server, installation)

    assert effective == {"command": "uvx"}
    effective["command"] = "changed"
    assert installation.agent_specific_config == {"command": "uvx"}


def test_effective_configuration_falls_back_to_global(configuration_service) -> None:
    server = McpServer(id="github", configuration={"command": "npx"})
    installation = ServerInstallation(server_id="github", agent_id="claude")

    assert configuration_service.get_effective_configuration(server, installation) == {
        "command": "npx"
    }
    assert configuration_service.get_effective_configuration(server, None) == {
        "command": "npx"
    }

    effective = configuration_service.get_effective_configuration(server, None)
    effective["command"] = "changed"
    assert server.configuration == {"command": "npx"}


def test_agent_config_match_global(configuration_service) -> None:
    server = McpServer(id="github", configuration={"command": "npx"})
    matching = ServerInstallation(
        server_id="github", agent_id="claude", agent_specific_config={"command": "npx"}
    )
    diverged = ServerInstallation(
        server_id="github", agent_id="claude", agent_specific_config={"command": "uvx"}
    )
    deferring = ServerInstallation(server_id="github", agent_id="claude")

    assert configuration_service.does_agent_config_match_global(server, matching)
    assert not configuration_service.does_agent_config_match_global(server, diverged)
    assert not configuration_service.does_agent_config_match_global(server, deferring)
    assert configuration_service.does_agent_config_match_global(
        McpServer(id="empty"), deferring
    )


def test_propagation_updates_only_tracking_installations(
    configuration_service, installation_manager
) -> None:
    old = {"k": "v1"}
    tracking = installation_manager.add_server_to_agent("S", "claude", dict(old))
    diverged = installation_manager.add_server_to_agent("S", "openaicodex", {"k": "custom"})

    result = configuration_service.propagate_configuration_update("S", old, {"k": "v2"})

    assert result.updated_ids == [tracking.id]
    assert not result.has_failures
    assert installation_manager.get_installation(tracking.id).agent_specific_config == {
        "k": "v2"
    }
    assert installation_manager.get_installation(diverged.id).agent_specific_config == {
        "k": "custom"
    }
    assert installation_manager.get_installation(tracking.id).updated_at is not None


def test_propagation_stores_a_copy_of_new_configuration(
    configuration_service, installation_manager
) -> None:
    installation = installation_manager.add_server_to_agent("S", "claude", {"k": "v1"})
    new = {"k": "v2"}

    configuration_service.propagate_configuration_update("S", {"k": "v1"}, new)
    new["k"] = "mutated"

    assert installation_manager.get_installation(
        installation.id
    ).agent_specific_config == {"k": "v2"}


def test_propagation_ignores_other_servers(
    configuration_service, installation_manager
) -> None:
    other = installation_manager.add_server_to_agent("other", "claude", {"k": "v1"})

    result = configuration_service.propagate_configuration_update(
        "S", {"k": "v1"}, {"k": "v2"}
    )

    assert result.updated_ids == []
    assert installation_manager.get_installation(other.id).agent_specific_config == {
        "k": "v1"
    }


def test_propagation_from_empty_reaches_deferring_installations(
    configuration_service, installation_manager
) -> None:
    installation = installation_manager.add_server_to_agent("S", "claude")

    result = configuration_service.propagate_configuration_update("S", None, {"k": "v"})

    assert result.updated_ids == [installation.id]


def test_propagation_without_apply_does_not_touch_agents(
    configuration_service, installation_manager, claude_connector
) -> None:
    installation_manager.add_server_to_agent("S", "claude", {"k": "v1"})
    claude_connector.calls.clear()

    configuration_service.propagate_configuration_update("S", {"k": "v1"}, {"k": "v2"})

    assert claude_connector.calls == []


def test_propagation_with_apply_rewrites_agent_files(
    configuration_service, installation_manager, claude_connector
) -> None:
    installation_manager.add_server_to_agent("S", "claude", {"k": "v1"})

    configuration_service.propagate_configuration_update(
        "S", {"k": "v1"}, {"k": "v2"}, apply_to_agents=True
    )

    assert claude_connector.add_calls()[-1] == ("add", "S", {"k": "v2"})
    assert claude_connector.servers["S"] == {"k": "v2"}


def test_propagation_collects_failures_and_continues(
    configuration_service, installation_manager, claude_connector
) -> None:
    failing = installation_manager.add_server_to_agent("S", "claude", {"k": "v1"})
    working = installation_manager.add_server_to_agent("S", "openaicodex", {"k": "v1"})
    claude_connector.fail_writes = True

    result = configuration_service.propagate_configuration_update(
        "S", {"k": "v1"}, {"k": "v2"}, apply_to_agents=True
    )

    assert result.has_failures
    assert "disk full" in result.failures[failing.id]
    assert working.id in result.updated_ids
    # The record update is not rolled back when the file write fails.
    assert installation_manager.get_installation(failing.id).agent_specific_config == {
        "k": "v2"
    }


def test_validate_configuration_null(configuration_service) -> None:
    result = configuration_service.validate_configuration(None)
    assert not result.is_valid
    assert result.errors == ["Configuration cannot be null"]


def test_validate_configuration_accumulates_errors(configuration_service) -> None:
    result = configuration_service.validate_configuration(
        {"": "x", "   ": "y", "token": None, "empty": ""}
    )

    assert not result.is_valid
    assert result.errors == [
        "Configuration keys cannot be null or empty",
        "Configuration keys cannot be null or empty",
        "Configuration value for key 'token' cannot be null",
    ]


def test_validate_configuration_allows_empty_values(configuration_service) -> None:
    result = configuration_service.validate_configuration({"a": "", "b": "x"})
    assert result.is_valid
    assert result.errors == []


def test_validate_empty_configuration(configuration_service) -> None:
    assert configuration_service.validate_configuration({}).is_valid


def test_serialize_empty_configuration(configuration_service) -> None:
    assert configuration_service.serialize_configuration(None) == "{}"
    assert configuration_service.serialize_configuration({}) == "{}"


def test_serialize_configuration_is_indented_json(configuration_service) -> None:
    text = configuration_service.serialize_configuration({"command": "npx"})
    assert json.loads(text) == {"command": "npx"}
    assert "\n" in text


def test_serialized_configuration_reads_back(configuration_service) -> None:
    config = {"command": "npx", "args": "-y github", "env": '{"TOKEN": "x"}', "empty": ""}
    text = configuration_service.serialize_configuration(config)
    assert configuration_service.deserialize_configuration(text) == config


@pytest.mark.parametrize("text", [None, "", "   ", "null"])
def test_deserialize_blank_configuration(configuration_service, text) -> None:
    assert configuration_service.deserialize_configuration(text) == {}


@pytest.mark.parametrize(
    "text", ["{not json", "[1, 2]", '"text"', '{"a": 1}', '{"a": null}', '{"a": {"b": "c"}}']
)
def test_deserialize_invalid_configuration(configuration_service, text) -> None:
    assert configuration_service.deserialize_configuration(text) is None
