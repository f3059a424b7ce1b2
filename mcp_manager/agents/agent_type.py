from dataclasses import dataclass

from mcp_manager.models import AgentType


@dataclass(frozen=True)
class AgentMetadata:
    agent_type: AgentType
    label: str
    connectable: bool


AGENT_CATALOG: dict[AgentType, AgentMetadata] = {
    AgentType.CLAUDE: AgentMetadata(
        agent_type=AgentType.CLAUDE,
        label="Claude Desktop",
        connectable=True,
    ),
    AgentType.GITHUB_COPILOT: AgentMetadata(
        agent_type=AgentType.GITHUB_COPILOT,
        label="GitHub Copilot",
        connectable=True,
    ),
    AgentType.OPENAI_CODEX: AgentMetadata(
        agent_type=AgentType.OPENAI_CODEX,
        label="OpenAI Codex",
        connectable=True,
    ),
    AgentType.CLAUDE_CODE: AgentMetadata(
        agent_type=AgentType.CLAUDE_CODE,
        label="Claude Code",
        connectable=True,
    ),
    AgentType.OTHER: AgentMetadata(
        agent_type=AgentType.OTHER,
        label="Other",
        connectable=False,
    ),
}


def agent_metadata(agent_type: AgentType | str) -> AgentMetadata:
    resolved = agent_type if isinstance(agent_type, AgentType) else AgentType(agent_type)
    return AGENT_CATALOG[resolved]


def agent_label(agent_type: AgentType | str) -> str:
    return agent_metadata(agent_type).label


def agent_id_for(agent_type: AgentType) -> str:
    return agent_type.value
