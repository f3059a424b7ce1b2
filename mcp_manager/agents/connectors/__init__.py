from mcp_manager.agents.connectors.claude import ClaudeConnector
from mcp_manager.agents.connectors.claude_code import ClaudeCodeConnector
from mcp_manager.agents.connectors.codex import CodexConnector
from mcp_manager.agents.connectors.copilot import CopilotConnector

__all__ = [
    "ClaudeCodeConnector",
    "ClaudeConnector",
    "CodexConnector",
    "CopilotConnector",
]
