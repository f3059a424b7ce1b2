from mcp_manager.tui.renderers import ManagerConsoleUI

__all__ = ["ManagerConsoleUI"]
