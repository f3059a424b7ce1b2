from typing import Iterable

from rich.console import RenderableType
from rich.panel import Panel
from rich.text import Text

from mcp_manager.tui.enums import UIStyle


class UISection:
    """Bordered panels every ``ManagerConsoleUI`` view is printed in."""

    @staticmethod
    def panel(
        title: str,
        body: RenderableType,
        style: str = UIStyle.BLUE.value,
        subtitle: str | None = None,
    ) -> Panel:
        return Panel(
            body,
            title=Text(title, style="bold"),
            subtitle=subtitle,
            title_align="left",
            border_style=style,
            padding=(0, 1),
        )

    @staticmethod
    def message(title: str, markup: str, style: str) -> Panel:
        return UISection.panel(title, Text.from_markup(markup), style=style)

    @staticmethod
    def bullets(title: str, items: Iterable[str], style: str = UIStyle.RED.value) -> Panel:
        body = Text()
        for index, item in enumerate(items):
            if index:
                body.append("\n")
            body.append("- ", style=style)
            body.append(item)
        return UISection.panel(title, body, style=style)
