from enum import Enum


class UIStyle(str, Enum):
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    CYAN = "cyan"
    MAGENTA = "magenta"
    DIM = "dim"
    WHITE = "white"


def enabled_style(enabled: bool) -> str:
    return UIStyle.GREEN.value if enabled else UIStyle.YELLOW.value
