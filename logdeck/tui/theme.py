from __future__ import annotations

import curses
from dataclasses import dataclass


@dataclass(frozen=True)
class ThemeAttrs:
    panel: int
    heading: int
    muted: int
    error: int
    info: int
    success: int
    focus: int


class Theme:
    def __init__(self, has_color: bool) -> None:
        self.has_color = has_color
        self.attrs = ThemeAttrs(
            panel=0,
            heading=curses.A_BOLD,
            muted=curses.A_DIM,
            error=curses.A_BOLD,
            info=0,
            success=curses.A_BOLD,
            focus=curses.A_BOLD,
        )

    @classmethod
    def init(cls) -> "Theme":
        has_color = curses.has_colors()
        theme = cls(has_color=has_color)
        if not has_color:
            return theme

        curses.start_color()
        curses.use_default_colors()

        curses.init_pair(1, curses.COLOR_WHITE, -1)
        curses.init_pair(2, curses.COLOR_CYAN, -1)
        curses.init_pair(3, curses.COLOR_RED, -1)
        curses.init_pair(4, curses.COLOR_BLUE, -1)
        curses.init_pair(5, curses.COLOR_GREEN, -1)
        curses.init_pair(6, curses.COLOR_MAGENTA, -1)

        theme.attrs = ThemeAttrs(
            panel=curses.color_pair(1),
            heading=curses.color_pair(2) | curses.A_BOLD,
            muted=curses.A_DIM,
            error=curses.color_pair(3) | curses.A_BOLD,
            info=curses.color_pair(4),
            success=curses.color_pair(5) | curses.A_BOLD,
            focus=curses.color_pair(6) | curses.A_BOLD,
        )
        return theme
