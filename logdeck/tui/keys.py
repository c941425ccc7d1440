from __future__ import annotations

import curses
from typing import Optional

KEY_ENTER = {13, curses.KEY_ENTER}
KEY_BACK = {curses.KEY_BACKSPACE, 127}

NAMED_KEYS: dict[int, str] = {
    curses.KEY_UP: "up",
    curses.KEY_DOWN: "down",
    curses.KEY_LEFT: "left",
    curses.KEY_RIGHT: "right",
    curses.KEY_BTAB: "shift+tab",
    curses.KEY_DC: "delete",
    curses.KEY_HOME: "home",
    curses.KEY_END: "end",
    curses.KEY_NPAGE: "pgdown",
    curses.KEY_PPAGE: "pgup",
    curses.KEY_F1: "f1",
    curses.KEY_F2: "f2",
    curses.KEY_F5: "f5",
}

# Assumes curses.nonl(): Enter arrives as "\r", ctrl+j as "\n".
CONTROL_CHARS: dict[str, str] = {
    "\r": "enter",
    "\n": "ctrl+j",
    "\t": "tab",
    "\x1b": "esc",
    "\x7f": "backspace",
}


def key_name(raw: object) -> Optional[str]:
    """Normalize a ``get_wch`` result to the key names pages match on."""
    if isinstance(raw, int):
        if raw in KEY_ENTER:
            return "enter"
        if raw in KEY_BACK:
            return "backspace"
        return NAMED_KEYS.get(raw)
    if not isinstance(raw, str) or not raw:
        return None
    if raw in CONTROL_CHARS:
        return CONTROL_CHARS[raw]
    if len(raw) == 1 and ord(raw) < 32:
        return "ctrl+" + chr(ord(raw) + 96)
    return raw
