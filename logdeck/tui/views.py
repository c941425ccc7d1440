from __future__ import annotations

import curses


def clamp(n: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, n))


def truncate(text: str, width: int) -> str:
    if width <= 0:
        return ""
    if len(text) <= width:
        return text
    if width == 1:
        return text[:1]
    return text[: width - 1] + "…"


def box_lines(lines: list[str], width: int, title: str = "", focused: bool = False) -> list[str]:
    """Frame ``lines`` in a text box; focused boxes use a heavy border."""
    width = max(4, width)
    inner = width - 4
    if focused:
        tl, tr, bl, br, hz, vt = "┏", "┓", "┗", "┛", "━", "┃"
    else:
        tl, tr, bl, br, hz, vt = "╭", "╮", "╰", "╯", "─", "│"
    top = hz * (width - 2)
    if title:
        label = truncate(f" {title} ", width - 4)
        top = hz + label + hz * (width - 3 - len(label))
    out = [tl + top + tr]
    for line in lines:
        out.append(f"{vt} {truncate(line, inner).ljust(inner)} {vt}")
    out.append(bl + hz * (width - 2) + br)
    return out


def side_by_side(left: list[str], right: list[str], gap: int = 1) -> list[str]:
    left_w = max((len(line) for line in left), default=0)
    rows = max(len(left), len(right))
    out: list[str] = []
    for idx in range(rows):
        lhs = left[idx] if idx < len(left) else ""
        rhs = right[idx] if idx < len(right) else ""
        out.append((lhs.ljust(left_w) + " " * gap + rhs).rstrip())
    return out


def safe_addstr(stdscr: curses.window, y: int, x: int, text: str, attr: int = 0) -> None:
    h, w = stdscr.getmaxyx()
    if y < 0 or y >= h or x >= w:
        return
    if x < 0:
        text = text[-x:]
        x = 0
    if not text:
        return
    max_len = max(0, w - x - 1)
    if max_len <= 0:
        return
    try:
        stdscr.addnstr(y, x, text, max_len, attr)
    except curses.error:
        pass
