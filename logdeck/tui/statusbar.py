from __future__ import annotations

from .page import Page
from .state import Kontext
from .views import clamp


class StatusBar:
    """Title plus shortcut hints, derived from the page it was built for."""

    def __init__(self, page: Page) -> None:
        self.page = page

    def render(self, ktx: Kontext) -> str:
        width = clamp(ktx.window_width, 20, 400)
        title = self.page.title()
        hints = "  ".join(f"{s.name}: {s.keybinding}" for s in self.page.shortcuts())
        rule = "─" * width
        return "\n".join([title[:width], hints[:width], rule])
