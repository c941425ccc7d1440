from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class FocusRing:
    """Cyclic focus over named regions (detail panes, app tabs)."""

    items: list[str] = field(default_factory=list)
    index: int = 0

    @property
    def current(self) -> str:
        if not self.items:
            return ""
        self.index = max(0, min(self.index, len(self.items) - 1))
        return self.items[self.index]

    def is_focused(self, item: str) -> bool:
        return self.current == item

    def select(self, item: str) -> bool:
        if item not in self.items:
            return False
        self.index = self.items.index(item)
        return True

    def next(self) -> None:
        if self.items:
            self.index = (self.index + 1) % len(self.items)

    def prev(self) -> None:
        if self.items:
            self.index = (self.index - 1) % len(self.items)
