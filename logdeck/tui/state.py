from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

MIN_WIDTH = 60
MIN_HEIGHT = 16
CHROME_HEIGHT = 4


@dataclass(frozen=True)
class Kontext:
    """Program-wide render context, passed explicitly to every render call."""

    window_width: int = 100
    window_height: int = 40
    config: Any = field(default=None, compare=False)

    @property
    def available_height(self) -> int:
        return max(1, self.window_height - CHROME_HEIGHT)

    @property
    def too_small(self) -> bool:
        return self.window_width < MIN_WIDTH or self.window_height < MIN_HEIGHT

    def resized(self, width: int, height: int) -> "Kontext":
        return replace(self, window_width=width, window_height=height)


def new_test_kontext(config: Any = None) -> Kontext:
    return Kontext(window_width=100, window_height=40, config=config)
