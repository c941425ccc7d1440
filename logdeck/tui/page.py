from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .commands import Cmd
from .messages import Msg
from .state import Kontext


@dataclass(frozen=True)
class Shortcut:
    name: str
    keybinding: str


class Page:
    """One navigable screen. Exactly one is active inside a controller."""

    def render(self, ktx: Kontext) -> str:
        raise NotImplementedError

    def update(self, msg: Msg) -> Optional[Cmd]:
        raise NotImplementedError

    def title(self) -> str:
        raise NotImplementedError

    def shortcuts(self) -> list[Shortcut]:
        return []


def join_sections(*sections: str) -> str:
    return "\n\n".join(s for s in sections if s)
