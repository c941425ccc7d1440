from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Optional

from .commands import Cmd, tick
from .messages import HideNotificationMsg, Msg
from .models import NotificationKind

HIDE_DELAY = 3.0

# Shared by every notifier so a hide message never matches a foreign one.
_TAGS = itertools.count(1)

ICONS: dict[str, str] = {"success": "", "error": "✗ ", "info": "… "}


@dataclass(frozen=True)
class Notification:
    text: str
    kind: NotificationKind


class Notifier:
    """One transient notification per page, hidden by a scheduled message.

    Each ``show`` draws a fresh tag carried by its hide message, so a hide armed
    for an earlier notification leaves the current one alone.
    """

    def __init__(self, delay: float = HIDE_DELAY) -> None:
        self.delay = delay
        self.current: Optional[Notification] = None
        self.tag = 0

    def show(self, text: str, kind: NotificationKind = "success") -> Optional[Cmd]:
        self.current = Notification(text, kind)
        self.tag = next(_TAGS)
        if kind == "info":
            return None
        tag = self.tag
        return tick(self.delay, lambda: HideNotificationMsg(tag))

    def show_success(self, text: str) -> Optional[Cmd]:
        return self.show(text, "success")

    def show_error(self, text: str) -> Optional[Cmd]:
        return self.show(text, "error")

    def show_info(self, text: str) -> None:
        self.show(text, "info")

    def hide(self) -> None:
        self.current = None

    def update(self, msg: Msg) -> bool:
        """Consume hide messages; returns True when ``msg`` was one."""
        if not isinstance(msg, HideNotificationMsg):
            return False
        if msg.tag in (0, self.tag):
            self.hide()
        return True

    @property
    def visible(self) -> bool:
        return self.current is not None

    def render(self) -> str:
        if self.current is None:
            return ""
        return ICONS.get(self.current.kind, "") + self.current.text
