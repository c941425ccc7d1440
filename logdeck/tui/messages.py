from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

# Anything can travel through the loop, exceptions included.
Msg = Any


@dataclass(frozen=True)
class KeyMsg:
    key: str
    paste: bool = False

    @property
    def text(self) -> str:
        """Characters to insert into an editing buffer, or "" for control keys."""
        if self.paste:
            return self.key
        if len(self.key) == 1 and self.key.isprintable():
            return self.key
        return ""


@dataclass(frozen=True)
class ResizeMsg:
    width: int
    height: int


@dataclass(frozen=True)
class QuitMsg:
    pass


@dataclass(frozen=True)
class LoadTopicsPageMsg:
    refresh: bool = False


@dataclass(frozen=True)
class LoadCreateTopicPageMsg:
    pass


@dataclass(frozen=True)
class LoadPublishPageMsg:
    topic: Any


@dataclass(frozen=True)
class LoadConsumptionPageMsg:
    topic: Any


@dataclass(frozen=True)
class LoadCachedConsumptionPageMsg:
    pass


@dataclass(frozen=True)
class LoadRecordDetailPageMsg:
    record: Any
    topic: Any


@dataclass(frozen=True)
class HideNotificationMsg:
    tag: int = 0


@dataclass(frozen=True)
class ClusterRegisteredMsg:
    cluster: Any


@dataclass(frozen=True)
class ClusterDeletedMsg:
    name: str


@dataclass(frozen=True)
class ClusterSwitchedMsg:
    cluster: Any


NAVIGATION_MSGS: tuple[type, ...] = (
    LoadTopicsPageMsg,
    LoadCreateTopicPageMsg,
    LoadPublishPageMsg,
    LoadConsumptionPageMsg,
    LoadCachedConsumptionPageMsg,
    LoadRecordDetailPageMsg,
)


def keys_for(text: str) -> list[KeyMsg]:
    return [KeyMsg(ch) for ch in text]


def describe(msg: Msg) -> Optional[str]:
    """Summary of ``msg`` for the session log, or None for key events.

    Only the type name is written, never field values: typed keys and cluster
    payloads carry form input, passwords included.
    """
    if isinstance(msg, KeyMsg):
        return None
    if isinstance(msg, Exception):
        return f"{type(msg).__name__}: {msg}"
    return type(msg).__name__
