"""Deferred work returned from ``update`` and run by the surrounding runtime.

A command is a plain zero-argument callable. Creating one has no side
effect; the runtime invokes it and feeds whatever message it yields back
into the loop.
"""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .messages import Msg

Cmd = Callable[[], Msg]


@dataclass(frozen=True)
class BatchMsg:
    cmds: tuple[Cmd, ...]


@dataclass(frozen=True)
class SequenceMsg:
    cmds: tuple[Cmd, ...]


class Tick:
    """Command that yields ``fn()`` once ``delay`` seconds have elapsed."""

    def __init__(self, delay: float, fn: Callable[[], Msg]) -> None:
        self.delay = delay
        self.fn = fn

    def __call__(self) -> Msg:
        time.sleep(self.delay)
        return self.fn()

    def fire(self) -> Msg:
        return self.fn()


def tick(delay: float, fn: Callable[[], Msg]) -> Tick:
    return Tick(delay, fn)


def publish(msg: Msg) -> Cmd:
    return lambda: msg


def _compact(cmds: tuple[Optional[Cmd], ...]) -> tuple[Cmd, ...]:
    return tuple(c for c in cmds if c is not None)


def batch(*cmds: Optional[Cmd]) -> Optional[Cmd]:
    valid = _compact(cmds)
    if not valid:
        return None
    if len(valid) == 1:
        return valid[0]
    return lambda: BatchMsg(valid)


def sequence(*cmds: Optional[Cmd]) -> Optional[Cmd]:
    valid = _compact(cmds)
    if not valid:
        return None
    if len(valid) == 1:
        return valid[0]
    return lambda: SequenceMsg(valid)


def run_one(cmd: Cmd, *, wait: bool = True) -> Msg:
    if isinstance(cmd, Tick) and not wait:
        return cmd.fire()
    return cmd()


def drain(model: Any, cmd: Optional[Cmd], *, wait: bool = False, limit: int = 64) -> list[Msg]:
    """Run ``cmd`` to a fixed point against ``model``.

    Batch and sequence children are invoked one at a time, and each child's
    message reaches ``model.update`` before the next child runs. Commands
    returned by ``update`` queue behind the ones already pending. With
    ``wait=False`` ticks fire immediately instead of sleeping. Returns all
    delivered messages in delivery order.
    """
    pending: deque[Cmd] = deque()
    if cmd is not None:
        pending.append(cmd)
    delivered: list[Msg] = []
    steps = 0
    while pending:
        steps += 1
        if steps > limit:
            raise RuntimeError(f"command chain did not settle after {limit} steps")
        msg = run_one(pending.popleft(), wait=wait)
        if msg is None:
            continue
        if isinstance(msg, (BatchMsg, SequenceMsg)):
            pending.extendleft(reversed(msg.cmds))
            continue
        delivered.append(msg)
        follow_up = model.update(msg)
        if follow_up is not None:
            pending.append(follow_up)
    return delivered
