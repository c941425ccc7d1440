from __future__ import annotations

import curses
import os
import queue
import sys
import threading
from dataclasses import dataclass
from typing import Any, Optional

from .commands import BatchMsg, Cmd, SequenceMsg, Tick
from .forms import FOCUS_BAR
from .keys import key_name
from .logstore import LogStore
from .messages import KeyMsg, Msg, QuitMsg, ResizeMsg, describe
from .theme import Theme
from .views import safe_addstr

KEY_TIMEOUT_MS = 120
PASTE_TIMEOUT_MS = 500
PASTE_START = "[200~"
PASTE_END = "\x1b[201~"


@dataclass(frozen=True)
class Continuation:
    """A batch child's message; its remaining siblings run once it is delivered."""

    msg: Msg
    rest: tuple[Cmd, ...]


class CommandExecutor:
    """Runs commands off the UI thread and queues their messages in order."""

    def __init__(self, messages: queue.Queue, logstore: LogStore | None = None) -> None:
        self.messages = messages
        self.logstore = logstore

    def dispatch(self, cmd: Optional[Cmd]) -> None:
        if cmd is None:
            return
        if isinstance(cmd, Tick):
            self._arm(cmd)
            return
        self._spawn(self.execute, cmd)

    def resume(self, rest: tuple[Cmd, ...]) -> None:
        if rest:
            self._spawn(self.run_rest, rest)

    def _spawn(self, target: Any, arg: Any) -> None:
        worker = threading.Thread(target=target, args=(arg,), daemon=True)
        worker.start()

    def _arm(self, cmd: Tick) -> None:
        timer = threading.Timer(cmd.delay, lambda: self._put(self._invoke(cmd.fire)))
        timer.daemon = True
        timer.start()

    def _invoke(self, fn: Any) -> Msg:
        try:
            return fn()
        except Exception as exc:
            # A failing command becomes an error message instead of killing the worker.
            if self.logstore is not None:
                self.logstore.error("runtime", f"command failed: {exc!r}", category="admin")
            return exc

    def _put(self, msg: Msg) -> None:
        if msg is not None:
            self.messages.put(msg)

    def execute(self, cmd: Cmd, rest: tuple[Cmd, ...] = ()) -> None:
        """Invoke ``cmd``; batch children run one by one ahead of ``rest``.

        A message produced while siblings are still waiting is queued as a
        ``Continuation`` and the siblings run only after the loop delivers it.
        """
        msg = self._invoke(cmd)
        if isinstance(msg, (BatchMsg, SequenceMsg)):
            self.run_rest(tuple(msg.cmds) + rest)
            return
        if msg is None:
            self.run_rest(rest)
            return
        self._put(Continuation(msg, rest) if rest else msg)

    def run_rest(self, rest: tuple[Cmd, ...]) -> None:
        while rest:
            head, rest = rest[0], rest[1:]
            if isinstance(head, Tick):
                self._arm(head)
                continue
            self.execute(head, rest)
            return


class Program:
    """Single-threaded update loop around a root model painted with curses."""

    def __init__(self, stdscr: curses.window, model: Any, logstore: LogStore | None = None) -> None:
        self.stdscr = stdscr
        self.model = model
        self.logstore = logstore
        self.messages: queue.Queue[Msg] = queue.Queue()
        self.executor = CommandExecutor(self.messages, logstore)
        self.theme = Theme(has_color=False)
        self.running = True

    def run(self) -> None:
        curses.curs_set(0)
        curses.nonl()
        self.stdscr.keypad(True)
        self.stdscr.timeout(KEY_TIMEOUT_MS)
        os.environ.setdefault("ESCDELAY", "25")
        self.theme = Theme.init()

        h, w = self.stdscr.getmaxyx()
        self._deliver(ResizeMsg(w, h))
        self.executor.dispatch(self.model.init())

        self._bracketed_paste(True)
        try:
            self._loop()
        finally:
            self._bracketed_paste(False)

    def _loop(self) -> None:
        while self.running:
            self._drain_messages()
            if not self.running:
                break
            self._draw()
            try:
                raw = self.stdscr.get_wch()
            except curses.error:
                continue
            if raw == curses.KEY_RESIZE:
                h, w = self.stdscr.getmaxyx()
                self._deliver(ResizeMsg(w, h))
                continue
            if raw == "\x1b":
                pasted = self._read_paste()
                if pasted is not None:
                    if pasted:
                        self._deliver(KeyMsg(pasted, paste=True))
                    continue
            name = key_name(raw)
            if name is not None:
                self._deliver(KeyMsg(name))

    @staticmethod
    def _bracketed_paste(enabled: bool) -> None:
        sys.stdout.write("\x1b[?2004h" if enabled else "\x1b[?2004l")
        sys.stdout.flush()

    def _read_paste(self) -> Optional[str]:
        """Collect a bracketed paste whose leading ESC was just read.

        Returns None and pushes the read input back when the ESC starts
        something else.
        """
        self.stdscr.nodelay(True)
        try:
            seen: list[Any] = []
            while len(seen) < len(PASTE_START):
                try:
                    ch = self.stdscr.get_wch()
                except curses.error:
                    break
                seen.append(ch)
                if not isinstance(ch, str) or not PASTE_START.startswith("".join(seen)):
                    break
            if seen != list(PASTE_START):
                for ch in reversed(seen):
                    if isinstance(ch, str):
                        curses.unget_wch(ch)
                    else:
                        curses.ungetch(ch)
                return None

            self.stdscr.nodelay(False)
            self.stdscr.timeout(PASTE_TIMEOUT_MS)
            buf = ""
            while not buf.endswith(PASTE_END):
                try:
                    ch = self.stdscr.get_wch()
                except curses.error:
                    break
                if isinstance(ch, str):
                    buf += ch
            if buf.endswith(PASTE_END):
                buf = buf[: -len(PASTE_END)]
            return buf.replace("\r\n", "\n").replace("\r", "\n")
        finally:
            self.stdscr.nodelay(False)
            self.stdscr.timeout(KEY_TIMEOUT_MS)

    def _drain_messages(self) -> None:
        while self.running:
            try:
                msg = self.messages.get_nowait()
            except queue.Empty:
                break
            self._deliver(msg)

    def _deliver(self, msg: Msg) -> None:
        if isinstance(msg, Continuation):
            self._deliver(msg.msg)
            if self.running:
                self.executor.resume(msg.rest)
            return
        summary = describe(msg)
        if self.logstore is not None and summary is not None:
            self.logstore.debug("runtime", summary)
        if isinstance(msg, QuitMsg):
            self.running = False
            return
        self.executor.dispatch(self.model.update(msg))

    def _line_attr(self, idx: int, line: str) -> int:
        attrs = self.theme.attrs
        body = line[len(FOCUS_BAR):] if line.startswith(FOCUS_BAR) else line.lstrip()
        if idx == 0:
            return attrs.heading
        if body.startswith("* ") or body.startswith("✗ "):
            return attrs.error
        if body.startswith("🎉"):
            return attrs.success
        if body.startswith("… "):
            return attrs.info
        if line.startswith("─"):
            return attrs.muted
        if line.startswith(FOCUS_BAR):
            return attrs.focus
        return attrs.panel

    def _draw(self) -> None:
        self.stdscr.erase()
        h, _w = self.stdscr.getmaxyx()
        for idx, line in enumerate(self.model.render().split("\n")[:h]):
            safe_addstr(self.stdscr, idx, 0, line, self._line_attr(idx, line))
        self.stdscr.refresh()
