from __future__ import annotations

import json
from typing import Callable, Optional

from .commands import Cmd, publish
from .focus import FocusRing
from .messages import KeyMsg, LoadCachedConsumptionPageMsg, Msg
from .models import ConsumerRecord, Header, Topic
from .page import Page, Shortcut
from .state import Kontext
from .system_ops import ClipboardError, copy_to_clipboard
from .views import box_lines, clamp, side_by_side

PAYLOAD = "payload"
HEADERS = "headers"


def pretty_print_json(raw: str) -> str:
    try:
        parsed = json.loads(raw)
    except ValueError:
        return raw
    return json.dumps(parsed, indent=2, ensure_ascii=False)


class RecordDetailsPage(Page):
    def __init__(
        self,
        record: ConsumerRecord,
        topic: Topic,
        clipboard: Callable[[str], None] = copy_to_clipboard,
    ) -> None:
        self.record = record
        self.topic = topic
        self.clipboard = clipboard
        self.focus = FocusRing(items=[PAYLOAD, HEADERS])
        self.headers: list[Header] = sorted(record.headers, key=lambda h: h.key)
        self.header_cursor = 0
        self.scroll = 0
        self.payload = pretty_print_json(record.value)
        key = record.key or "<null>"
        self.meta_info = [
            f"key: {key}",
            f"timestamp: {record.timestamp.strftime('%a %b %d %H:%M:%S %Y')}",
            f"partition: {record.partition}",
            f"offset: {record.offset}",
        ]

    @property
    def payload_focused(self) -> bool:
        return self.focus.is_focused(PAYLOAD)

    def selected_header(self) -> Header | None:
        if not self.headers:
            return None
        return self.headers[clamp(self.header_cursor, 0, len(self.headers) - 1)]

    def update(self, msg: Msg) -> Optional[Cmd]:
        if not isinstance(msg, KeyMsg):
            return None
        if msg.key == "esc":
            return publish(LoadCachedConsumptionPageMsg())
        if msg.key == "left":
            self.focus.prev()
        elif msg.key in ("ctrl+h", "right"):
            self.focus.next()
        elif msg.key == "c":
            self._copy()
        elif msg.key in ("up", "down"):
            delta = -1 if msg.key == "up" else 1
            if self.payload_focused:
                last_line = max(0, len(self.payload.split("\n")) - 1)
                self.scroll = clamp(self.scroll + delta, 0, last_line)
            elif self.headers:
                self.header_cursor = clamp(self.header_cursor + delta, 0, len(self.headers) - 1)
        return None

    def _copy(self) -> None:
        if self.payload_focused:
            text = self.record.value
        else:
            header = self.selected_header()
            if header is None:
                return
            text = header.value
        try:
            self.clipboard(text)
        except ClipboardError:
            return

    def render(self, ktx: Kontext) -> str:
        payload_width = int(ktx.window_width * 0.70)
        sidebar_width = max(20, ktx.window_width - payload_width - 1)
        height = max(3, ktx.available_height - 2)

        payload_lines = self.payload.split("\n")[self.scroll : self.scroll + height]
        payload_box = box_lines(payload_lines, payload_width, "Payload", focused=self.payload_focused)

        sidebar = list(self.meta_info) + [""]
        if not self.headers:
            sidebar.append("No headers present")
        else:
            header_rows = []
            for idx, header in enumerate(self.headers):
                marker = "> " if idx == self.header_cursor else "  "
                header_rows.append(marker + header.key)
            selected = self.selected_header()
            header_rows += ["", "Header Value", "─" * (sidebar_width - 4), selected.value if selected else ""]
            sidebar += box_lines(header_rows, sidebar_width, "Header Key", focused=not self.payload_focused)
        return "\n".join(side_by_side(payload_box, sidebar))

    def title(self) -> str:
        return f"Topics / {self.topic.name} / Records / {self.record.offset}"

    def shortcuts(self) -> list[Shortcut]:
        what_to_copy = "Content" if self.payload_focused else "Header Value"
        return [
            Shortcut("Toggle Headers/Content", "C-h/Arrows"),
            Shortcut("Go Back", "esc"),
            Shortcut("Copy " + what_to_copy, "c"),
        ]
