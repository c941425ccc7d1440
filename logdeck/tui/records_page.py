from __future__ import annotations

from typing import Optional

from .admin import RecordReader
from .commands import Cmd, publish
from .messages import KeyMsg, LoadRecordDetailPageMsg, LoadTopicsPageMsg, Msg
from .models import ConsumerRecord, ReadDetails, RecordReadingErrMsg, RecordsReadMsg, Topic
from .notifier import Notifier
from .page import Page, Shortcut, join_sections
from .state import Kontext
from .views import clamp, truncate


class RecordsPage(Page):
    """Records read from one topic, newest first."""

    def __init__(self, reader: RecordReader, topic: Topic, limit: int = 100, notifier: Notifier | None = None) -> None:
        self.reader = reader
        self.topic = topic
        self.limit = limit
        self.notifier = notifier or Notifier()
        self.records: list[ConsumerRecord] = []
        self.cursor = 0
        self.loading = False

    def read(self) -> Cmd:
        self.loading = True
        reader = self.reader
        details = ReadDetails(self.topic, self.limit)
        return lambda: reader.read_records(details)

    def selected_record(self) -> ConsumerRecord | None:
        if not self.records:
            return None
        return self.records[clamp(self.cursor, 0, len(self.records) - 1)]

    def update(self, msg: Msg) -> Optional[Cmd]:
        if self.notifier.update(msg):
            return None
        if isinstance(msg, RecordsReadMsg):
            if msg.topic != self.topic.name:
                return None
            self.loading = False
            self.records = sorted(msg.records, key=lambda r: r.timestamp, reverse=True)
            self.cursor = clamp(self.cursor, 0, max(0, len(self.records) - 1))
            return None
        if isinstance(msg, RecordReadingErrMsg):
            self.loading = False
            return self.notifier.show_error(f"Failed to read records: {msg.err}")
        if isinstance(msg, Exception):
            self.loading = False
            return self.notifier.show_error(f"Failed to read records: {msg}")
        if not isinstance(msg, KeyMsg):
            return None

        if msg.key == "esc":
            return publish(LoadTopicsPageMsg(refresh=False))
        if msg.key == "up":
            self.cursor = max(0, self.cursor - 1)
        elif msg.key == "down":
            self.cursor = clamp(self.cursor + 1, 0, max(0, len(self.records) - 1))
        elif msg.key == "enter":
            record = self.selected_record()
            if record is not None:
                return publish(LoadRecordDetailPageMsg(record, self.topic))
        elif msg.key == "f5":
            return self.read()
        return None

    def render(self, ktx: Kontext) -> str:
        if self.loading and not self.records:
            body = f"Reading records from {self.topic.name}"
        elif not self.records:
            body = "No records found"
        else:
            key_w = max(10, ktx.window_width - 44)
            rows = [f"  {'Partition':>9} {'Offset':>8} {'Key'.ljust(key_w)} Timestamp"]
            for idx, record in enumerate(self.records):
                marker = "> " if idx == self.cursor else "  "
                key = truncate(record.key or "<null>", key_w).ljust(key_w)
                rows.append(f"{marker}{record.partition:>9} {record.offset:>8} {key} {record.timestamp:%H:%M:%S}")
            body = "\n".join(rows)
        return join_sections(body, self.notifier.render())

    def title(self) -> str:
        return f"Topics / {self.topic.name} / Records"

    def shortcuts(self) -> list[Shortcut]:
        return [
            Shortcut("View Record", "enter"),
            Shortcut("Refresh", "F5"),
            Shortcut("Go Back", "esc"),
        ]
