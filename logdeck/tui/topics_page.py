from __future__ import annotations

from typing import Optional

from .admin import TopicLister
from .commands import Cmd, publish
from .messages import (
    KeyMsg,
    LoadConsumptionPageMsg,
    LoadCreateTopicPageMsg,
    LoadPublishPageMsg,
    Msg,
)
from .models import Topic, TopicListingErrMsg, TopicsListedMsg
from .notifier import Notifier
from .page import Page, Shortcut, join_sections
from .state import Kontext
from .views import clamp, truncate


class TopicsPage(Page):
    def __init__(self, lister: TopicLister, notifier: Notifier | None = None) -> None:
        self.lister = lister
        self.notifier = notifier or Notifier()
        self.topics: list[Topic] = []
        self.cursor = 0
        self.loading = False

    def refresh(self) -> Cmd:
        self.loading = True
        lister = self.lister
        return lambda: lister.list_topics()

    def selected_topic(self) -> Topic | None:
        if not self.topics:
            return None
        return self.topics[clamp(self.cursor, 0, len(self.topics) - 1)]

    def update(self, msg: Msg) -> Optional[Cmd]:
        if self.notifier.update(msg):
            return None
        if isinstance(msg, TopicsListedMsg):
            self.loading = False
            self.topics = list(msg.topics)
            self.cursor = clamp(self.cursor, 0, max(0, len(self.topics) - 1))
            return None
        if isinstance(msg, TopicListingErrMsg):
            self.loading = False
            return self.notifier.show_error(f"Failed to list topics: {msg.err}")
        if isinstance(msg, Exception):
            self.loading = False
            return self.notifier.show_error(f"Failed to list topics: {msg}")
        if not isinstance(msg, KeyMsg):
            return None

        selected = self.selected_topic()
        if msg.key == "up":
            self.cursor = max(0, self.cursor - 1)
        elif msg.key == "down":
            self.cursor = clamp(self.cursor + 1, 0, max(0, len(self.topics) - 1))
        elif msg.key == "ctrl+n":
            return publish(LoadCreateTopicPageMsg())
        elif msg.key == "ctrl+p" and selected is not None:
            return publish(LoadPublishPageMsg(selected))
        elif msg.key == "enter" and selected is not None:
            return publish(LoadConsumptionPageMsg(selected))
        elif msg.key == "f5":
            return self.refresh()
        return None

    def render(self, ktx: Kontext) -> str:
        if self.loading and not self.topics:
            body = "Loading topics"
        elif not self.topics:
            body = "No topics found"
        else:
            name_w = max(10, ktx.window_width - 30)
            rows = [f"  {'Name'.ljust(name_w)} {'Partitions':>10} {'Replicas':>8}"]
            for idx, topic in enumerate(self.topics):
                marker = "> " if idx == self.cursor else "  "
                rows.append(f"{marker}{truncate(topic.name, name_w).ljust(name_w)} {topic.partitions:>10} {topic.replicas:>8}")
            body = "\n".join(rows)
        return join_sections(body, self.notifier.render())

    def title(self) -> str:
        return "Topics"

    def shortcuts(self) -> list[Shortcut]:
        return [
            Shortcut("Consume", "enter"),
            Shortcut("Create", "C-n"),
            Shortcut("Produce", "C-p"),
            Shortcut("Refresh", "F5"),
        ]
