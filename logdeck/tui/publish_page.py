from __future__ import annotations

from typing import Optional

from .admin import RecordPublisher
from .commands import Cmd, publish
from .forms import FieldDef, Form, FormGroup, partition_index
from .messages import KeyMsg, LoadTopicsPageMsg, Msg
from .models import (
    ProducerRecord,
    PublicationFailedMsg,
    PublicationStartedMsg,
    PublicationSucceededMsg,
    Topic,
)
from .notifier import Notifier
from .page import Page, Shortcut, join_sections
from .state import Kontext


def publish_groups(topic: Topic) -> tuple[FormGroup, ...]:
    return (
        FormGroup("", (FieldDef("key", "Key"),)),
        FormGroup(
            "",
            (FieldDef("partition", "Partition", kind="number", validator=partition_index(topic.partitions)),),
        ),
        FormGroup("", (FieldDef("payload", "Payload", multiline=True),)),
    )


class PublishPage(Page):
    def __init__(self, publisher: RecordPublisher, topic: Topic, notifier: Notifier | None = None) -> None:
        self.publisher = publisher
        self.topic = topic
        self.notifier = notifier or Notifier()
        self.form = Form(publish_groups(topic))
        # Survives form resets.
        self.published = 0

    def update(self, msg: Msg) -> Optional[Cmd]:
        if self.notifier.update(msg):
            return None
        if isinstance(msg, KeyMsg):
            if msg.key == "esc":
                return publish(LoadTopicsPageMsg())
            if msg.key == "ctrl+r":
                self.form.reset()
                return None
            if self.form.update(msg) == "ready":
                return self._submit()
            return None
        if isinstance(msg, PublicationStartedMsg):
            self.notifier.show_info("Publishing record")
            return msg.await_completion
        if isinstance(msg, PublicationSucceededMsg):
            self.form.reset()
            self.published += 1
            return self.notifier.show_success("🎉 Record published!")
        if isinstance(msg, PublicationFailedMsg):
            return self.notifier.show_error(f"Failed to publish record: {msg.err}")
        if isinstance(msg, Exception):
            return self.notifier.show_error(f"Failed to publish record: {msg}")
        return None

    def _submit(self) -> Optional[Cmd]:
        values, _errors = self.form.submit()
        if values is None:
            return None
        raw_partition = values["partition"].strip()
        record = ProducerRecord(
            topic=self.topic.name,
            key=values["key"],
            partition=int(raw_partition) if raw_partition else None,
            value=values["payload"],
        )
        publisher = self.publisher
        return lambda: publisher.publish_record(record)

    def render(self, ktx: Kontext) -> str:
        counter = f"{self.published} record(s) published to {self.topic.name}" if self.published else ""
        return join_sections(self.form.render(), self.notifier.render(), counter)

    def title(self) -> str:
        return f"Topics / {self.topic.name} / Produce"

    def shortcuts(self) -> list[Shortcut]:
        return [
            Shortcut("Confirm", "enter"),
            Shortcut("Next Field", "tab"),
            Shortcut("Prev. Field", "s-tab"),
            Shortcut("New Line", "C-j"),
            Shortcut("Reset Form", "C-r"),
            Shortcut("Go Back", "esc"),
        ]
