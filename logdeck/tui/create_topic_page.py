from __future__ import annotations

from typing import Optional

from .admin import TopicCreator
from .commands import Cmd, publish
from .forms import FieldDef, Form, FormGroup, positive_int, required
from .messages import KeyMsg, LoadTopicsPageMsg, Msg
from .models import CLEANUP_POLICIES, TopicCreatedMsg, TopicCreationDetails, TopicCreationErrMsg
from .notifier import Notifier
from .page import Page, Shortcut, join_sections
from .state import Kontext

CREATE_TOPIC_GROUPS: tuple[FormGroup, ...] = (
    FormGroup("", (FieldDef("name", "Topic Name", validator=required("Topic Name")),)),
    FormGroup(
        "",
        (
            FieldDef(
                "partitions",
                "Number of Partitions",
                kind="number",
                validator=positive_int("partition count", "Number of Partitions"),
            ),
            FieldDef("cleanup_policy", "Cleanup Policy", kind="select", options=CLEANUP_POLICIES),
        ),
    ),
    FormGroup(
        "",
        (FieldDef("configs", "Config", kind="configs", entries_title="Custom Topic configurations:"),),
    ),
)


class CreateTopicPage(Page):
    def __init__(self, creator: TopicCreator, notifier: Notifier | None = None) -> None:
        self.creator = creator
        self.notifier = notifier or Notifier()
        self.form = Form(CREATE_TOPIC_GROUPS)
        # Set on the first successful creation and kept for the page's lifetime.
        self.topic_created = False

    def update(self, msg: Msg) -> Optional[Cmd]:
        if self.notifier.update(msg):
            return None
        if isinstance(msg, KeyMsg):
            if msg.key == "esc":
                return publish(LoadTopicsPageMsg(refresh=self.topic_created))
            if msg.key == "ctrl+r":
                self.form.reset()
                return None
            if self.form.update(msg) == "ready":
                return self._submit()
            return None
        if isinstance(msg, TopicCreatedMsg):
            self.topic_created = True
            self.form.reset()
            name = f" {msg.name}" if msg.name else ""
            return self.notifier.show_success(f"Topic{name} created!")
        if isinstance(msg, TopicCreationErrMsg):
            return self.notifier.show_error(f"Failed to create topic: {msg.err}")
        if isinstance(msg, Exception):
            return self.notifier.show_error(f"Failed to create topic: {msg}")
        return None

    def _submit(self) -> Optional[Cmd]:
        values, _errors = self.form.submit()
        if values is None:
            return None
        configuration = {"cleanup.policy": values["cleanup_policy"]}
        configuration.update(values["configs"])
        details = TopicCreationDetails(
            name=values["name"].strip(),
            partition_count=int(values["partitions"].strip()),
            configuration=configuration,
        )
        self.notifier.show_info("Creating topic")
        creator = self.creator
        return lambda: creator.create_topic(details)

    def render(self, ktx: Kontext) -> str:
        return join_sections(self.form.render(), self.notifier.render())

    def title(self) -> str:
        return "Topics / Create"

    def shortcuts(self) -> list[Shortcut]:
        return [
            Shortcut("Confirm", "enter"),
            Shortcut("Next Field", "tab"),
            Shortcut("Prev. Field", "s-tab"),
            Shortcut("Reset Form", "C-r"),
            Shortcut("Go Back", "esc"),
        ]
