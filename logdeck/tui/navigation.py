from __future__ import annotations

from typing import Any, Callable, Optional

from .commands import Cmd
from .create_topic_page import CreateTopicPage
from .logstore import LogStore
from .messages import (
    ClusterDeletedMsg,
    ClusterRegisteredMsg,
    ClusterSwitchedMsg,
    LoadCachedConsumptionPageMsg,
    LoadConsumptionPageMsg,
    LoadCreateTopicPageMsg,
    LoadPublishPageMsg,
    LoadRecordDetailPageMsg,
    LoadTopicsPageMsg,
    Msg,
)
from .page import Page
from .publish_page import PublishPage
from .record_details_page import RecordDetailsPage
from .records_page import RecordsPage
from .state import Kontext
from .statusbar import StatusBar
from .system_ops import copy_to_clipboard
from .topics_page import TopicsPage

PageFactory = Callable[[Any], tuple[Page, Optional[Cmd]]]

STRUCTURAL_MSGS = (ClusterRegisteredMsg, ClusterDeletedMsg, ClusterSwitchedMsg)


class NavigationController:
    """Owns the single active topics-side page and swaps it on navigation messages.

    The topics list and the last consumption page are cached so going back
    to them keeps cursor and content; every other page is built fresh.
    """

    def __init__(
        self,
        admin: Any,
        clipboard: Callable[[str], None] = copy_to_clipboard,
        logstore: LogStore | None = None,
    ) -> None:
        self.admin = admin
        self.clipboard = clipboard
        self.logstore = logstore
        self.topics_page = TopicsPage(admin)
        self.consumption_page: RecordsPage | None = None
        self.active: Page = self.topics_page
        self.statusbar = StatusBar(self.active)
        self.factories: dict[type, PageFactory] = {
            LoadTopicsPageMsg: self._load_topics,
            LoadCreateTopicPageMsg: self._load_create_topic,
            LoadPublishPageMsg: self._load_publish,
            LoadConsumptionPageMsg: self._load_consumption,
            LoadCachedConsumptionPageMsg: self._load_cached_consumption,
            LoadRecordDetailPageMsg: self._load_record_details,
        }

    def init(self) -> Optional[Cmd]:
        return self.topics_page.refresh()

    def update(self, msg: Msg) -> Optional[Cmd]:
        factory = self.factories.get(type(msg))
        if factory is not None:
            page, cmd = factory(msg)
            self._activate(page)
            return cmd
        cmd = self.active.update(msg)
        if isinstance(msg, STRUCTURAL_MSGS):
            self.statusbar = StatusBar(self.active)
        return cmd

    def _activate(self, page: Page) -> None:
        if self.logstore is not None and page is not self.active:
            self.logstore.info(page.title(), f"navigated from '{self.active.title()}'", category="nav")
        self.active = page
        self.statusbar = StatusBar(page)

    def _load_topics(self, msg: LoadTopicsPageMsg) -> tuple[Page, Optional[Cmd]]:
        # Its pending hide message was delivered to whichever page was active.
        self.topics_page.notifier.hide()
        cmd = self.topics_page.refresh() if msg.refresh else None
        return self.topics_page, cmd

    def _load_create_topic(self, _msg: LoadCreateTopicPageMsg) -> tuple[Page, Optional[Cmd]]:
        return CreateTopicPage(self.admin), None

    def _load_publish(self, msg: LoadPublishPageMsg) -> tuple[Page, Optional[Cmd]]:
        return PublishPage(self.admin, msg.topic), None

    def _load_consumption(self, msg: LoadConsumptionPageMsg) -> tuple[Page, Optional[Cmd]]:
        page = RecordsPage(self.admin, msg.topic)
        self.consumption_page = page
        return page, page.read()

    def _load_cached_consumption(self, _msg: LoadCachedConsumptionPageMsg) -> tuple[Page, Optional[Cmd]]:
        if self.consumption_page is None:
            return self.topics_page, None
        self.consumption_page.notifier.hide()
        return self.consumption_page, None

    def _load_record_details(self, msg: LoadRecordDetailPageMsg) -> tuple[Page, Optional[Cmd]]:
        return RecordDetailsPage(msg.record, msg.topic, clipboard=self.clipboard), None

    def title(self) -> str:
        return self.active.title()

    def render(self, ktx: Kontext) -> str:
        return self.statusbar.render(ktx) + "\n" + self.active.render(ktx)
