from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from typing import Any
from unittest import mock

from logdeck.tui.admin import SandboxAdmin
from logdeck.tui.clusters_page import ClustersPage
from logdeck.tui.clusters_tab import ClustersTab
from logdeck.tui.commands import drain
from logdeck.tui.config import Cluster, Config, ConfigError
from logdeck.tui.create_cluster_page import AUTH_SASL, CreateClusterPage
from logdeck.tui.create_topic_page import CreateTopicPage
from logdeck.tui.logstore import LogStore
from logdeck.tui.messages import (
    ClusterDeletedMsg,
    ClusterRegisteredMsg,
    ClusterSwitchedMsg,
    KeyMsg,
    LoadCachedConsumptionPageMsg,
    Msg,
    keys_for,
)
from logdeck.tui.models import Topic, TopicListingErrMsg
from logdeck.tui.navigation import NavigationController
from logdeck.tui.publish_page import PublishPage
from logdeck.tui.record_details_page import RecordDetailsPage
from logdeck.tui.records_page import RecordsPage
from logdeck.tui.state import new_test_kontext


def press(model: Any, *keys: str) -> list[Msg]:
    """Deliver keys and run every resulting command to completion."""
    delivered: list[Msg] = []
    for name in keys:
        delivered.extend(drain(model, model.update(KeyMsg(name))))
    return delivered


def type_text(model: Any, text: str) -> None:
    for msg in keys_for(text):
        drain(model, model.update(msg))


class NavigationControllerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.admin = SandboxAdmin("dev", [Topic("orders", 3)])
        self.admin.seed(1)
        self.clipboard = mock.Mock()
        self.nav = NavigationController(self.admin, clipboard=self.clipboard)
        drain(self.nav, self.nav.init())

    def _topic_names(self) -> list[str]:
        return [t.name for t in self.nav.topics_page.topics]

    def test_init_lists_topics(self) -> None:
        self.assertEqual(self._topic_names(), ["dev-topic-1", "orders"])
        self.assertTrue(self.nav.render(new_test_kontext()).startswith("Topics\n"))

    def test_create_topic_then_escape_refreshes_list(self) -> None:
        press(self.nav, "ctrl+n")
        self.assertIsInstance(self.nav.active, CreateTopicPage)
        self.assertEqual(self.nav.title(), "Topics / Create")
        type_text(self.nav, "fresh")
        press(self.nav, "enter")
        type_text(self.nav, "1")
        press(self.nav, "enter", "enter", "enter")
        self.assertNotIn("fresh", self._topic_names())
        press(self.nav, "esc")
        self.assertIs(self.nav.active, self.nav.topics_page)
        self.assertIn("fresh", self._topic_names())

    def test_escape_without_creation_keeps_cached_list(self) -> None:
        press(self.nav, "down")
        press(self.nav, "ctrl+n")
        with mock.patch.object(self.admin, "list_topics") as listing:
            press(self.nav, "esc")
        listing.assert_not_called()
        self.assertIs(self.nav.active, self.nav.topics_page)
        self.assertEqual(self.nav.topics_page.cursor, 1)
        self.assertEqual(self._topic_names(), ["dev-topic-1", "orders"])

    def test_publish_page_for_selected_topic(self) -> None:
        press(self.nav, "down", "ctrl+p")
        self.assertIsInstance(self.nav.active, PublishPage)
        self.assertEqual(self.nav.title(), "Topics / orders / Produce")
        type_text(self.nav, "k")
        press(self.nav, "enter", "enter")
        type_text(self.nav, "hello")
        press(self.nav, "enter")
        self.assertEqual(self.nav.active.published, 1)

    def test_record_details_returns_to_cached_consumption(self) -> None:
        press(self.nav, "enter")
        consumption = self.nav.active
        self.assertIsInstance(consumption, RecordsPage)
        self.assertEqual(len(consumption.records), 1)
        press(self.nav, "enter")
        self.assertIsInstance(self.nav.active, RecordDetailsPage)
        press(self.nav, "c")
        self.clipboard.assert_called_once_with('{"seeded": true, "index": 1}')
        press(self.nav, "esc")
        self.assertIs(self.nav.active, consumption)
        press(self.nav, "esc")
        self.assertIs(self.nav.active, self.nav.topics_page)

    def test_returning_to_topics_clears_stale_error(self) -> None:
        self.nav.update(TopicListingErrMsg("broker down"))
        self.assertIn("Failed to list topics", self.nav.render(new_test_kontext()))
        press(self.nav, "ctrl+n")
        with mock.patch.object(self.admin, "list_topics"):
            press(self.nav, "esc")
        self.assertIs(self.nav.active, self.nav.topics_page)
        self.assertNotIn("Failed to list topics", self.nav.render(new_test_kontext()))

    def test_cached_consumption_falls_back_to_topics(self) -> None:
        self.nav.update(LoadCachedConsumptionPageMsg())
        self.assertIs(self.nav.active, self.nav.topics_page)

    def test_page_changes_are_logged(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            logstore = LogStore(max_entries=64, log_dir=Path(td))
            nav = NavigationController(self.admin, clipboard=self.clipboard, logstore=logstore)
            drain(nav, nav.init())
            press(nav, "ctrl+n")
            nav_entries = [e for e in logstore.entries if e.category == "nav"]
            self.assertEqual(len(nav_entries), 1)
            self.assertEqual(nav_entries[0].page, "Topics / Create")

    def test_status_bar_follows_active_page(self) -> None:
        press(self.nav, "ctrl+n")
        rendered = self.nav.render(new_test_kontext())
        self.assertTrue(rendered.startswith("Topics / Create\n"))
        self.assertIn("Reset Form: C-r", rendered)


class ClustersTabTests(unittest.TestCase):
    def _fill_cluster(self, tab: ClustersTab, name: str) -> list[Msg]:
        type_text(tab, name)
        press(tab, "enter", "enter")
        type_text(tab, "localhost:9092")
        return press(tab, *(["enter"] * 8))

    def test_first_cluster_is_created_and_activated(self) -> None:
        config = Config()
        tab = ClustersTab(config)
        self.assertIsInstance(tab.active, CreateClusterPage)
        self.assertIsNone(tab.statusbar)

        delivered = self._fill_cluster(tab, "local")
        self.assertIsInstance(delivered[0], ClusterRegisteredMsg)
        self.assertEqual(delivered[1], ClusterSwitchedMsg(config.clusters[0]))
        self.assertIsInstance(tab.active, ClustersPage)
        self.assertIsNotNone(tab.statusbar)
        self.assertEqual(config.clusters[0].bootstrap_servers, ["localhost:9092"])
        self.assertTrue(config.clusters[0].active)
        self.assertTrue(tab.render(new_test_kontext()).startswith("Clusters\n"))

    def test_duplicate_name_is_reported(self) -> None:
        config = Config([Cluster("local", active=True)])
        tab = ClustersTab(config)
        press(tab, "ctrl+n")
        delivered = self._fill_cluster(tab, "local")
        self.assertIsInstance(delivered[0], ConfigError)
        self.assertEqual(str(delivered[0]), "cluster 'local' already exists")
        self.assertIsInstance(tab.active, CreateClusterPage)
        self.assertEqual(len(config.clusters), 1)

    def test_sasl_requires_username(self) -> None:
        page = CreateClusterPage(Config())
        page.form.set_value("name", "secure")
        page.form.set_value("host", "broker:9093")
        page.form.set_value("auth_method", AUTH_SASL)
        self.assertIsNone(page._submit())
        self.assertEqual(page.form.errors, {"username": "Username cannot be empty."})
        self.assertEqual(page.form.current.key, "username")

    def test_session_log_never_holds_typed_password(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            logstore = LogStore(max_entries=256, log_dir=Path(td))
            config = Config()
            tab = ClustersTab(config, logstore)
            type_text(tab, "secure")
            press(tab, "enter", "enter")
            type_text(tab, "broker:9093")
            press(tab, "enter", "down", "enter", "enter")
            type_text(tab, "bob")
            press(tab, "enter")
            type_text(tab, "S3cr3t")
            delivered = press(tab, "enter", "enter", "enter", "enter")
            self.assertIsInstance(delivered[0], ClusterRegisteredMsg)
            self.assertEqual(config.clusters[0].sasl.password, "S3cr3t")
            text = logstore.log_path.read_text(encoding="utf-8")
            self.assertNotIn("S3cr3t", text)
            self.assertIn("ClusterRegisteredMsg", text)

    def test_edit_prefills_and_escape_returns_to_list(self) -> None:
        config = Config([Cluster("a", active=True, bootstrap_servers=["h:1"]), Cluster("b")])
        tab = ClustersTab(config)
        press(tab, "ctrl+e")
        self.assertEqual(tab.title(), "Clusters / a / Edit")
        self.assertEqual(tab.active.form.values()["host"], "h:1")
        press(tab, "esc")
        self.assertIsInstance(tab.active, ClustersPage)

    def test_delete_after_confirmation_switches_active(self) -> None:
        config = Config([Cluster("a", active=True), Cluster("b")])
        tab = ClustersTab(config)
        press(tab, "ctrl+d")
        self.assertIn("Delete cluster a?", tab.render(new_test_kontext()))
        press(tab, "esc")
        self.assertIsInstance(tab.active, ClustersPage)
        self.assertIsNone(tab.active.modal)
        self.assertEqual(len(config.clusters), 2)

        delivered = press(tab, "ctrl+d", "enter")
        self.assertIn(ClusterDeletedMsg("a"), delivered)
        self.assertEqual(delivered[-1], ClusterSwitchedMsg(config.clusters[0]))
        self.assertEqual([c.name for c in config.clusters], ["b"])
        self.assertTrue(config.clusters[0].active)

    def test_deleting_last_cluster_shows_create_form(self) -> None:
        config = Config([Cluster("only", active=True)])
        tab = ClustersTab(config)
        delivered = press(tab, "ctrl+d", "y")
        self.assertEqual(delivered[-1], ClusterSwitchedMsg(None))
        self.assertIsInstance(tab.active, CreateClusterPage)
        self.assertIsNone(tab.statusbar)

    def test_enter_switches_cluster(self) -> None:
        config = Config([Cluster("a", active=True), Cluster("b")])
        tab = ClustersTab(config)
        delivered = press(tab, "down", "enter")
        self.assertEqual(delivered, [ClusterSwitchedMsg(config.clusters[1])])
        self.assertEqual(config.active_cluster().name, "b")
        self.assertIn("b (active)", tab.render(new_test_kontext()))


if __name__ == "__main__":
    unittest.main()
