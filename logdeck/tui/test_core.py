from __future__ import annotations

import curses
import json
import queue
import tempfile
import unittest
from pathlib import Path
from typing import Optional
from unittest import mock

from logdeck.tui.admin import SandboxAdmin
from logdeck.tui.commands import BatchMsg, Cmd, Tick, batch, drain, publish, sequence, tick
from logdeck.tui.config import Cluster, Config, ConfigError, ConfigIO, SASLConfig
from logdeck.tui.keys import key_name
from logdeck.tui.logstore import LogStore
from logdeck.tui.messages import ClusterDeletedMsg, ClusterSwitchedMsg, HideNotificationMsg, KeyMsg, Msg
from logdeck.tui.models import (
    ProducerRecord,
    PublicationFailedMsg,
    PublicationSucceededMsg,
    ReadDetails,
    RecordsReadMsg,
    Topic,
    TopicCreatedMsg,
    TopicCreationDetails,
    TopicCreationErrMsg,
    TopicsListedMsg,
)
from logdeck.tui.notifier import Notifier
from logdeck.tui.runner import PASTE_END, CommandExecutor, Continuation, Program
from logdeck.tui.system_ops import ClipboardError, copy_to_clipboard


class Recorder:
    def __init__(self) -> None:
        self.seen: list[Msg] = []

    def update(self, msg: Msg) -> Optional[Cmd]:
        self.seen.append(msg)
        return None


class CommandTests(unittest.TestCase):
    def test_batch_and_sequence_compaction(self) -> None:
        one = publish(1)
        self.assertIsNone(batch())
        self.assertIsNone(sequence(None, None))
        self.assertIs(batch(None, one), one)
        self.assertIsInstance(batch(one, publish(2))(), BatchMsg)

    def test_nested_batches_deliver_in_order(self) -> None:
        cmd = batch(publish("a"), sequence(publish("b"), lambda: None, publish("c")), publish("d"))
        self.assertEqual(drain(Recorder(), cmd), ["a", "b", "c", "d"])
        self.assertEqual(drain(Recorder(), None), [])

    def test_tick_fires_without_waiting(self) -> None:
        cmd = tick(60.0, lambda: "late")
        self.assertIsInstance(cmd, Tick)
        self.assertEqual(drain(Recorder(), cmd), ["late"])

    def test_batch_child_runs_after_previous_message_is_delivered(self) -> None:
        class Counter:
            def __init__(self) -> None:
                self.count = 0

            def update(self, msg: Msg) -> Optional[Cmd]:
                if msg == "bump":
                    self.count += 1
                return None

        model = Counter()
        delivered = drain(model, batch(publish("bump"), lambda: ("observed", model.count)))
        self.assertEqual(delivered, ["bump", ("observed", 1)])

    def test_drain_feeds_follow_ups_in_order(self) -> None:
        class Model:
            def __init__(self) -> None:
                self.seen: list[Msg] = []

            def update(self, msg: Msg) -> Optional[Cmd]:
                self.seen.append(msg)
                if msg == "start":
                    return batch(publish("x"), publish("y"))
                if msg == "x":
                    return publish("z")
                return None

        model = Model()
        delivered = drain(model, publish("start"))
        self.assertEqual(delivered, ["start", "x", "y", "z"])
        self.assertEqual(model.seen, delivered)

    def test_drain_limit(self) -> None:
        class Loop:
            def update(self, msg: Msg) -> Optional[Cmd]:
                return publish(msg)

        with self.assertRaises(RuntimeError):
            drain(Loop(), publish("again"), limit=5)


class NotifierTests(unittest.TestCase):
    def test_show_then_hide(self) -> None:
        notifier = Notifier()
        cmd = notifier.show_success("Saved")
        self.assertEqual(notifier.render(), "Saved")
        self.assertTrue(notifier.update(cmd.fire()))
        self.assertFalse(notifier.visible)

    def test_stale_hide_keeps_newer_notification(self) -> None:
        notifier = Notifier()
        first = notifier.show_error("one")
        notifier.show_success("two")
        notifier.update(first.fire())
        self.assertEqual(notifier.render(), "two")
        notifier.update(HideNotificationMsg(0))
        self.assertEqual(notifier.render(), "")

    def test_info_has_no_timer_and_ignores_other_messages(self) -> None:
        notifier = Notifier()
        self.assertIsNone(notifier.show("Working", "info"))
        self.assertEqual(notifier.render(), "… Working")
        self.assertFalse(notifier.update("unrelated"))
        self.assertTrue(notifier.visible)

    def test_tags_are_unique_across_notifiers(self) -> None:
        a, b = Notifier(), Notifier()
        hide_a = a.show_success("a")
        b.show_success("b")
        b.update(hide_a.fire())
        self.assertTrue(b.visible)


class KeyNameTests(unittest.TestCase):
    def test_control_characters(self) -> None:
        self.assertEqual(key_name("\r"), "enter")
        self.assertEqual(key_name("\n"), "ctrl+j")
        self.assertEqual(key_name("\t"), "tab")
        self.assertEqual(key_name("\x1b"), "esc")
        self.assertEqual(key_name("\x12"), "ctrl+r")
        self.assertEqual(key_name("\x08"), "ctrl+h")

    def test_curses_codes(self) -> None:
        self.assertEqual(key_name(curses.KEY_BTAB), "shift+tab")
        self.assertEqual(key_name(curses.KEY_UP), "up")
        self.assertEqual(key_name(curses.KEY_F5), "f5")
        self.assertEqual(key_name(127), "backspace")
        self.assertIsNone(key_name(curses.KEY_MOUSE))

    def test_printable(self) -> None:
        self.assertEqual(key_name("é"), "é")
        self.assertIsNone(key_name(""))


class LogStoreTests(unittest.TestCase):
    def test_logstore_falls_back_when_preferred_dir_unwritable(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            home = Path(td)
            real_mkdir = Path.mkdir

            def fake_mkdir(path_obj: Path, *args: object, **kwargs: object) -> None:
                if str(path_obj) == "/var/log/logdeck":
                    raise PermissionError("denied")
                return real_mkdir(path_obj, *args, **kwargs)

            with mock.patch("logdeck.tui.logstore.Path.home", return_value=home), mock.patch(
                "logdeck.tui.logstore.Path.mkdir",
                new=fake_mkdir,
            ):
                store = LogStore(max_entries=32, log_dir=Path("/var/log/logdeck"))
                expected_root = home / ".cache" / "logdeck" / "logs"
                self.assertTrue(str(store.log_dir).startswith(str(expected_root)))
                self.assertTrue(store.log_path.exists())
                self.assertIn("fallback", store.entries[0].message)

    def test_min_level_and_file_output(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            store = LogStore(max_entries=32, log_dir=Path(td), min_level="info")
            self.assertIsNone(store.append("debug", "Topics", "noise"))
            store.info("Topics / Create", "navigated from 'Topics'", category="nav")
            lines = store.log_path.read_text(encoding="utf-8").splitlines()
            self.assertTrue(lines[-1].endswith("[nav] [Topics / Create] navigated from 'Topics'"))
            self.assertEqual(store.entries[-1].category, "nav")


class ConfigTests(unittest.TestCase):
    def test_register_persists_and_first_cluster_is_active(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            io = ConfigIO(Path(td) / "config.json")
            config = Config(io=io)
            config.register_cluster(Cluster("local", bootstrap_servers=["localhost:9092"]))
            config.register_cluster(
                Cluster("prod", sasl=SASLConfig(username="svc", password="pw", security_protocol="SASL_SSL"))
            )
            raw = json.loads(io.path.read_text(encoding="utf-8"))
            self.assertEqual([c["name"] for c in raw["clusters"]], ["local", "prod"])

            loaded = Config.load(io)
            self.assertEqual(loaded.active_cluster().name, "local")
            self.assertEqual(loaded.find_cluster_by_name("prod").sasl.username, "svc")

    def test_duplicate_name_rejected_unless_editing_itself(self) -> None:
        config = Config()
        config.register_cluster(Cluster("local"))
        with self.assertRaises(ConfigError):
            config.register_cluster(Cluster("local"))
        msg = config.register_cluster(Cluster("local", color="red"), previous_name="local")
        self.assertEqual(msg.cluster.color, "red")
        self.assertTrue(config.clusters[0].active)
        self.assertEqual(len(config.clusters), 1)

    def test_delete_active_activates_first_remaining(self) -> None:
        config = Config([Cluster("a", active=True), Cluster("b"), Cluster("c")])
        self.assertEqual(config.delete_cluster("a"), ClusterDeletedMsg("a"))
        self.assertEqual(config.active_cluster().name, "b")
        self.assertTrue(config.clusters[0].active)
        with self.assertRaises(ConfigError):
            config.delete_cluster("a")

    def test_switch_cluster(self) -> None:
        config = Config([Cluster("a", active=True), Cluster("b")])
        msg = config.switch_cluster("b")
        self.assertIsInstance(msg, ClusterSwitchedMsg)
        self.assertEqual([c.active for c in config.clusters], [False, True])

    def test_unreadable_file_raises_config_error(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "config.json"
            path.write_text("{not json", encoding="utf-8")
            with self.assertRaises(ConfigError):
                Config.load(ConfigIO(path))

    def test_malformed_cluster_entries_raise_config_error(self) -> None:
        entries = {
            "truncated sasl": {"name": "a", "sasl": {"username": "u"}},
            "unknown key": {"name": "a", "schema_registry": {"url": "http://r", "token": "x"}},
            "sasl not an object": {"name": "a", "sasl": "u:p"},
            "servers as string": {"name": "a", "bootstrap_servers": "localhost:9092"},
        }
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "config.json"
            for label, entry in entries.items():
                with self.subTest(label):
                    path.write_text(json.dumps({"clusters": [entry]}), encoding="utf-8")
                    with self.assertRaises(ConfigError) as ctx:
                        Config.load(ConfigIO(path))
                    self.assertTrue(str(ctx.exception).startswith("cluster 'a': "))

    def test_passwords_stay_out_of_repr(self) -> None:
        cluster = Cluster("a", sasl=SASLConfig("bob", "S3cr3t"))
        self.assertNotIn("S3cr3t", repr(cluster))
        self.assertEqual(cluster.to_dict()["sasl"]["password"], "S3cr3t")


class SandboxAdminTests(unittest.TestCase):
    def setUp(self) -> None:
        self.admin = SandboxAdmin("dev", [Topic("orders", 2)])

    def test_create_and_list(self) -> None:
        self.assertEqual(self.admin.create_topic(TopicCreationDetails("audit", 1)), TopicCreatedMsg("audit"))
        self.assertIsInstance(self.admin.create_topic(TopicCreationDetails("audit", 1)), TopicCreationErrMsg)
        self.assertIsInstance(self.admin.create_topic(TopicCreationDetails("x", 0)), TopicCreationErrMsg)
        listed = self.admin.list_topics()
        self.assertIsInstance(listed, TopicsListedMsg)
        self.assertEqual([t.name for t in listed.topics], ["audit", "orders"])

    def test_publish_then_read(self) -> None:
        started = self.admin.publish_record(ProducerRecord("orders", "k", 1, "v"))
        self.assertEqual(started.await_completion(), PublicationSucceededMsg(partition=1, offset=0))
        read = self.admin.read_records(ReadDetails(Topic("orders", 2)))
        self.assertIsInstance(read, RecordsReadMsg)
        self.assertEqual([(r.key, r.partition) for r in read.records], [("k", 1)])

    def test_publish_to_missing_partition_fails(self) -> None:
        started = self.admin.publish_record(ProducerRecord("orders", "k", 9, "v"))
        self.assertEqual(
            started.await_completion(),
            PublicationFailedMsg("partition 9 does not exist on topic 'orders'"),
        )

    def test_seed(self) -> None:
        self.admin.seed(2)
        names = [t.name for t in self.admin.list_topics().topics]
        self.assertIn("dev-topic-2", names)
        records = self.admin.read_records(ReadDetails(Topic("dev-topic-1", 3))).records
        self.assertEqual(len(records), 1)
        self.assertEqual({h.key for h in records[0].headers}, {"origin", "content-type"})


class ClipboardTests(unittest.TestCase):
    def test_no_tool_available(self) -> None:
        with mock.patch("logdeck.tui.system_ops.have_cmd", return_value=False):
            with self.assertRaises(ClipboardError):
                copy_to_clipboard("x")

    def test_first_available_tool_gets_text(self) -> None:
        done = mock.Mock(returncode=0, stderr="")
        with mock.patch("logdeck.tui.system_ops.have_cmd", side_effect=lambda name: name == "xsel"), mock.patch(
            "logdeck.tui.system_ops.subprocess.run", return_value=done
        ) as run:
            copy_to_clipboard("payload")
        self.assertEqual(run.call_args.args[0], ["xsel", "--clipboard", "--input"])
        self.assertEqual(run.call_args.kwargs["input"], "payload")


class CommandExecutorTests(unittest.TestCase):
    def test_batch_siblings_wait_for_delivery(self) -> None:
        messages: queue.Queue = queue.Queue()
        executor = CommandExecutor(messages)
        calls: list[int] = []

        def second() -> Msg:
            calls.append(2)
            return 2

        executor.execute(batch(publish(1), sequence(second, publish(3))))
        first = messages.get_nowait()
        self.assertIsInstance(first, Continuation)
        self.assertEqual(first.msg, 1)
        self.assertEqual(calls, [])
        self.assertTrue(messages.empty())

        executor.run_rest(first.rest)
        self.assertEqual(calls, [2])
        follow = messages.get_nowait()
        self.assertEqual(follow.msg, 2)
        executor.run_rest(follow.rest)
        self.assertEqual(messages.get_nowait(), 3)

    def test_program_resumes_batch_after_update(self) -> None:
        class Counter:
            def __init__(self) -> None:
                self.count = 0
                self.seen: list[Msg] = []

            def update(self, msg: Msg) -> Optional[Cmd]:
                self.seen.append(msg)
                if msg == "bump":
                    self.count += 1
                return None

        model = Counter()
        program = Program(mock.Mock(), model)
        program.executor.execute(batch(publish("bump"), lambda: ("observed", model.count)))
        program._deliver(program.messages.get_nowait())
        program._deliver(program.messages.get(timeout=2))
        self.assertEqual(model.seen, ["bump", ("observed", 1)])

    def test_raising_command_becomes_message(self) -> None:
        messages: queue.Queue = queue.Queue()

        def boom() -> Msg:
            raise RuntimeError("broker unreachable")

        CommandExecutor(messages).execute(boom)
        err = messages.get_nowait()
        self.assertIsInstance(err, RuntimeError)
        self.assertEqual(str(err), "broker unreachable")

    def test_tick_is_armed_on_a_timer(self) -> None:
        messages: queue.Queue = queue.Queue()
        CommandExecutor(messages).dispatch(tick(0.01, lambda: HideNotificationMsg(4)))
        self.assertEqual(messages.get(timeout=2), HideNotificationMsg(4))


class ProgramInputTests(unittest.TestCase):
    def test_bracketed_paste_is_collected(self) -> None:
        stdscr = mock.Mock()
        stdscr.get_wch.side_effect = list("[200~one\rtwo") + list(PASTE_END)
        self.assertEqual(Program(stdscr, mock.Mock())._read_paste(), "one\ntwo")

    def test_plain_escape_pushes_input_back(self) -> None:
        stdscr = mock.Mock()
        stdscr.get_wch.side_effect = ["[", "A"]
        with mock.patch("logdeck.tui.runner.curses.unget_wch") as unget:
            self.assertIsNone(Program(stdscr, mock.Mock())._read_paste())
        self.assertEqual([c.args[0] for c in unget.call_args_list], ["A", "["])

    def test_session_log_skips_keys(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            logstore = LogStore(max_entries=32, log_dir=Path(td))
            program = Program(mock.Mock(), Recorder(), logstore)
            program._deliver(KeyMsg("S"))
            program._deliver(ClusterSwitchedMsg(Cluster("a", sasl=SASLConfig("bob", "S3cr3t"))))
            text = logstore.log_path.read_text(encoding="utf-8")
            self.assertNotIn("KeyMsg", text)
            self.assertNotIn("S3cr3t", text)
            self.assertTrue(text.rstrip().endswith("ClusterSwitchedMsg"))


if __name__ == "__main__":
    unittest.main()
