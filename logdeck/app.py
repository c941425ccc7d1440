from __future__ import annotations

import argparse
import curses
from pathlib import Path
from typing import Any, Callable, Optional

from .tui.admin import SandboxAdmin
from .tui.clusters_tab import ClustersTab
from .tui.commands import Cmd, batch
from .tui.config import Cluster, Config, ConfigError, ConfigIO
from .tui.focus import FocusRing
from .tui.logstore import LogStore
from .tui.messages import (
    NAVIGATION_MSGS,
    ClusterDeletedMsg,
    ClusterRegisteredMsg,
    ClusterSwitchedMsg,
    HideNotificationMsg,
    KeyMsg,
    Msg,
    QuitMsg,
    ResizeMsg,
)
from .tui.navigation import NavigationController
from .tui.runner import Program
from .tui.state import Kontext
from .tui.system_ops import copy_to_clipboard
from .tui.views import truncate

TABS = ("Topics", "Clusters")

AdminFactory = Callable[[Optional[Cluster]], Any]


class App:
    """Root model: owns the render context and the two tabs.

    Key presses go to the visible tab. Topic navigation always lands in the
    topics tab, cluster lifecycle messages in the clusters tab, and a
    cluster switch rebuilds the topics tab against the new backend.
    """

    def __init__(
        self,
        config: Config,
        admin_factory: AdminFactory,
        logstore: LogStore | None = None,
        clipboard: Callable[[str], None] = copy_to_clipboard,
    ) -> None:
        self.config = config
        self.admin_factory = admin_factory
        self.logstore = logstore
        self.clipboard = clipboard
        self.ktx = Kontext(config=config)
        self.clusters = ClustersTab(config, logstore)
        self.topics = self._topics_for(config.active_cluster())
        self.tabs = FocusRing(list(TABS), 0 if config.has_clusters() else 1)

    def _topics_for(self, cluster: Cluster | None) -> NavigationController:
        return NavigationController(self.admin_factory(cluster), clipboard=self.clipboard, logstore=self.logstore)

    def init(self) -> Optional[Cmd]:
        return self.topics.init()

    def update(self, msg: Msg) -> Optional[Cmd]:
        if isinstance(msg, ResizeMsg):
            self.ktx = self.ktx.resized(msg.width, msg.height)
            return None
        if isinstance(msg, KeyMsg):
            if msg.key == "ctrl+c":
                return lambda: QuitMsg()
            if msg.key == "f1":
                self.tabs.select("Topics")
                return None
            if msg.key == "f2":
                self.tabs.select("Clusters")
                return None
            if self.tabs.current == "Clusters":
                return self.clusters.update(msg)
            return self.topics.update(msg)
        if isinstance(msg, ClusterSwitchedMsg):
            return self._switch(msg)
        if isinstance(msg, NAVIGATION_MSGS):
            return self.topics.update(msg)
        if isinstance(msg, (ClusterRegisteredMsg, ClusterDeletedMsg, ConfigError)):
            return self.clusters.update(msg)
        if isinstance(msg, HideNotificationMsg):
            return batch(self.topics.update(msg), self.clusters.update(msg))
        if isinstance(msg, Exception) and self.logstore is not None:
            self.logstore.error(self.topics.title(), str(msg), category="admin")
        # Collaborator results all belong to the topics side.
        return self.topics.update(msg)

    def _switch(self, msg: ClusterSwitchedMsg) -> Optional[Cmd]:
        name = msg.cluster.name if msg.cluster is not None else "<none>"
        if self.logstore is not None:
            self.logstore.info("app", f"active cluster is now {name}", category="config")
        self.topics = self._topics_for(msg.cluster)
        return batch(self.clusters.update(msg), self.topics.init())

    def title(self) -> str:
        if self.tabs.current == "Clusters":
            return self.clusters.title()
        return self.topics.title()

    def _tab_line(self) -> str:
        cells = []
        for idx, name in enumerate(TABS):
            label = f"F{idx + 1} {name}"
            cells.append(f"[{label}]" if self.tabs.is_focused(name) else f" {label} ")
        active = self.config.active_cluster()
        cluster = f"cluster: {active.name}" if active is not None else "no cluster"
        return " ".join(cells) + "  " + cluster

    def render(self) -> str:
        ktx = self.ktx
        if ktx.too_small:
            return truncate(f"Window too small ({ktx.window_width}x{ktx.window_height})", ktx.window_width)
        body = self.clusters.render(ktx) if self.tabs.current == "Clusters" else self.topics.render(ktx)
        return self._tab_line() + "\n" + body


def sandbox_factory(seed: int) -> AdminFactory:
    """Give every cluster its own in-memory backend, kept across switches."""
    admins: dict[str, SandboxAdmin] = {}

    def build(cluster: Cluster | None) -> SandboxAdmin:
        name = cluster.name if cluster is not None else "sandbox"
        admin = admins.get(name)
        if admin is None:
            admin = SandboxAdmin(name)
            admin.seed(seed)
            admins[name] = admin
        return admin

    return build


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="logdeck", description="Terminal admin console for a message log cluster.")
    parser.add_argument("--config", type=Path, default=None, help="cluster configuration file (JSON)")
    parser.add_argument("--log-dir", type=Path, default=None, help="directory for the session log file")
    parser.add_argument("--sandbox-topics", type=int, default=3, help="topics seeded in each sandbox cluster")
    parser.add_argument("--verbose", action="store_true", help="also log every delivered message type")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logstore = LogStore(log_dir=args.log_dir, min_level="debug" if args.verbose else "info")
    io = ConfigIO(args.config)
    try:
        config = Config.load(io)
    except ConfigError as exc:
        logstore.error("app", str(exc), category="config")
        print(f"logdeck: {exc}")
        return 1
    app = App(config, sandbox_factory(max(0, args.sandbox_topics)), logstore)

    def _main(stdscr: curses.window) -> None:
        Program(stdscr, app, logstore).run()

    try:
        curses.wrapper(_main)
    except KeyboardInterrupt:
        pass
    logstore.info("app", "exit", category="ui")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
