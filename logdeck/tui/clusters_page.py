from __future__ import annotations

from typing import Callable, Optional

from .commands import Cmd
from .config import Cluster, Config, ConfigError
from .messages import ClusterDeletedMsg, KeyMsg, Msg
from .modals import ConfirmModal
from .notifier import Notifier
from .page import Page, Shortcut, join_sections
from .state import Kontext
from .views import clamp, truncate


class ClustersPage(Page):
    def __init__(self, config: Config, notifier: Notifier | None = None) -> None:
        self.config = config
        self.notifier = notifier or Notifier()
        self.cursor = 0
        self.modal: ConfirmModal | None = None
        self.pending_delete = ""
        active = config.active_cluster()
        if active is not None:
            self.cursor = config.clusters.index(active)

    def selected_cluster(self) -> Cluster | None:
        clusters = self.config.clusters
        if not clusters:
            return None
        return clusters[clamp(self.cursor, 0, len(clusters) - 1)]

    def _guarded(self, action: Callable[[], Msg]) -> Cmd:
        def run() -> Msg:
            try:
                return action()
            except ConfigError as exc:
                return exc

        return run

    def update(self, msg: Msg) -> Optional[Cmd]:
        if self.notifier.update(msg):
            return None
        if isinstance(msg, ClusterDeletedMsg):
            self.cursor = clamp(self.cursor, 0, max(0, len(self.config.clusters) - 1))
            return self.notifier.show_success(f"Cluster {msg.name} deleted")
        if isinstance(msg, ConfigError):
            return self.notifier.show_error(str(msg))
        if not isinstance(msg, KeyMsg):
            return None

        if self.modal is not None:
            if msg.key in ("enter", "y"):
                name = self.pending_delete
                self.modal = None
                self.pending_delete = ""
                config = self.config
                return self._guarded(lambda: config.delete_cluster(name))
            if msg.key in ("esc", "n"):
                self.modal = None
                self.pending_delete = ""
            return None

        selected = self.selected_cluster()
        if msg.key == "up":
            self.cursor = max(0, self.cursor - 1)
        elif msg.key == "down":
            self.cursor = clamp(self.cursor + 1, 0, max(0, len(self.config.clusters) - 1))
        elif msg.key == "enter" and selected is not None:
            config = self.config
            name = selected.name
            return self._guarded(lambda: config.switch_cluster(name))
        elif msg.key == "ctrl+d" and selected is not None:
            self.pending_delete = selected.name
            self.modal = ConfirmModal(
                title=f"Delete cluster {selected.name}?",
                detail="The cluster definition is removed from the configuration.",
                cancel_label="No (esc)",
                confirm_label="Yes (enter)",
            )
        return None

    def render(self, ktx: Kontext) -> str:
        if self.modal is not None:
            return self.modal.render(min(70, ktx.window_width))
        name_w = max(10, ktx.window_width // 3)
        rows = [f"  {'Name'.ljust(name_w)} Bootstrap Servers"]
        for idx, cluster in enumerate(self.config.clusters):
            marker = "> " if idx == self.cursor else "  "
            label = cluster.name + (" (active)" if cluster.active else "")
            rows.append(f"{marker}{truncate(label, name_w).ljust(name_w)} {', '.join(cluster.bootstrap_servers)}")
        return join_sections("\n".join(rows), self.notifier.render())

    def title(self) -> str:
        return "Clusters"

    def shortcuts(self) -> list[Shortcut]:
        return [
            Shortcut("Activate", "enter"),
            Shortcut("Create", "C-n"),
            Shortcut("Edit", "C-e"),
            Shortcut("Delete", "C-d"),
        ]
