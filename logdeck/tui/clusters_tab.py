from __future__ import annotations

from typing import Optional

from .clusters_page import ClustersPage
from .commands import Cmd, batch, publish
from .config import Config
from .create_cluster_page import CreateClusterPage
from .logstore import LogStore
from .messages import ClusterDeletedMsg, ClusterRegisteredMsg, ClusterSwitchedMsg, KeyMsg, Msg, describe
from .page import Page
from .state import Kontext
from .statusbar import StatusBar


class ClustersTab:
    """Container for the cluster pages.

    The child page is swapped wholesale on lifecycle messages and keys; the
    status bar is rebuilt through ``_on_child_changed`` after every update
    so it never describes a page that is gone.
    """

    def __init__(self, config: Config, logstore: LogStore | None = None) -> None:
        self.config = config
        self.logstore = logstore
        self.active: Page
        if config.has_clusters():
            self.active = ClustersPage(config)
        else:
            self.active = CreateClusterPage(config)
        self.statusbar: StatusBar | None = None
        self._on_child_changed()

    def _on_child_changed(self) -> None:
        self.statusbar = StatusBar(self.active) if self.config.has_clusters() else None

    def _swap(self, page: Page) -> None:
        if self.logstore is not None:
            self.logstore.info(page.title(), f"replaced '{self.active.title()}'", category="nav")
        self.active = page

    def update(self, msg: Msg) -> Optional[Cmd]:
        summary = describe(msg)
        if self.logstore is not None and summary is not None:
            self.logstore.debug(self.active.title(), summary, category="config")
        cmd = self._delegate(msg)
        self._on_child_changed()
        return cmd

    def _delegate(self, msg: Msg) -> Optional[Cmd]:
        if isinstance(msg, ClusterRegisteredMsg):
            self._swap(ClustersPage(self.config))
            return publish(ClusterSwitchedMsg(self.config.active_cluster()))
        if isinstance(msg, ClusterDeletedMsg):
            if not self.config.has_clusters():
                self._swap(CreateClusterPage(self.config))
                return publish(ClusterSwitchedMsg(None))
            if not isinstance(self.active, ClustersPage):
                self._swap(ClustersPage(self.config))
            # The deleted cluster may have been the active one.
            return batch(self.active.update(msg), publish(ClusterSwitchedMsg(self.config.active_cluster())))
        if isinstance(msg, KeyMsg):
            if msg.key == "esc" and self.config.has_clusters():
                if not isinstance(self.active, ClustersPage) or self.active.modal is None:
                    self._swap(ClustersPage(self.config))
                    return None
            elif msg.key == "ctrl+n":
                self._swap(CreateClusterPage(self.config))
                return None
            elif msg.key == "ctrl+e" and isinstance(self.active, ClustersPage):
                selected = self.active.selected_cluster()
                if selected is not None:
                    self._swap(CreateClusterPage(self.config, editing=selected))
                return None
        return self.active.update(msg)

    def title(self) -> str:
        return self.active.title()

    def render(self, ktx: Kontext) -> str:
        views = []
        if self.statusbar is not None:
            views.append(self.statusbar.render(ktx))
        views.append(self.active.render(ktx))
        return "\n".join(views)
