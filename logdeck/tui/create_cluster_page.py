from __future__ import annotations

from typing import Any, Optional

from .commands import Cmd
from .config import COLORS, SECURITY_PROTOCOLS, Cluster, Config, ConfigError, SASLConfig, SchemaRegistryConfig
from .forms import FieldDef, Form, FormGroup, required
from .messages import ClusterRegisteredMsg, KeyMsg, Msg
from .notifier import Notifier
from .page import Page, Shortcut, join_sections
from .state import Kontext

AUTH_NONE = "NONE"
AUTH_SASL = "SASL"

CLUSTER_GROUPS: tuple[FormGroup, ...] = (
    FormGroup(
        "",
        (
            FieldDef("name", "Name", validator=required("Name")),
            FieldDef("color", "Color", kind="select", options=COLORS),
        ),
    ),
    FormGroup("", (FieldDef("host", "Host", validator=required("Host")),)),
    FormGroup(
        "Authentication",
        (
            FieldDef("auth_method", "Authentication Method", kind="select", options=(AUTH_NONE, AUTH_SASL)),
            FieldDef("security_protocol", "Security Protocol", kind="select", options=SECURITY_PROTOCOLS),
            FieldDef("username", "Username"),
            FieldDef("password", "Password", secret=True),
        ),
    ),
    FormGroup(
        "Schema Registry",
        (
            FieldDef("sr_url", "Schema Registry URL"),
            FieldDef("sr_username", "Schema Registry Username"),
            FieldDef("sr_password", "Schema Registry Password", secret=True),
        ),
    ),
)


def form_values(cluster: Cluster) -> dict[str, Any]:
    values: dict[str, Any] = {
        "name": cluster.name,
        "color": cluster.color,
        "host": cluster.bootstrap_servers[0] if cluster.bootstrap_servers else "",
    }
    if cluster.sasl is not None:
        values.update(
            auth_method=AUTH_SASL,
            security_protocol=cluster.sasl.security_protocol,
            username=cluster.sasl.username,
            password=cluster.sasl.password,
        )
    if cluster.schema_registry is not None:
        values.update(
            sr_url=cluster.schema_registry.url,
            sr_username=cluster.schema_registry.username,
            sr_password=cluster.schema_registry.password,
        )
    return values


class CreateClusterPage(Page):
    def __init__(self, config: Config, editing: Cluster | None = None, notifier: Notifier | None = None) -> None:
        self.config = config
        self.editing = editing
        self.notifier = notifier or Notifier()
        self.form = Form(CLUSTER_GROUPS, form_values(editing) if editing is not None else None)

    def update(self, msg: Msg) -> Optional[Cmd]:
        if self.notifier.update(msg):
            return None
        if isinstance(msg, KeyMsg):
            if msg.key == "ctrl+r":
                self.form.reset()
                return None
            if self.form.update(msg) == "ready":
                return self._submit()
            return None
        if isinstance(msg, ConfigError):
            return self.notifier.show_error(f"Failed to save cluster: {msg}")
        return None

    def _submit(self) -> Optional[Cmd]:
        values, _errors = self.form.submit()
        if values is None:
            return None
        sasl = None
        if values["auth_method"] == AUTH_SASL:
            if not values["username"].strip():
                self.form.fail("username", "Username cannot be empty.")
                return None
            sasl = SASLConfig(
                username=values["username"].strip(),
                password=values["password"],
                security_protocol=values["security_protocol"],
            )
        schema_registry = None
        if values["sr_url"].strip():
            schema_registry = SchemaRegistryConfig(
                url=values["sr_url"].strip(),
                username=values["sr_username"].strip(),
                password=values["sr_password"],
            )
        cluster = Cluster(
            name=values["name"].strip(),
            color=values["color"],
            bootstrap_servers=[values["host"].strip()],
            sasl=sasl,
            schema_registry=schema_registry,
        )
        previous = self.editing.name if self.editing is not None else None
        config = self.config

        def register() -> ClusterRegisteredMsg | ConfigError:
            try:
                return config.register_cluster(cluster, previous_name=previous)
            except ConfigError as exc:
                return exc

        return register

    def render(self, ktx: Kontext) -> str:
        return join_sections(self.form.render(), self.notifier.render())

    def title(self) -> str:
        if self.editing is not None:
            return f"Clusters / {self.editing.name} / Edit"
        return "Clusters / Create"

    def shortcuts(self) -> list[Shortcut]:
        return [
            Shortcut("Confirm", "enter"),
            Shortcut("Next Field", "tab"),
            Shortcut("Prev. Field", "s-tab"),
            Shortcut("Reset Form", "C-r"),
            Shortcut("Go Back", "esc"),
        ]
