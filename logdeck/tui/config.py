"""Cluster definitions and their JSON persistence."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional

from .messages import ClusterDeletedMsg, ClusterRegisteredMsg, ClusterSwitchedMsg
from .system_ops import cache_dir, config_dir

COLORS: tuple[str, ...] = ("green", "blue", "orange", "purple", "yellow", "red")
SECURITY_PROTOCOLS: tuple[str, ...] = ("SASL_PLAINTEXT", "SASL_SSL")


class ConfigError(RuntimeError):
    pass


@dataclass
class SASLConfig:
    username: str
    password: str = field(repr=False)
    security_protocol: str = "SASL_PLAINTEXT"


@dataclass
class SchemaRegistryConfig:
    url: str
    username: str = ""
    password: str = field(default="", repr=False)


@dataclass
class Cluster:
    name: str
    color: str = COLORS[0]
    bootstrap_servers: list[str] = field(default_factory=list)
    active: bool = False
    sasl: Optional[SASLConfig] = None
    schema_registry: Optional[SchemaRegistryConfig] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Cluster":
        name = str(raw.get("name", "")).strip()
        if not name:
            raise ConfigError("cluster entry without a name")
        servers = raw.get("bootstrap_servers", [])
        if not isinstance(servers, list):
            raise ConfigError(f"cluster '{name}': bootstrap_servers must be a list")
        try:
            return cls(
                name=name,
                color=str(raw.get("color", COLORS[0])),
                bootstrap_servers=[str(s) for s in servers],
                active=bool(raw.get("active", False)),
                sasl=_section(SASLConfig, raw.get("sasl")),
                schema_registry=_section(SchemaRegistryConfig, raw.get("schema_registry")),
            )
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"cluster '{name}': {exc}") from exc


def _section(kind: type, raw: Any) -> Any:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ValueError(f"{kind.__name__} entry must be an object")
    return kind(**raw)


class ConfigIO:
    def __init__(self, path: Path | None = None) -> None:
        self.path = path or self._resolve_path()

    @staticmethod
    def _resolve_path() -> Path:
        for candidate in (config_dir(), cache_dir()):
            try:
                candidate.mkdir(parents=True, exist_ok=True)
                return candidate / "config.json"
            except OSError:
                continue
        return cache_dir() / "config.json"

    def read(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                payload = json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigError(f"cannot read {self.path}: {exc}") from exc
        clusters = payload.get("clusters", []) if isinstance(payload, dict) else []
        return [c for c in clusters if isinstance(c, dict)]

    def write(self, clusters: list[dict[str, Any]]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as fh:
                json.dump({"clusters": clusters}, fh, indent=2, sort_keys=True)
                fh.write("\n")
        except OSError as exc:
            raise ConfigError(f"cannot write {self.path}: {exc}") from exc


class Config:
    def __init__(self, clusters: list[Cluster] | None = None, io: ConfigIO | None = None) -> None:
        self.clusters: list[Cluster] = list(clusters or [])
        self.io = io

    @classmethod
    def load(cls, io: ConfigIO) -> "Config":
        return cls([Cluster.from_dict(raw) for raw in io.read()], io)

    def save(self) -> None:
        if self.io is not None:
            self.io.write([c.to_dict() for c in self.clusters])

    def has_clusters(self) -> bool:
        return bool(self.clusters)

    def active_cluster(self) -> Cluster | None:
        for cluster in self.clusters:
            if cluster.active:
                return cluster
        return self.clusters[0] if self.clusters else None

    def find_cluster_by_name(self, name: str) -> Cluster | None:
        for cluster in self.clusters:
            if cluster.name == name:
                return cluster
        return None

    def register_cluster(self, cluster: Cluster, previous_name: str | None = None) -> ClusterRegisteredMsg:
        """Add ``cluster`` or, with ``previous_name``, replace the one it edits."""
        clash = self.find_cluster_by_name(cluster.name)
        replaced = self.find_cluster_by_name(previous_name) if previous_name else None
        if clash is not None and clash is not replaced:
            raise ConfigError(f"cluster '{cluster.name}' already exists")
        if replaced is not None:
            cluster.active = replaced.active
            self.clusters[self.clusters.index(replaced)] = cluster
        else:
            cluster.active = not self.clusters
            self.clusters.append(cluster)
        self.save()
        return ClusterRegisteredMsg(cluster)

    def delete_cluster(self, name: str) -> ClusterDeletedMsg:
        cluster = self.find_cluster_by_name(name)
        if cluster is None:
            raise ConfigError(f"cluster '{name}' does not exist")
        self.clusters.remove(cluster)
        if cluster.active and self.clusters:
            self.clusters[0].active = True
        self.save()
        return ClusterDeletedMsg(name)

    def switch_cluster(self, name: str) -> ClusterSwitchedMsg:
        target = self.find_cluster_by_name(name)
        if target is None:
            raise ConfigError(f"cluster '{name}' does not exist")
        for cluster in self.clusters:
            cluster.active = cluster is target
        self.save()
        return ClusterSwitchedMsg(target)
