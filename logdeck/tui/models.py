from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, Optional

NotificationKind = Literal["success", "error", "info"]

CLEANUP_POLICIES: tuple[str, ...] = ("delete", "compact", "delete-compact")


@dataclass(frozen=True)
class Topic:
    name: str
    partitions: int
    replicas: int = 1
    isr: int = 1


@dataclass(frozen=True)
class TopicCreationDetails:
    name: str
    partition_count: int
    configuration: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ProducerRecord:
    topic: str
    key: str
    partition: Optional[int]
    value: str


@dataclass(frozen=True)
class Header:
    key: str
    value: str


@dataclass
class ConsumerRecord:
    key: str
    value: str
    partition: int
    offset: int
    timestamp: datetime
    headers: list[Header] = field(default_factory=list)


@dataclass(frozen=True)
class ReadDetails:
    topic: Topic
    limit: int = 100


@dataclass(frozen=True)
class TopicCreatedMsg:
    name: str = ""


@dataclass(frozen=True)
class TopicCreationErrMsg:
    err: str


@dataclass(frozen=True)
class PublicationSucceededMsg:
    partition: Optional[int] = None
    offset: Optional[int] = None


@dataclass(frozen=True)
class PublicationFailedMsg:
    err: str


@dataclass(frozen=True)
class PublicationStartedMsg:
    completion: Optional[Future] = field(default=None, compare=False)

    def await_completion(self) -> PublicationSucceededMsg | PublicationFailedMsg | None:
        if self.completion is None:
            return None
        try:
            partition, offset = self.completion.result()
        except Exception as exc:
            return PublicationFailedMsg(str(exc))
        return PublicationSucceededMsg(partition=partition, offset=offset)


@dataclass(frozen=True)
class TopicsListedMsg:
    topics: tuple[Topic, ...]


@dataclass(frozen=True)
class TopicListingErrMsg:
    err: str


@dataclass(frozen=True)
class RecordsReadMsg:
    topic: str
    records: tuple[ConsumerRecord, ...]


@dataclass(frozen=True)
class RecordReadingErrMsg:
    err: str
