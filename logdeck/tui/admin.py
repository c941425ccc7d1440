from __future__ import annotations

import threading
import zlib
from concurrent.futures import Future
from datetime import datetime
from typing import Iterable, Protocol

from .messages import Msg
from .models import (
    ConsumerRecord,
    Header,
    ProducerRecord,
    PublicationStartedMsg,
    ReadDetails,
    RecordReadingErrMsg,
    RecordsReadMsg,
    Topic,
    TopicCreatedMsg,
    TopicCreationDetails,
    TopicCreationErrMsg,
    TopicsListedMsg,
)


class AdminError(RuntimeError):
    pass


class TopicCreator(Protocol):
    def create_topic(self, details: TopicCreationDetails) -> Msg: ...


class RecordPublisher(Protocol):
    def publish_record(self, record: ProducerRecord) -> PublicationStartedMsg: ...


class TopicLister(Protocol):
    def list_topics(self) -> Msg: ...


class RecordReader(Protocol):
    def read_records(self, details: ReadDetails) -> Msg: ...


class SandboxAdmin:
    """In-process stand-in for a cluster: topics and records live in memory.

    Publication completes on a worker thread so the started/succeeded
    message pair behaves like a remote call.
    """

    def __init__(self, cluster_name: str = "sandbox", topics: Iterable[Topic] = ()) -> None:
        self.cluster_name = cluster_name
        self._lock = threading.Lock()
        self._topics: dict[str, Topic] = {}
        self._records: dict[str, list[ConsumerRecord]] = {}
        for topic in topics:
            self._add_topic(topic)

    def _add_topic(self, topic: Topic) -> None:
        self._topics[topic.name] = topic
        self._records[topic.name] = []

    def seed(self, count: int) -> None:
        for idx in range(count):
            name = f"{self.cluster_name}-topic-{idx + 1}"
            with self._lock:
                if name in self._topics:
                    continue
                self._add_topic(Topic(name=name, partitions=3))
            self._append(
                ProducerRecord(topic=name, key=f"key-{idx + 1}", partition=None, value='{"seeded": true, "index": %d}' % (idx + 1)),
                headers=[Header("origin", "sandbox"), Header("content-type", "application/json")],
            )

    def create_topic(self, details: TopicCreationDetails) -> Msg:
        name = details.name.strip()
        if not name:
            return TopicCreationErrMsg("topic name cannot be empty")
        if details.partition_count <= 0:
            return TopicCreationErrMsg("partition count must be greater than zero")
        with self._lock:
            if name in self._topics:
                return TopicCreationErrMsg(f"topic '{name}' already exists")
            self._add_topic(Topic(name=name, partitions=details.partition_count))
        return TopicCreatedMsg(name)

    def list_topics(self) -> Msg:
        with self._lock:
            topics = tuple(sorted(self._topics.values(), key=lambda t: t.name))
        return TopicsListedMsg(topics)

    def publish_record(self, record: ProducerRecord) -> PublicationStartedMsg:
        completion: Future = Future()
        worker = threading.Thread(target=self._deliver, args=(record, completion), daemon=True)
        worker.start()
        return PublicationStartedMsg(completion)

    def _deliver(self, record: ProducerRecord, completion: Future) -> None:
        try:
            completion.set_result(self._append(record))
        except AdminError as exc:
            completion.set_exception(exc)

    def _append(self, record: ProducerRecord, headers: list[Header] | None = None) -> tuple[int, int]:
        with self._lock:
            topic = self._topics.get(record.topic)
            if topic is None:
                raise AdminError(f"unknown topic '{record.topic}'")
            partition = record.partition
            if partition is None:
                partition = zlib.crc32(record.key.encode("utf-8")) % topic.partitions
            elif not 0 <= partition < topic.partitions:
                raise AdminError(f"partition {partition} does not exist on topic '{topic.name}'")
            log = self._records[topic.name]
            offset = sum(1 for r in log if r.partition == partition)
            log.append(
                ConsumerRecord(
                    key=record.key,
                    value=record.value,
                    partition=partition,
                    offset=offset,
                    timestamp=datetime.now(),
                    headers=list(headers or []),
                )
            )
        return partition, offset

    def read_records(self, details: ReadDetails) -> Msg:
        with self._lock:
            log = self._records.get(details.topic.name)
            if log is None:
                return RecordReadingErrMsg(f"unknown topic '{details.topic.name}'")
            records = tuple(log[-details.limit :]) if details.limit > 0 else ()
        return RecordsReadMsg(details.topic.name, records)
