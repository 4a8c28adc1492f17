"""Per-user FIFO queues carrying scan entries to extraction workers."""

from __future__ import annotations

import logging
import queue
import time
from functools import lru_cache
from typing import Iterator, Optional, Protocol, Union, cast, runtime_checkable

import redis

from ..config import QueueConfig
from ..ingestion.models import ScanQueueEntry, User

logger = logging.getLogger(__name__)

END_OF_STREAM = "\x00end-of-stream"


class QueueError(RuntimeError):
    """Raised when the queue cannot accept or deliver entries."""


class QueueFullError(QueueError):
    """Raised when a push waited longer than the configured timeout."""


class QueueClosedError(QueueError):
    """Raised when pushing to, or closing, an already closed queue."""


@runtime_checkable
class DocumentQueue(Protocol):
    """Contract the scanner and the extraction workers rely on."""

    @property
    def closed(self) -> bool:
        ...

    @property
    def end_of_stream(self) -> bool:
        ...

    def put(self, entry: ScanQueueEntry) -> None:
        ...

    def get(self, timeout: Optional[float] = None) -> Optional[ScanQueueEntry]:
        ...

    def open(self) -> None:
        ...

    def close(self) -> None:
        ...


def _user_id(user: Union[User, str]) -> str:
    return user.id if isinstance(user, User) else str(user)


@lru_cache(maxsize=None)
def redis_client(url: str) -> "redis.Redis":
    """Return the shared client (and its connection pool) for ``url``."""

    return redis.Redis.from_url(url)


def _drain(source: DocumentQueue, timeout: Optional[float]) -> Iterator[ScanQueueEntry]:
    while not source.end_of_stream:
        entry = source.get(timeout=timeout)
        if entry is not None:
            yield entry


class RedisDocumentQueue:
    """Durable queue stored as a Redis list named ``<queue_name>:<user id>``.

    Closing appends a single end-of-stream marker. A consumer that pops the
    marker pushes it back so every other consumer sees it too; the next
    producer run removes it again with ``open``.
    """

    def __init__(
        self,
        user: Union[User, str],
        client: "redis.Redis",
        name: str = "extract:queue",
        capacity: int = 0,
        push_timeout: float = 300.0,
        poll_interval: float = 0.5,
    ) -> None:
        self._client = client
        self._key = f"{name}:{_user_id(user)}"
        self._capacity = capacity
        self._push_timeout = push_timeout
        self._poll_interval = poll_interval
        self._closed = False
        self._end_of_stream = False

    @classmethod
    def from_config(cls, user: Union[User, str], config: QueueConfig) -> "RedisDocumentQueue":
        return cls(
            user,
            redis_client(config.redis_url),
            name=config.queue_name,
            capacity=config.capacity,
            push_timeout=config.push_timeout_seconds,
            poll_interval=config.poll_interval_seconds,
        )

    @property
    def key(self) -> str:
        return self._key

    @property
    def client(self) -> "redis.Redis":
        return self._client

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def end_of_stream(self) -> bool:
        return self._end_of_stream

    def __len__(self) -> int:
        try:
            return int(self._client.llen(self._key))
        except redis.RedisError as exc:
            raise QueueError(f"Unable to read length of {self._key}: {exc}") from exc

    def put(self, entry: ScanQueueEntry) -> None:
        if self._closed:
            raise QueueClosedError(f"Queue {self._key} is closed")
        try:
            self._wait_for_capacity()
            self._client.rpush(self._key, entry.to_json())
        except redis.RedisError as exc:
            raise QueueError(f"Unable to push {entry.path} to {self._key}: {exc}") from exc

    def open(self) -> None:
        """Start a new producer run by removing the marker left by a previous one.

        Entries still pending from that run stay in place and are delivered
        ahead of the new ones.
        """

        try:
            removed = int(self._client.lrem(self._key, 0, END_OF_STREAM))
        except redis.RedisError as exc:
            raise QueueError(f"Unable to open {self._key}: {exc}") from exc
        if removed:
            logger.info("Removed %d stale end-of-stream marker(s) from %s", removed, self._key)
        self._closed = False
        self._end_of_stream = False

    def close(self) -> None:
        if self._closed:
            raise QueueClosedError(f"Queue {self._key} is already closed")
        try:
            self._client.rpush(self._key, END_OF_STREAM)
        except redis.RedisError as exc:
            raise QueueError(f"Unable to close {self._key}: {exc}") from exc
        self._closed = True
        logger.info("Closed queue %s", self._key)

    def get(self, timeout: Optional[float] = None) -> Optional[ScanQueueEntry]:
        """Pop the next entry; ``None`` on timeout or at end-of-stream."""

        if self._end_of_stream:
            return None
        try:
            popped = self._client.blpop([self._key], timeout=timeout or 0)
            if popped is None:
                return None
            _, raw = popped
            value = raw.decode("utf-8") if isinstance(raw, bytes) else raw
            if value == END_OF_STREAM:
                self._client.rpush(self._key, END_OF_STREAM)
                self._end_of_stream = True
                return None
        except redis.RedisError as exc:
            raise QueueError(f"Unable to pop from {self._key}: {exc}") from exc
        return ScanQueueEntry.from_json(value)

    def __iter__(self) -> Iterator[ScanQueueEntry]:
        return _drain(self, timeout=None)

    def _wait_for_capacity(self) -> None:
        if self._capacity <= 0:
            return
        deadline = time.monotonic() + self._push_timeout
        while int(self._client.llen(self._key)) >= self._capacity:
            if time.monotonic() >= deadline:
                raise QueueFullError(
                    f"Queue {self._key} still full after {self._push_timeout:.1f}s"
                )
            time.sleep(self._poll_interval)


class InMemoryDocumentQueue:
    """Bounded in-process queue with the same contract, for single-process runs."""

    _MARKER = object()

    def __init__(self, capacity: int = 0, push_timeout: Optional[float] = None) -> None:
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize=capacity)
        self._push_timeout = push_timeout
        self._closed = False
        self._end_of_stream = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def end_of_stream(self) -> bool:
        return self._end_of_stream

    def __len__(self) -> int:
        return self._queue.qsize()

    def put(self, entry: ScanQueueEntry) -> None:
        if not isinstance(entry, ScanQueueEntry):
            raise TypeError(f"Expected a ScanQueueEntry, got {type(entry).__name__}")
        if self._closed:
            raise QueueClosedError("Queue is closed")
        try:
            self._queue.put(entry, timeout=self._push_timeout)
        except queue.Full as exc:
            raise QueueFullError(f"Queue still full after {self._push_timeout}s") from exc

    def open(self) -> None:
        with self._queue.mutex:
            pending = [item for item in self._queue.queue if item is not self._MARKER]
            if len(pending) != len(self._queue.queue):
                self._queue.queue.clear()
                self._queue.queue.extend(pending)
                self._queue.not_full.notify_all()
        self._closed = False
        self._end_of_stream = False

    def close(self) -> None:
        if self._closed:
            raise QueueClosedError("Queue is already closed")
        try:
            self._queue.put(self._MARKER, timeout=self._push_timeout)
        except queue.Full as exc:
            raise QueueFullError("Unable to close a full queue") from exc
        self._closed = True

    def get(self, timeout: Optional[float] = None) -> Optional[ScanQueueEntry]:
        if self._end_of_stream:
            return None
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        if item is self._MARKER:
            self._queue.put_nowait(item)
            self._end_of_stream = True
            return None
        return cast(ScanQueueEntry, item)

    def __iter__(self) -> Iterator[ScanQueueEntry]:
        return _drain(self, timeout=None)


__all__ = [
    "DocumentQueue",
    "END_OF_STREAM",
    "InMemoryDocumentQueue",
    "QueueClosedError",
    "QueueError",
    "QueueFullError",
    "RedisDocumentQueue",
    "redis_client",
]
