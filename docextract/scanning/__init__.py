"""Filesystem scanning into per-user extraction queues."""

from .filters import PathFilter
from .queues import (
    DocumentQueue,
    InMemoryDocumentQueue,
    QueueClosedError,
    QueueError,
    QueueFullError,
    RedisDocumentQueue,
)
from .scanner import ScanError, ScanResult, Scanner, resolve_user_root, scan_user_directory

__all__ = [
    "DocumentQueue",
    "InMemoryDocumentQueue",
    "PathFilter",
    "QueueClosedError",
    "QueueError",
    "QueueFullError",
    "RedisDocumentQueue",
    "ScanError",
    "ScanResult",
    "Scanner",
    "resolve_user_root",
    "scan_user_directory",
]
