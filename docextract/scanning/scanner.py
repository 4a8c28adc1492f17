"""Directory scanner feeding discovered files to a per-user queue."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from ..config import PipelineConfig, ScanConfig
from ..ingestion.models import ScanQueueEntry, User
from .filters import PathFilter
from .queues import DocumentQueue, QueueError, RedisDocumentQueue

logger = logging.getLogger(__name__)


class ScanError(RuntimeError):
    """Raised when a scan cannot start or must be aborted."""


@dataclass(frozen=True)
class ScanResult:
    root: Path
    user_id: str
    queued: int
    skipped: int


def resolve_user_root(base: Union[str, Path], user: User) -> Path:
    """Resolve the scan root for ``user`` under ``base``."""

    return (Path(base) / user.home).absolute()


class Scanner:
    """Walks a tree synchronously and pushes one entry per regular file.

    The scanner is the only producer of its queue. It reopens the queue when a
    run starts and closes it exactly once when the walk ends, whether it
    completed or was aborted.
    """

    def __init__(
        self,
        queue: DocumentQueue,
        path_filter: Optional[PathFilter] = None,
        follow_symlinks: bool = False,
    ) -> None:
        self._queue = queue
        self._filter = path_filter or PathFilter()
        self._follow_symlinks = follow_symlinks

    @classmethod
    def from_config(cls, queue: DocumentQueue, config: ScanConfig) -> "Scanner":
        return cls(queue, PathFilter.from_config(config), follow_symlinks=config.follow_symlinks)

    def scan(self, root: Union[str, Path], user: User) -> ScanResult:
        root_path = Path(root).absolute()
        logger.info("Scanning %s for user %s", root_path, user.id)
        try:
            self._open_queue()
            if not root_path.is_dir():
                raise ScanError(f"Scan root is not an accessible directory: {root_path}")
            queued, skipped = self._walk(root_path, user)
        finally:
            self._close_queue()

        logger.info("Scan of %s finished: %d queued, %d skipped", root_path, queued, skipped)
        return ScanResult(root=root_path, user_id=user.id, queued=queued, skipped=skipped)

    def _walk(self, root: Path, user: User) -> tuple[int, int]:
        queued = 0
        skipped = 0

        def on_error(error: OSError) -> None:
            if Path(error.filename or "") == root:
                raise ScanError(f"Unable to read scan root {root}: {error}") from error
            logger.warning("Skipping unreadable directory %s: %s", error.filename, error)

        for dirpath, dirnames, filenames in os.walk(root, onerror=on_error, followlinks=self._follow_symlinks):
            current = Path(dirpath)
            dirnames[:] = sorted(
                name for name in dirnames if self._filter.accepts_directory(current / name, root)
            )
            for name in sorted(filenames):
                path = current / name
                if not self._is_regular_file(path):
                    skipped += 1
                    continue
                if not self._filter.accepts(path, root):
                    skipped += 1
                    continue
                self._push(ScanQueueEntry(path=path, user_id=user.id))
                queued += 1
        return queued, skipped

    def _is_regular_file(self, path: Path) -> bool:
        if path.is_symlink() and not self._follow_symlinks:
            return False
        return path.is_file()

    def _push(self, entry: ScanQueueEntry) -> None:
        try:
            self._queue.put(entry)
        except QueueError as exc:
            raise ScanError(f"Aborting scan, unable to queue {entry.path}: {exc}") from exc

    def _open_queue(self) -> None:
        try:
            self._queue.open()
        except QueueError as exc:
            raise ScanError(f"Unable to open scan queue: {exc}") from exc

    def _close_queue(self) -> None:
        try:
            self._queue.close()
        except QueueError as exc:
            raise ScanError(f"Unable to close scan queue: {exc}") from exc


def scan_user_directory(
    user: User,
    config: PipelineConfig,
    queue: Optional[DocumentQueue] = None,
    base: Optional[Union[str, Path]] = None,
) -> ScanResult:
    """Scan ``user``'s directory into the user's queue and close it."""

    root = resolve_user_root(base if base is not None else config.scan.data_dir, user)
    target = queue if queue is not None else RedisDocumentQueue.from_config(user, config.queue)
    return Scanner.from_config(target, config.scan).scan(root, user)


__all__ = ["ScanError", "ScanResult", "Scanner", "resolve_user_root", "scan_user_directory"]
