"""Include/exclude path filter used by the scanner."""

from __future__ import annotations

from fnmatch import fnmatch
from pathlib import PurePath
from typing import Iterable, Optional, Tuple

from ..config import ScanConfig


class PathFilter:
    """Glob-based filter matched against both the file name and the relative path.

    With no include patterns every file is included; exclude patterns always win.
    """

    def __init__(self, include_patterns: Iterable[str] = (), exclude_patterns: Iterable[str] = ()) -> None:
        self._include: Tuple[str, ...] = tuple(include_patterns)
        self._exclude: Tuple[str, ...] = tuple(exclude_patterns)

    @classmethod
    def from_config(cls, config: ScanConfig) -> "PathFilter":
        return cls(config.include_patterns, config.exclude_patterns)

    def accepts(self, path: PurePath, root: Optional[PurePath] = None) -> bool:
        candidates = [path.name]
        if root is not None:
            try:
                candidates.append(path.relative_to(root).as_posix())
            except ValueError:
                pass
        candidates.append(path.as_posix())

        if any(fnmatch(candidate, pattern) for pattern in self._exclude for candidate in candidates):
            return False
        if not self._include:
            return True
        return any(fnmatch(candidate, pattern) for pattern in self._include for candidate in candidates)

    def accepts_directory(self, path: PurePath, root: Optional[PurePath] = None) -> bool:
        """Directories are pruned only by exclude patterns."""

        candidates = [path.name]
        if root is not None:
            try:
                candidates.append(path.relative_to(root).as_posix())
            except ValueError:
                pass
        return not any(fnmatch(candidate, pattern) for pattern in self._exclude for candidate in candidates)


__all__ = ["PathFilter"]
