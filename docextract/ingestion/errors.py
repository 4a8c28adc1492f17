"""Exceptions raised while extracting a single document."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class ExtractionError(Exception):
    """Base class for per-file extraction failures."""

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


class StreamOpenError(ExtractionError):
    """Raised when the source file cannot be opened or read."""


class DecodeError(ExtractionError):
    """Raised when a decoder fails or the fallback decoder rejects a media type."""

    def __init__(
        self,
        message: str,
        path: Optional[Path] = None,
        media_type: Optional[str] = None,
    ) -> None:
        super().__init__(message, path)
        self.media_type = media_type


class UnsupportedMediaTypeError(DecodeError):
    """Raised when no decoder claims the detected media type."""


class ExcludedMediaTypeError(DecodeError):
    """Raised for media types whose decoder was excluded at configuration time."""


__all__ = [
    "DecodeError",
    "ExcludedMediaTypeError",
    "ExtractionError",
    "StreamOpenError",
    "UnsupportedMediaTypeError",
]
