"""Media type detection utilities."""

from __future__ import annotations

import logging
import mimetypes
from pathlib import PurePath
from typing import BinaryIO, Optional

import filetype

logger = logging.getLogger(__name__)

HEADER_SIZE = 8192

_SIGNATURES = {
    b"%PDF": "application/pdf",
    b"\x89PNG\r\n\x1a\n": "image/png",
    b"\xff\xd8\xff": "image/jpeg",
    b"II*\x00": "image/tiff",
    b"MM\x00*": "image/tiff",
    b"BM": "image/bmp",
    b"GIF87a": "image/gif",
    b"GIF89a": "image/gif",
}

_EXTENSIONS = {
    ".txt": "text/plain",
    ".text": "text/plain",
    ".log": "text/plain",
    ".md": "text/markdown",
    ".markdown": "text/markdown",
    ".adoc": "text/asciidoc",
    ".asciidoc": "text/asciidoc",
    ".csv": "text/csv",
    ".htm": "text/html",
    ".html": "text/html",
    ".xhtml": "application/xhtml+xml",
    ".pdf": "application/pdf",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}

_GENERIC = {"application/octet-stream", "application/zip", "text/plain"}


def base_media_type(media_type: str) -> str:
    """Strip parameters such as ``; charset=UTF-8`` and lower-case the type."""

    return media_type.split(";", 1)[0].strip().lower()


def wildcard_media_type(media_type: str) -> str:
    """Return the ``major/*`` form of ``media_type``, e.g. ``text/*``."""

    return base_media_type(media_type).split("/", 1)[0] + "/*"


def _sniff_header(header: bytes) -> Optional[str]:
    if not header:
        return None

    try:
        kind = filetype.guess(header)
        if kind and kind.mime:
            return kind.mime.lower()
    except Exception as exc:  # pragma: no cover - defensive
        logger.debug("filetype.guess failed: %s", exc)

    for sig, mime in _SIGNATURES.items():
        if header.startswith(sig):
            return mime
    return None


def _guess_from_name(name: Optional[str]) -> Optional[str]:
    if not name:
        return None
    suffix = PurePath(name).suffix.lower()
    if suffix in _EXTENSIONS:
        return _EXTENSIONS[suffix]
    guessed, _ = mimetypes.guess_type(name)
    return guessed


def _looks_like_text(header: bytes) -> bool:
    if not header or b"\x00" in header:
        return False
    try:
        header.decode("utf-8")
    except UnicodeDecodeError as exc:
        # A multi-byte sequence cut by the header boundary still counts as text.
        return exc.start >= len(header) - 3 and len(header) == HEADER_SIZE
    return True


def detect_media_type(stream: BinaryIO, name: Optional[str] = None) -> Optional[str]:
    """Detect the media type from magic bytes, then the file name, then a text sniff.

    The stream position is restored before returning.
    """

    position = stream.tell()
    try:
        header = stream.read(HEADER_SIZE)
    finally:
        stream.seek(position)

    sniffed = _sniff_header(header)
    by_name = _guess_from_name(name)

    # Office formats are zip containers; trust the extension over a bare zip guess.
    if sniffed and sniffed not in _GENERIC:
        return sniffed
    if by_name:
        return by_name
    if sniffed:
        return sniffed
    if _looks_like_text(header):
        return "text/plain"
    return None


__all__ = ["HEADER_SIZE", "base_media_type", "detect_media_type", "wildcard_media_type"]
