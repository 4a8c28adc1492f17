"""Document-scoped metadata container and canonical field readers."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional

from .models import Language

logger = logging.getLogger(__name__)

RESOURCE_NAME = "resourceName"
CONTENT_TYPE = "Content-Type"
CONTENT_LENGTH = "Content-Length"
CONTENT_ENCODING = "Content-Encoding"
CONTENT_LANGUAGE = "Content-Language"

CANONICAL_KEYS = (
    RESOURCE_NAME,
    CONTENT_TYPE,
    CONTENT_LENGTH,
    CONTENT_ENCODING,
    CONTENT_LANGUAGE,
)

UTF_8 = "UTF-8"

_INTEGER = re.compile(r"[+-]?[0-9]+")


class Metadata:
    """Multi-valued, insertion-ordered metadata collected during one parse.

    A fresh instance is created for every document; instances are never shared
    between concurrent parses.
    """

    def __init__(self) -> None:
        self._entries: List[tuple[str, str]] = []

    def add(self, key: str, value: object) -> None:
        if value is None:
            return
        self._entries.append((key, str(value)))

    def set(self, key: str, value: object) -> None:
        self.remove(key)
        self.add(key, value)

    def remove(self, key: str) -> None:
        self._entries = [(k, v) for k, v in self._entries if k != key]

    def get(self, key: str) -> Optional[str]:
        values = self.get_values(key)
        return values[-1] if values else None

    def get_values(self, key: str) -> List[str]:
        return [v for k, v in self._entries if k == key]

    def names(self) -> List[str]:
        """Return keys as an ordered, de-duplicated list."""

        return list(dict.fromkeys(k for k, _ in self._entries))

    def __contains__(self, key: object) -> bool:
        return any(k == key for k, _ in self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self.names())

    def __repr__(self) -> str:
        return f"Metadata({self.as_dict()!r})"

    def as_dict(self) -> Dict[str, str]:
        """Snapshot every key with its last written value."""

        return {key: self.get(key) or "" for key in self.names()}


def get_resource_name(metadata: Metadata) -> Optional[str]:
    if RESOURCE_NAME not in metadata:
        return None
    return metadata.get(RESOURCE_NAME)


def get_mime_type(metadata: Metadata) -> Optional[str]:
    if CONTENT_TYPE not in metadata:
        return None
    return metadata.get(CONTENT_TYPE)


def get_length(metadata: Metadata) -> Optional[int]:
    if CONTENT_LENGTH not in metadata:
        return None
    raw = metadata.get(CONTENT_LENGTH) or ""
    if not _INTEGER.fullmatch(raw):
        logger.debug("Ignoring non-numeric %s value %r", CONTENT_LENGTH, raw)
        return None
    return int(raw)


def get_encoding(metadata: Metadata) -> Optional[str]:
    """Return UTF-8 when any encoding was declared, ``None`` otherwise.

    No charset sniffing is performed: the declared value itself is not
    inspected.
    """

    if CONTENT_ENCODING not in metadata:
        return None
    return UTF_8


def get_language(metadata: Metadata) -> Optional[Language]:
    if CONTENT_LANGUAGE not in metadata:
        return None
    return Language.parse(metadata.get(CONTENT_LANGUAGE))


@dataclass(frozen=True)
class CanonicalMetadata:
    """Canonical fields plus a pass-through map of every other key."""

    resource_name: Optional[str]
    content_type: Optional[str]
    content_length: Optional[int]
    content_encoding: Optional[str]
    content_language: Optional[Language]
    extra: Mapping[str, str]
    all_fields: Mapping[str, str]


def canonicalize(metadata: Metadata) -> CanonicalMetadata:
    """Map engine metadata onto canonical fields as an immutable snapshot."""

    snapshot = metadata.as_dict()
    extra = {key: value for key, value in snapshot.items() if key not in CANONICAL_KEYS}
    return CanonicalMetadata(
        resource_name=get_resource_name(metadata),
        content_type=get_mime_type(metadata),
        content_length=get_length(metadata),
        content_encoding=get_encoding(metadata),
        content_language=get_language(metadata),
        extra=MappingProxyType(extra),
        all_fields=MappingProxyType(snapshot),
    )


__all__ = [
    "CANONICAL_KEYS",
    "CONTENT_ENCODING",
    "CONTENT_LANGUAGE",
    "CONTENT_LENGTH",
    "CONTENT_TYPE",
    "CanonicalMetadata",
    "Metadata",
    "RESOURCE_NAME",
    "UTF_8",
    "canonicalize",
    "get_encoding",
    "get_language",
    "get_length",
    "get_mime_type",
    "get_resource_name",
]
