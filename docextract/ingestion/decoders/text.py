"""Plain text decoder."""

from __future__ import annotations

from typing import BinaryIO, FrozenSet

from ..metadata import CONTENT_ENCODING, UTF_8, Metadata
from ..sinks import TeeSink
from .base import DecodeContext

TEXT_MEDIA_TYPES: FrozenSet[str] = frozenset(
    {
        "text/plain",
        "text/*",
        "application/json",
        "application/ld+json",
        "application/xml",
        "application/javascript",
        "application/x-javascript",
        "application/x-sh",
        "application/x-yaml",
        "application/yaml",
        "application/toml",
        "application/sql",
    }
)


class PlainTextDecoder:
    """Decodes text files as UTF-8, replacing undecodable bytes.

    Besides ``text/plain`` it claims every other ``text/*`` type without a
    dedicated decoder, and the structured formats that are plain text on disk.
    """

    name = "text"
    media_types: FrozenSet[str] = TEXT_MEDIA_TYPES

    def decode(
        self,
        stream: BinaryIO,
        sink: TeeSink,
        metadata: Metadata,
        context: DecodeContext,
    ) -> None:
        raw = stream.read()
        if raw.startswith(b"\xef\xbb\xbf"):
            raw = raw[3:]
        sink.text(raw.decode("utf-8", errors="replace"))
        metadata.set(CONTENT_ENCODING, UTF_8)
