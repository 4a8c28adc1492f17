"""Decoder protocol and the per-call decode context."""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO, FrozenSet, Optional, Protocol, runtime_checkable

from ..metadata import Metadata
from ..sinks import TeeSink

if TYPE_CHECKING:
    from ..ocr import PdfSettings
    from ..registry import ParserRegistry

logger = logging.getLogger(__name__)


@runtime_checkable
class Decoder(Protocol):
    """Turns a byte stream into text, links, and metadata for some media types."""

    name: str
    media_types: FrozenSet[str]

    def decode(
        self,
        stream: BinaryIO,
        sink: TeeSink,
        metadata: Metadata,
        context: "DecodeContext",
    ) -> None:
        ...


@dataclass(frozen=True)
class DecodeContext:
    """Read-only state handed to decoders for one parse call."""

    registry: "ParserRegistry"
    pdf: "PdfSettings"
    path: Optional[Path] = None

    def delegate(
        self,
        media_type: str,
        data: bytes,
        sink: TeeSink,
        metadata: Metadata,
        name: Optional[str] = None,
    ) -> bool:
        """Decode an embedded resource through the registry.

        Returns ``False`` when no enabled decoder claims ``media_type``.
        Failures of embedded resources are logged and do not abort the
        container.
        """

        descriptor = self.registry.lookup(media_type)
        if descriptor is None:
            return False
        try:
            descriptor.decoder.decode(io.BytesIO(data), sink, metadata, self)
        except Exception as exc:
            logger.warning(
                "Embedded %s resource %s in %s could not be decoded: %s",
                media_type,
                name or "<unnamed>",
                self.path,
                exc,
            )
            metadata.add("X-Embedded-Errors", f"{name or media_type}: {exc}")
            return False
        return True


__all__ = ["DecodeContext", "Decoder"]
