"""Parser registry mapping media types to decoders, plus the fallback decoder."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from types import MappingProxyType
from typing import BinaryIO, Dict, FrozenSet, Iterable, NoReturn, Optional, Tuple

from .decoders import DecodeContext, Decoder, DoclingDecoder, OcrDecoder, PdfDecoder, PlainTextDecoder
from .detector import base_media_type, wildcard_media_type
from .errors import DecodeError, ExcludedMediaTypeError, UnsupportedMediaTypeError
from .metadata import CONTENT_TYPE, Metadata
from .sinks import TeeSink

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParserDescriptor:
    """A decoder and the media types it claims."""

    name: str
    media_types: FrozenSet[str]
    decoder: Decoder
    enabled: bool = True

    @classmethod
    def of(cls, decoder: Decoder) -> "ParserDescriptor":
        return cls(name=decoder.name, media_types=frozenset(decoder.media_types), decoder=decoder)


class ErrorDecoder:
    """Fallback decoder that always fails explicitly.

    It separates "could not parse" from "no text found": excluded and
    unclaimed media types never yield an empty document.
    """

    name = "error"
    media_types: FrozenSet[str] = frozenset()

    def __init__(self, excluded_media_types: Iterable[str] = ()) -> None:
        self._excluded = frozenset(excluded_media_types)

    def decode(
        self,
        stream: BinaryIO,
        sink: TeeSink,
        metadata: Metadata,
        context: DecodeContext,
    ) -> None:
        self.reject(metadata.get(CONTENT_TYPE), context.path)

    def reject(
        self,
        media_type: Optional[str],
        path: Optional[Path] = None,
        cause: Optional[BaseException] = None,
    ) -> NoReturn:
        base = base_media_type(media_type) if media_type else None
        if cause is not None:
            raise DecodeError(
                f"Failed to decode {path} as {media_type}: {cause}",
                path=path,
                media_type=media_type,
            ) from cause
        if base is not None and (base in self._excluded or wildcard_media_type(base) in self._excluded):
            raise ExcludedMediaTypeError(
                f"Media type {base} is excluded from extraction: {path}",
                path=path,
                media_type=media_type,
            )
        raise UnsupportedMediaTypeError(
            f"No decoder available for media type {media_type or 'unknown'}: {path}",
            path=path,
            media_type=media_type,
        )


class ParserRegistry:
    """Immutable table of decoder descriptors keyed by media type.

    ``register`` and ``exclude`` return new registries; an instance never
    changes once built, so it can be shared by concurrent parses.
    """

    def __init__(
        self,
        descriptors: Iterable[ParserDescriptor] = (),
        excluded_media_types: Iterable[str] = (),
    ) -> None:
        self._descriptors: Tuple[ParserDescriptor, ...] = tuple(descriptors)
        self._excluded: FrozenSet[str] = frozenset(excluded_media_types)

        table: Dict[str, ParserDescriptor] = {}
        for descriptor in self._descriptors:
            if not descriptor.enabled:
                continue
            for media_type in descriptor.media_types:
                table[media_type] = descriptor
        self._table = MappingProxyType(table)
        self._fallback = ErrorDecoder(self._excluded)

    @property
    def descriptors(self) -> Tuple[ParserDescriptor, ...]:
        return self._descriptors

    @property
    def excluded_media_types(self) -> FrozenSet[str]:
        return self._excluded

    @property
    def supported_media_types(self) -> FrozenSet[str]:
        return frozenset(self._table)

    @property
    def fallback(self) -> ErrorDecoder:
        return self._fallback

    def get(self, name: str) -> Optional[ParserDescriptor]:
        for descriptor in self._descriptors:
            if descriptor.name == name:
                return descriptor
        return None

    def lookup(self, media_type: Optional[str]) -> Optional[ParserDescriptor]:
        """Find the decoder for ``media_type``, falling back to a ``major/*`` entry.

        The wildcard never applies to a type whose own decoder was excluded.
        """

        if not media_type:
            return None
        base = base_media_type(media_type)
        descriptor = self._table.get(base)
        if descriptor is None and base not in self._excluded:
            descriptor = self._table.get(wildcard_media_type(base))
        return descriptor

    def register(self, descriptor: ParserDescriptor) -> "ParserRegistry":
        """Return a registry where ``descriptor`` replaces any same-named entry."""

        descriptors = [d for d in self._descriptors if d.name != descriptor.name]
        descriptors.append(descriptor)
        excluded = self._excluded - descriptor.media_types if descriptor.enabled else self._excluded
        return ParserRegistry(descriptors, excluded)

    def exclude(self, name: str) -> "ParserRegistry":
        """Disable every descriptor named ``name`` and record its media types as excluded."""

        excluded = set(self._excluded)
        descriptors = []
        for descriptor in self._descriptors:
            if descriptor.name == name:
                excluded.update(descriptor.media_types)
                descriptor = replace(descriptor, enabled=False)
            descriptors.append(descriptor)
        logger.debug("Excluded decoder %s; excluded media types: %s", name, sorted(excluded))
        return ParserRegistry(descriptors, excluded)


def build_default_registry(include_docling: bool = True) -> ParserRegistry:
    """Build the base registry: text, PDF, OCR for images, and Docling formats."""

    decoders: list[Decoder] = [PlainTextDecoder(), PdfDecoder(), OcrDecoder()]
    if include_docling:
        decoders.append(DoclingDecoder())
    return ParserRegistry(ParserDescriptor.of(decoder) for decoder in decoders)


__all__ = ["ErrorDecoder", "ParserDescriptor", "ParserRegistry", "build_default_registry"]
