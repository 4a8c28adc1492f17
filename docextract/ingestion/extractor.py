"""Extraction orchestrator turning a file into a canonical ``Document``."""

from __future__ import annotations

import locale
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional, Tuple, Union

from ..config import DEFAULT_CONFIG, ExtractionConfig
from .decoders import DecodeContext
from .detector import detect_media_type
from .errors import ExtractionError, StreamOpenError
from .language import LanguageDetector, apply_detected_language, normalize_language
from .metadata import CONTENT_LENGTH, CONTENT_TYPE, RESOURCE_NAME, Metadata, canonicalize
from .models import (
    CANONICAL_LANGUAGES,
    UNKNOWN_MIME_TYPE,
    Document,
    ExtractionMethod,
    Language,
)
from .ocr import OcrSettings, PdfSettings, configure_ocr
from .registry import ParserRegistry, build_default_registry
from .sinks import Link, LinkSink, TeeSink, TextSink

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractionResult:
    """A document together with the hyperlinks found in the same pass."""

    document: Document
    links: Tuple[Link, ...]


class DocumentExtractor:
    """Drives one file at a time through the registry, language detection and
    metadata canonicalization.

    The registry, OCR settings and language detector are fixed in the
    constructor. Every call allocates its own metadata container and sinks, so
    one extractor can serve many concurrent workers.
    """

    def __init__(
        self,
        config: ExtractionConfig = DEFAULT_CONFIG.extraction,
        registry: Optional[ParserRegistry] = None,
        language_detector: Optional[LanguageDetector] = None,
    ) -> None:
        self._config = config

        configured = configure_ocr(registry if registry is not None else build_default_registry(), config)
        self._registry = configured.registry
        self._pdf = configured.pdf
        self._ocr = configured.ocr
        self._language_detector = language_detector or LanguageDetector(
            min_confidence=config.language_min_confidence
        )
        self._method = ExtractionMethod.OCR if config.ocr_enabled else ExtractionMethod.STANDARD

    @property
    def config(self) -> ExtractionConfig:
        return self._config

    @property
    def registry(self) -> ParserRegistry:
        return self._registry

    @property
    def pdf_settings(self) -> PdfSettings:
        return self._pdf

    @property
    def ocr_settings(self) -> OcrSettings:
        return self._ocr

    @property
    def extraction_method(self) -> ExtractionMethod:
        return self._method

    def parse(self, file_path: Union[str, Path]) -> Optional[Document]:
        """Extract ``file_path``; failures are logged and yield ``None``."""

        path = Path(file_path)
        try:
            return self.extract_file(path).document
        except StreamOpenError as exc:
            logger.error("Failed to get input stream from %s: %s", path, exc)
        except ExtractionError as exc:
            logger.error("Failed to parse %s: %s", path, exc)
        return None

    def extract_file(self, file_path: Union[str, Path]) -> ExtractionResult:
        """Open ``file_path`` and extract it, raising ``ExtractionError`` on failure."""

        path = Path(file_path).absolute()
        try:
            stream = path.open("rb")
        except OSError as exc:
            raise StreamOpenError(f"Cannot open {path}: {exc}", path=path) from exc

        with stream:
            try:
                length: Optional[int] = path.stat().st_size
            except OSError:
                length = None
            return self.extract(stream, path, content_length=length)

    def extract(
        self,
        stream: BinaryIO,
        path: Union[str, Path],
        content_length: Optional[int] = None,
    ) -> ExtractionResult:
        """Decode ``stream`` in a single pass and assemble the document."""

        path = Path(path)
        metadata = Metadata()
        metadata.set(RESOURCE_NAME, path.name)
        if content_length is not None:
            metadata.set(CONTENT_LENGTH, content_length)

        try:
            media_type = detect_media_type(stream, path.name)
        except OSError as exc:
            raise StreamOpenError(f"Cannot read {path}: {exc}", path=path) from exc
        if media_type:
            metadata.set(CONTENT_TYPE, media_type)

        text_sink = TextSink()
        link_sink = LinkSink()
        sink = TeeSink(text_sink, link_sink)
        context = DecodeContext(registry=self._registry, pdf=self._pdf, path=path)

        descriptor = self._registry.lookup(media_type)
        if descriptor is None:
            self._registry.fallback.decode(stream, sink, metadata, context)
        else:
            try:
                descriptor.decoder.decode(stream, sink, metadata, context)
            except ExtractionError:
                raise
            except Exception as exc:
                self._registry.fallback.reject(media_type, path, cause=exc)

        content = str(text_sink)
        apply_detected_language(self._language_detector, content, metadata)
        canonical = canonicalize(metadata)

        document = Document(
            path=path,
            content=content,
            language=self._document_language(canonical.content_language),
            encoding=canonical.content_encoding or locale.getpreferredencoding(False),
            mime_type=canonical.content_type or UNKNOWN_MIME_TYPE,
            metadata=canonical.all_fields,
            extraction_method=self._method,
        )
        logger.debug(
            "Extracted %s (%s, %d chars, %d links, language=%s)",
            path,
            document.mime_type,
            len(content),
            len(link_sink),
            document.language.name,
        )
        return ExtractionResult(document=document, links=link_sink.links)

    def _document_language(self, language: Optional[Language]) -> Language:
        if language is None:
            language = self._config.language
        if language in CANONICAL_LANGUAGES:
            return language
        return normalize_language(language)


__all__ = ["DocumentExtractor", "ExtractionResult"]
