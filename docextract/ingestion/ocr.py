"""OCR opt-in/opt-out applied to the parser registry at pipeline construction."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..config import ExtractionConfig
from .decoders import OcrDecoder
from .models import Language
from .registry import ParserDescriptor, ParserRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PdfSettings:
    """How the PDF container decoder treats inline images."""

    extract_inline_images: bool = False
    extract_unique_inline_images_only: bool = True


@dataclass(frozen=True)
class OcrSettings:
    enabled: bool
    language: Optional[str] = None


@dataclass(frozen=True)
class OcrConfiguration:
    """Result of configuring OCR: the active registry and the container settings."""

    registry: ParserRegistry
    pdf: PdfSettings
    ocr: OcrSettings


def ocr_language_hint(language: Optional[Language]) -> Optional[str]:
    """Return the Tesseract code for ``language``; ``None`` for NONE/UNKNOWN."""

    if language is None or language in (Language.NONE, Language.UNKNOWN):
        return None
    return language.iso6392


def enable_ocr(registry: ParserRegistry, language: Optional[Language], unique_images_only: bool = False) -> OcrConfiguration:
    hint = ocr_language_hint(language)
    registry = registry.register(ParserDescriptor.of(OcrDecoder(language=hint)))
    logger.info("OCR enabled (language hint: %s)", hint or "none")
    return OcrConfiguration(
        registry=registry,
        pdf=PdfSettings(extract_inline_images=True, extract_unique_inline_images_only=unique_images_only),
        ocr=OcrSettings(enabled=True, language=hint),
    )


def disable_ocr(registry: ParserRegistry) -> OcrConfiguration:
    registry = registry.exclude(OcrDecoder.name)
    logger.info("OCR disabled; excluded media types: %s", sorted(registry.excluded_media_types))
    return OcrConfiguration(
        registry=registry,
        pdf=PdfSettings(extract_inline_images=False),
        ocr=OcrSettings(enabled=False),
    )


def configure_ocr(registry: ParserRegistry, config: ExtractionConfig) -> OcrConfiguration:
    if config.ocr_enabled:
        return enable_ocr(registry, config.language, config.extract_unique_inline_images_only)
    return disable_ocr(registry)


__all__ = [
    "OcrConfiguration",
    "OcrSettings",
    "PdfSettings",
    "configure_ocr",
    "disable_ocr",
    "enable_ocr",
    "ocr_language_hint",
]
