"""Image decoder running Tesseract OCR."""

from __future__ import annotations

from typing import BinaryIO, FrozenSet, Optional

import pytesseract
from PIL import Image

from ..metadata import Metadata
from ..sinks import TeeSink
from .base import DecodeContext

IMAGE_MEDIA_TYPES: FrozenSet[str] = frozenset(
    {
        "image/png",
        "image/jpeg",
        "image/tiff",
        "image/bmp",
        "image/gif",
        "image/webp",
    }
)


class OcrDecoder:
    """Recognizes text in images; ``language`` is a Tesseract code such as ``deu``."""

    name = "ocr"
    media_types: FrozenSet[str] = IMAGE_MEDIA_TYPES

    def __init__(self, language: Optional[str] = None) -> None:
        self._language = language

    @property
    def language(self) -> Optional[str]:
        return self._language

    def decode(
        self,
        stream: BinaryIO,
        sink: TeeSink,
        metadata: Metadata,
        context: DecodeContext,
    ) -> None:
        with Image.open(stream) as image:
            image.load()
            if image.mode not in {"RGB", "L"}:
                image = image.convert("RGB")
            if self._language:
                text = pytesseract.image_to_string(image, lang=self._language)
            else:
                text = pytesseract.image_to_string(image)
        sink.text(text.strip())
        if self._language:
            metadata.set("X-OCR-Language", self._language)


__all__ = ["IMAGE_MEDIA_TYPES", "OcrDecoder"]
