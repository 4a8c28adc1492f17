"""Format decoders plugged into the parser registry."""

from .base import DecodeContext, Decoder
from .docling import DoclingDecoder
from .ocr import IMAGE_MEDIA_TYPES, OcrDecoder
from .pdf import PdfDecoder
from .text import TEXT_MEDIA_TYPES, PlainTextDecoder

__all__ = [
    "DecodeContext",
    "Decoder",
    "DoclingDecoder",
    "IMAGE_MEDIA_TYPES",
    "OcrDecoder",
    "PdfDecoder",
    "PlainTextDecoder",
    "TEXT_MEDIA_TYPES",
]
