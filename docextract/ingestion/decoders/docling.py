"""Office and markup decoder using Docling."""

from __future__ import annotations

import io
import logging
from typing import BinaryIO, Dict, FrozenSet

from docling.datamodel.base_models import DocumentStream, InputFormat
from docling.document_converter import DocumentConverter
from docling_core.types.doc import TableItem

from ..metadata import CONTENT_TYPE, Metadata
from ..sinks import TeeSink
from .base import DecodeContext

logger = logging.getLogger(__name__)

_FORMATS: Dict[str, tuple[InputFormat, str]] = {
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": (InputFormat.DOCX, ".docx"),
    "application/vnd.openxmlformats-officedocument.presentationml.presentation": (InputFormat.PPTX, ".pptx"),
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": (InputFormat.XLSX, ".xlsx"),
    "text/html": (InputFormat.HTML, ".html"),
    "application/xhtml+xml": (InputFormat.HTML, ".xhtml"),
    "text/markdown": (InputFormat.MD, ".md"),
    "text/asciidoc": (InputFormat.ASCIIDOC, ".adoc"),
    "text/csv": (InputFormat.CSV, ".csv"),
}


class DoclingDecoder:
    """Converts office and markup documents with Docling's ``DocumentConverter``.

    Text and hyperlinks are emitted from a single walk over the converted
    document's items.
    """

    name = "docling"
    media_types: FrozenSet[str] = frozenset(_FORMATS)

    def __init__(self) -> None:
        allowed = sorted({fmt for fmt, _ in _FORMATS.values()}, key=lambda fmt: fmt.value)
        self._converter = DocumentConverter(allowed_formats=allowed)

    def decode(
        self,
        stream: BinaryIO,
        sink: TeeSink,
        metadata: Metadata,
        context: DecodeContext,
    ) -> None:
        media_type = (metadata.get(CONTENT_TYPE) or "").split(";", 1)[0].strip().lower()
        _, extension = _FORMATS.get(media_type, (None, ""))
        stem = context.path.stem if context.path else "document"
        source = DocumentStream(name=f"{stem}{extension}", stream=io.BytesIO(stream.read()))

        result = self._converter.convert(source)
        document = result.document

        for item, _level in document.iterate_items():
            if isinstance(item, TableItem):
                text = item.export_to_markdown(doc=document)
            else:
                text = getattr(item, "text", None) or ""
            if text:
                sink.text(text)
                sink.newline()
            hyperlink = getattr(item, "hyperlink", None)
            if hyperlink:
                sink.link(str(hyperlink), text)

        metadata.set("docling:format", result.input.format.value)
        if document.pages:
            metadata.set("xmpTPg:NPages", len(document.pages))
        for error in getattr(result, "errors", []) or []:
            message = getattr(error, "error_message", "")
            if message:
                logger.warning("Docling reported an issue for %s: %s", context.path, message)
                metadata.add("X-Docling-Warnings", message)


__all__ = ["DoclingDecoder"]
