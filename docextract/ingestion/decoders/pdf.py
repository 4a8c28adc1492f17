"""PDF container decoder built on pypdf."""

from __future__ import annotations

import hashlib
import io
import logging
from typing import Any, BinaryIO, FrozenSet, Iterator, Optional, Set

from pypdf import PdfReader

from ..detector import detect_media_type
from ..metadata import Metadata
from ..sinks import TeeSink
from .base import DecodeContext

logger = logging.getLogger(__name__)

_INFO_FIELDS = {
    "title": "dc:title",
    "author": "dc:creator",
    "subject": "dc:subject",
    "creator": "xmp:CreatorTool",
    "producer": "pdf:producer",
    "creation_date_raw": "dcterms:created",
    "modification_date_raw": "dcterms:modified",
}


class PdfDecoder:
    """Extracts page text, URI links and document info from PDF files.

    When inline image extraction is enabled, every image XObject is routed
    through the registry (normally to the OCR decoder) during the same pass
    over the pages.
    """

    name = "pdf"
    media_types: FrozenSet[str] = frozenset({"application/pdf"})

    def decode(
        self,
        stream: BinaryIO,
        sink: TeeSink,
        metadata: Metadata,
        context: DecodeContext,
    ) -> None:
        reader = PdfReader(stream)
        if reader.is_encrypted:
            reader.decrypt("")
            metadata.set("pdf:encrypted", "true")

        self._read_info(reader, metadata)
        metadata.set("xmpTPg:NPages", len(reader.pages))

        seen_images: Set[str] = set()
        for page in reader.pages:
            sink.text(page.extract_text() or "")
            sink.newline()
            for uri in _page_uris(page):
                sink.link(uri)
            if context.pdf.extract_inline_images:
                self._extract_images(page, sink, metadata, context, seen_images)

    @staticmethod
    def _read_info(reader: PdfReader, metadata: Metadata) -> None:
        info = reader.metadata
        if info is None:
            return
        for attribute, key in _INFO_FIELDS.items():
            value = getattr(info, attribute, None)
            if value:
                metadata.set(key, str(value).strip())

    @staticmethod
    def _extract_images(
        page: Any,
        sink: TeeSink,
        metadata: Metadata,
        context: DecodeContext,
        seen: Set[str],
    ) -> None:
        try:
            images = list(page.images)
        except Exception as exc:
            logger.warning("Unable to read inline images of %s: %s", context.path, exc)
            return

        for image in images:
            data = image.data
            if context.pdf.extract_unique_inline_images_only:
                digest = hashlib.sha256(data).hexdigest()
                if digest in seen:
                    continue
                seen.add(digest)
            media_type = detect_media_type(io.BytesIO(data), image.name)
            if media_type is None:
                continue
            if context.delegate(media_type, data, sink, metadata, name=image.name):
                sink.newline()


def _page_uris(page: Any) -> Iterator[str]:
    annotations = page.get("/Annots")
    if annotations is None:
        return
    for reference in annotations.get_object():
        annotation = reference.get_object()
        if annotation.get("/Subtype") != "/Link":
            continue
        uri = _action_uri(annotation.get("/A"))
        if uri:
            yield uri


def _action_uri(action: Any) -> Optional[str]:
    if action is None:
        return None
    action = action.get_object()
    uri = action.get("/URI")
    return str(uri) if uri else None


__all__ = ["PdfDecoder"]
