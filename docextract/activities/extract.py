"""Activities that drain the scan queue and extract documents."""

from __future__ import annotations

import asyncio
import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional

from temporalio import activity

from ..config import ExtractionConfig, PipelineConfig
from ..ingestion.errors import ExtractionError
from ..ingestion.extractor import DocumentExtractor
from ..scanning import RedisDocumentQueue

logger = logging.getLogger(__name__)


@lru_cache(maxsize=8)
def _extractor(config: ExtractionConfig) -> DocumentExtractor:
    # Shared across activity invocations; the extractor keeps no per-call state.
    return DocumentExtractor(config)


def _dequeue(user_id: str, batch_size: int, wait_seconds: float, config: PipelineConfig) -> Dict[str, Any]:
    queue = RedisDocumentQueue.from_config(user_id, config.queue)
    paths: List[str] = []

    entry = queue.get(timeout=wait_seconds)
    while entry is not None:
        paths.append(str(entry.path))
        if len(paths) >= batch_size:
            break
        entry = queue.get(timeout=config.queue.poll_interval_seconds)

    return {"paths": paths, "closed": queue.end_of_stream}


@activity.defn
async def dequeue_documents_activity(
    user_id: str,
    batch_size: int = 16,
    options: Optional[Dict[str, Any]] = None,
    wait_seconds: float = 5.0,
) -> Dict[str, Any]:
    """Pop up to ``batch_size`` entries from the user's queue.

    ``closed`` is true once the end-of-stream marker has been observed.
    """

    config = PipelineConfig.from_options(options)
    return await asyncio.to_thread(_dequeue, user_id, max(batch_size, 1), wait_seconds, config)


@activity.defn
async def extract_document_activity(path: str, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Extract a single file; per-file failures are reported, not raised."""

    config = PipelineConfig.from_options(options)
    extractor = _extractor(config.extraction)

    try:
        result = await asyncio.to_thread(extractor.extract_file, path)
    except ExtractionError as exc:
        logger.error("Extraction failed for %s: %s", path, exc)
        return {
            "status": "failed",
            "path": path,
            "error": str(exc),
            "error_type": type(exc).__name__,
        }

    return {
        "status": "ok",
        "path": path,
        "document": result.document.to_payload(),
        "links": [{"href": link.href, "text": link.text, "rel": link.rel} for link in result.links],
    }


__all__ = ["dequeue_documents_activity", "extract_document_activity"]
