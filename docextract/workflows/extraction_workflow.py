"""Temporal workflow that drains a user's queue through the extractor."""

from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import Any, Dict, List, Optional

from temporalio import workflow
from temporalio.common import RetryPolicy

DEQUEUE_DOCUMENTS_ACTIVITY = "dequeue_documents_activity"
EXTRACT_DOCUMENT_ACTIVITY = "extract_document_activity"


@workflow.defn
class ExtractionWorkflow:
    """Pulls batches until end-of-stream, extracting each batch concurrently.

    Long queues are split across runs with ``continue_as_new`` so the history
    stays bounded; counters are carried over in the payload.
    """

    @workflow.run
    async def run(self, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload = payload or {}
        user_id = payload.get("user_id")
        if not user_id:
            raise ValueError("user_id must be provided in payload")

        options = payload.get("options") or {}
        batch_size = max(int(payload.get("batch_size", 16)), 1)
        max_batches = max(int(payload.get("max_batches_per_run", 500)), 1)
        extracted = int(payload.get("extracted", 0))
        failed = int(payload.get("failed", 0))
        failures: List[Dict[str, Any]] = list(payload.get("failures") or [])

        for _ in range(max_batches):
            batch = await workflow.execute_activity(
                DEQUEUE_DOCUMENTS_ACTIVITY,
                args=(user_id, batch_size, options),
                start_to_close_timeout=timedelta(minutes=2),
            )
            paths = list(batch.get("paths") or [])
            if paths:
                results = await asyncio.gather(
                    *(
                        workflow.execute_activity(
                            EXTRACT_DOCUMENT_ACTIVITY,
                            args=(path, options),
                            start_to_close_timeout=timedelta(minutes=10),
                            retry_policy=RetryPolicy(maximum_attempts=3),
                        )
                        for path in paths
                    )
                )
                for result in results:
                    if result.get("status") == "ok":
                        extracted += 1
                    else:
                        failed += 1
                        failures.append({"path": result.get("path"), "error": result.get("error")})

            if batch.get("closed"):
                return {
                    "user_id": user_id,
                    "extracted": extracted,
                    "failed": failed,
                    "failures": failures,
                }

        workflow.continue_as_new(
            {
                **payload,
                "extracted": extracted,
                "failed": failed,
                "failures": failures,
            }
        )


__all__ = ["ExtractionWorkflow"]
