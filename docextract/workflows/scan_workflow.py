"""Temporal workflow that scans a user directory once."""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict, Optional

from temporalio import workflow
from temporalio.common import RetryPolicy

SCAN_DIRECTORY_ACTIVITY = "scan_directory_activity"


@workflow.defn
class ScanWorkflow:
    """Runs the scanner for one user; a failed scan is not retried."""

    @workflow.run
    async def run(self, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload = payload or {}
        user_id = payload.get("user_id")
        if not user_id:
            raise ValueError("user_id must be provided in payload")

        return await workflow.execute_activity(
            SCAN_DIRECTORY_ACTIVITY,
            args=(user_id, payload.get("user_path"), payload.get("options") or {}),
            start_to_close_timeout=timedelta(hours=1),
            retry_policy=RetryPolicy(maximum_attempts=1),
        )


__all__ = ["ScanWorkflow"]
