"""Activity that scans a user's directory into the extraction queue."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from temporalio import activity

from ..config import PipelineConfig
from ..ingestion.models import User
from ..scanning import scan_user_directory

logger = logging.getLogger(__name__)


@activity.defn
async def scan_directory_activity(
    user_id: str,
    user_path: Optional[str] = None,
    options: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Walk the user's directory and enqueue every accepted file."""

    config = PipelineConfig.from_options(options)
    user = User(id=user_id, path=user_path)
    result = await asyncio.to_thread(scan_user_directory, user, config)

    return {
        "root": str(result.root),
        "user_id": result.user_id,
        "count": result.queued,
        "skipped": result.skipped,
    }


__all__ = ["scan_directory_activity"]
