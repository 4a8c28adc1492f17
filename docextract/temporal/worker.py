"""Temporal worker entry point for the docextract workflows."""

from __future__ import annotations

import argparse
import asyncio
import logging

from temporalio.client import Client
from temporalio.worker import Worker

from ..activities import (
    dequeue_documents_activity,
    extract_document_activity,
    scan_directory_activity,
)
from ..config import DEFAULT_CONFIG
from ..workflows import ExtractionWorkflow, ScanWorkflow

logger = logging.getLogger(__name__)


async def _run_worker(address: str, namespace: str, task_queue: str) -> None:
    client = await Client.connect(address, namespace=namespace)
    worker = Worker(
        client,
        task_queue=task_queue,
        workflows=[ScanWorkflow, ExtractionWorkflow],
        activities=[
            scan_directory_activity,
            dequeue_documents_activity,
            extract_document_activity,
        ],
    )

    logger.info("Worker listening on %s (namespace=%s, task queue=%s)", address, namespace, task_queue)
    await worker.run()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run the Temporal worker for the docextract workflows",
    )
    parser.add_argument(
        "--address",
        default=DEFAULT_CONFIG.temporal_address,
        help="Temporal server address (host:port)",
    )
    parser.add_argument(
        "--namespace",
        default=DEFAULT_CONFIG.temporal_namespace,
        help="Temporal namespace",
    )
    parser.add_argument(
        "--task-queue",
        default=DEFAULT_CONFIG.task_queue,
        help="Temporal task queue",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level for the worker process",
    )
    return parser


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper())
    asyncio.run(_run_worker(args.address, args.namespace, args.task_queue))


if __name__ == "__main__":  # pragma: no cover
    main()
