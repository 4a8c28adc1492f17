"""Command-line interface for starting scans and extractions."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import uuid
from typing import Any, Dict, List, Optional, Sequence

from dotenv import load_dotenv
from temporalio.client import Client

from .config import DEFAULT_CONFIG, PipelineConfig
from .ingestion.errors import ExtractionError
from .ingestion.extractor import DocumentExtractor
from .ingestion.models import User
from .scanning import InMemoryDocumentQueue, scan_user_directory
from .workflows import ExtractionWorkflow, ScanWorkflow

load_dotenv()

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="docextract: scan directories and extract documents")
    parser.add_argument("--log-level", default="WARNING", help="Logging level")
    parser.add_argument("--address", default=DEFAULT_CONFIG.temporal_address, help="Temporal server address")
    parser.add_argument("--namespace", default=DEFAULT_CONFIG.temporal_namespace, help="Temporal namespace")
    parser.add_argument("--task-queue", default=DEFAULT_CONFIG.task_queue, help="Temporal task queue")
    parser.add_argument("--ocr", action="store_true", default=None, help="Enable OCR of images")
    parser.add_argument("--language", help="Document language hint (e.g. en, deu, German)")
    parser.add_argument("--data-dir", help="Base directory that user paths resolve under")
    parser.add_argument("--include", action="append", default=None, help="Glob of files to include")
    parser.add_argument("--exclude", action="append", default=None, help="Glob of files to exclude")

    commands = parser.add_subparsers(dest="command", required=True)

    scan = commands.add_parser("scan", help="Start a scan workflow for a user")
    scan.add_argument("user", help="User identifier")
    scan.add_argument("--path", help="Directory of the user under the data directory")

    extract = commands.add_parser("extract", help="Start an extraction workflow draining a user's queue")
    extract.add_argument("user", help="User identifier")
    extract.add_argument("--batch-size", type=int, default=16)

    local = commands.add_parser("local", help="Scan and extract in this process without Temporal")
    local.add_argument("user", help="User identifier")
    local.add_argument("--path", help="Directory of the user under the data directory")

    return parser


def _options(args: argparse.Namespace) -> Dict[str, Any]:
    options: Dict[str, Any] = {
        "ocrEnabled": args.ocr,
        "language": args.language,
        "dataDir": args.data_dir,
        "includePatterns": args.include,
        "excludePatterns": args.exclude,
        "temporalAddress": args.address,
        "namespace": args.namespace,
        "taskQueue": args.task_queue,
    }
    return {key: value for key, value in options.items() if value is not None}


async def _start_workflow(args: argparse.Namespace, config: PipelineConfig) -> Dict[str, Any]:
    client = await Client.connect(config.temporal_address, namespace=config.temporal_namespace)
    payload: Dict[str, Any] = {"user_id": args.user, "options": config.to_activity_payload()}

    if args.command == "scan":
        payload["user_path"] = args.path
        return await client.execute_workflow(
            ScanWorkflow.run,
            payload,
            id=f"docextract-scan-{args.user}-{uuid.uuid4().hex[:8]}",
            task_queue=config.task_queue,
        )

    payload["batch_size"] = args.batch_size
    return await client.execute_workflow(
        ExtractionWorkflow.run,
        payload,
        id=f"docextract-extract-{args.user}-{uuid.uuid4().hex[:8]}",
        task_queue=config.task_queue,
    )


def run_local(user: User, config: PipelineConfig) -> List[Dict[str, Any]]:
    """Scan ``user``'s directory into memory and extract every file in turn."""

    queue = InMemoryDocumentQueue()
    scan_user_directory(user, config, queue=queue)
    extractor = DocumentExtractor(config.extraction)

    results: List[Dict[str, Any]] = []
    for entry in queue:
        try:
            document = extractor.extract_file(entry.path).document
        except ExtractionError as exc:
            logger.error("Extraction failed for %s: %s", entry.path, exc)
            results.append({"status": "failed", "path": str(entry.path), "error": str(exc)})
            continue
        results.append({"status": "ok", "document": document.to_payload()})
    return results


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper())

    config = PipelineConfig.from_options(_options(args))

    if args.command == "local":
        output: Any = run_local(User(id=args.user, path=args.path), config)
    else:
        output = asyncio.run(_start_workflow(args, config))

    json.dump(output, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
