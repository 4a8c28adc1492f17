"""Pipeline configuration dataclasses."""

from __future__ import annotations

import logging
import os
from dataclasses import field, fields
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from pydantic.dataclasses import dataclass

from .ingestion.models import Language

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() not in {"0", "false", "no", "off", ""}


DEFAULT_OCR_ENABLED = _env_flag("DOCEXTRACT_OCR_ENABLED", "0")
DEFAULT_LANGUAGE = Language.parse(os.environ.get("DOCEXTRACT_LANGUAGE")) or Language.UNKNOWN
DEFAULT_LANGUAGE_MIN_CONFIDENCE = float(os.environ.get("DOCEXTRACT_LANGUAGE_MIN_CONFIDENCE", "0.9"))
DEFAULT_DATA_DIR = os.environ.get("DOCEXTRACT_DATA_DIR", "data")
DEFAULT_REDIS_URL = os.environ.get("DOCEXTRACT_REDIS_URL", "redis://127.0.0.1:6379/0")
DEFAULT_QUEUE_NAME = os.environ.get("DOCEXTRACT_QUEUE_NAME", "extract:queue")
DEFAULT_QUEUE_CAPACITY = int(os.environ.get("DOCEXTRACT_QUEUE_CAPACITY", "10000"))
DEFAULT_PUSH_TIMEOUT_SECONDS = float(os.environ.get("DOCEXTRACT_PUSH_TIMEOUT_SECONDS", "300"))
DEFAULT_POLL_INTERVAL_SECONDS = 0.5
DEFAULT_TEMPORAL_ADDRESS = os.environ.get("DOCEXTRACT_TEMPORAL_ADDRESS", "127.0.0.1:7233")
DEFAULT_TEMPORAL_NAMESPACE = os.environ.get("DOCEXTRACT_TEMPORAL_NAMESPACE", "default")
DEFAULT_TEMPORAL_TASK_QUEUE = os.environ.get("DOCEXTRACT_TEMPORAL_TASK_QUEUE", "docextract")


@dataclass(frozen=True)
class ExtractionConfig:
    """Settings applied once when the extraction pipeline is built."""

    ocr_enabled: bool = DEFAULT_OCR_ENABLED
    language: Language = DEFAULT_LANGUAGE
    extract_unique_inline_images_only: bool = False
    language_min_confidence: float = DEFAULT_LANGUAGE_MIN_CONFIDENCE


@dataclass(frozen=True)
class ScanConfig:
    """Options handed to the scanner and its path filter."""

    include_patterns: Tuple[str, ...] = ()
    exclude_patterns: Tuple[str, ...] = ()
    follow_symlinks: bool = False
    data_dir: str = DEFAULT_DATA_DIR


@dataclass(frozen=True)
class QueueConfig:
    """Connection and flow-control parameters for the scan queue."""

    redis_url: str = DEFAULT_REDIS_URL
    queue_name: str = DEFAULT_QUEUE_NAME
    capacity: int = DEFAULT_QUEUE_CAPACITY
    push_timeout_seconds: float = DEFAULT_PUSH_TIMEOUT_SECONDS
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS


@dataclass(frozen=True)
class PipelineConfig:
    """Immutable configuration shared by every worker of a pipeline."""

    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)
    queue: QueueConfig = field(default_factory=QueueConfig)
    temporal_address: str = DEFAULT_TEMPORAL_ADDRESS
    temporal_namespace: str = DEFAULT_TEMPORAL_NAMESPACE
    task_queue: str = DEFAULT_TEMPORAL_TASK_QUEUE

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]] = None) -> "PipelineConfig":
        """Build a configuration from a flat option map, defaults filling the gaps."""

        options = dict(options or {})
        unknown = set(options) - _KNOWN_OPTIONS
        if unknown:
            logger.debug("Ignoring unrecognized options: %s", sorted(unknown))

        extraction = ExtractionConfig(
            ocr_enabled=_as_bool(_first(options, "ocrEnabled", "ocr"), DEFAULT_OCR_ENABLED),
            language=Language.parse(_first(options, "language")) or DEFAULT_LANGUAGE,
            extract_unique_inline_images_only=_as_bool(
                _first(options, "extractUniqueInlineImagesOnly"), False
            ),
            language_min_confidence=float(
                _first(options, "languageMinConfidence") or DEFAULT_LANGUAGE_MIN_CONFIDENCE
            ),
        )
        scan = ScanConfig(
            include_patterns=_as_patterns(_first(options, "includePatterns")),
            exclude_patterns=_as_patterns(_first(options, "excludePatterns")),
            follow_symlinks=_as_bool(_first(options, "followSymlinks"), False),
            data_dir=str(_first(options, "dataDir") or DEFAULT_DATA_DIR),
        )
        queue = QueueConfig(
            redis_url=str(_first(options, "redisAddress", "redisUrl") or DEFAULT_REDIS_URL),
            queue_name=str(_first(options, "queueName") or DEFAULT_QUEUE_NAME),
            capacity=int(_first(options, "queueCapacity") or DEFAULT_QUEUE_CAPACITY),
            push_timeout_seconds=float(_first(options, "pushTimeout") or DEFAULT_PUSH_TIMEOUT_SECONDS),
        )
        return cls(
            extraction=extraction,
            scan=scan,
            queue=queue,
            temporal_address=str(_first(options, "temporalAddress") or DEFAULT_TEMPORAL_ADDRESS),
            temporal_namespace=str(_first(options, "namespace") or DEFAULT_TEMPORAL_NAMESPACE),
            task_queue=str(_first(options, "taskQueue") or DEFAULT_TEMPORAL_TASK_QUEUE),
        )

    def to_activity_payload(self) -> Dict[str, Any]:
        """Return the flat option map understood by ``from_options``."""

        return {
            "ocrEnabled": self.extraction.ocr_enabled,
            "language": self.extraction.language.value,
            "extractUniqueInlineImagesOnly": self.extraction.extract_unique_inline_images_only,
            "languageMinConfidence": self.extraction.language_min_confidence,
            "includePatterns": list(self.scan.include_patterns),
            "excludePatterns": list(self.scan.exclude_patterns),
            "followSymlinks": self.scan.follow_symlinks,
            "dataDir": self.scan.data_dir,
            "redisAddress": self.queue.redis_url,
            "queueName": self.queue.queue_name,
            "queueCapacity": self.queue.capacity,
            "pushTimeout": self.queue.push_timeout_seconds,
            "temporalAddress": self.temporal_address,
            "namespace": self.temporal_namespace,
            "taskQueue": self.task_queue,
        }

    def copy(self, **updates: Any) -> "PipelineConfig":
        """Return a copy with optional overrides."""

        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update(updates)
        return PipelineConfig(**values)


_KNOWN_OPTIONS = frozenset(
    {
        "ocr",
        "ocrEnabled",
        "language",
        "extractUniqueInlineImagesOnly",
        "languageMinConfidence",
        "includePatterns",
        "excludePatterns",
        "followSymlinks",
        "dataDir",
        "redisAddress",
        "redisUrl",
        "queueName",
        "queueCapacity",
        "pushTimeout",
        "temporalAddress",
        "namespace",
        "taskQueue",
    }
)


def _first(options: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = options.get(key)
        if value is not None and value != "":
            return value
    return None


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def _as_patterns(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    items: Iterable[Any] = value.split(",") if isinstance(value, str) else value
    return tuple(str(item).strip() for item in items if str(item).strip())


DEFAULT_CONFIG = PipelineConfig()

__all__ = [
    "DEFAULT_CONFIG",
    "ExtractionConfig",
    "PipelineConfig",
    "QueueConfig",
    "ScanConfig",
]
