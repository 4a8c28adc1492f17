"""Workflow package exposing public Temporal workflows."""

from .extraction_workflow import ExtractionWorkflow
from .scan_workflow import ScanWorkflow

__all__ = ["ExtractionWorkflow", "ScanWorkflow"]
