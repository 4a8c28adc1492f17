"""Temporal activity package for the docextract pipeline."""

from .extract import dequeue_documents_activity, extract_document_activity
from .scan import scan_directory_activity

__all__ = [
    "dequeue_documents_activity",
    "extract_document_activity",
    "scan_directory_activity",
]
