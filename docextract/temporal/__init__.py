"""Temporal worker entry point for the docextract workflows."""

from .worker import build_parser, main

__all__ = ["build_parser", "main"]
