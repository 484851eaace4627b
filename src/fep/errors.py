"""Exceptions shared across the pipeline."""

from __future__ import annotations


class ConflictError(Exception):
    """A write hit a uniqueness constraint."""


class LlmError(RuntimeError):
    """The LLM backend failed or returned no usable content."""


class EnrichmentError(RuntimeError):
    """An enrichment provider could not produce fields."""
