"""Ingestion package."""

from fep.ingestion.duplicates import DuplicateResolver
from fep.ingestion.fingerprint import extract_url_id, fingerprint
from fep.ingestion.upsert import UpsertCoordinator

__all__ = ["DuplicateResolver", "UpsertCoordinator", "extract_url_id", "fingerprint"]
