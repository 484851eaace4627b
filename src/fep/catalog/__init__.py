"""Catalog read and maintenance operations."""

from fep.catalog.lifecycle import deactivate_past
from fep.catalog.query import EventQueryService

__all__ = ["EventQueryService", "deactivate_past"]
