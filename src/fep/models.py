"""Core data models for ingestion and enrichment."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fep.utils.time import localize


EventStatus = Literal["new", "approved", "rejected"]
IndoorOutdoor = Literal["indoor", "outdoor", "both", "unknown"]
LogMode = Literal["ai", "rules"]
LogStatus = Literal["pending", "success", "fallback", "failed"]

TERMINAL_LOG_STATUSES: frozenset[str] = frozenset({"success", "fallback", "failed"})

# Columns a scraper owns; a re-scrape may rewrite any of them.
RECORD_FIELDS: tuple[str, ...] = (
    "source",
    "source_url",
    "source_event_id",
    "title",
    "start_at",
    "end_at",
    "venue",
    "location_name",
    "address",
    "price_text",
    "description",
    "description_raw",
    "age_min",
    "age_max",
    "tags",
    "kid_friendly",
    "fingerprint",
)

# Record fields that enrichment also fills; a scraper sending None must not wipe them.
SHARED_DERIVED_FIELDS: frozenset[str] = frozenset({"age_min", "age_max", "tags", "kid_friendly"})


class EventRecord(BaseModel):
    """Normalized record produced by a source adapter."""

    model_config = ConfigDict(extra="ignore")

    source: str
    source_url: str
    source_event_id: str
    title: str
    start_at: datetime
    end_at: Optional[datetime] = None
    venue: Optional[str] = None
    location_name: Optional[str] = None
    address: Optional[str] = None
    price_text: Optional[str] = None
    description: Optional[str] = None
    description_raw: Optional[str] = None
    age_min: Optional[int] = None
    age_max: Optional[int] = None
    tags: Optional[list[str]] = None
    kid_friendly: Optional[bool] = None
    fingerprint: str = ""

    @field_validator("source_event_id", mode="before")
    @classmethod
    def _source_id_text(cls, value: Any) -> Any:
        # Upstream ids often arrive as JSON numbers.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("start_at", "end_at")
    @classmethod
    def _aware(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        return localize(value)

    def to_fields(self) -> dict[str, Any]:
        """Return the catalog columns this record carries."""
        return {name: getattr(self, name) for name in RECORD_FIELDS}


class CanonicalEvent(BaseModel):
    """A catalog row."""

    model_config = ConfigDict(extra="ignore")

    id: int
    source: str
    source_url: str
    source_event_id: str
    title: str
    title_i18n: Optional[dict[str, str]] = None
    start_at: datetime
    end_at: Optional[datetime] = None
    venue: Optional[str] = None
    location_name: Optional[str] = None
    address: Optional[str] = None
    price_text: Optional[str] = None
    description: Optional[str] = None
    description_raw: Optional[str] = None
    summary: Optional[str] = None
    summary_i18n: Optional[dict[str, str]] = None
    short_summary: Optional[str] = None
    short_summary_i18n: Optional[dict[str, str]] = None
    age_min: Optional[int] = None
    age_max: Optional[int] = None
    tags: Optional[list[str]] = None
    kid_friendly: Optional[bool] = None
    indoor_outdoor: Optional[IndoorOutdoor] = None
    category: Optional[str] = None
    language: Optional[str] = None
    needs_review: bool = False
    fingerprint: str = ""
    duplicate_of_event_id: Optional[int] = None
    status: EventStatus = "new"
    is_active: bool = True
    enriched_at: Optional[datetime] = None
    enrichment_attempts: int = 0
    enrichment_log_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_root(self) -> bool:
        return self.duplicate_of_event_id is None

    @property
    def is_enriched(self) -> bool:
        return bool(self.short_summary) and self.enriched_at is not None

    @property
    def match_location(self) -> Optional[str]:
        return self.location_name or self.venue


class EnrichmentLogEntry(BaseModel):
    """Audit record for one enrichment attempt."""

    id: int
    event_id: int
    mode: LogMode
    prompt: str
    response: Optional[str] = None
    status: LogStatus = "pending"
    tokens_prompt: Optional[int] = None
    tokens_completion: Optional[int] = None
    duration_ms: Optional[int] = None
    error: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class EnrichmentResult(BaseModel):
    """Outcome of a successful enrichment call."""

    log_id: int
    fields: dict[str, Any] = Field(default_factory=dict)
    mode: LogMode
