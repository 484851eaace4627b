"""Deterministic keyword heuristics, used standalone and as the AI fallback."""

from __future__ import annotations

import re
from typing import Any, Optional

import orjson

from fep.db.repository import EnrichmentLogStore
from fep.enrichment.schemas import SUMMARY_MAX_CHARS
from fep.models import CanonicalEvent, EnrichmentResult
from fep.utils.logging import get_logger
from fep.utils.text import normalize_whitespace


logger = get_logger(__name__)

AGE_PATTERNS: tuple[tuple[re.Pattern[str], bool], ...] = (
    # (pattern, has upper bound)
    (re.compile(r"\b(\d{1,2})\s*-\s*(\d{1,2})\s*(let|roku|years)?\b"), True),
    (re.compile(r"\b(\d{1,2})\s*\+\s*(let|roku|years)?\b"), False),
    (re.compile(r"\bod\s*(\d{1,2})\s*(let|roku)\b"), False),
    (re.compile(r"\bpro děti\s*(\d{1,2})\s*-\s*(\d{1,2})\b"), True),
)

KID_KEYWORDS = ("děti", "dets", "rodinn", "family", "kids", "pohádk", "loutk")
INDOOR_KEYWORDS = ("divadl", "kino", "hala", "vnitř", "interiér", "museum", "muze")
OUTDOOR_KEYWORDS = ("venku", "park", "les", "zahrad", "venkovn", "outdoor")
ENGLISH_KEYWORDS = ("english", "workshop", "kids", "family")

# First matching category wins.
CATEGORY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("theatre", ("divadl", "loutk", "představ")),
    ("music", ("koncert", "hudb", "kapel", "zpěv")),
    ("festival", ("festival", "fest")),
    ("workshop", ("díln", "workshop", "tvořiv", "kreativ")),
    ("education", ("přednáš", "eduk", "vzděl")),
    ("sports", ("sport", "běh", "turnaj", "závod")),
    ("nature", ("přírod", "les", "zoo", "zvířat")),
    ("exhibition", ("výstav", "expoz")),
)

CZECH_CHARS_RE = re.compile(r"[áéěíóúůýřžščďťň]")

ELLIPSIS = "..."


def _has_any(text: str, needles: tuple[str, ...]) -> bool:
    return any(needle in text for needle in needles)


def extract_age_range(text: str) -> tuple[Optional[int], Optional[int]]:
    for pattern, has_upper in AGE_PATTERNS:
        match = pattern.search(text)
        if match:
            upper = int(match.group(2)) if has_upper else None
            return int(match.group(1)), upper
    return None, None


def detect_kid_friendly(text: str, age_min: Optional[int], age_max: Optional[int]) -> Optional[bool]:
    if age_min is not None or age_max is not None:
        return True
    if _has_any(text, KID_KEYWORDS):
        return True
    return None


def detect_indoor_outdoor(text: str) -> str:
    indoor = _has_any(text, INDOOR_KEYWORDS)
    outdoor = _has_any(text, OUTDOOR_KEYWORDS)
    if indoor and outdoor:
        return "both"
    if indoor:
        return "indoor"
    if outdoor:
        return "outdoor"
    return "unknown"


def detect_category(text: str) -> str:
    for category, keywords in CATEGORY_KEYWORDS:
        if _has_any(text, keywords):
            return category
    return "other"


def detect_language(text: str) -> str:
    has_czech = bool(CZECH_CHARS_RE.search(text))
    has_english = _has_any(text, ENGLISH_KEYWORDS)
    if has_czech and has_english:
        return "mixed"
    if has_czech:
        return "cs"
    if has_english:
        return "en"
    return "unknown"


def trim_summary(text: str) -> Optional[str]:
    text = text.strip()
    if not text:
        return None
    if len(text) > SUMMARY_MAX_CHARS:
        return text[: SUMMARY_MAX_CHARS - len(ELLIPSIS)] + ELLIPSIS
    return text


def build_summary(title: str, description_raw: Optional[str]) -> Optional[str]:
    source = (description_raw or "").strip()
    if not source:
        return trim_summary(title)
    return trim_summary(normalize_whitespace(source))


def derive_fields(title: str, description_raw: Optional[str]) -> dict[str, Any]:
    text = re.sub(r"\s+", " ", f"{title} {description_raw or ''}".lower())
    age_min, age_max = extract_age_range(text)
    return {
        "kid_friendly": detect_kid_friendly(text, age_min, age_max),
        "age_min": age_min,
        "age_max": age_max,
        "indoor_outdoor": detect_indoor_outdoor(text),
        "category": detect_category(text),
        "language": detect_language(text),
        "short_summary": build_summary(title, description_raw),
        "title_i18n": None,
        "short_summary_i18n": None,
    }


class RulesEnrichmentProvider:
    """Always succeeds; writes one terminal log entry per call."""

    def __init__(self, logs: EnrichmentLogStore) -> None:
        self.logs = logs

    def enrich(self, event: CanonicalEvent, reason: str = "rules") -> EnrichmentResult:
        description_raw = (
            event.description_raw if event.description_raw is not None else event.description
        )
        input_payload = {
            "title": event.title,
            "description_raw": description_raw,
            "location_name": event.match_location,
        }
        fields = derive_fields(event.title, description_raw)

        status = "fallback" if reason == "fallback" else "success"
        log_id = self.logs.record(
            event.id,
            "rules",
            orjson.dumps({"reason": reason, "input": input_payload}).decode("utf-8"),
            orjson.dumps(fields).decode("utf-8"),
            status,
        )
        logger.info(
            "enrichment.rules event_id=%s log_id=%s reason=%s", event.id, log_id, reason
        )
        return EnrichmentResult(log_id=log_id, fields=fields, mode="rules")
