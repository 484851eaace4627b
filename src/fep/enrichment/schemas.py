"""Enrichment field vocabulary and normalization of LLM output.

Every normalizer is total: a value that is missing, of the wrong type or out
of range becomes None instead of raising, so one bad field never discards the
rest of a response.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator


INDOOR_OUTDOOR_VALUES: tuple[str, ...] = ("indoor", "outdoor", "both", "unknown")

CATEGORY_VALUES: tuple[str, ...] = (
    "culture",
    "sports",
    "education",
    "nature",
    "theatre",
    "music",
    "festival",
    "workshop",
    "exhibition",
    "other",
)

LANGUAGE_VALUES: tuple[str, ...] = ("cs", "en", "mixed", "unknown")

I18N_LANGUAGES: tuple[str, ...] = ("en", "uk")

AGE_MIN_BOUND = 0
AGE_MAX_BOUND = 120

SUMMARY_MAX_CHARS = 200

_TRUE_STRINGS = frozenset({"true", "yes", "1"})
_FALSE_STRINGS = frozenset({"false", "no", "0"})

_NUMERIC_RE = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")


def normalize_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        return None
    if isinstance(value, int):
        return bool(value)
    return None


def normalize_int(
    value: Any,
    minimum: int = AGE_MIN_BOUND,
    maximum: int = AGE_MAX_BOUND,
) -> Optional[int]:
    """Coerce a numeric value (int, float or numeric string) into [minimum, maximum]."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str) and _NUMERIC_RE.match(value):
        number = float(value)
    else:
        return None
    try:
        result = int(number)
    except (OverflowError, ValueError):
        return None
    if result < minimum or result > maximum:
        return None
    return result


def normalize_enum(value: Any, allowed: tuple[str, ...]) -> Optional[str]:
    if not isinstance(value, str):
        return None
    lowered = value.strip().lower()
    return lowered if lowered in allowed else None


def normalize_summary(value: Any, max_chars: int = SUMMARY_MAX_CHARS) -> Optional[str]:
    if not isinstance(value, str):
        return None
    summary = value.strip()
    if not summary:
        return None
    return summary[:max_chars]


def normalize_translation(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    text = value.strip()
    return text or None


def build_i18n_map(**values: Optional[str]) -> Optional[dict[str, str]]:
    """Keep only supported languages with a non-empty value; None if nothing is left."""
    mapping = {lang: values[lang] for lang in I18N_LANGUAGES if values.get(lang)}
    return mapping or None


class EnrichmentOutput(BaseModel):
    """Structured LLM answer; each field degrades to None on its own."""

    model_config = ConfigDict(extra="ignore")

    is_kid_friendly: Optional[bool] = None
    age_min: Optional[int] = None
    age_max: Optional[int] = None
    indoor_outdoor: Optional[str] = None
    category: Optional[str] = None
    language: Optional[str] = None
    short_summary: Optional[str] = None
    title_en: Optional[str] = None
    title_uk: Optional[str] = None
    short_summary_en: Optional[str] = None
    short_summary_uk: Optional[str] = None

    @field_validator("is_kid_friendly", mode="before")
    @classmethod
    def _bool(cls, value: Any) -> Optional[bool]:
        return normalize_bool(value)

    @field_validator("age_min", "age_max", mode="before")
    @classmethod
    def _age(cls, value: Any) -> Optional[int]:
        return normalize_int(value)

    @field_validator("indoor_outdoor", mode="before")
    @classmethod
    def _indoor_outdoor(cls, value: Any) -> Optional[str]:
        return normalize_enum(value, INDOOR_OUTDOOR_VALUES)

    @field_validator("category", mode="before")
    @classmethod
    def _category(cls, value: Any) -> Optional[str]:
        return normalize_enum(value, CATEGORY_VALUES)

    @field_validator("language", mode="before")
    @classmethod
    def _language(cls, value: Any) -> Optional[str]:
        return normalize_enum(value, LANGUAGE_VALUES)

    @field_validator("short_summary", "short_summary_en", "short_summary_uk", mode="before")
    @classmethod
    def _summary(cls, value: Any) -> Optional[str]:
        return normalize_summary(value)

    @field_validator("title_en", "title_uk", mode="before")
    @classmethod
    def _translation(cls, value: Any) -> Optional[str]:
        return normalize_translation(value)

    def to_fields(self) -> dict[str, Any]:
        """Map onto catalog columns."""
        return {
            "kid_friendly": self.is_kid_friendly,
            "age_min": self.age_min,
            "age_max": self.age_max,
            "indoor_outdoor": self.indoor_outdoor,
            "category": self.category,
            "language": self.language,
            "short_summary": self.short_summary,
            "title_i18n": build_i18n_map(en=self.title_en, uk=self.title_uk),
            "short_summary_i18n": build_i18n_map(
                en=self.short_summary_en, uk=self.short_summary_uk
            ),
        }


def normalize_fields(parsed: dict[str, Any]) -> dict[str, Any]:
    """Map a parsed LLM response onto catalog columns."""
    return EnrichmentOutput.model_validate(parsed).to_fields()
