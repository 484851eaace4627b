"""LLM client contract and response helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Protocol

import orjson


@dataclass(frozen=True)
class LlmCompletion:
    text: str
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None


class LlmClient(Protocol):
    def complete(self, prompt: str) -> LlmCompletion:
        """Send one prompt and return the raw JSON text; raise LlmError on failure."""


def strip_code_fences(text: str) -> str:
    value = text.strip()
    if value.startswith("```"):
        lines = value.splitlines()
        if lines and lines[0].startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].startswith("```"):
            lines = lines[:-1]
        value = "\n".join(lines).strip()
    return value


def parse_json_object(text: str) -> Any:
    """Parse model output, tolerating markdown fences and text around the object.

    Raises orjson.JSONDecodeError when no JSON value can be recovered.
    """
    candidate = strip_code_fences(text)
    try:
        return orjson.loads(candidate)
    except orjson.JSONDecodeError:
        start = candidate.find("{")
        end = candidate.rfind("}")
        if start >= 0 and end > start:
            return orjson.loads(candidate[start : end + 1])
        raise


def dig(payload: Any, *path: Any) -> Any:
    """Walk nested dicts/lists, returning None as soon as a step is missing."""
    current = payload
    for key in path:
        if isinstance(current, dict):
            current = current.get(key)
        elif isinstance(current, list) and isinstance(key, int) and -len(current) <= key < len(current):
            current = current[key]
        else:
            return None
    return current


def int_or_none(value: Any) -> Optional[int]:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None
