"""Text helpers."""

from __future__ import annotations

import re


def normalize_whitespace(text: str) -> str:
    """Collapse whitespace and trim."""
    return re.sub(r"\s+", " ", text).strip()


def normalize_for_match(text: str | None) -> str:
    """Lowercase, replace anything but letters and digits with single spaces."""
    if not text:
        return ""
    return re.sub(r"[\W_]+", " ", text.strip().lower()).strip()


def _longest_common_block(first: str, second: str) -> tuple[int, int, int]:
    """Return (pos_first, pos_second, length) of the first longest common substring."""
    best_first = best_second = best_len = 0
    for i in range(len(first)):
        for j in range(len(second)):
            k = 0
            while i + k < len(first) and j + k < len(second) and first[i + k] == second[j + k]:
                k += 1
            if k > best_len:
                best_first, best_second, best_len = i, j, k
    return best_first, best_second, best_len


def similar_chars(first: str, second: str) -> int:
    """Count matching characters, order-sensitive.

    Takes the longest common substring, then recurses into the parts to the
    left and to the right of it on both sides.
    """
    if not first or not second:
        return 0
    pos_first, pos_second, length = _longest_common_block(first, second)
    if length == 0:
        return 0
    return (
        length
        + similar_chars(first[:pos_first], second[:pos_second])
        + similar_chars(first[pos_first + length :], second[pos_second + length :])
    )


def similarity_percent(first: str, second: str) -> float:
    """Percentage of matching characters relative to the combined length."""
    total = len(first) + len(second)
    if total == 0:
        return 0.0
    return similar_chars(first, second) * 2 * 100.0 / total
