"""Utility helpers."""

from fep.utils.hashing import hash_text, sha1_hex
from fep.utils.logging import configure_logging, get_logger
from fep.utils.text import normalize_for_match, normalize_whitespace, similarity_percent
from fep.utils.time import localize, now_local

__all__ = [
    "hash_text",
    "sha1_hex",
    "configure_logging",
    "get_logger",
    "normalize_for_match",
    "normalize_whitespace",
    "similarity_percent",
    "localize",
    "now_local",
]
