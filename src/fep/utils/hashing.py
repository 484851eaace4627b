"""Digests for event identity and prompt tracking."""

from __future__ import annotations

import hashlib

PROMPT_HASH_CHARS = 12


def sha1_hex(value: str) -> str:
    """Full SHA-1 hex digest; used for event fingerprints stored in the catalog."""
    return hashlib.sha1(value.encode("utf-8")).hexdigest()


def hash_text(value: str) -> str:
    """Short SHA-256 prefix, enough to tell prompt versions apart in logs."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:PROMPT_HASH_CHARS]
