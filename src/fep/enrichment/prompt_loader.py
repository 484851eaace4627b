"""Prompt loading utilities."""

from __future__ import annotations

import re
from importlib import resources


_VERSION_RE = re.compile(r"^v\d{3}$")


def load_prompt(prompt_version: str) -> str:
    """Load a bundled prompt template like 'v001' as UTF-8 text."""
    if not _VERSION_RE.match(prompt_version):
        raise ValueError(f"prompt_version must look like 'v001', got {prompt_version!r}")

    path = resources.files("fep.enrichment").joinpath("prompts").joinpath(f"{prompt_version}.md")
    if not path.is_file():
        raise FileNotFoundError(f"Prompt file not found: {prompt_version}.md")
    return path.read_text(encoding="utf-8").strip()
