"""Content identity helpers."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from fep.utils.hashing import sha1_hex
from fep.utils.time import DEFAULT_TIMEZONE, localize


# visitostrava.eu and ostravainfo.cz run on the same CMS and publish the same numeric ids.
URL_ID_PATTERN = re.compile(r"/akce/rodina/(\d+)-")


def fingerprint(
    title: str,
    start_at: datetime,
    venue: Optional[str] = None,
    tz_name: str = DEFAULT_TIMEZONE,
) -> str:
    """Return a stable SHA-1 over normalized title, start minute and venue."""
    title_normalized = title.strip().lower()
    venue_normalized = (venue or "").strip().lower()
    when = localize(start_at, tz_name).strftime("%Y-%m-%d %H:%M")
    base = f"{title_normalized}|{when}|{venue_normalized}"
    return sha1_hex(base)


def extract_url_id(url: Optional[str]) -> Optional[str]:
    """Return the upstream numeric id embedded in a source URL, if any."""
    if not url:
        return None
    match = URL_ID_PATTERN.search(url)
    return match.group(1) if match else None
