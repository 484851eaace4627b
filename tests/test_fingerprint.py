import hashlib
from datetime import datetime, timezone

from fep.ingestion.fingerprint import extract_url_id, fingerprint

from factories import at


def test_fingerprint_is_deterministic():
    start = at(2026, 3, 7, 10, 0)
    assert fingerprint("Puppet Show", start, "Theatre") == fingerprint("Puppet Show", start, "Theatre")


def test_fingerprint_ignores_case_and_surrounding_whitespace():
    start = at(2026, 3, 7, 10, 0)
    assert fingerprint("Puppet Show", start, "Theatre") == fingerprint(
        "PUPPET SHOW", start, " Theatre "
    )


def test_fingerprint_matches_sha1_of_normalized_parts():
    start = at(2026, 3, 7, 10, 0)
    expected = hashlib.sha1("puppet show|2026-03-07 10:00|theatre".encode("utf-8")).hexdigest()
    assert fingerprint(" Puppet Show ", start, "Theatre") == expected


def test_fingerprint_uses_catalog_timezone_and_minute_precision():
    prague = at(2026, 3, 7, 10, 0)
    utc = datetime(2026, 3, 7, 9, 0, 42, tzinfo=timezone.utc)
    assert fingerprint("Puppet Show", prague, None) == fingerprint("Puppet Show", utc, None)


def test_fingerprint_treats_missing_venue_as_empty():
    start = at(2026, 3, 7)
    assert fingerprint("Puppet Show", start, None) == fingerprint("Puppet Show", start, "  ")
    assert fingerprint("Puppet Show", start, None) != fingerprint("Puppet Show", start, "Theatre")


def test_extract_url_id():
    assert extract_url_id("https://www.visitostrava.eu/cz/akce/rodina/4521-pohadka.html") == "4521"
    assert extract_url_id("https://www.ostravainfo.cz/cz/akce/rodina/4521-pohadka/") == "4521"
    assert extract_url_id("https://allevents.in/ostrava/4521") is None
    assert extract_url_id(None) is None
