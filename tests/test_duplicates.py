import logging

from fep.ingestion.duplicates import MAX_DUPLICATE_CHAIN_DEPTH, DuplicateResolver
from fep.ingestion.fingerprint import fingerprint

from factories import at, make_event, make_record


def _with_fingerprint(record):
    return record.model_copy(
        update={"fingerprint": fingerprint(record.title, record.start_at, record.venue)}
    )


def test_fingerprint_tier_returns_oldest_root(repo):
    record = _with_fingerprint(make_record())
    repo.put(make_event(5, fingerprint=record.fingerprint))
    repo.put(make_event(3, fingerprint=record.fingerprint))
    repo.put(make_event(1, fingerprint=record.fingerprint, duplicate_of_event_id=3))

    match = DuplicateResolver(repo).find_duplicate_candidate(record)

    assert match is not None
    assert match.id == 3


def test_related_source_tier_matches_shared_upstream_id(repo):
    repo.put(
        make_event(
            7,
            source="ostravainfo",
            source_event_id="1001",
            source_url="https://www.ostravainfo.cz/events/1001",
            title="Něco úplně jiného",
        )
    )
    record = _with_fingerprint(make_record(source="visitostrava", source_event_id="1001"))

    match = DuplicateResolver(repo).find_duplicate_candidate(record)

    assert match is not None
    assert match.id == 7


def test_url_id_tier_matches_other_source_only(repo):
    repo.put(
        make_event(
            4,
            source="visitostrava",
            source_event_id="vo-4521",
            source_url="https://www.visitostrava.eu/cz/akce/rodina/4521-jine.html",
            title="Jiný název",
        )
    )
    resolver = DuplicateResolver(repo)

    same_source = _with_fingerprint(
        make_record(
            source="visitostrava",
            source_event_id="other",
            source_url="https://www.visitostrava.eu/cz/akce/rodina/4521-druhy.html",
            title="Úplně odlišná akce",
            start_at=at(2026, 4, 1),
        )
    )
    assert resolver.find_duplicate_candidate(same_source) is None

    other_source = _with_fingerprint(
        make_record(
            source="kudyznudy",
            source_event_id="kzn-1",
            source_url="https://www.ostravainfo.cz/cz/akce/rodina/4521-druhy.html",
            title="Úplně odlišná akce",
            start_at=at(2026, 4, 1),
        )
    )
    match = resolver.find_duplicate_candidate(other_source)
    assert match is not None
    assert match.id == 4


def test_fuzzy_tier_matches_near_identical_title_at_same_time_and_place(repo):
    repo.put(
        make_event(
            2,
            title="Puppet Show for Kids in Ostrava",
            location_name="Divadlo loutek Ostrava",
        )
    )
    record = _with_fingerprint(
        make_record(
            source="kulturajih",
            source_event_id="kj-9",
            source_url="https://kulturajih.cz/akce/9",
            title="Puppet Show for Kids in Ostrava!",
            venue="Divadlo loutek, Ostrava",
            location_name=None,
        )
    )

    match = DuplicateResolver(repo).find_duplicate_candidate(record)

    assert match is not None
    assert match.id == 2


def test_fuzzy_tier_rejects_different_title_and_location(repo):
    repo.put(
        make_event(
            2,
            title="Puppet Show for Kids in Ostrava",
            location_name="Divadlo loutek Ostrava",
        )
    )
    record = _with_fingerprint(
        make_record(
            source="kulturajih",
            source_event_id="kj-10",
            source_url="https://kulturajih.cz/akce/10",
            title="Completely Different Event Title",
            venue="Dolní oblast Vítkovice",
            location_name="Dolní oblast Vítkovice",
        )
    )

    assert DuplicateResolver(repo).find_duplicate_candidate(record) is None


def test_fuzzy_tier_requires_same_start(repo):
    repo.put(make_event(2, title="Puppet Show for Kids in Ostrava", start_at=at(2026, 3, 7, 11)))
    record = _with_fingerprint(
        make_record(
            source="kulturajih",
            source_event_id="kj-11",
            source_url="https://kulturajih.cz/akce/11",
            start_at=at(2026, 3, 7, 10),
        )
    )

    assert DuplicateResolver(repo).find_duplicate_candidate(record) is None


def test_fuzzy_tier_uses_stricter_threshold_without_location(repo):
    repo.put(make_event(2, title="Puppet Show for Kids"))
    resolver = DuplicateResolver(repo)

    close = _with_fingerprint(
        make_record(
            source="kulturajih",
            source_event_id="kj-12",
            source_url="https://kulturajih.cz/akce/12",
            title="Puppet Show for Kid",
            venue=None,
            location_name=None,
        )
    )
    match = resolver.find_duplicate_candidate(close)
    assert match is not None
    assert match.id == 2

    looser = _with_fingerprint(
        make_record(
            source="kulturajih",
            source_event_id="kj-13",
            source_url="https://kulturajih.cz/akce/13",
            title="Puppet Theatre for Children",
            venue=None,
            location_name=None,
        )
    )
    assert resolver.find_duplicate_candidate(looser) is None


def test_fuzzy_tier_never_matches_rejected_events(repo):
    repo.put(
        make_event(
            2,
            title="Puppet Show for Kids in Ostrava",
            location_name="Divadlo loutek Ostrava",
            status="rejected",
        )
    )
    record = _with_fingerprint(
        make_record(
            source="kulturajih",
            source_event_id="kj-14",
            source_url="https://kulturajih.cz/akce/14",
        )
    )

    assert DuplicateResolver(repo).find_duplicate_candidate(record) is None


def test_fuzzy_tier_keeps_highest_title_score(repo):
    repo.put(make_event(2, title="Puppet Show for Kids in Ostrava Centre"))
    repo.put(make_event(3, title="Puppet Show for Kids in Ostrava"))
    record = _with_fingerprint(
        make_record(
            source="kulturajih",
            source_event_id="kj-15",
            source_url="https://kulturajih.cz/akce/15",
            venue=None,
            location_name=None,
        )
    )

    match = DuplicateResolver(repo).find_duplicate_candidate(record)

    assert match is not None
    assert match.id == 3


def test_resolve_root_walks_chain(repo):
    a = repo.put(make_event(1))
    b = repo.put(make_event(2, duplicate_of_event_id=a.id))
    c = repo.put(make_event(3, duplicate_of_event_id=b.id))

    assert DuplicateResolver(repo).resolve_root_id(c) == a.id


def test_resolve_root_of_root_is_itself(repo):
    a = repo.put(make_event(1))
    assert DuplicateResolver(repo).resolve_root_id(a) == a.id


def test_resolve_root_terminates_on_cycle(repo, caplog):
    a = repo.put(make_event(1, duplicate_of_event_id=2))
    repo.put(make_event(2, duplicate_of_event_id=1))

    with caplog.at_level(logging.WARNING, logger="fep.ingestion.duplicates"):
        root_id = DuplicateResolver(repo).resolve_root_id(a)

    assert root_id in {1, 2}
    assert "duplicates.chain_too_deep" in caplog.text


def test_resolve_root_stops_at_depth_limit(repo):
    depth = MAX_DUPLICATE_CHAIN_DEPTH + 3
    repo.put(make_event(1))
    for event_id in range(2, depth + 2):
        repo.put(make_event(event_id, duplicate_of_event_id=event_id - 1))
    leaf = repo.get(depth + 1)

    root_id = DuplicateResolver(repo).resolve_root_id(leaf)

    assert root_id != 1
    assert root_id == leaf.id - MAX_DUPLICATE_CHAIN_DEPTH


def test_resolve_root_with_missing_parent_returns_current_node(repo):
    orphan = repo.put(make_event(9, duplicate_of_event_id=404))
    assert DuplicateResolver(repo).resolve_root_id(orphan) == 9
