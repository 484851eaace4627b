from fep.catalog.lifecycle import deactivate_past

from factories import at, make_event


def _seed(repo):
    repo.put(make_event(1, start_at=at(2026, 3, 6, 10), end_at=at(2026, 3, 6, 12)))
    repo.put(make_event(2, start_at=at(2026, 3, 7, 8)))
    repo.put(make_event(3, start_at=at(2026, 3, 6, 10), end_at=at(2026, 3, 8, 18)))
    repo.put(make_event(4, start_at=at(2026, 3, 7, 11)))
    repo.put(make_event(5, start_at=at(2026, 3, 1), is_active=False))


def test_ended_events_are_deactivated(repo):
    _seed(repo)

    assert deactivate_past(repo, now=at(2026, 3, 7, 10)) == 2

    active = {e.id: e.is_active for e in repo.all()}
    assert active == {1: False, 2: False, 3: True, 4: True, 5: False}


def test_grace_hours_move_the_cutoff_back(repo):
    _seed(repo)

    assert deactivate_past(repo, now=at(2026, 3, 7, 10), grace_hours=3) == 1

    assert repo.get(1).is_active is False
    assert repo.get(2).is_active is True


def test_negative_grace_is_treated_as_zero(repo):
    _seed(repo)
    assert deactivate_past(repo, now=at(2026, 3, 7, 10), grace_hours=-24) == 2


def test_second_run_changes_nothing(repo):
    _seed(repo)
    deactivate_past(repo, now=at(2026, 3, 7, 10))
    assert deactivate_past(repo, now=at(2026, 3, 7, 10)) == 0
