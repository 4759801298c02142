"""
Tests for court allocation and court management.
"""
import pytest

from courtqueue import courts
from courtqueue.constants import PlayerStatus
from courtqueue.errors import (
    COURT_OCCUPIED,
    INVALID_COURT_COUNT,
    INVALID_TEAM,
    NO_COURT_AVAILABLE,
    UNKNOWN_COURT,
    CommandRejected,
)
from courtqueue.models import Court


def snapshot(session):
    return [p.to_dict() for p in session.players]


def test_start_team_puts_four_on_court_one(session, add_players, clock):
    team = add_players(*"ABCD")
    ids = [p.id for p in team]

    court = courts.start_team(session, ids, clock())

    assert court.id == 1
    for p in team:
        assert p.status == PlayerStatus.PLAYING
        assert p.started_at == clock()
        assert p.court_number == 1
        assert sorted(p.last_partner_ids) == sorted(i for i in ids if i != p.id)
        assert len(p.last_partner_ids) == 3


def test_start_team_uses_lowest_idle_court(session, add_players, clock):
    courts.add_court(session)
    courts.add_court(session)
    first = add_players(*"ABCD")
    second = add_players(*"EFGH")
    third = add_players(*"IJKL")

    assert courts.start_team(session, [p.id for p in first], clock()).id == 1
    assert courts.start_team(session, [p.id for p in second], clock()).id == 2
    # Free court 1 again; the next team lands there, not on 3.
    for p in first:
        p.status, p.started_at, p.court_number = PlayerStatus.QUEUED, None, None
    assert courts.start_team(session, [p.id for p in third], clock()).id == 1


def test_start_team_when_full_changes_nothing(session, add_players, clock):
    courts.start_team(session, [p.id for p in add_players(*"ABCD")], clock())
    waiting = add_players(*"EFGH")
    before = snapshot(session)

    with pytest.raises(CommandRejected) as exc:
        courts.start_team(session, [p.id for p in waiting], clock())

    assert exc.value.reason == NO_COURT_AVAILABLE
    assert snapshot(session) == before


@pytest.mark.parametrize("count", [3, 5])
def test_start_team_needs_exactly_four(session, add_players, clock, count):
    players = add_players(*"ABCDE")[:count]
    before = snapshot(session)
    with pytest.raises(CommandRejected) as exc:
        courts.start_team(session, [p.id for p in players], clock())
    assert exc.value.reason == INVALID_TEAM
    assert snapshot(session) == before


def test_start_team_rejects_standby_member(session, add_players, clock):
    players = add_players("A", "B", "C")
    players += add_players("S", status="standby")
    before = snapshot(session)
    with pytest.raises(CommandRejected):
        courts.start_team(session, [p.id for p in players], clock())
    assert snapshot(session) == before


def test_start_team_rejects_duplicate_ids(session, add_players, clock):
    a, b, c = add_players("A", "B", "C")
    with pytest.raises(CommandRejected):
        courts.start_team(session, [a.id, b.id, c.id, a.id], clock())


def test_add_court_ids_keep_growing(session):
    assert courts.add_court(session).id == 2
    courts.remove_court(session, 2)
    assert courts.add_court(session, "  Center  ").id == 3
    assert session.get_court(3).label == "Center"
    assert session.get_court(1).label == "Court 1"


def test_remove_occupied_court_rejected(session, add_players, clock):
    courts.start_team(session, [p.id for p in add_players(*"ABCD")], clock())
    with pytest.raises(CommandRejected) as exc:
        courts.remove_court(session, 1)
    assert exc.value.reason == COURT_OCCUPIED
    assert [c.id for c in session.courts] == [1]


def test_remove_unknown_court(session):
    with pytest.raises(CommandRejected) as exc:
        courts.remove_court(session, 42)
    assert exc.value.reason == UNKNOWN_COURT


def test_set_court_count_grows_and_shrinks(session):
    courts.set_court_count(session, 4)
    assert [c.id for c in session.courts] == [1, 2, 3, 4]
    courts.set_court_count(session, 2)
    assert [c.id for c in session.courts] == [1, 2]
    courts.set_court_count(session, 3)
    assert [c.id for c in session.courts] == [1, 2, 5]


def test_set_court_count_refuses_to_drop_busy_court(session, add_players, clock):
    courts.set_court_count(session, 3)
    session.courts.insert(0, session.courts.pop())  # order in the list does not matter
    team = add_players(*"ABCD")
    for p in team:
        p.status, p.started_at, p.court_number = PlayerStatus.PLAYING, clock(), 3
    with pytest.raises(CommandRejected) as exc:
        courts.set_court_count(session, 1)
    assert exc.value.reason == COURT_OCCUPIED
    assert sorted(c.id for c in session.courts) == [1, 2, 3]


@pytest.mark.parametrize("count", [0, -1, 11, "3", True])
def test_set_court_count_bounds(session, count):
    with pytest.raises(CommandRejected) as exc:
        courts.set_court_count(session, count)
    assert exc.value.reason == INVALID_COURT_COUNT


def test_occupancy_is_derived(session, add_players, clock):
    session.courts.append(Court(id=2))
    assert courts.occupied_count(session) == 0
    courts.start_team(session, [p.id for p in add_players(*"ABCD")], clock())
    assert courts.occupied_count(session) == 1
    assert [c.id for c in courts.idle_courts(session)] == [2]
