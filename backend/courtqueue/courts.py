"""
Courts: allocation of an idle court to a ready team, and court add/remove.
Occupancy is never stored; a court is busy while some player points at it.
"""
import logging

from .constants import MAX_COURT_COUNT, TEAM_SIZE, PlayerStatus
from .errors import (
    COURT_OCCUPIED,
    INVALID_COURT_COUNT,
    INVALID_TEAM,
    NO_COURT_AVAILABLE,
    UNKNOWN_COURT,
    CommandRejected,
)
from .models import Court, Player, Session

logger = logging.getLogger(__name__)


def idle_courts(session: Session) -> list[Court]:
    busy = {p.court_number for p in session.players if p.court_number is not None}
    return sorted((c for c in session.courts if c.id not in busy), key=lambda c: c.id)


def find_idle_court(session: Session) -> Court | None:
    """Idle court with the lowest id."""
    courts = idle_courts(session)
    return courts[0] if courts else None


def occupied_count(session: Session) -> int:
    return len(session.courts) - len(idle_courts(session))


def _ready_team(session: Session, player_ids: list[str], team_size: int) -> list[Player]:
    if len(player_ids) != team_size or len(set(player_ids)) != team_size:
        raise CommandRejected(INVALID_TEAM, f"a team needs {team_size} distinct players")
    team = []
    for pid in player_ids:
        p = session.get_player(pid)
        if p is None or p.status != PlayerStatus.QUEUED:
            raise CommandRejected(INVALID_TEAM, f"player {pid} is not queued")
        team.append(p)
    return team


def start_team(session: Session, player_ids: list[str], now: int, team_size: int = TEAM_SIZE) -> Court:
    """
    Put a full queued team on the lowest idle court.
    Everything is validated before the first write, so the team moves as a whole or not at all.
    """
    team = _ready_team(session, player_ids, team_size)
    court = find_idle_court(session)
    if court is None:
        raise CommandRejected(NO_COURT_AVAILABLE, "all courts are occupied")
    for p in team:
        p.status = PlayerStatus.PLAYING
        p.started_at = now
        p.court_number = court.id
        p.last_partner_ids = [pid for pid in player_ids if pid != p.id]
    logger.info("%s: %s", court.label, ", ".join(p.name for p in team))
    return court


def add_court(session: Session, name: str | None = None) -> Court:
    court = Court(id=session.next_court_id, name=(name or "").strip() or None)
    session.next_court_id += 1
    session.courts.append(court)
    logger.info("added %s", court.label)
    return court


def remove_court(session: Session, court_id: int) -> Court:
    court = session.get_court(court_id)
    if court is None:
        raise CommandRejected(UNKNOWN_COURT, f"no court {court_id}")
    if session.is_court_occupied(court_id):
        raise CommandRejected(COURT_OCCUPIED, f"{court.label} has a game in progress")
    session.courts.remove(court)
    logger.info("removed %s", court.label)
    return court


def set_court_count(session: Session, count: int) -> list[Court]:
    """
    Grow with new ids or drop the highest-id courts until count remain.
    Refused outright if a court that would go has a game on it.
    """
    if not isinstance(count, int) or isinstance(count, bool) or not 1 <= count <= MAX_COURT_COUNT:
        raise CommandRejected(INVALID_COURT_COUNT, f"court count must be 1..{MAX_COURT_COUNT}")
    by_id = sorted(session.courts, key=lambda c: c.id)
    doomed = by_id[count:]
    for court in doomed:
        if session.is_court_occupied(court.id):
            raise CommandRejected(COURT_OCCUPIED, f"{court.label} has a game in progress")
    for court in doomed:
        session.courts.remove(court)
    while len(session.courts) < count:
        add_court(session)
    logger.info("court count set to %d", count)
    return session.courts


def default_courts(count: int) -> list[Court]:
    return [Court(id=i) for i in range(1, count + 1)]
