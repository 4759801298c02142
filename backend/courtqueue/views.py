"""Client-facing rendering of the session."""
from .constants import COURT_COUNT_OPTIONS, TEAM_SIZE, PlayerStatus
from .courts import find_idle_court, occupied_count
from .grouping import estimate_wait_minutes, group_waitlist
from .lifecycle import elapsed_minutes
from .models import Player, Session


def _player(p: Player) -> dict:
    return {"id": p.id, "name": p.name, "level": p.level.value, "status": p.status.value}


def _team_label(index: int, size: int) -> str:
    if size < TEAM_SIZE:
        return "waiting"
    return "stacked" if index == 0 else "mixed"


def state_payload(session: Session, now: int) -> dict:
    """Assemble the state message sent to every client."""
    courts = []
    for court in sorted(session.courts, key=lambda c: c.id):
        on_court = session.players_on_court(court.id)
        courts.append({
            "id": court.id,
            "name": court.label,
            "occupied": bool(on_court),
            "players": [_player(p) for p in on_court],
            "elapsed_minutes": max(0, elapsed_minutes(on_court[0].started_at, now)) if on_court else None,
        })

    court_count = len(session.courts)
    can_start = find_idle_court(session) is not None
    waitlist = []
    for index, team in enumerate(group_waitlist(session.players)):
        full = len(team) == TEAM_SIZE
        waitlist.append({
            "index": index,
            "player_ids": [p.id for p in team],
            "players": [_player(p) for p in team],
            "full": full,
            "label": _team_label(index, len(team)),
            "can_start": full and can_start,
            "estimated_wait_minutes": estimate_wait_minutes(index, court_count),
        })

    return {
        "type": "state",
        "now": now,
        "courts": courts,
        "waitlist": waitlist,
        "standby": [_player(p) for p in session.with_status(PlayerStatus.STANDBY)],
        "players": [_player(p) for p in sorted(session.players, key=lambda p: p.name.lower())],
        "counts": {
            "queued": len(session.with_status(PlayerStatus.QUEUED)),
            "standby": len(session.with_status(PlayerStatus.STANDBY)),
            "playing": len(session.with_status(PlayerStatus.PLAYING)),
            "occupied_courts": occupied_count(session),
            "courts": court_count,
            "games_played": len(session.history),
        },
        "can_start": can_start,
        "court_count_options": COURT_COUNT_OPTIONS,
        "history": [h.to_dict() for h in session.history],
    }
