"""
Game lifecycle: finishing a game on a court and sending its players back to the queue.
Starting a game lives in courts.start_team.
"""
import logging
import math
from typing import Callable

from . import history
from .constants import PlayerStatus
from .errors import INVALID_TEAM, CommandRejected
from .models import GameHistoryEntry, Player, PlayerSnapshot, Session

logger = logging.getLogger(__name__)


def elapsed_minutes(started_at: int, now: int) -> int:
    """Whole minutes between two ms timestamps; exact halves round up."""
    return math.floor((now - started_at) / 60_000 + 0.5)


def _game_on_court(session: Session, player_ids: list[str]) -> list[Player]:
    players = [session.get_player(pid) for pid in dict.fromkeys(player_ids)]
    if not players or any(p is None or not p.is_playing for p in players):
        raise CommandRejected(INVALID_TEAM, "every player must be on a court")
    courts = {p.court_number for p in players}
    if len(courts) != 1:
        raise CommandRejected(INVALID_TEAM, "players are on different courts")
    on_court = session.players_on_court(courts.pop())
    if {p.id for p in on_court} != {p.id for p in players}:
        raise CommandRejected(INVALID_TEAM, "finish the whole game, not part of it")
    return players


def finish_team(
    session: Session,
    player_ids: list[str],
    now: int,
    new_id: Callable[[], str],
) -> GameHistoryEntry | None:
    """
    End the game the given players are in. Returns the history entry, or None
    when the court no longer exists (the players are requeued either way).
    """
    players = _game_on_court(session, player_ids)
    court_id = players[0].court_number
    entry = None
    if session.get_court(court_id) is not None:
        entry = GameHistoryEntry(
            id=new_id(),
            timestamp=now,
            duration=elapsed_minutes(players[0].started_at, now),
            court=court_id,
            players=tuple(PlayerSnapshot(name=p.name, level=p.level) for p in players),
        )
        history.append_entry(session, entry)
        logger.info("court %s finished after %d min", court_id, entry.duration)
    else:
        logger.warning("court %s is gone, game not recorded", court_id)
    for p in players:
        p.status = PlayerStatus.QUEUED
        p.started_at = None
        p.court_number = None
        p.joined_at = now
    return entry
