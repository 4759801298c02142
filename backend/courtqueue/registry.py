"""
Player registration, removal and queued/standby control.
"""
import logging
from typing import Callable, Iterable

from .constants import DEMO_PLAYER_NAMES, Level, PlayerStatus
from .errors import (
    EMPTY,
    INVALID_LEVEL,
    INVALID_NAME,
    INVALID_STATUS,
    PLAYER_PLAYING,
    UNKNOWN_PLAYER,
    CommandRejected,
)
from .models import Player, Session

logger = logging.getLogger(__name__)

REGISTRATION_STATUSES = (PlayerStatus.QUEUED, PlayerStatus.STANDBY)


def _parse_level(level) -> Level:
    try:
        return Level(level)
    except ValueError:
        raise CommandRejected(INVALID_LEVEL, f"unknown level {level!r}") from None


def _parse_status(status) -> PlayerStatus:
    try:
        parsed = PlayerStatus(status)
    except ValueError:
        raise CommandRejected(INVALID_STATUS, f"unknown status {status!r}") from None
    if parsed not in REGISTRATION_STATUSES:
        raise CommandRejected(INVALID_STATUS, f"cannot set status {parsed.value} by hand")
    return parsed


def _new_player(name, level, status, now: int, new_id: Callable[[], str]) -> Player:
    clean = name.strip() if isinstance(name, str) else ""
    if not clean:
        raise CommandRejected(INVALID_NAME, "name is empty")
    parsed_level = _parse_level(level)
    parsed_status = _parse_status(status)
    return Player(id=new_id(), name=clean, level=parsed_level, status=parsed_status, joined_at=now)


def register_player(
    session: Session,
    name: str,
    level: Level | str,
    status: PlayerStatus | str,
    now: int,
    new_id: Callable[[], str],
) -> Player:
    player = _new_player(name, level, status, now, new_id)
    session.players.append(player)
    logger.info("registered %s (%s) as %s", player.name, player.level.value, player.status.value)
    return player


def bulk_register_players(
    session: Session,
    entries: Iterable[dict],
    now: int,
    new_id: Callable[[], str],
) -> list[Player]:
    """
    Register every valid entry ({"name", "level", "status"}) in input order.
    All share one join time, so the stable FIFO sort keeps input order.
    Invalid entries are skipped; nothing valid at all is a rejection.
    """
    added: list[Player] = []
    for entry in entries:
        try:
            added.append(_new_player(
                entry.get("name"),
                entry.get("level", Level.INTERMEDIATE),
                entry.get("status", PlayerStatus.QUEUED),
                now,
                new_id,
            ))
        except (CommandRejected, AttributeError) as e:
            logger.info("bulk register: skipped %r: %s", entry, e)
    if not added:
        raise CommandRejected(EMPTY, "no valid players to register")
    session.players.extend(added)
    logger.info("bulk registered %d players", len(added))
    return added


def remove_player(session: Session, player_id: str) -> Player:
    player = session.get_player(player_id)
    if player is None:
        raise CommandRejected(UNKNOWN_PLAYER, f"no player {player_id}")
    if player.is_playing:
        raise CommandRejected(PLAYER_PLAYING, f"{player.name} is on court {player.court_number}")
    session.players.remove(player)
    logger.info("removed %s", player.name)
    return player


def toggle_status(session: Session, player_id: str, new_status: PlayerStatus | str, now: int) -> Player:
    """Move a player between queued and standby. Re-entering the queue goes to the back."""
    player = session.get_player(player_id)
    if player is None:
        raise CommandRejected(UNKNOWN_PLAYER, f"no player {player_id}")
    status = _parse_status(new_status)
    if player.is_playing:
        raise CommandRejected(PLAYER_PLAYING, f"{player.name} is on court {player.court_number}")
    if player.status == status:
        return player
    if status == PlayerStatus.QUEUED:
        player.joined_at = now
    player.status = status
    logger.info("%s -> %s", player.name, status.value)
    return player


def load_demo_players(session: Session, court_id: int | None, now: int, new_id: Callable[[], str]) -> list[Player]:
    """
    Replace all players with the demo roster. The first four are mid-game on court_id
    (15 minutes in) when a court is given; the rest wait one minute apart.
    """
    levels = [Level.ADVANCED, Level.INTERMEDIATE, Level.BEGINNER]
    players = []
    for index, name in enumerate(DEMO_PLAYER_NAMES):
        playing = court_id is not None and index < 4
        players.append(Player(
            id=new_id(),
            name=name,
            level=levels[index % 3],
            status=PlayerStatus.PLAYING if playing else PlayerStatus.QUEUED,
            joined_at=now - index * 60_000,
            started_at=now - 15 * 60_000 if playing else None,
            court_number=court_id if playing else None,
        ))
    on_court = [p.id for p in players if p.is_playing]
    for p in players:
        if p.is_playing:
            p.last_partner_ids = [pid for pid in on_court if pid != p.id]
    session.players = players
    logger.info("loaded %d demo players", len(players))
    return players
