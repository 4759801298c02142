"""
Grouping of queued players into candidate teams.
Nothing here is stored: teams are recomputed from the current queue on every call.
"""
import math

from .constants import AVG_GAME_MINS, TEAM_SIZE, PlayerStatus
from .models import Player


def waiting_pool(players: list[Player]) -> list[Player]:
    """Queued players, longest-waiting first (sorted() is stable for join-time ties)."""
    return sorted(
        (p for p in players if p.status == PlayerStatus.QUEUED),
        key=lambda p: p.joined_at,
    )


def group_waitlist(players: list[Player], team_size: int = TEAM_SIZE) -> list[list[Player]]:
    """
    Split the queue into teams of team_size in FIFO order.
    Each team is anchored on the earliest unassigned player; the other slots go to
    the earliest players who were not the anchor's partners last game, falling back
    to plain FIFO. Only the last team may be short.
    """
    pool = waiting_pool(players)
    assigned: set[str] = set()
    teams: list[list[Player]] = []
    for anchor in pool:
        if anchor.id in assigned:
            continue
        team = [anchor]
        assigned.add(anchor.id)
        recent = set(anchor.last_partner_ids)
        for _ in range(team_size - 1):
            others = [p for p in pool if p.id not in assigned]
            if not others:
                break
            candidate = next((p for p in others if p.id not in recent), others[0])
            team.append(candidate)
            assigned.add(candidate.id)
        teams.append(team)
    return teams


def group_ids(players: list[Player], team_size: int = TEAM_SIZE) -> list[list[str]]:
    return [[p.id for p in team] for team in group_waitlist(players, team_size)]


def estimate_wait_minutes(team_index: int, court_count: int) -> int | None:
    """Rough wait for the team at team_index: one average game per full round of courts."""
    if court_count <= 0:
        return None
    return math.ceil((team_index + 1) / court_count) * AVG_GAME_MINS
