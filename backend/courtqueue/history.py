"""Bounded log of finished games, newest first."""
from .constants import HISTORY_LIMIT
from .models import GameHistoryEntry, Session


def append_entry(session: Session, entry: GameHistoryEntry, limit: int = HISTORY_LIMIT) -> None:
    session.history.insert(0, entry)
    del session.history[limit:]


def clear(session: Session) -> int:
    removed = len(session.history)
    session.history.clear()
    return removed
