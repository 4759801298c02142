"""
Command surface of the court queue.
One CourtQueue owns the session; a lock lets exactly one command run at a time,
so every command is a single atomic transition no matter which handler calls it.
"""
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable

from . import courts, history, lifecycle, registry
from .clock import new_id, now_ms
from .constants import DEFAULT_COURT_COUNT
from .errors import INVALID_ARGUMENTS, NOT_CONFIRMED, UNKNOWN_COMMAND, CommandRejected
from .grouping import group_ids
from .models import Session
from .storage import FileStore, MemoryStore, SnapshotWriter, load_session
from .views import state_payload

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]

CLEAR_HISTORY_PROMPT = "Clear all game history?"
RESET_ALL_PROMPT = "Remove all players, game history and court setup?"


def _deny(message: str) -> bool:
    return False


@dataclass
class CommandResult:
    ok: bool
    session: Session
    reason: str | None = None
    detail: str = ""
    value: Any = None


class CourtQueue:
    def __init__(
        self,
        session: Session | None = None,
        writer: SnapshotWriter | None = None,
        clock: Callable[[], int] = now_ms,
        id_gen: Callable[[], str] = new_id,
        confirm: Confirm = _deny,
        default_courts: int = DEFAULT_COURT_COUNT,
    ):
        self.default_courts = default_courts
        self.session = session if session is not None else self._fresh_session()
        self.writer = writer
        self.clock = clock
        self.id_gen = id_gen
        self.confirm = confirm
        self._lock = threading.RLock()

    def _fresh_session(self) -> Session:
        return Session(
            courts=courts.default_courts(self.default_courts),
            next_court_id=self.default_courts + 1,
        )

    def _run(self, name: str, action: Callable[[], Any]) -> CommandResult:
        with self._lock:
            try:
                value = action()
            except CommandRejected as e:
                logger.info("%s rejected: %s %s", name, e.reason, e.detail)
                return CommandResult(False, self.session, reason=e.reason, detail=e.detail)
            if self.writer is not None:
                self.writer.save(self.session)
            return CommandResult(True, self.session, value=value)

    def _confirmed(self, message: str, confirm: Confirm | None) -> None:
        if not (confirm or self.confirm)(message):
            raise CommandRejected(NOT_CONFIRMED, message)

    # --- players ---

    def register_player(self, name: str, level: str = "Intermediate", status: str = "queued") -> CommandResult:
        return self._run("register_player", lambda: registry.register_player(
            self.session, name, level, status, self.clock(), self.id_gen))

    def bulk_register_players(self, players: list[dict]) -> CommandResult:
        return self._run("bulk_register_players", lambda: registry.bulk_register_players(
            self.session, players, self.clock(), self.id_gen))

    def remove_player(self, player_id: str) -> CommandResult:
        return self._run("remove_player", lambda: registry.remove_player(self.session, player_id))

    def toggle_status(self, player_id: str, new_status: str) -> CommandResult:
        return self._run("toggle_status", lambda: registry.toggle_status(
            self.session, player_id, new_status, self.clock()))

    def load_demo_players(self) -> CommandResult:
        # Demo players replace everyone, so the lowest court is always free for the demo game.
        def action():
            first = min((c.id for c in self.session.courts), default=None)
            return registry.load_demo_players(self.session, first, self.clock(), self.id_gen)
        return self._run("load_demo_players", action)

    # --- games ---

    def start_team(self, player_ids: list[str]) -> CommandResult:
        return self._run("start_team", lambda: courts.start_team(self.session, list(player_ids), self.clock()))

    def finish_team(self, player_ids: list[str]) -> CommandResult:
        return self._run("finish_team", lambda: lifecycle.finish_team(
            self.session, list(player_ids), self.clock(), self.id_gen))

    # --- courts ---

    def add_court(self, name: str | None = None) -> CommandResult:
        return self._run("add_court", lambda: courts.add_court(self.session, name))

    def remove_court(self, court_id: int) -> CommandResult:
        return self._run("remove_court", lambda: courts.remove_court(self.session, court_id))

    def set_court_count(self, count: int) -> CommandResult:
        return self._run("set_court_count", lambda: courts.set_court_count(self.session, count))

    # --- destructive ---

    def clear_history(self, confirm: Confirm | None = None) -> CommandResult:
        def action():
            self._confirmed(CLEAR_HISTORY_PROMPT, confirm)
            return history.clear(self.session)
        return self._run("clear_history", action)

    def reset_all(self, confirm: Confirm | None = None) -> CommandResult:
        def action():
            self._confirmed(RESET_ALL_PROMPT, confirm)
            self.session = self._fresh_session()
            return self.session
        return self._run("reset_all", action)

    # --- reads ---

    def teams(self) -> list[list[str]]:
        with self._lock:
            return group_ids(self.session.players)

    def state(self, now: int | None = None) -> dict:
        with self._lock:
            return state_payload(self.session, self.clock() if now is None else now)

    def dispatch(self, command: str, args: dict, confirm: Confirm | None = None) -> CommandResult:
        """Run a command by name with keyword arguments taken from a client message."""
        handler = COMMANDS.get(command)
        if handler is None:
            return CommandResult(False, self.session, reason=UNKNOWN_COMMAND, detail=command)
        try:
            return handler(self, args, confirm)
        except (KeyError, TypeError, ValueError) as e:
            logger.info("%s: bad arguments %r: %s", command, args, e)
            return CommandResult(False, self.session, reason=INVALID_ARGUMENTS, detail=str(e))


COMMANDS: dict[str, Callable[[CourtQueue, dict, Confirm | None], CommandResult]] = {
    "register_player": lambda q, a, c: q.register_player(
        a["name"], a.get("level", "Intermediate"), a.get("status", "queued")),
    "bulk_register_players": lambda q, a, c: q.bulk_register_players(list(a["players"])),
    "remove_player": lambda q, a, c: q.remove_player(a["player_id"]),
    "toggle_status": lambda q, a, c: q.toggle_status(a["player_id"], a["status"]),
    "start_team": lambda q, a, c: q.start_team(a["player_ids"]),
    "finish_team": lambda q, a, c: q.finish_team(a["player_ids"]),
    "add_court": lambda q, a, c: q.add_court(a.get("name")),
    "remove_court": lambda q, a, c: q.remove_court(int(a["court_id"])),
    "set_court_count": lambda q, a, c: q.set_court_count(a["count"]),
    "clear_history": lambda q, a, c: q.clear_history(c),
    "reset_all": lambda q, a, c: q.reset_all(c),
    "load_demo_players": lambda q, a, c: q.load_demo_players(),
}


def build_queue(config) -> CourtQueue:
    """Queue backed by the configured store, restored from its last snapshot."""
    store = FileStore(config.storage_dir) if config.storage_dir else MemoryStore()
    session = load_session(store, config.storage_prefix, config.default_courts)
    writer = SnapshotWriter(store, config.storage_prefix)
    return CourtQueue(session=session, writer=writer, default_courts=config.default_courts)
