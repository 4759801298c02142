"""
Snapshot persistence: three JSON blobs (queue, history, courts) in a key-value store.
Writes are advisory. A failed write is logged and the in-memory session stays authoritative.
"""
import json
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Protocol

from .constants import HISTORY_LIMIT
from .courts import default_courts
from .models import Court, GameHistoryEntry, Player, Session

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, blob: str) -> None: ...


class MemoryStore:
    def __init__(self, data: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(data or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, blob: str) -> None:
        self.data[key] = blob


class FileStore:
    """One file per key under a directory."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, blob: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        tmp = self._path(key).with_suffix(".tmp")
        tmp.write_text(blob, encoding="utf-8")
        tmp.replace(self._path(key))


def _keys(prefix: str) -> tuple[str, str, str]:
    return f"{prefix}_queue", f"{prefix}_history", f"{prefix}_courts"


def _read(store: KeyValueStore, key: str):
    try:
        blob = store.get(key)
    except OSError as e:
        logger.warning("storage: cannot read %s: %s", key, e)
        return None
    if blob is None:
        return None
    try:
        return json.loads(blob)
    except (json.JSONDecodeError, TypeError) as e:
        logger.warning("storage: %s is not valid JSON, ignoring: %s", key, e)
        return None


def _load_players(raw) -> list[Player]:
    if raw is None:
        return []
    try:
        return [Player.from_dict(item) for item in raw]
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("storage: corrupt queue, starting empty: %s", e)
        return []


def _load_history(raw) -> list[GameHistoryEntry]:
    if raw is None:
        return []
    try:
        return [GameHistoryEntry.from_dict(item) for item in raw][:HISTORY_LIMIT]
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("storage: corrupt history, starting empty: %s", e)
        return []


def _load_courts(raw, default_count: int) -> list[Court]:
    # Simple mode stores a bare count, extended mode a list of {id, name}.
    try:
        if isinstance(raw, int) and not isinstance(raw, bool) and raw > 0:
            return default_courts(raw)
        if isinstance(raw, list) and raw:
            courts = [Court(id=int(c["id"]), name=c.get("name")) for c in raw]
            if len({c.id for c in courts}) == len(courts):
                return courts
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        logger.warning("storage: corrupt courts: %s", e)
    if raw is not None:
        logger.warning("storage: unusable courts value, using %d default courts", default_count)
    return default_courts(default_count)


def load_session(store: KeyValueStore, prefix: str, default_courts_count: int) -> Session:
    queue_key, history_key, courts_key = _keys(prefix)
    courts = _load_courts(_read(store, courts_key), default_courts_count)
    players = _load_players(_read(store, queue_key))
    games = _load_history(_read(store, history_key))
    # Ids still named by history or by a game on court are never handed out again.
    used = [c.id for c in courts] + [h.court for h in games]
    used += [p.court_number for p in players if p.court_number is not None]
    session = Session(
        players=players,
        courts=courts,
        history=games,
        next_court_id=max(used, default=0) + 1,
    )
    logger.info(
        "storage: loaded %d players, %d courts, %d games",
        len(session.players), len(session.courts), len(session.history),
    )
    return session


def dump_session(session: Session, prefix: str) -> dict[str, str]:
    queue_key, history_key, courts_key = _keys(prefix)
    return {
        queue_key: json.dumps([p.to_dict() for p in session.players]),
        history_key: json.dumps([h.to_dict() for h in session.history]),
        courts_key: json.dumps([c.to_dict() for c in session.courts]),
    }


class SnapshotWriter:
    """
    Writes snapshots after each committed command.
    Blobs are serialized by the caller (under the command lock) and written on a
    single worker thread, so writes keep command order and never block a command.
    """

    def __init__(self, store: KeyValueStore, prefix: str, background: bool = True):
        self.store = store
        self.prefix = prefix
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="snapshot") if background else None
        self._last: Future | None = None

    def save(self, session: Session) -> None:
        blobs = dump_session(session, self.prefix)
        if self._executor is None:
            self._write(blobs)
        else:
            try:
                self._last = self._executor.submit(self._write, blobs)
            except RuntimeError as e:
                logger.warning("storage: snapshot dropped, writer is closed: %s", e)

    def _write(self, blobs: dict[str, str]) -> None:
        for key, blob in blobs.items():
            try:
                self.store.set(key, blob)
            except Exception as e:
                logger.warning("storage: write of %s failed: %s", key, e)

    def flush(self) -> None:
        if self._last is not None:
            self._last.result()

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
