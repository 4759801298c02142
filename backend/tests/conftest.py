"""
Shared fixtures: a hand-driven clock and predictable ids keep every test deterministic.
"""
import pytest

from courtqueue.courts import default_courts
from courtqueue.models import Session
from courtqueue.registry import register_player
from courtqueue.service import CourtQueue
from courtqueue.storage import MemoryStore, SnapshotWriter

T0 = 1_700_000_000_000
MINUTE = 60_000


class FakeClock:
    def __init__(self, start: int = T0):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, minutes: float = 0, ms: int = 0) -> int:
        self.now += int(minutes * MINUTE) + ms
        return self.now


class SequentialIds:
    def __init__(self, prefix: str = "id"):
        self.prefix = prefix
        self.n = 0

    def __call__(self) -> str:
        self.n += 1
        return f"{self.prefix}{self.n}"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ids():
    return SequentialIds()


@pytest.fixture
def session():
    return Session(courts=default_courts(1), next_court_id=2)


@pytest.fixture
def add_players(session, clock, ids):
    """Register players one second apart, in the order given."""
    def _add(*names, status="queued", level="Intermediate"):
        added = []
        for name in names:
            clock.advance(ms=1000)
            added.append(register_player(session, name, level, status, clock(), ids))
        return added
    return _add


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def queue(clock, store):
    writer = SnapshotWriter(store, "test", background=False)
    return CourtQueue(writer=writer, clock=clock, id_gen=SequentialIds("p"), default_courts=1)
