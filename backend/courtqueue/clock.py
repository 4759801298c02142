"""Time and id sources."""
import time
import uuid


def now_ms() -> int:
    return int(time.time() * 1000)


def new_id() -> str:
    return str(uuid.uuid4())


class DisplayClock:
    """
    "Current time" shown to clients for elapsed minutes on court.
    Only the periodic refresh moves it; commands read the real clock.
    """

    def __init__(self, source=now_ms):
        self._source = source
        self.current = source()

    def refresh(self) -> int:
        self.current = self._source()
        return self.current
