"""
Tests for the display clock refresh loop.
"""
import asyncio
import contextlib

from courtqueue.clock import DisplayClock
from courtqueue.storage import dump_session
from courtqueue.ws_manager import clock_refresh_loop, manager


class FakeSocket:
    def __init__(self):
        self.sent = []

    async def send_json(self, payload):
        self.sent.append(payload)


def _run_loop(queue, display, until):
    async def runner():
        task = asyncio.create_task(clock_refresh_loop(queue, display, 0.001))
        try:
            for _ in range(1000):
                if until():
                    break
                await asyncio.sleep(0.001)
        finally:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
    asyncio.run(runner())


def _start_game(queue):
    for name in "ABCD":
        assert queue.register_player(name).ok
    assert queue.start_team(queue.teams()[0]).ok


def test_refresh_moves_elapsed_minutes_without_touching_the_queue(queue, clock, store):
    _start_game(queue)
    before = dump_session(queue.session, "x")
    blobs = dict(store.data)
    display = DisplayClock(source=lambda: clock.advance(minutes=1))
    socket = FakeSocket()
    conn_id = manager.connect(socket)
    try:
        _run_loop(queue, display, lambda: len(socket.sent) >= 3)
    finally:
        manager.disconnect(conn_id)

    assert len(socket.sent) >= 3
    minutes = [state["courts"][0]["elapsed_minutes"] for state in socket.sent]
    assert all(a < b for a, b in zip(minutes, minutes[1:]))
    assert display.current == clock()
    assert dump_session(queue.session, "x") == before
    assert store.data == blobs


def test_refresh_without_clients_only_ticks_the_clock(queue, clock, store):
    _start_game(queue)
    blobs = dict(store.data)
    display = DisplayClock(source=lambda: clock.advance(minutes=1))
    start = display.current

    _run_loop(queue, display, lambda: display.current - start >= 3 * 60_000)

    assert display.current - start >= 3 * 60_000
    assert queue.state(display.current)["courts"][0]["elapsed_minutes"] >= 3
    assert store.data == blobs
