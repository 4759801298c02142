"""
WebSocket manager: open connections and state broadcasts.
"""
import asyncio
import logging
import uuid
from typing import Any

from fastapi import WebSocket

from .clock import DisplayClock
from .service import CourtQueue

logger = logging.getLogger(__name__)


class Connection:
    def __init__(self, ws: WebSocket, conn_id: str):
        self.ws = ws
        self.conn_id = conn_id


class WSManager:
    def __init__(self):
        self._by_id: dict[str, Connection] = {}

    @property
    def count(self) -> int:
        return len(self._by_id)

    def connect(self, ws: WebSocket) -> str:
        conn_id = str(uuid.uuid4())
        self._by_id[conn_id] = Connection(ws, conn_id)
        return conn_id

    def disconnect(self, conn_id: str) -> None:
        self._by_id.pop(conn_id, None)

    async def send(self, conn_id: str, payload: dict[str, Any]) -> bool:
        conn = self._by_id.get(conn_id)
        if not conn:
            return False
        try:
            await conn.ws.send_json(payload)
            return True
        except Exception as e:
            logger.warning("send %s: %s", conn_id, e)
            return False

    async def broadcast_state(self, queue: CourtQueue, clock: DisplayClock) -> None:
        await self._broadcast(queue.state(clock.refresh()))

    async def _broadcast(self, payload: dict[str, Any]) -> None:
        dead = []
        for conn in list(self._by_id.values()):
            try:
                await conn.ws.send_json(payload)
            except Exception:
                dead.append(conn)
        for conn in dead:
            self.disconnect(conn.conn_id)


async def clock_refresh_loop(queue: CourtQueue, clock: DisplayClock, interval: float) -> None:
    """Tick the display clock so elapsed minutes on court keep moving. Never touches the queue."""
    while True:
        await asyncio.sleep(interval)
        if manager.count:
            await manager.broadcast_state(queue, clock)
        else:
            clock.refresh()


manager = WSManager()
