"""
WebSocket message handling: one command per message, state broadcast after each change.
"""
import json
import logging

from fastapi import WebSocket
from starlette.concurrency import run_in_threadpool
from starlette.websockets import WebSocketDisconnect

from .clock import DisplayClock
from .service import COMMANDS, CourtQueue
from .ws_manager import manager

logger = logging.getLogger(__name__)


def result_payload(command: str, result) -> dict:
    return {
        "type": "result",
        "command": command,
        "ok": result.ok,
        "reason": result.reason,
        "detail": result.detail,
    }


async def handle_ws_message(raw: str, conn_id: str, queue: CourtQueue, clock: DisplayClock) -> bool:
    """
    Handle one client message. Returns False if the connection should close.
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("WS: invalid JSON from %s: %s", conn_id, e)
        return True
    if not isinstance(data, dict):
        return True
    t = data.get("type")
    if not isinstance(t, str):
        logger.warning("WS: message without a command type from %s: %r", conn_id, t)
        return True
    logger.info("WS: msg from %s type=%s", conn_id, t)
    if t == "get_state":
        await manager.send(conn_id, queue.state(clock.current))
        return True
    if t == "close":
        return False
    if t not in COMMANDS:
        await manager.send(conn_id, {"type": "error", "reason": "unknown_command", "detail": str(t)})
        return True
    # Destructive commands carry the user's answer to the confirmation prompt.
    confirmed = bool(data.get("confirm"))
    result = await run_in_threadpool(queue.dispatch, t, data, confirm=lambda message: confirmed)
    await manager.send(conn_id, result_payload(t, result))
    if result.ok:
        await manager.broadcast_state(queue, clock)
    return True


async def ws_loop(ws: WebSocket) -> None:
    """
    Accept, send the current state, then process commands until the client leaves.
    """
    queue: CourtQueue = ws.app.state.queue
    clock: DisplayClock = ws.app.state.clock
    conn_id = None
    try:
        await ws.accept()
        conn_id = manager.connect(ws)
        logger.info("WS: accepted %s", conn_id)
        await manager.send(conn_id, queue.state(clock.current))
        while True:
            msg = await ws.receive_text()
            if not await handle_ws_message(msg, conn_id, queue, clock):
                await ws.close()
                break
    except WebSocketDisconnect as e:
        logger.info("WS: client disconnected code=%s reason=%s conn=%s", e.code, e.reason or "", conn_id)
    except Exception as e:
        logger.exception("WS: error conn=%s: %s", conn_id, e)
    finally:
        if conn_id:
            manager.disconnect(conn_id)
            logger.info("WS: disconnected conn=%s", conn_id)
