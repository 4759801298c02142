"""
Court queue API and WebSocket.
"""
import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import Body, FastAPI, HTTPException, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool

from .clock import DisplayClock
from .config import get_config
from .errors import UNKNOWN_COMMAND, UNKNOWN_COURT, UNKNOWN_PLAYER
from .service import CourtQueue, build_queue
from .ws_handlers import result_payload, ws_loop
from .ws_manager import clock_refresh_loop, manager

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

NOT_FOUND_REASONS = {UNKNOWN_COMMAND, UNKNOWN_PLAYER, UNKNOWN_COURT}


def create_app(queue: CourtQueue | None = None, clock: DisplayClock | None = None) -> FastAPI:
    config = get_config()
    if config.debug:
        logging.getLogger("courtqueue").setLevel(logging.DEBUG)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        refresh = asyncio.create_task(
            clock_refresh_loop(app.state.queue, app.state.clock, config.clock_refresh_seconds)
        )
        try:
            yield
        finally:
            refresh.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await refresh
            if app.state.queue.writer is not None:
                app.state.queue.writer.close()

    app = FastAPI(title="Court Queue API", lifespan=lifespan)
    app.state.queue = queue if queue is not None else build_queue(config)
    app.state.clock = clock if clock is not None else DisplayClock()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/state")
    def get_state():
        return app.state.queue.state(app.state.clock.current)

    @app.post("/commands/{name}")
    async def run_command(name: str, args: dict | None = Body(default=None)):
        args = args or {}
        confirmed = bool(args.get("confirm"))
        # The queue lock is a threading lock; take it off the event loop.
        result = await run_in_threadpool(
            app.state.queue.dispatch, name, args, confirm=lambda message: confirmed
        )
        if not result.ok:
            status = 404 if result.reason in NOT_FOUND_REASONS else 400
            raise HTTPException(status_code=status, detail=result_payload(name, result))
        await manager.broadcast_state(app.state.queue, app.state.clock)
        return app.state.queue.state(app.state.clock.current)

    @app.websocket("/ws")
    async def websocket_endpoint(ws: WebSocket):
        logger.info("WS: connection attempt from %s", ws.client)
        await ws_loop(ws)

    return app


app = create_app()
