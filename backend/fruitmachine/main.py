"""Fruit Machine FastAPI application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from fruitmachine.config import settings
from fruitmachine.config_hash import get_config_hash
from fruitmachine.logic.session import SlotSession
from fruitmachine.middleware import ErrorHandlerMiddleware, PlayerIdMiddleware
from fruitmachine.protocol import (
    ActionResponse,
    Configuration,
    InitResponse,
    SessionSnapshot,
    StateResponse,
)
from fruitmachine.session_store import session_store


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Apply log level and load the machine configuration up front."""
    logging.basicConfig(level=logging.DEBUG if settings.debug else settings.log_level)
    config = session_store.config
    logger.info("Serving machine %r with %d reels", config.name, config.reel_count)
    yield
    session_store.reset()


app = FastAPI(
    title="Fruit Machine",
    version="0.1.0",
    description="Reel spin and payout engine for an interactive fruit machine",
    lifespan=lifespan,
)

app.add_middleware(ErrorHandlerMiddleware)
app.add_middleware(PlayerIdMiddleware)


def _snapshot(session: SlotSession) -> SessionSnapshot:
    return SessionSnapshot.from_state(session.state, session.config.spin_cost)


def _action(applied: bool, session: SlotSession) -> dict:
    return ActionResponse(applied=applied, state=_snapshot(session)).model_dump()


@app.get("/health")
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/init")
async def init(request: Request) -> dict:
    """Machine configuration plus the player's current session snapshot."""
    async with session_store.player_session(request.state.player_id) as (session, _):
        config = session.config
        response = InitResponse(
            configuration=Configuration.from_config(config, get_config_hash(config)),
            state=_snapshot(session),
        )
    return response.model_dump()


@app.get("/state")
async def state(request: Request) -> dict:
    """Poll the player's current session snapshot."""
    async with session_store.player_session(request.state.player_id) as (session, _):
        return StateResponse(state=_snapshot(session)).model_dump()


@app.post("/spin")
async def spin(request: Request) -> dict:
    """
    Request a spin.

    Ignored requests (already spinning, not enough credits) are not errors:
    the response carries applied=false and the unchanged state.
    """
    player_id = request.state.player_id
    async with session_store.player_session(player_id) as (session, metrics):
        applied = session.request_spin()
        logger.debug(
            "Spin request player=%s applied=%s lock_acquire_ms=%.2f",
            player_id,
            applied,
            metrics.acquire_ms,
        )
        return _action(applied, session)


@app.post("/reels/{reel_id}/hold")
async def toggle_hold(request: Request, reel_id: str) -> dict:
    """Toggle a reel's hold flag (idle only)."""
    async with session_store.player_session(request.state.player_id) as (session, _):
        return _action(session.toggle_hold(reel_id), session)


@app.post("/holds/release")
async def release_holds(request: Request) -> dict:
    """Release every hold (idle only)."""
    async with session_store.player_session(request.state.player_id) as (session, _):
        return _action(session.release_all_holds(), session)


@app.post("/reels/{reel_id}/complete")
async def complete_reel(request: Request, reel_id: str) -> dict:
    """Animator callback: the reel reached its plan's target."""
    async with session_store.player_session(request.state.player_id) as (session, _):
        return _action(session.complete_reel_spin(reel_id), session)
