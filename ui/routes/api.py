"""API routes for game state, stats and subscribers."""

from fastapi import APIRouter, Depends

from utils.timestamp import format_timestamp
from ui.auth import verify_basic_auth

router = APIRouter(prefix="/api/v1", tags=["api"])

# These will be set by app.py
_engine = None
_bus = None
_file_logger = None
_store = None


def init(engine, bus, file_logger, store):
    """Initialize with engine, bus, logger and preference store references."""
    global _engine, _bus, _file_logger, _store
    _engine = engine
    _bus = bus
    _file_logger = file_logger
    _store = store


@router.get("/state")
async def state():
    """Current render snapshot."""
    snapshot = await _engine.get_snapshot()
    return snapshot.to_dict()


@router.get("/high-score")
async def high_score():
    """Persisted high score, 0 when nothing is stored."""
    return {"high_score": _store.load_high_score() if _store else 0}


@router.get("/stats")
async def stats(username=Depends(verify_basic_auth)):
    """Return bus and game statistics (requires basic auth)."""
    snapshot = await _engine.get_snapshot()
    return {
        "timestamp": format_timestamp(),
        "game": {
            "state": snapshot.state,
            "tick": snapshot.tick,
            "level": snapshot.level,
            "score": snapshot.score,
            "particle_count": len(snapshot.particles),
            "active_power_ups": snapshot.active_power_ups,
        },
        "engine": _engine.state,
        "bus": _bus.get_stats(),
        "logger": _file_logger.get_stats(),
    }


@router.get("/subscribers")
async def subscribers(username=Depends(verify_basic_auth)):
    """Return info about all current subscribers (requires basic auth)."""
    return await _bus.get_subscriber_info()
