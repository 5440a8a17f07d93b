"""Game control routes."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from internal.errors import InvalidGeometryError
from ui.auth import verify_basic_auth

router = APIRouter(prefix="/api/v1/control", tags=["control"])

# Set by app.py
_engine = None


def init(engine):
    """Initialize with the engine reference."""
    global _engine
    _engine = engine


class Visibility(BaseModel):
    hidden: bool


class CanvasSize(BaseModel):
    width: float = Field(gt=0)
    height: float = Field(gt=0)


class Sound(BaseModel):
    enabled: bool


def _result(events):
    return {"ok": True, "state": _engine.game_state, "events": events}


@router.post("/start")
async def start(username=Depends(verify_basic_auth)):
    """Start a new game (requires basic auth)."""
    return _result(await _engine.start_game())


@router.post("/restart")
async def restart(username=Depends(verify_basic_auth)):
    """Throw away the current game and start over (requires basic auth)."""
    return _result(await _engine.restart())


@router.post("/pause")
async def toggle_pause(username=Depends(verify_basic_auth)):
    """Toggle pause; ignored unless playing or paused (requires basic auth)."""
    return _result(await _engine.toggle_pause())


@router.post("/visibility")
async def visibility(body: Visibility, username=Depends(verify_basic_auth)):
    """Report page visibility; hiding while playing pauses (requires basic auth)."""
    return _result(await _engine.set_visibility(body.hidden))


@router.post("/resize")
async def resize(body: CanvasSize, username=Depends(verify_basic_auth)):
    """Update the canvas size used for the next layout (requires basic auth)."""
    try:
        out = await _engine.resize(body.width, body.height)
    except InvalidGeometryError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {"ok": True, "width": body.width, "height": body.height, "events": out}


@router.post("/sound")
async def sound(body: Sound, username=Depends(verify_basic_auth)):
    """Turn sound cues on or off and remember the choice (requires basic auth)."""
    return {"ok": True, "sound_enabled": await _engine.set_sound(body.enabled)}
