"""Path input routes: the pointer surface posts strokes here."""

from typing import List, Tuple

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from internal.errors import InvalidGeometryError

router = APIRouter(prefix="/api/v1/input", tags=["input"])

# Set by app.py
_engine = None


def init(engine):
    """Initialize with the engine reference."""
    global _engine
    _engine = engine


class Point(BaseModel):
    x: float
    y: float


class Stroke(BaseModel):
    points: List[Tuple[float, float]] = Field(min_length=1)


def _bad_point(exc):
    return HTTPException(status_code=400, detail=str(exc))


@router.post("/paths")
async def add_stroke(body: Stroke):
    """Add a finished stroke as one path."""
    try:
        accepted = await _engine.add_stroke(body.points)
    except InvalidGeometryError as exc:
        raise _bad_point(exc)
    return {"accepted": accepted}


@router.post("/begin")
async def begin(point: Point):
    """Start a new stroke at the pointer position."""
    try:
        accepted = await _engine.begin_path(point.x, point.y)
    except InvalidGeometryError as exc:
        raise _bad_point(exc)
    return {"accepted": accepted}


@router.post("/extend")
async def extend(point: Point):
    """Append the pointer position to the stroke in progress."""
    try:
        accepted = await _engine.extend_path(point.x, point.y)
    except InvalidGeometryError as exc:
        raise _bad_point(exc)
    return {"accepted": accepted}


@router.post("/end")
async def end():
    """Finish the stroke in progress."""
    await _engine.end_path()
    return {"ok": True}


@router.post("/clear")
async def clear():
    """Drop every path."""
    await _engine.clear_paths()
    return {"ok": True}
