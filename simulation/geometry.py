"""Stateless 2D helpers shared by physics, collisions and placement."""

import math

from internal.errors import InvalidGeometryError

TWO_PI = math.pi * 2


def distance(x1, y1, x2, y2):
    return math.hypot(x2 - x1, y2 - y1)


def angle(x1, y1, x2, y2):
    """Heading in radians from (x1, y1) towards (x2, y2)."""
    return math.atan2(y2 - y1, x2 - x1)


def clamp(value, low, high):
    return min(max(value, low), high)


def wrap_phase(phase):
    """Keep an accumulating phase inside [0, 2π]."""
    if phase > TWO_PI:
        phase -= TWO_PI
    return phase


def point_in_circle(px, py, cx, cy, radius):
    return distance(px, py, cx, cy) <= radius


def closest_point_on_segment(px, py, ax, ay, bx, by):
    """Project (px, py) onto segment a-b, clamping t to [0, 1].

    A zero-length segment degenerates to its single point.
    """
    dx, dy = bx - ax, by - ay
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return ax, ay
    t = clamp(((px - ax) * dx + (py - ay) * dy) / length_sq, 0.0, 1.0)
    return ax + t * dx, ay + t * dy


def push(speed_x, speed_y, heading, force):
    """Add a force of the given magnitude along a heading to a velocity."""
    return speed_x + math.cos(heading) * force, speed_y + math.sin(heading) * force


def require_finite(**values):
    for name, value in values.items():
        if value is None or not math.isfinite(value):
            raise InvalidGeometryError(f"{name} must be a finite number", field=name, value=value)


def require_positive(**values):
    require_finite(**values)
    for name, value in values.items():
        if value <= 0:
            raise InvalidGeometryError(f"{name} must be positive", field=name, value=value)
