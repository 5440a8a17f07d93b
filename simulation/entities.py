"""Simulated bodies and the static things they interact with."""

import math
from collections import deque
from enum import Enum

from simulation.geometry import (
    angle,
    closest_point_on_segment,
    distance,
    point_in_circle,
    push,
    require_finite,
    require_positive,
    wrap_phase,
)
from simulation.state import CollectionPointState, ObstacleState, ParticleState, PowerUpState

PATH_FOLLOW_RANGE = 100.0
AVOIDANCE_MARGIN = 50.0
AVOIDANCE_STRENGTH = 2.0
MAGNET_RANGE = 200.0
MAGNET_STRENGTH = 0.2
TIME_SLOW_SCALE = 0.5
FRICTION = 0.98
BOUNDS_MARGIN = 50.0


class PowerUpType(Enum):
    """Closed set of power-ups; each member carries its wire name, color and icon."""

    TIME_SLOW = ("timeSlow", "#64C8FF", "⏱")
    MAGNET = ("magnet", "#FF64FF", "\U0001f9f2")
    SHIELD = ("shield", "#FFFF64", "\U0001f6e1")
    MULTIPLIER = ("multiplier", "#FF9632", "✖")

    def __init__(self, key, color, icon):
        self.key = key
        self.color = color
        self.icon = icon

    @classmethod
    def from_key(cls, key):
        for member in cls:
            if member.key == key:
                return member
        raise ValueError(f"unknown power-up type: {key!r}")


class ForceField:
    """Everything a particle reads while integrating one tick."""

    __slots__ = ("paths", "obstacles", "collection_points", "magnet", "time_slow")

    def __init__(self, paths=(), obstacles=(), collection_points=(), magnet=False, time_slow=False):
        self.paths = paths
        self.obstacles = obstacles
        self.collection_points = collection_points
        self.magnet = magnet
        self.time_slow = time_slow


class Particle:
    """A fading point mass steered by paths, pushed off obstacles."""

    def __init__(self, x, y, speed_x=0.0, speed_y=0.0, size=3.0, color="#FFFFFF", life=1.0,
                 decay=0.005, gravity=0.0, max_trail_length=10, path_follow_force=0.1):
        require_finite(x=x, y=y, speed_x=speed_x, speed_y=speed_y, gravity=gravity, life=life)
        require_positive(size=size, decay=decay)
        self.x = x
        self.y = y
        self.speed_x = speed_x
        self.speed_y = speed_y
        self.size = size
        self.color = color
        self.life = life
        self.decay = decay
        self.gravity = gravity
        self.path_follow_force = path_follow_force
        self.mass = size * 0.5
        self.trail = deque(maxlen=max_trail_length)
        self.active = True

    def update(self, field):
        """Advance one tick under ``field``. Inactive particles never move again."""
        if not self.active:
            return

        self.speed_y += self.gravity
        self._follow_paths(field.paths)
        self._avoid_obstacles(field.obstacles)
        if field.magnet:
            self._attract_to_collection_points(field.collection_points)
        if field.time_slow:
            self.speed_x *= TIME_SLOW_SCALE
            self.speed_y *= TIME_SLOW_SCALE

        self.speed_x *= FRICTION
        self.speed_y *= FRICTION

        self.x += self.speed_x
        self.y += self.speed_y
        self.trail.append((self.x, self.y))

        self.life -= self.decay
        if self.life <= 0:
            self.active = False

    def _follow_paths(self, paths):
        closest = None
        closest_distance = math.inf
        for path in paths:
            if not path.active or not path.points:
                continue
            points = path.points
            if len(points) == 1:
                candidates = [points[0]]
            else:
                candidates = (closest_point_on_segment(self.x, self.y, ax, ay, bx, by)
                              for (ax, ay), (bx, by) in zip(points, points[1:]))
            for cx, cy in candidates:
                dist = distance(self.x, self.y, cx, cy)
                if dist < closest_distance:
                    closest_distance = dist
                    closest = (cx, cy)

        if closest is not None and closest_distance < PATH_FOLLOW_RANGE:
            force = self.path_follow_force * (1 - closest_distance / PATH_FOLLOW_RANGE)
            heading = angle(self.x, self.y, *closest)
            self.speed_x, self.speed_y = push(self.speed_x, self.speed_y, heading, force)

    def _avoid_obstacles(self, obstacles):
        for obstacle in obstacles:
            reach = obstacle.radius + AVOIDANCE_MARGIN
            dist = distance(self.x, self.y, obstacle.x, obstacle.y)
            if dist < reach:
                heading = angle(obstacle.x, obstacle.y, self.x, self.y)
                force = AVOIDANCE_STRENGTH * (1 - dist / reach)
                self.speed_x, self.speed_y = push(self.speed_x, self.speed_y, heading, force)

    def _attract_to_collection_points(self, points):
        nearest = None
        nearest_distance = math.inf
        for point in points:
            if point.collected:
                continue
            dist = distance(self.x, self.y, point.x, point.y)
            if dist < nearest_distance:
                nearest_distance = dist
                nearest = point

        if nearest is not None and nearest_distance < MAGNET_RANGE:
            force = MAGNET_STRENGTH * (1 - nearest_distance / MAGNET_RANGE)
            heading = angle(self.x, self.y, nearest.x, nearest.y)
            self.speed_x, self.speed_y = push(self.speed_x, self.speed_y, heading, force)

    def is_out_of_bounds(self, width, height):
        return (self.x < -BOUNDS_MARGIN or self.x > width + BOUNDS_MARGIN
                or self.y < -BOUNDS_MARGIN or self.y > height + BOUNDS_MARGIN)

    def to_state(self):
        return ParticleState(self.x, self.y, self.size, self.life, self.color, list(self.trail))


class _Pulsing:
    """Shared pulse animation for the static entities."""

    def __init__(self, x, y, radius, pulse_speed, pulse_amount, pulse_phase):
        require_finite(x=x, y=y, pulse_speed=pulse_speed, pulse_amount=pulse_amount, pulse_phase=pulse_phase)
        require_positive(radius=radius)
        self.x = x
        self.y = y
        self.radius = radius
        self.pulse_speed = pulse_speed
        self.pulse_amount = pulse_amount
        self.pulse_phase = pulse_phase
        self.active = True

    @property
    def pulse_scale(self):
        return 1 + math.sin(self.pulse_phase) * self.pulse_amount

    def _advance_pulse(self):
        self.pulse_phase = wrap_phase(self.pulse_phase + self.pulse_speed)

    def check_collision(self, x, y):
        return point_in_circle(x, y, self.x, self.y, self.radius)


class Obstacle(_Pulsing):
    def __init__(self, x, y, radius=30.0, pulse_speed=0.05, pulse_amount=0.2, pulse_phase=0.0):
        super().__init__(x, y, radius, pulse_speed, pulse_amount, pulse_phase)

    def update(self):
        if self.active:
            self._advance_pulse()

    def to_state(self):
        return ObstacleState(self.x, self.y, self.radius, self.pulse_scale)


class CollectionPoint(_Pulsing):
    """Scoring target; collecting is one-shot for the rest of the level."""

    def __init__(self, x, y, radius=20.0, value=10, pulse_speed=0.05, pulse_amount=0.3, pulse_phase=0.0):
        super().__init__(x, y, radius, pulse_speed, pulse_amount, pulse_phase)
        self.value = value
        self.collected = False

    def update(self):
        if self.active and not self.collected:
            self._advance_pulse()

    def check_collision(self, x, y):
        return not self.collected and super().check_collision(x, y)

    def collect(self):
        """Return the point value the first time, 0 afterwards."""
        if self.collected:
            return 0
        self.collected = True
        return self.value

    def to_state(self):
        return CollectionPointState(self.x, self.y, self.radius, self.value, self.collected, self.pulse_scale)


class PowerUp(_Pulsing):
    ROTATION_SPEED = 0.02

    def __init__(self, x, y, type, radius=15.0, duration=5000, pulse_speed=0.05, pulse_amount=0.3,
                 pulse_phase=0.0):
        super().__init__(x, y, radius, pulse_speed, pulse_amount, pulse_phase)
        require_positive(duration=duration)
        self.type = type
        self.duration = duration
        self.rotation = 0.0
        self.collected = False

    @property
    def color(self):
        return self.type.color

    @property
    def icon(self):
        return self.type.icon

    def update(self):
        if not self.active or self.collected:
            return
        self._advance_pulse()
        self.rotation = wrap_phase(self.rotation + self.ROTATION_SPEED)

    def check_collision(self, x, y):
        return not self.collected and super().check_collision(x, y)

    def collect(self):
        """Return ``(type, duration)`` the first time, ``None`` afterwards."""
        if self.collected:
            return None
        self.collected = True
        return self.type, self.duration

    def to_state(self):
        return PowerUpState(self.x, self.y, self.radius, self.type.key, self.color, self.icon,
                            self.rotation, self.pulse_scale, self.duration)
