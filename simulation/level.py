"""Procedural level layout by rejection sampling."""

import math
import random

from simulation.emitter import Emitter, random_color
from simulation.entities import CollectionPoint, Obstacle, PowerUp, PowerUpType
from simulation.geometry import TWO_PI, distance

PLACEMENT_MARGIN = 50.0
EMITTER_RING = 0.3
MAX_EMITTERS = 3
OBSTACLE_EMITTER_CLEARANCE = 150.0
POINT_EMITTER_CLEARANCE = 100.0
ENTITY_CLEARANCE = 50.0
POWER_UP_BASE_DURATION = 5000
POWER_UP_DURATION_PER_LEVEL = 500


class Difficulty:
    """Multipliers that compound every level."""

    __slots__ = ("particle_speed", "spawn_rate", "power_up_chance", "power_up_chance_cap")

    def __init__(self, particle_speed=1.0, spawn_rate=1.0, power_up_chance=0.01, power_up_chance_cap=0.05):
        self.particle_speed = particle_speed
        self.spawn_rate = spawn_rate
        self.power_up_chance = power_up_chance
        self.power_up_chance_cap = power_up_chance_cap

    def advance(self):
        self.particle_speed *= 1.1
        self.spawn_rate *= 1.1
        self.power_up_chance = min(self.power_up_chance * 1.05, self.power_up_chance_cap)

    def to_dict(self):
        return {"particle_speed": self.particle_speed, "spawn_rate": self.spawn_rate,
                "power_up_chance": self.power_up_chance}


class Layout:
    """Generated entities plus how many of each were asked for."""

    __slots__ = ("emitters", "obstacles", "collection_points", "requested_obstacles", "requested_points")

    def __init__(self, emitters, obstacles, collection_points, requested_obstacles, requested_points):
        self.emitters = emitters
        self.obstacles = obstacles
        self.collection_points = collection_points
        self.requested_obstacles = requested_obstacles
        self.requested_points = requested_points

    @property
    def underfilled(self):
        return (len(self.obstacles) < self.requested_obstacles
                or len(self.collection_points) < self.requested_points)

    def shortfall(self):
        return {
            "obstacles": {"requested": self.requested_obstacles, "placed": len(self.obstacles)},
            "collection_points": {"requested": self.requested_points, "placed": len(self.collection_points)},
        }


def power_up_duration(level):
    return POWER_UP_BASE_DURATION + level * POWER_UP_DURATION_PER_LEVEL


class LevelGenerator:
    def __init__(self, rng=None, obstacle_count=3, collection_point_count=3, attempts=50, emitter_budget=None):
        self.rng = rng or random.Random()
        self.obstacle_count = obstacle_count
        self.collection_point_count = collection_point_count
        self.attempts = attempts
        self.emitter_budget = emitter_budget

    def generate(self, level, width, height, difficulty):
        emitters = self.place_emitters(level, width, height, difficulty)

        requested_obstacles = self.obstacle_count + level // 2
        obstacles = self.place_obstacles(requested_obstacles, width, height, emitters)

        requested_points = self.collection_point_count + level // 3
        points = self.place_collection_points(requested_points, level, width, height, emitters, obstacles)

        return Layout(emitters, obstacles, points, requested_obstacles, requested_points)

    def place_emitters(self, level, width, height, difficulty):
        count = min(1 + level // 3, MAX_EMITTERS)
        ring = min(width, height) * EMITTER_RING
        emitters = []
        for i in range(count):
            heading = (i / count) * TWO_PI
            emitters.append(Emitter(
                width / 2 + math.cos(heading) * ring,
                height / 2 + math.sin(heading) * ring,
                rate=difficulty.spawn_rate * (1 + level * 0.2),
                spread=math.pi / 3,
                speed=difficulty.particle_speed * (1 + level * 0.1),
                size=(2.0, 4.0 + level * 0.2),
                life=(0.7, 1.0),
                color=random_color(self.rng),
                max_particles=100 + level * 10,
                budget=self.emitter_budget,
                rng=self.rng,
            ))
        return emitters

    def place_obstacles(self, count, width, height, emitters):
        def clear_of_emitters(x, y):
            return all(distance(x, y, e.x, e.y) >= OBSTACLE_EMITTER_CLEARANCE for e in emitters)

        obstacles = []
        for _ in range(count):
            position = self.sample_position(width, height, clear_of_emitters)
            if position is None:
                continue
            obstacles.append(Obstacle(
                *position,
                radius=self.rng.uniform(20, 40),
                pulse_speed=self.rng.uniform(0.03, 0.07),
                pulse_amount=self.rng.uniform(0.1, 0.3),
                pulse_phase=self.rng.uniform(0, TWO_PI),
            ))
        return obstacles

    def place_collection_points(self, count, level, width, height, emitters, obstacles):
        def valid(x, y):
            return (all(distance(x, y, e.x, e.y) >= POINT_EMITTER_CLEARANCE for e in emitters)
                    and all(distance(x, y, o.x, o.y) >= o.radius + ENTITY_CLEARANCE for o in obstacles))

        value = 10 * (1 + level // 2)
        points = []
        for _ in range(count):
            position = self.sample_position(width, height, valid)
            if position is None:
                continue
            points.append(CollectionPoint(
                *position,
                radius=15 + level,
                value=value,
                pulse_speed=self.rng.uniform(0.03, 0.07),
                pulse_amount=self.rng.uniform(0.2, 0.4),
                pulse_phase=self.rng.uniform(0, TWO_PI),
            ))
        return points

    def spawn_power_up(self, level, width, height, emitters, obstacles, collection_points):
        """One placement attempt round for a random power-up; ``None`` if no spot was found."""
        power_up_type = self.rng.choice(list(PowerUpType))

        def valid(x, y):
            return (all(distance(x, y, e.x, e.y) >= POINT_EMITTER_CLEARANCE for e in emitters)
                    and all(distance(x, y, o.x, o.y) >= o.radius + ENTITY_CLEARANCE for o in obstacles)
                    and all(distance(x, y, p.x, p.y) >= p.radius + ENTITY_CLEARANCE
                            for p in collection_points if not p.collected))

        position = self.sample_position(width, height, valid)
        if position is None:
            return None
        return PowerUp(*position, power_up_type, duration=power_up_duration(level),
                       pulse_phase=self.rng.uniform(0, TWO_PI))

    def sample_position(self, width, height, is_valid):
        """Uniform samples inside the margin-inset canvas until ``is_valid`` accepts one."""
        for _ in range(self.attempts):
            x = self.rng.uniform(PLACEMENT_MARGIN, width - PLACEMENT_MARGIN)
            y = self.rng.uniform(PLACEMENT_MARGIN, height - PLACEMENT_MARGIN)
            if is_valid(x, y):
                return x, y
        return None
