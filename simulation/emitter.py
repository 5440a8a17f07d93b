"""Particle sources owning their pool."""

import math
import random

from simulation.entities import Particle
from simulation.geometry import require_finite, require_positive
from simulation.state import EmitterState

PALETTE = [
    "#FF5252", "#FF4081", "#E040FB", "#7C4DFF", "#536DFE",
    "#448AFF", "#40C4FF", "#18FFFF", "#64FFDA", "#69F0AE",
    "#B2FF59", "#EEFF41", "#FFFF00", "#FFD740", "#FFAB40",
    "#FF6E40",
]


def random_color(rng):
    return rng.choice(PALETTE)


class Emitter:
    """Emits ``rate`` particles per tick, carrying the fractional remainder.

    ``budget`` caps how many particles the emitter produces over its lifetime;
    once spent it goes inactive. ``None`` means unlimited.
    """

    def __init__(self, x, y, rate=5.0, spread=math.pi / 4, direction=0.0, speed=2.0, size=(2.0, 6.0),
                 life=(0.5, 1.0), gravity=0.0, color="#FFFFFF", max_particles=100, budget=None,
                 active=True, rng=None):
        require_finite(x=x, y=y, spread=spread, direction=direction, speed=speed, gravity=gravity)
        require_positive(rate=rate, max_particles=max_particles)
        self.x = x
        self.y = y
        self.rate = rate
        self.spread = spread
        self.direction = direction
        self.speed = speed
        self.size = size
        self.life = life
        self.gravity = gravity
        self.color = color
        self.max_particles = max_particles
        self.budget = budget
        self.active = active
        self.rng = rng or random.Random()
        self.particles = []
        self.rate_fraction = 0.0
        self.emitted = 0

    @property
    def can_emit(self):
        """True while this emitter could still add a particle to the world."""
        return self.active and len(self.particles) < self.max_particles

    def emit(self):
        if not self.active:
            return []

        count = math.floor(self.rate)
        self.rate_fraction += self.rate - count
        if self.rate_fraction >= 1:
            count += 1
            self.rate_fraction -= 1

        created = []
        for _ in range(count):
            if len(self.particles) >= self.max_particles:
                break
            heading = self.direction + self.rng.uniform(-self.spread / 2, self.spread / 2)
            speed = self.speed * self.rng.uniform(0.8, 1.2)
            particle = Particle(
                self.x, self.y,
                speed_x=math.cos(heading) * speed,
                speed_y=math.sin(heading) * speed,
                size=self.rng.uniform(*self.size),
                color=self.color,
                life=self.rng.uniform(*self.life),
                gravity=self.gravity,
            )
            created.append(particle)
            self.particles.append(particle)
            self.emitted += 1
            if self.budget is not None and self.emitted >= self.budget:
                self.active = False
                break
        return created

    def update(self, field):
        for particle in self.particles:
            particle.update(field)

    def prune(self, width, height):
        """Drop dead and escaped particles after the tick; returns how many went."""
        before = len(self.particles)
        self.particles = [p for p in self.particles if p.active and not p.is_out_of_bounds(width, height)]
        return before - len(self.particles)

    def to_state(self):
        return EmitterState(self.x, self.y, self.color, self.active, len(self.particles), self.max_particles)
