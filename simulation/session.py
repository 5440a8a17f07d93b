"""Per-game mutable state, created at start and dropped at restart."""

import itertools
import uuid

from simulation.level import Difficulty
from simulation.powerups import PowerUpController
from simulation.world import World


class SessionState:
    """Everything one game owns. Passed explicitly to ``run_tick``."""

    def __init__(self, world, generator, difficulty=None, grace_ticks=0, session_id=None):
        self.session_id = session_id or uuid.uuid4().hex[:12]
        self.world = world
        self.generator = generator
        self.rng = generator.rng
        self.difficulty = difficulty or Difficulty()
        self.grace_ticks = grace_ticks
        self.effects = PowerUpController()
        self.score = 0
        self.level = 1
        self.tick = 0
        self.level_ticks = 0
        self.emitters = []
        self.obstacles = []
        self.collection_points = []
        self.power_ups = []
        self.strays = []

    @classmethod
    def create(cls, width, height, generator, difficulty=None, grace_ticks=0):
        return cls(World(width, height), generator, difficulty, grace_ticks)

    def apply_layout(self, layout):
        """Swap in a new layout. Live particles outlive their emitters and keep flying."""
        self.strays = [p for p in self.particles() if p.active]
        self.emitters = layout.emitters
        self.obstacles = layout.obstacles
        self.collection_points = layout.collection_points
        self.level_ticks = 0

    def generate_level(self):
        layout = self.generator.generate(self.level, self.world.width, self.world.height, self.difficulty)
        self.apply_layout(layout)
        return layout

    def particles(self):
        return list(itertools.chain(self.strays, *(e.particles for e in self.emitters)))

    def prune_strays(self):
        before = len(self.strays)
        self.strays = [p for p in self.strays
                       if p.active and not p.is_out_of_bounds(self.world.width, self.world.height)]
        return before - len(self.strays)

    @property
    def particle_count(self):
        return len(self.strays) + sum(len(e.particles) for e in self.emitters)

    @property
    def level_complete(self):
        """Every point collected. A layout that placed no points never completes."""
        return bool(self.collection_points) and all(point.collected for point in self.collection_points)

    @property
    def exhausted(self):
        """No particles alive and no emitter able to make more."""
        if self.level_ticks < self.grace_ticks:
            return False
        return self.particle_count == 0 and not any(e.can_emit for e in self.emitters)

    def context(self):
        return {"session": self.session_id, "level": self.level, "score": self.score, "tick": self.tick}
