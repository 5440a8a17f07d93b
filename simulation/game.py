"""Game state machine wrapped around the per-session tick."""

import random

from config import GameConfig
from internal.logging import get_logger
from simulation import events
from simulation.geometry import require_positive
from simulation.level import Difficulty, LevelGenerator
from simulation.session import SessionState
from simulation.state import GameSnapshot
from simulation.tick import run_tick


class GameState:
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    GAME_OVER = "game_over"


class Game:
    """Idle -> playing <-> paused -> game over, with level-ups staying in playing.

    All time-dependent calls take ``now_ms`` so callers decide the clock.
    """

    def __init__(self, config=None, width=800, height=600, store=None, seed=None):
        self.config = config or GameConfig()
        self.width = width
        self.height = height
        self.store = store
        self.state = GameState.IDLE
        self.session = None
        self.high_score = None
        self.sound_enabled = True
        self._rng = random.Random(seed)
        self._log = get_logger()

    @property
    def playing(self):
        return self.state == GameState.PLAYING

    @property
    def paused(self):
        return self.state == GameState.PAUSED

    def _new_session(self):
        generator = LevelGenerator(
            random.Random(self._rng.getrandbits(64)),
            obstacle_count=self.config.obstacle_count,
            collection_point_count=self.config.collection_point_count,
            attempts=self.config.placement_attempts,
            emitter_budget=self.config.emitter_budget,
        )
        difficulty = Difficulty(power_up_chance=self.config.power_up_chance,
                                power_up_chance_cap=self.config.power_up_chance_cap)
        return SessionState.create(self.width, self.height, generator, difficulty,
                                   grace_ticks=self.config.game_over_grace_ticks)

    def start(self):
        """Begin a fresh session from any state and generate level 1."""
        self.session = self._new_session()
        layout = self.session.generate_level()
        self.state = GameState.PLAYING
        self._log = get_logger().bind(session=self.session.session_id)
        self._log.info("game started", width=self.width, height=self.height)

        out = [events.event(events.STARTED, session=self.session.session_id, level=self.session.level)]
        if layout.underfilled:
            self._log.warn("layout underfilled", level=1, **layout.shortfall())
            out.append(events.event(events.LAYOUT_UNDERFILLED, level=1, **layout.shortfall()))
        return out

    def restart(self):
        return self.start()

    def toggle_pause(self):
        """Flip between playing and paused; a no-op in any other state."""
        if self.state == GameState.PLAYING:
            self.state = GameState.PAUSED
            self._log.info("game paused", tick=self.session.tick)
            return [events.event(events.PAUSED, tick=self.session.tick)]
        if self.state == GameState.PAUSED:
            self.state = GameState.PLAYING
            self._log.info("game resumed", tick=self.session.tick)
            return [events.event(events.RESUMED, tick=self.session.tick)]
        return []

    def set_visibility(self, hidden):
        """Losing visibility while playing forces a pause; regaining it does not resume."""
        if hidden and self.state == GameState.PLAYING:
            return self.toggle_pause()
        return []

    def resize(self, width, height):
        require_positive(width=width, height=height)
        self.width = width
        self.height = height
        if self.session is None:
            return []
        self.session.world.resize(width, height)
        if self.session.collection_points or self.state == GameState.GAME_OVER:
            return []
        # The old canvas fit no collection point; retry the same level on the new one.
        layout = self.session.generate_level()
        self._log.info("level regenerated", level=self.session.level, width=width, height=height)
        if layout.underfilled:
            return [events.event(events.LAYOUT_UNDERFILLED, level=self.session.level, **layout.shortfall())]
        return []

    def tick(self, paths, now_ms):
        if self.state != GameState.PLAYING:
            return []

        level_before = self.session.level
        result = run_tick(self.session, paths, now_ms)
        out = result.events

        for item in out:
            if item["kind"] == events.POWER_UP_ACQUIRED:
                self._log.debug("power-up acquired", type=item["type"], duration=item["duration"])
            elif item["kind"] == events.POWER_UP_EXPIRED:
                self._log.debug("power-up expired", type=item["type"])
            elif item["kind"] == events.LAYOUT_UNDERFILLED:
                self._log.warn("layout underfilled", level=item["level"], obstacles=item["obstacles"],
                               collection_points=item["collection_points"])

        if result.level_completed:
            self._log.info("level complete", level=level_before, next_level=self.session.level,
                           score=self.session.score)
        elif result.exhausted:
            out.extend(self.end_game())
        return events.with_sound(out, self.sound_enabled)

    def end_game(self):
        """Enter game over and settle the high score with the store."""
        self.state = GameState.GAME_OVER
        score = self.session.score
        stored = self.store.load_high_score() if self.store else 0
        if score > stored:
            if self.store:
                self.store.save_high_score(score)
            stored = score
        self.high_score = stored
        self._log.info("game over", score=score, high_score=stored, level=self.session.level)
        return [events.event(events.GAME_OVER, score=score, high_score=stored, level=self.session.level)]

    def snapshot(self, paths=(), now_ms=0.0):
        session = self.session
        if session is None:
            return GameSnapshot(None, 0, self.state, 0, 1, self.high_score, self.sound_enabled,
                                self.width, self.height, {}, [], [], [], [], [], [p.to_state() for p in paths])
        return GameSnapshot(
            session.session_id,
            session.tick,
            self.state,
            session.score,
            session.level,
            self.high_score,
            self.sound_enabled,
            session.world.width,
            session.world.height,
            session.effects.remaining_ms(now_ms),
            [p.to_state() for p in session.particles()],
            [e.to_state() for e in session.emitters],
            [o.to_state() for o in session.obstacles],
            [c.to_state() for c in session.collection_points],
            [p.to_state() for p in session.power_ups],
            [p.to_state() for p in paths],
        )
