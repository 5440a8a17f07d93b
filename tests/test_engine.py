"""Unit tests for SimulationEngine."""

import asyncio
import pytest
from communication.bus import EVENT_TOPIC, STATE_TOPIC, EventBus
from simulation.engine import EngineState, SimulationEngine
from simulation.entities import CollectionPoint, Particle
from simulation.game import GameState
from simulation.state import GameSnapshot


class FakeClock:
    """Hand-driven millisecond clock."""

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


async def next_event(subscriber, kind, timeout=2.0):
    """First event of the given kind on the subscriber's queue."""
    async def scan():
        while True:
            item = await subscriber.queue.get()
            if item["kind"] == kind:
                return item
    return await asyncio.wait_for(scan(), timeout)


def drain(game):
    for emitter in game.session.emitters:
        emitter.active = False
        emitter.particles = []
    game.session.strays = []
    game.session.collection_points = [CollectionPoint(700, 500)]
    game.session.grace_ticks = 0


class TestSimulationEngine:
    """Tests for SimulationEngine class."""

    @pytest.mark.asyncio
    async def test_engine_creation(self, engine):
        """Engine starts stopped with an idle game."""
        assert engine.tick == 0
        assert engine.state == EngineState.STOPPED
        assert engine.game_state == GameState.IDLE
        assert engine.paused is False

    @pytest.mark.asyncio
    async def test_step_idle(self, engine):
        """Stepping an idle game does nothing."""
        snapshot, out = await engine.step()
        assert snapshot is None
        assert out == []

    @pytest.mark.asyncio
    async def test_start_game_publishes_event(self, engine, bus):
        """Starting a game announces it on the event topic."""
        sub = await bus.subscribe("events", topics=[EVENT_TOPIC])

        await engine.start_game()

        msg = await asyncio.wait_for(sub.queue.get(), timeout=1.0)
        assert msg["kind"] == "started"
        assert engine.game_state == GameState.PLAYING

    @pytest.mark.asyncio
    async def test_step_advances(self, engine):
        """A manual step ticks the game and returns a snapshot."""
        await engine.start_game()
        snapshot, _ = await engine.step()
        assert isinstance(snapshot, GameSnapshot)
        assert snapshot.tick == 1
        assert engine.tick == 1

    @pytest.mark.asyncio
    async def test_engine_start_stop(self, engine):
        """Engine starts and stops cleanly."""
        await engine.start()
        assert engine._task is not None
        assert engine.state == EngineState.RUNNING

        await asyncio.sleep(0.05)

        await engine.stop()
        assert engine._stop.is_set()
        assert engine.state == EngineState.STOPPED

    @pytest.mark.asyncio
    async def test_engine_tick_advances(self, engine):
        """The loop ticks a playing game over time."""
        await engine.start_game()
        await engine.start()
        await asyncio.sleep(0.1)
        await engine.stop()

        assert engine.tick >= 2

    @pytest.mark.asyncio
    async def test_engine_pause_resume(self, engine):
        """Paused games hold their tick until resumed."""
        await engine.start_game()
        await engine.toggle_pause()
        await engine.start()
        await asyncio.sleep(0.05)
        assert engine.tick == 0

        await engine.toggle_pause()
        assert engine.paused is False
        await asyncio.sleep(0.05)
        assert engine.tick > 0

        await engine.stop()

    @pytest.mark.asyncio
    async def test_engine_publishes_snapshots(self, engine, bus):
        """The loop ships render snapshots on the state topic."""
        sub = await bus.subscribe("renderer", topics=[STATE_TOPIC], latest_only=True)

        await engine.start_game()
        await engine.start()
        msg = await asyncio.wait_for(sub.queue.get(), timeout=1.0)
        await engine.stop()

        assert isinstance(msg, GameSnapshot)
        assert msg.state == GameState.PLAYING
        assert len(msg.emitters) == 1

    @pytest.mark.asyncio
    async def test_stop_announces(self, engine, bus):
        """Stopping publishes a final engine event."""
        sub = await bus.subscribe("events", topics=[EVENT_TOPIC])
        await engine.start()
        await engine.stop()
        msg = sub.queue.get_nowait()
        assert msg["kind"] == "engine_stopped"

    @pytest.mark.asyncio
    async def test_context(self, engine):
        """Crash context names the engine, game and session."""
        assert engine.context() == {"engine": "stopped", "game": "idle"}
        await engine.start_game()
        context = engine.context()
        assert context["level"] == 1
        assert context["session"] == engine.game.session.session_id


class TestEngineInput:
    """Tests for path input through the engine."""

    @pytest.mark.asyncio
    async def test_paths_refused_when_idle(self, engine):
        """Drawing before the game starts is ignored."""
        assert await engine.begin_path(10, 10) is False
        assert await engine.add_stroke([(10, 10), (20, 20)]) is False

    @pytest.mark.asyncio
    async def test_stroke_appears_in_snapshot(self, bus, app_config, store):
        """A stroke is live right after it is drawn."""
        clock = FakeClock()
        engine = SimulationEngine(bus=bus, config=app_config, store=store, clock=clock)
        await engine.start_game()

        assert await engine.add_stroke([(10, 10), (20, 20), (30, 30)]) is True

        snapshot, _ = await engine.step()
        assert len(snapshot.paths) == 1
        assert snapshot.paths[0].points == [(10, 10), (20, 20), (30, 30)]

    @pytest.mark.asyncio
    async def test_paths_expire(self, bus, app_config, store):
        """Strokes older than their lifetime stop steering."""
        clock = FakeClock()
        engine = SimulationEngine(bus=bus, config=app_config, store=store, clock=clock)
        await engine.start_game()
        await engine.begin_path(100, 100)
        assert await engine.extend_path(110, 100) is True
        await engine.end_path()

        clock.now = 1500
        snapshot, _ = await engine.step()
        assert snapshot.paths[0].life == pytest.approx(0.5)

        clock.now = 3500
        snapshot, _ = await engine.step()
        assert snapshot.paths == []

    @pytest.mark.asyncio
    async def test_extend_without_stroke(self, engine):
        """Extending with nothing in progress is refused."""
        await engine.start_game()
        assert await engine.extend_path(5, 5) is False

    @pytest.mark.asyncio
    async def test_restart_clears_paths(self, engine):
        """A new game starts with no strokes."""
        await engine.start_game()
        await engine.add_stroke([(10, 10)])
        await engine.restart()
        snapshot = await engine.get_snapshot()
        assert snapshot.paths == []


class TestEnginePreferences:
    """Tests for preference persistence through the engine."""

    @pytest.mark.asyncio
    async def test_set_sound_persists(self, engine, store):
        """Muting is stored for the next run."""
        assert await engine.set_sound(False) is False
        assert store.load_sound_enabled() is False

    @pytest.mark.asyncio
    async def test_sound_loaded_on_creation(self, bus, app_config, store):
        """A stored mute is honoured by a fresh engine."""
        store.save_sound_enabled(False)
        engine = SimulationEngine(bus=bus, config=app_config, store=store)
        assert engine.game.sound_enabled is False

    @pytest.mark.asyncio
    async def test_game_over_saves_high_score(self, engine, store):
        """Game over through the engine records the best score."""
        await engine.start_game()
        drain(engine.game)
        engine.game.session.score = 70

        snapshot, out = await engine.step()

        assert out[-1]["kind"] == "game_over"
        assert snapshot.state == GameState.GAME_OVER
        assert store.load_high_score() == 70

    @pytest.mark.asyncio
    async def test_resize(self, engine):
        """Resize reaches the running session."""
        await engine.start_game()
        await engine.resize(1000, 700)
        snapshot = await engine.get_snapshot()
        assert (snapshot.width, snapshot.height) == (1000, 700)


class TestEngineLoop:
    """Tests for the running loop across level and game transitions."""

    @pytest.mark.asyncio
    async def test_loop_survives_level_up_and_game_over(self, engine, bus, store):
        """The loop publishes level-up and game over and keeps running."""
        sub = await bus.subscribe("events", max_queue_size=1000, topics=[EVENT_TOPIC])
        await engine.start_game()
        session = engine.game.session
        session.obstacles = []
        session.collection_points = [CollectionPoint(200, 200, value=10)]
        session.emitters[0].particles.append(Particle(200.0, 200.0))

        await engine.start()
        level_up = await next_event(sub, "level_complete")
        assert level_up["level"] == 2
        assert not engine._task.done()

        async with engine._lock:
            drain(engine.game)
            engine.game.session.score = 500
        over = await next_event(sub, "game_over")
        assert over["score"] == 500
        assert over["high_score"] == 500

        await asyncio.sleep(0.05)
        assert not engine._task.done()
        assert engine.game_state == GameState.GAME_OVER
        assert store.load_high_score() == 500
        await engine.stop()
