import asyncio
import time
from communication.bus import EVENT_TOPIC, STATE_TOPIC
from config import load_config
from internal.logging import get_logger
from simulation.game import Game, GameState
from simulation.paths import PathTracker
from utils.timestamp import now_millis

class EngineState:
    STOPPED = "stopped"
    RUNNING = "running"

class SimulationEngine:
    """Drives ``Game`` ticks on the event loop and publishes what comes out.

    Every mutation (ticks, control, input, resize) happens under one lock, so a
    tick is never interleaved with anything else.
    """

    def __init__(self, bus, config=None, store=None, clock=now_millis):
        self.bus = bus
        self.config = config or load_config()
        self.store = store
        self.clock = clock
        self._lock = asyncio.Lock()
        self._log = get_logger()
        sim, game_config = self.config.simulation, self.config.game
        self.game = Game(game_config, sim.canvas_width, sim.canvas_height, store=store, seed=sim.seed)
        if store is not None:
            self.game.sound_enabled = store.load_sound_enabled()
        self.paths = PathTracker(game_config.max_paths, game_config.path_lifetime_ms, game_config.max_path_points)
        self._state = EngineState.STOPPED
        self._task = None
        self._stop = asyncio.Event()
        self.loop_ticks = 0

    @property
    def state(self):
        return self._state

    @property
    def game_state(self):
        return self.game.state

    @property
    def paused(self):
        return self.game.paused

    @property
    def tick(self):
        return self.game.session.tick if self.game.session else 0

    def context(self):
        """Crash-report context; read without the lock on purpose."""
        session = self.game.session
        data = {"engine": self._state, "game": self.game.state}
        if session is not None:
            data.update(session.context())
        return data

    async def start(self):
        if self._task:
            return
        self._stop.clear()
        self._state = EngineState.RUNNING
        self._task = asyncio.create_task(self._loop())

    async def stop(self):
        self._stop.set()
        if self._task:
            await self._task
            self._task = None
        self._state = EngineState.STOPPED
        await self.bus.publish({"kind": "engine_stopped", "tick": self.tick}, EVENT_TOPIC)

    async def _apply(self, action):
        async with self._lock:
            out = action()
        await self.bus.publish_all(out, EVENT_TOPIC)
        return out

    async def start_game(self):
        def action():
            self.paths.clear()
            return self.game.start()
        return await self._apply(action)

    async def restart(self):
        return await self.start_game()

    async def toggle_pause(self):
        return await self._apply(self.game.toggle_pause)

    async def set_visibility(self, hidden):
        return await self._apply(lambda: self.game.set_visibility(hidden))

    async def resize(self, width, height):
        out = await self._apply(lambda: self.game.resize(width, height))
        self._log.info("canvas resized", width=width, height=height)
        return out

    async def set_sound(self, enabled):
        async with self._lock:
            self.game.sound_enabled = bool(enabled)
        if self.store is not None:
            self.store.save_sound_enabled(enabled)
        return self.game.sound_enabled

    async def begin_path(self, x, y):
        async with self._lock:
            if not self.game.playing:
                return False
            self.paths.begin(x, y, self.clock())
            return True

    async def extend_path(self, x, y):
        async with self._lock:
            return self.paths.extend(x, y)

    async def end_path(self):
        async with self._lock:
            self.paths.end()

    async def add_stroke(self, points):
        async with self._lock:
            if not self.game.playing:
                return False
            return self.paths.add_stroke(points, self.clock()) is not None

    async def clear_paths(self):
        async with self._lock:
            self.paths.clear()

    async def get_snapshot(self):
        async with self._lock:
            return self.game.snapshot(self.paths.get_active_paths(), self.clock())

    async def step(self):
        """Run one tick now; returns ``(snapshot, events)`` or ``(None, [])`` when not playing."""
        async with self._lock:
            if self.game.state != GameState.PLAYING:
                return None, []
            now = self.clock()
            self.paths.update(now)
            paths = self.paths.get_active_paths()
            out = self.game.tick(paths, now)
            snapshot = self.game.snapshot(paths, now)
        return snapshot, out

    async def _loop(self):
        tick_interval = self.config.simulation.tick_interval
        snapshot_every = max(1, self.config.simulation.snapshot_every)
        next_tick_time = time.perf_counter()
        self._log.info(f"engine start dt={tick_interval}")

        while not self._stop.is_set():
            wait_time = next_tick_time - time.perf_counter()
            if wait_time > 0:
                try:
                    await asyncio.wait_for(self._stop.wait(), timeout=wait_time)
                    break
                except asyncio.TimeoutError:
                    pass
            next_tick_time += tick_interval

            try:
                snapshot, out = await self.step()
            except Exception as exc:
                self._log.error("tick fail", error=exc, **self.context())
                continue

            if snapshot is None:
                continue
            self.loop_ticks += 1
            await self.bus.publish_all(out, EVENT_TOPIC)
            # Game over freezes the world, so always ship the final frame.
            if self.loop_ticks % snapshot_every == 0 or snapshot.state != GameState.PLAYING:
                await self.bus.publish(snapshot, STATE_TOPIC)

        self._log.info(f"engine stop tick={self.tick}")
