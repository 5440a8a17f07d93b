"""Pytest fixtures for all tests."""

import random

import pytest
from httpx import AsyncClient, ASGITransport

from communication.bus import EventBus
from config import Config, GameConfig, LoggingConfig, SimulationConfig, StorageConfig
from simulation.engine import SimulationEngine
from simulation.entities import Particle
from simulation.level import Difficulty, LevelGenerator
from simulation.session import SessionState
from simulation.world import World
from storage.preferences import PreferenceStore
from ui.app import create_app


@pytest.fixture
def rng():
    """Seeded RNG so placement tests are repeatable."""
    return random.Random(1234)


@pytest.fixture
def world():
    """Create a test world."""
    return World(width=800, height=600)


@pytest.fixture
def particle():
    """A resting particle away from the canvas edges."""
    return Particle(100.0, 100.0)


@pytest.fixture
def session(rng):
    """Session with an empty layout and no random power-up spawns."""
    generator = LevelGenerator(rng)
    return SessionState.create(800, 600, generator, Difficulty(power_up_chance=0.0))


@pytest.fixture
def store(tmp_path):
    """Preference store in a temp directory."""
    return PreferenceStore(tmp_path / "prefs.json")


@pytest.fixture
def app_config(tmp_path):
    """Full config pointing every file into a temp directory."""
    return Config(
        simulation=SimulationConfig(tick_interval=0.01, canvas_width=800, canvas_height=600, seed=7),
        game=GameConfig(power_up_chance=0.0),
        logging=LoggingConfig(file=str(tmp_path / "logs" / "game.log"), crash_file=str(tmp_path / "logs" / "crash.log")),
        storage=StorageConfig(file=str(tmp_path / "prefs.json")),
    )


@pytest.fixture
async def bus():
    """Create test event bus."""
    return EventBus(queue_size=10)


@pytest.fixture
async def engine(bus, app_config, store):
    """Create test simulation engine."""
    eng = SimulationEngine(bus=bus, config=app_config, store=store)
    yield eng
    if eng._task:
        await eng.stop()


@pytest.fixture
async def app(app_config):
    """Create test FastAPI app."""
    return create_app(app_config)


@pytest.fixture
async def client(app):
    """Create async test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
