import json
from pathlib import Path

_DEFAULT_CONFIG = Path(__file__).parent / "config.json"


class SimulationConfig:
    __slots__ = ("tick_interval", "canvas_width", "canvas_height", "seed", "snapshot_every")

    def __init__(self, tick_interval=1 / 60, canvas_width=800, canvas_height=600, seed=None, snapshot_every=1):
        self.tick_interval = tick_interval
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height
        self.seed = seed
        self.snapshot_every = snapshot_every


class GameConfig:
    __slots__ = ("obstacle_count", "collection_point_count", "power_up_chance", "power_up_chance_cap",
                 "placement_attempts", "game_over_grace_ticks", "emitter_budget",
                 "max_paths", "path_lifetime_ms", "max_path_points")

    def __init__(self, obstacle_count=3, collection_point_count=3, power_up_chance=0.01, power_up_chance_cap=0.05,
                 placement_attempts=50, game_over_grace_ticks=60, emitter_budget=None,
                 max_paths=5, path_lifetime_ms=3000, max_path_points=100):
        self.obstacle_count = obstacle_count
        self.collection_point_count = collection_point_count
        self.power_up_chance = power_up_chance
        self.power_up_chance_cap = power_up_chance_cap
        self.placement_attempts = placement_attempts
        self.game_over_grace_ticks = game_over_grace_ticks
        self.emitter_budget = emitter_budget
        self.max_paths = max_paths
        self.path_lifetime_ms = path_lifetime_ms
        self.max_path_points = max_path_points


class ServerConfig:
    __slots__ = ("host", "port")

    def __init__(self, host="127.0.0.1", port=8080):
        self.host = host
        self.port = port


class LoggingConfig:
    __slots__ = ("level", "file", "crash_file")

    def __init__(self, level="INFO", file="logs/particle_dance.log", crash_file="logs/crash.log"):
        self.level = level
        self.file = file
        self.crash_file = crash_file


class StorageConfig:
    __slots__ = ("file",)

    def __init__(self, file="data/preferences.json"):
        self.file = file


class Config:
    __slots__ = ("simulation", "game", "server", "logging", "storage")

    def __init__(self, simulation=None, game=None, server=None, logging=None, storage=None):
        self.simulation = simulation or SimulationConfig()
        self.game = game or GameConfig()
        self.server = server or ServerConfig()
        self.logging = logging or LoggingConfig()
        self.storage = storage or StorageConfig()

    @classmethod
    def from_dict(cls, d):
        return cls(
            SimulationConfig(**d.get("simulation", {})),
            GameConfig(**d.get("game", {})),
            ServerConfig(**d.get("server", {})),
            LoggingConfig(**d.get("logging", {})),
            StorageConfig(**d.get("storage", {})),
        )


def load_config(path=None):
    config_path = Path(path) if path else _DEFAULT_CONFIG

    if not config_path.exists():
        return Config()

    with open(config_path) as file:
        return Config.from_dict(json.load(file))
