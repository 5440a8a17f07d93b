"""Read-only snapshots handed to the renderer and published on the bus."""

from utils.timestamp import format_timestamp


class ParticleState:
    __slots__ = ("x", "y", "size", "life", "color", "trail")

    def __init__(self, x, y, size, life, color, trail):
        self.x, self.y, self.size, self.life, self.color, self.trail = x, y, size, life, color, trail

    def to_dict(self):
        return {"x": self.x, "y": self.y, "size": self.size, "life": self.life, "color": self.color,
                "trail": [list(point) for point in self.trail]}


class EmitterState:
    __slots__ = ("x", "y", "color", "active", "particle_count", "max_particles")

    def __init__(self, x, y, color, active, particle_count, max_particles):
        self.x, self.y, self.color = x, y, color
        self.active, self.particle_count, self.max_particles = active, particle_count, max_particles

    def to_dict(self):
        return {"x": self.x, "y": self.y, "color": self.color, "active": self.active,
                "particle_count": self.particle_count, "max_particles": self.max_particles}


class ObstacleState:
    __slots__ = ("x", "y", "radius", "pulse_scale")

    def __init__(self, x, y, radius, pulse_scale):
        self.x, self.y, self.radius, self.pulse_scale = x, y, radius, pulse_scale

    def to_dict(self):
        return {"x": self.x, "y": self.y, "radius": self.radius, "pulse_scale": self.pulse_scale}


class CollectionPointState:
    __slots__ = ("x", "y", "radius", "value", "collected", "pulse_scale")

    def __init__(self, x, y, radius, value, collected, pulse_scale):
        self.x, self.y, self.radius = x, y, radius
        self.value, self.collected, self.pulse_scale = value, collected, pulse_scale

    def to_dict(self):
        return {"x": self.x, "y": self.y, "radius": self.radius, "value": self.value,
                "collected": self.collected, "pulse_scale": self.pulse_scale}


class PowerUpState:
    __slots__ = ("x", "y", "radius", "type", "color", "icon", "rotation", "pulse_scale", "duration")

    def __init__(self, x, y, radius, type, color, icon, rotation, pulse_scale, duration):
        self.x, self.y, self.radius = x, y, radius
        self.type, self.color, self.icon = type, color, icon
        self.rotation, self.pulse_scale, self.duration = rotation, pulse_scale, duration

    def to_dict(self):
        return {"x": self.x, "y": self.y, "radius": self.radius, "type": self.type, "color": self.color,
                "icon": self.icon, "rotation": self.rotation, "pulse_scale": self.pulse_scale,
                "duration": self.duration}


class PathState:
    __slots__ = ("points", "life")

    def __init__(self, points, life):
        self.points, self.life = points, life

    def to_dict(self):
        return {"points": [list(point) for point in self.points], "life": self.life}


class GameSnapshot:
    """Everything the renderer and UI chrome may read for one frame."""

    __slots__ = ("session_id", "timestamp", "tick", "state", "score", "level", "high_score", "sound_enabled",
                 "width", "height", "active_power_ups", "particles", "emitters", "obstacles",
                 "collection_points", "power_ups", "paths")

    def __init__(self, session_id, tick, state, score, level, high_score, sound_enabled, width, height,
                 active_power_ups, particles, emitters, obstacles, collection_points, power_ups, paths,
                 timestamp=None):
        self.session_id = session_id
        self.timestamp = timestamp or format_timestamp()
        self.tick = tick
        self.state = state
        self.score = score
        self.level = level
        self.high_score = high_score
        self.sound_enabled = sound_enabled
        self.width = width
        self.height = height
        self.active_power_ups = active_power_ups
        self.particles = particles
        self.emitters = emitters
        self.obstacles = obstacles
        self.collection_points = collection_points
        self.power_ups = power_ups
        self.paths = paths

    def to_dict(self):
        return {
            "session_id": self.session_id,
            "timestamp": self.timestamp,
            "tick": self.tick,
            "state": self.state,
            "score": self.score,
            "level": self.level,
            "high_score": self.high_score,
            "sound_enabled": self.sound_enabled,
            "width": self.width,
            "height": self.height,
            "active_power_ups": dict(self.active_power_ups),
            "particles": [p.to_dict() for p in self.particles],
            "emitters": [e.to_dict() for e in self.emitters],
            "obstacles": [o.to_dict() for o in self.obstacles],
            "collection_points": [c.to_dict() for c in self.collection_points],
            "power_ups": [p.to_dict() for p in self.power_ups],
            "paths": [p.to_dict() for p in self.paths],
        }
