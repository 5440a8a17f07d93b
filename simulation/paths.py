"""Player-drawn guide paths and the tracker that ages them."""

from simulation.geometry import require_finite
from simulation.state import PathState


class Path:
    """A bounded polyline whose life fades with wall-clock age, not ticks."""

    def __init__(self, started_at, lifetime_ms=3000, max_points=100):
        self.points = []
        self.started_at = started_at
        self.lifetime_ms = lifetime_ms
        self.max_points = max_points
        self.life = 1.0
        self.active = True

    def add_point(self, x, y):
        require_finite(x=x, y=y)
        self.points.append((x, y))
        if len(self.points) > self.max_points:
            del self.points[0]

    def update(self, now_ms):
        age = now_ms - self.started_at
        if age > self.lifetime_ms:
            self.life = 0.0
            self.active = False
        else:
            self.life = 1 - max(age, 0) / self.lifetime_ms

    def to_state(self):
        return PathState(list(self.points), self.life)


class PathTracker:
    """Collects strokes from the input surface and serves the live ones each tick."""

    def __init__(self, max_paths=5, lifetime_ms=3000, max_points=100):
        self.max_paths = max_paths
        self.lifetime_ms = lifetime_ms
        self.max_points = max_points
        self.paths = []
        self.current = None

    def begin(self, x, y, now_ms):
        path = Path(now_ms, self.lifetime_ms, self.max_points)
        path.add_point(x, y)
        self.current = path
        self.paths.append(path)
        if len(self.paths) > self.max_paths:
            del self.paths[0]
        return path

    def extend(self, x, y):
        """Append to the stroke in progress; ignored when nothing is being drawn."""
        if self.current is None or not self.current.active:
            return False
        self.current.add_point(x, y)
        return True

    def end(self):
        self.current = None

    def add_stroke(self, points, now_ms):
        """Record a finished stroke in one call."""
        if not points:
            return None
        for px, py in points:
            require_finite(x=px, y=py)
        (x, y), rest = points[0], points[1:]
        path = self.begin(x, y, now_ms)
        for px, py in rest:
            path.add_point(px, py)
        self.end()
        return path

    def update(self, now_ms):
        for path in self.paths:
            path.update(now_ms)
        self.paths = [path for path in self.paths if path.active]
        if self.current is not None and not self.current.active:
            self.current = None

    def get_active_paths(self):
        return [path for path in self.paths if path.active]

    def clear(self):
        self.paths = []
        self.current = None
