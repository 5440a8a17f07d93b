"""World defines the canvas the simulation plays on."""

from simulation.geometry import require_positive


class World:
    """Canvas bounds; re-read by level generation, spawning and pruning."""

    def __init__(self, width, height):
        require_positive(width=width, height=height)
        self.width = width
        self.height = height

    def resize(self, width, height):
        require_positive(width=width, height=height)
        self.width = width
        self.height = height
