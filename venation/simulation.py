"""
Simulation context: the scene (boundary, obstacles, network) plus
presentation flags, driven by explicit commands between ticks.
"""

from dataclasses import dataclass
from typing import List, Optional, Union

from .config import VenationConfig
from .geometry import Polygon, is_free
from .network import GrowthNetwork, StepResult
from .shapes import BoundaryShape, build_obstacles
from .sources import sources_from_config


@dataclass(frozen=True)
class Reset:
    """Rebuild sources and roots; switch boundary shape when `shape` is given."""
    shape: Optional[BoundaryShape] = None


@dataclass(frozen=True)
class ToggleBoundsVisible:
    pass


@dataclass(frozen=True)
class ToggleObstaclesVisible:
    pass


Command = Union[Reset, ToggleBoundsVisible, ToggleObstaclesVisible]

KEY_COMMANDS = {
    'r': Reset(),
    'b': ToggleBoundsVisible(),
    'o': ToggleObstaclesVisible(),
    '1': Reset(BoundaryShape.TRIANGLE),
    '2': Reset(BoundaryShape.SQUARE),
    '3': Reset(BoundaryShape.CIRCLE),
    '4': Reset(BoundaryShape.LEAF),
}


def command_for_key(key: str) -> Optional[Command]:
    return KEY_COMMANDS.get(key)


class Simulation:
    def __init__(self, config: Optional[VenationConfig] = None):
        self.config = config or VenationConfig()
        self.shape = BoundaryShape.from_name(self.config.shape)
        self.show_bounds = self.config.show_bounds
        self.show_obstacles = self.config.show_obstacles
        self.frame = 0

        self.boundary: Polygon = None
        self.obstacles: List[Polygon] = []
        self.network: GrowthNetwork = None

        self._setup_bounds()
        self._setup_obstacles()
        self._setup_network()

    def _setup_bounds(self):
        cx, cy = self.config.center
        self.boundary = self.shape.polygon(cx, cy, self.config)

    def _setup_obstacles(self):
        cx, cy = self.config.center
        self.obstacles = build_obstacles(self.config.obstacles, cx, cy)

    def _setup_network(self):
        cx, cy = self.config.center
        sources = sources_from_config(self.config, self.boundary, self.obstacles)
        network = GrowthNetwork(
            self.boundary, self.obstacles, sources, step_length=self.config.step_length
        )

        candidates = self.shape.roots(cx, cy, self.boundary, self.obstacles, self.config)
        for position in candidates:
            if is_free(position, self.boundary, self.obstacles):
                network.add_root(position)
            else:
                print(f"Warning: skipping root {position} outside the free area of the {self.shape.value} scene")

        self.network = network
        self.frame = 0

        print(f"Initialized {self.shape.value} scene:")
        print(f"  Sources: {len(network.sources)}")
        print(f"  Roots: {len(network.nodes)}")

    def apply(self, command: Command):
        """Apply a command. Call between ticks, never from inside one."""
        if isinstance(command, Reset):
            if command.shape is not None and command.shape is not self.shape:
                self.shape = command.shape
                self._setup_bounds()
            self._setup_network()
        elif isinstance(command, ToggleBoundsVisible):
            self.show_bounds = not self.show_bounds
        elif isinstance(command, ToggleObstaclesVisible):
            self.show_obstacles = not self.show_obstacles
        else:
            raise TypeError(f"Unknown command: {command!r}")

    def handle_key(self, key: str) -> bool:
        """Translate a key press into a command; returns False for unbound keys."""
        command = command_for_key(key)
        if command is None:
            return False
        self.apply(command)
        return True

    def tick(self) -> StepResult:
        """Advance one frame."""
        self.frame += 1
        return self.network.step()
