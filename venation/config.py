"""
Configuration for the venation simulation.
"""

from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Tuple, Optional, Literal
import json

import numpy as np

from .profiling import profiler

SourcePattern = Literal['grid', 'random']
ObstacleLayout = Literal['center', 'none']


@dataclass
class VenationConfig:
    # Scene
    shape: str = 'triangle'           # triangle, square, circle, leaf
    obstacles: ObstacleLayout = 'center'
    width: int = 1200
    height: int = 900
    leaf_svg_path: Optional[str] = None  # None = built-in leaf outline

    # Attractor sources
    source_pattern: SourcePattern = 'grid'
    num_sources: int = 500            # used by the random pattern
    grid_spacing: Tuple[float, float] = (20.0, 20.0)
    max_attempts: int = 10_000        # consecutive rejections allowed per random source
    influence_radius: float = 100.0
    consume_radius: float = 5.0

    # Growth
    step_length: float = 5.0
    num_square_roots: int = 10
    max_iterations: int = 1000
    stagnation_limit: int = 200       # stop if no source is consumed for this many steps

    # Presentation
    show_sources: bool = True
    show_attraction_zones: bool = False
    show_bounds: bool = True
    show_obstacles: bool = True
    animate: bool = False
    frame_skip: int = 5

    output_dir: str = 'outputs/venation'
    random_seed: Optional[int] = None
    profile: bool = False

    def __post_init__(self):
        self.grid_spacing = tuple(float(v) for v in self.grid_spacing)

        if self.influence_radius <= 0 or self.consume_radius <= 0:
            raise ValueError("influence_radius and consume_radius must be positive")
        if self.step_length <= 0:
            raise ValueError(f"step_length must be positive, got {self.step_length}")
        if len(self.grid_spacing) != 2 or min(self.grid_spacing) <= 0:
            raise ValueError(f"grid_spacing must be two positive numbers, got {self.grid_spacing}")
        if self.num_sources < 0:
            raise ValueError(f"num_sources must be non-negative, got {self.num_sources}")
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.source_pattern not in ('grid', 'random'):
            raise ValueError(f"Unknown source pattern: {self.source_pattern!r}")
        if self.obstacles not in ('center', 'none'):
            raise ValueError(f"Unknown obstacle layout: {self.obstacles!r}")

        if self.random_seed is not None:
            np.random.seed(self.random_seed)
        profiler.enabled = self.profile

    @property
    def center(self) -> Tuple[float, float]:
        return self.width / 2, self.height / 2

    @property
    def shape_name(self) -> str:
        return self.shape.lower()

    @property
    def network_data_path(self) -> Path:
        return Path(self.output_dir) / f'{self.shape_name}_network.json'

    @property
    def network_image_path(self) -> Path:
        return Path(self.output_dir) / f'{self.shape_name}_network.png'

    @property
    def animation_path(self) -> Path:
        return Path(self.output_dir) / f'{self.shape_name}_growth.gif'

    @property
    def stats_path(self) -> Path:
        return Path(self.output_dir) / f'{self.shape_name}_stats.png'


def load_config(path: str = 'config/venation.json') -> VenationConfig:
    """Load config from JSON file, with defaults for missing fields."""
    config_path = Path(path)
    if not config_path.exists():
        return VenationConfig()

    with open(config_path, 'r') as f:
        data = json.load(f)

    known = {f.name for f in fields(VenationConfig)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown config fields: {sorted(unknown)}")

    return VenationConfig(**data)


def save_config(config: VenationConfig, path: str = 'config/venation.json'):
    """Save config to JSON file."""
    config_path = Path(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = asdict(config)
    data['grid_spacing'] = list(config.grid_spacing)

    with open(config_path, 'w') as f:
        json.dump(data, f, indent=2)

    print(f"Saved config to {config_path}")
