"""
Space colonization growth of 2D leaf-like vein networks.

Based on: "Modeling and visualization of leaf venation patterns"
by Runions, Fuhrer, Lane, Federl, Rolland-Lagan and Prusinkiewicz (2005).
"""

from .vector import Vector2D
from .geometry import Polygon, circle_points
from .attractor import AttractorSource
from .vein import VeinNode
from .network import GrowthNetwork, GrowthStatus, StepResult
from .sources import scatter_sources, grid_sources, InsufficientSpaceError
from .shapes import BoundaryShape
from .config import VenationConfig, load_config, save_config
from .simulation import (
    Simulation,
    Reset,
    ToggleBoundsVisible,
    ToggleObstaclesVisible,
    command_for_key,
)

__all__ = [
    'Vector2D',
    'Polygon',
    'circle_points',
    'AttractorSource',
    'VeinNode',
    'GrowthNetwork',
    'GrowthStatus',
    'StepResult',
    'scatter_sources',
    'grid_sources',
    'InsufficientSpaceError',
    'BoundaryShape',
    'VenationConfig',
    'load_config',
    'save_config',
    'Simulation',
    'Reset',
    'ToggleBoundsVisible',
    'ToggleObstaclesVisible',
    'command_for_key',
]
