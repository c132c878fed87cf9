"""
Attractor source patterns.

Provides two placement methods:
- scatter: uniform random sampling within the boundary, avoiding obstacles
- grid: regular lattice over the boundary's bounding box, row-major
"""

from typing import List, Sequence

import numpy as np

from .attractor import AttractorSource
from .geometry import Polygon, free_mask


class InsufficientSpaceError(RuntimeError):
    """Raised when rejection sampling cannot find free space for a source."""

    def __init__(self, accepted: int, requested: int, max_attempts: int):
        self.accepted = accepted
        self.requested = requested
        self.max_attempts = max_attempts
        super().__init__(
            f"Placed {accepted}/{requested} sources before {max_attempts} consecutive "
            f"samples fell outside the free area"
        )


def scatter_sources(
    count: int,
    boundary: Polygon,
    obstacles: Sequence[Polygon] = (),
    influence_radius: float = 100.0,
    consume_radius: float = 5.0,
    max_attempts: int = 10_000,
) -> List[AttractorSource]:
    """
    Sample `count` sources uniformly inside the boundary and outside all obstacles.

    Args:
        count: Number of sources to place
        boundary: Polygon the sources must lie in
        obstacles: Polygons the sources must avoid
        max_attempts: Consecutive rejected samples allowed before giving up

    Raises:
        InsufficientSpaceError: when `max_attempts` samples in a row are rejected
    """
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    min_x, min_y, max_x, max_y = boundary.bounding_box
    accepted: List[np.ndarray] = []
    rejected_in_a_row = 0

    while len(accepted) < count:
        batch_size = min(max(2 * (count - len(accepted)), 64), max_attempts)
        candidates = np.column_stack([
            np.random.uniform(min_x, max_x, batch_size),
            np.random.uniform(min_y, max_y, batch_size),
        ])
        ok = free_mask(candidates, boundary, obstacles)

        for point, is_ok in zip(candidates, ok):
            if is_ok:
                accepted.append(point)
                rejected_in_a_row = 0
                if len(accepted) == count:
                    break
            else:
                rejected_in_a_row += 1
                if rejected_in_a_row >= max_attempts:
                    raise InsufficientSpaceError(len(accepted), count, max_attempts)

    return [AttractorSource(p, influence_radius, consume_radius) for p in accepted]


def grid_sources(
    dx: float,
    dy: float,
    boundary: Polygon,
    obstacles: Sequence[Polygon] = (),
    influence_radius: float = 100.0,
    consume_radius: float = 5.0,
) -> List[AttractorSource]:
    """Lattice of sources with spacing (dx, dy), traversed row by row from the box's min corner."""
    if dx <= 0 or dy <= 0:
        raise ValueError(f"grid spacing must be positive, got ({dx}, {dy})")

    min_x, min_y, max_x, max_y = boundary.bounding_box
    xs = min_x + dx * np.arange(int(np.floor((max_x - min_x) / dx)) + 1)
    ys = min_y + dy * np.arange(int(np.floor((max_y - min_y) / dy)) + 1)

    grid_x, grid_y = np.meshgrid(xs, ys)
    candidates = np.column_stack([grid_x.ravel(), grid_y.ravel()])
    ok = free_mask(candidates, boundary, obstacles)

    return [AttractorSource(p, influence_radius, consume_radius) for p in candidates[ok]]


def sources_from_config(config, boundary: Polygon, obstacles: Sequence[Polygon] = ()) -> List[AttractorSource]:
    """Build the configured source pattern."""
    if config.source_pattern == 'random':
        return scatter_sources(
            config.num_sources, boundary, obstacles,
            influence_radius=config.influence_radius,
            consume_radius=config.consume_radius,
            max_attempts=config.max_attempts,
        )
    dx, dy = config.grid_spacing
    return grid_sources(
        dx, dy, boundary, obstacles,
        influence_radius=config.influence_radius,
        consume_radius=config.consume_radius,
    )
