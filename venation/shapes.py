"""
Named boundary shapes and the obstacle layouts used by the simulation.

Each BoundaryShape member has a registered outline generator and a
registered root placer. Supporting a new shape means adding a member and
registering both functions for it.

All coordinates are screen coordinates (y grows downward) around the
viewport center (cx, cy).
"""

from enum import Enum
from typing import Callable, Dict, List, Sequence

import numpy as np

from .geometry import Polygon, circle_points, is_free
from .svg import load_svg_polygons, translate_to_center
from .vector import Vector2D


class BoundaryShape(Enum):
    TRIANGLE = 'triangle'
    SQUARE = 'square'
    CIRCLE = 'circle'
    LEAF = 'leaf'

    @classmethod
    def from_name(cls, name: str) -> 'BoundaryShape':
        try:
            return cls(name.lower())
        except ValueError:
            options = ', '.join(s.value for s in cls)
            raise ValueError(f"Unknown boundary shape {name!r}, expected one of: {options}") from None

    def polygon(self, cx: float, cy: float, config=None) -> Polygon:
        return Polygon(_OUTLINES[self](cx, cy, config))

    def roots(self, cx: float, cy: float, boundary: Polygon, obstacles: Sequence[Polygon], config=None) -> List[Vector2D]:
        """Candidate root positions; callers keep only the free ones."""
        return _ROOT_PLACERS[self](cx, cy, boundary, obstacles, config)


_OUTLINES: Dict[BoundaryShape, Callable] = {}
_ROOT_PLACERS: Dict[BoundaryShape, Callable] = {}


def outline(shape: BoundaryShape):
    def register(func):
        _OUTLINES[shape] = func
        return func
    return register


def root_placer(shape: BoundaryShape):
    def register(func):
        _ROOT_PLACERS[shape] = func
        return func
    return register


# ---------------------------------------------------------------- outlines

@outline(BoundaryShape.TRIANGLE)
def triangle_outline(cx, cy, config=None) -> np.ndarray:
    return np.array([
        [cx - 400, cy + 300],
        [cx, cy - 350],
        [cx + 400, cy + 300],
    ], dtype=float)


@outline(BoundaryShape.SQUARE)
def square_outline(cx, cy, config=None, side_length: float = 800.0) -> np.ndarray:
    half = side_length / 2
    return np.array([
        [cx - half, cy - half],  # top left
        [cx + half, cy - half],  # top right
        [cx + half, cy + half],  # bottom right
        [cx - half, cy + half],  # bottom left
    ], dtype=float)


@outline(BoundaryShape.CIRCLE)
def circle_outline(cx, cy, config=None) -> np.ndarray:
    return circle_points(cx, cy, 350, 100)


@outline(BoundaryShape.LEAF)
def leaf_outline(cx, cy, config=None, design_size: float = 900.0) -> np.ndarray:
    """First outline of the configured SVG, or the built-in serrated leaf."""
    svg_path = getattr(config, 'leaf_svg_path', None)
    if svg_path:
        points = load_svg_polygons(svg_path)[0]
        return translate_to_center(points, cx, cy, design_size, design_size)
    return serrated_leaf(cx, cy)


def serrated_leaf(
    cx: float,
    cy: float,
    length: float = 660.0,
    half_width: float = 280.0,
    teeth: int = 9,
    tooth_depth: float = 0.03,
    resolution: int = 200,
) -> np.ndarray:
    """
    Leaf blade with its base at (cx, cy + 260) and its tip `length` above.
    The margin is serrated, so the outline is not convex.
    """
    s = np.linspace(0.0, 1.0, resolution)
    width = half_width * np.sin(np.pi * s) ** 0.8 * (1 - 0.35 * s)
    width *= 1 + tooth_depth * np.sin(2 * np.pi * teeth * s)
    y = cy + 260 - length * s

    right = np.column_stack([cx + width, y])
    left = np.column_stack([cx - width, y])[::-1][1:-1]
    return np.vstack([right, left])


# ------------------------------------------------------------ root placers

@root_placer(BoundaryShape.TRIANGLE)
def triangle_roots(cx, cy, boundary, obstacles, config=None) -> List[Vector2D]:
    return [Vector2D(cx - 340, cy + 290)]


@root_placer(BoundaryShape.CIRCLE)
def circle_roots(cx, cy, boundary, obstacles, config=None) -> List[Vector2D]:
    return [Vector2D(cx, cy + 300)]


@root_placer(BoundaryShape.SQUARE)
def square_roots(cx, cy, boundary, obstacles, config=None) -> List[Vector2D]:
    """Random roots scattered over the viewport, kept only when free."""
    count = getattr(config, 'num_square_roots', 10)
    width, height = 2 * cx, 2 * cy
    roots = []
    for _ in range(count):
        candidate = Vector2D(np.random.uniform(0, width), np.random.uniform(0, height))
        if is_free(candidate, boundary, obstacles):
            roots.append(candidate)
    return roots


@root_placer(BoundaryShape.LEAF)
def leaf_roots(cx, cy, boundary, obstacles, config=None) -> List[Vector2D]:
    # base of the leaf
    return [Vector2D(cx - 5, cy + 220)]


# -------------------------------------------------------------- obstacles

def build_obstacles(layout: str, cx: float, cy: float) -> List[Polygon]:
    if layout == 'none':
        return []
    if layout == 'center':
        return [Polygon(circle_points(cx, cy + 70, 200, 100))]
    raise ValueError(f"Unknown obstacle layout: {layout!r}")
