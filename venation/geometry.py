"""
Closed polygons used as growth boundaries and obstacles.

Containment uses the even-odd crossing rule, so convex and non-convex
outlines (leaf shapes) behave the same way. Points lying on an edge or a
vertex count as inside.
"""

from typing import Iterable, Tuple, Union

import numpy as np

from .vector import Vector2D


PointLike = Union[Vector2D, Tuple[float, float], np.ndarray]

_EDGE_TOLERANCE = 1e-9


def _orientation(ax, ay, bx, by, cx, cy):
    return (bx - ax) * (cy - ay) - (by - ay) * (cx - ax)


def _within_box(ax, ay, bx, by, px, py, tol):
    return (
        (px >= np.minimum(ax, bx) - tol) & (px <= np.maximum(ax, bx) + tol) &
        (py >= np.minimum(ay, by) - tol) & (py <= np.maximum(ay, by) + tol)
    )


def _dedupe_vertices(points: np.ndarray) -> np.ndarray:
    """Drop consecutive duplicates and an explicit closing vertex."""
    keep = np.ones(len(points), dtype=bool)
    keep[1:] = np.any(points[1:] != points[:-1], axis=1)
    points = points[keep]
    if len(points) > 1 and np.all(points[0] == points[-1]):
        points = points[:-1]
    return points


def _segments_touch(a: np.ndarray, b: np.ndarray, c: np.ndarray, d: np.ndarray, tol: float) -> np.ndarray:
    """Elementwise test of segments a[k]-b[k] against c[k]-d[k]; touching counts."""
    ax, ay, bx, by = a[:, 0], a[:, 1], b[:, 0], b[:, 1]
    cx, cy, dx, dy = c[:, 0], c[:, 1], d[:, 0], d[:, 1]

    d1 = _orientation(cx, cy, dx, dy, ax, ay)
    d2 = _orientation(cx, cy, dx, dy, bx, by)
    d3 = _orientation(ax, ay, bx, by, cx, cy)
    d4 = _orientation(ax, ay, bx, by, dx, dy)

    s1, s2, s3, s4 = (np.where(np.abs(d) <= tol, 0.0, np.sign(d)) for d in (d1, d2, d3, d4))

    proper = (s1 * s2 < 0) & (s3 * s4 < 0)
    touching = (
        ((s1 == 0) & _within_box(cx, cy, dx, dy, ax, ay, tol)) |
        ((s2 == 0) & _within_box(cx, cy, dx, dy, bx, by, tol)) |
        ((s3 == 0) & _within_box(ax, ay, bx, by, cx, cy, tol)) |
        ((s4 == 0) & _within_box(ax, ay, bx, by, dx, dy, tol))
    )
    return proper | touching


def _has_self_intersection(points: np.ndarray, tol: float, block: int = 256) -> bool:
    """
    Check every pair of non-adjacent edges, one block of rows at a time.
    Only pairs whose bounding boxes overlap reach the orientation test,
    so memory stays at block * n booleans.
    """
    n = len(points)
    if n < 4:
        return False

    a = points
    b = np.roll(points, -1, axis=0)
    lo = np.minimum(a, b) - tol
    hi = np.maximum(a, b) + tol
    cols = np.arange(n)

    for start in range(0, n - 2, block):
        stop = min(start + block, n)
        rows = np.arange(start, stop)[:, None]

        overlap = (
            (lo[start:stop, None, 0] <= hi[None, :, 0]) & (hi[start:stop, None, 0] >= lo[None, :, 0]) &
            (lo[start:stop, None, 1] <= hi[None, :, 1]) & (hi[start:stop, None, 1] >= lo[None, :, 1])
        )
        # edges i and j share a vertex when j == i + 1 or (i, j) == (0, n - 1)
        overlap &= cols[None, :] >= rows + 2
        if start == 0:
            overlap[0, n - 1] = False

        i, j = np.nonzero(overlap)
        if len(i) == 0:
            continue
        i += start
        if np.any(_segments_touch(a[i], b[i], a[j], b[j], tol)):
            return True

    return False


class Polygon:
    """Immutable simple polygon answering point-in-polygon queries."""

    __slots__ = ('_points', '_bbox', '_tolerance')

    def __init__(self, points: Iterable[PointLike], validate: bool = True):
        arr = np.array([tuple(Vector2D.from_any(p)) for p in points], dtype=float)
        if arr.ndim != 2 or len(arr) == 0:
            raise ValueError("Polygon needs at least 3 points")
        if not np.all(np.isfinite(arr)):
            raise ValueError("Polygon coordinates must be finite")

        arr = _dedupe_vertices(arr)
        if len(arr) < 3:
            raise ValueError(f"Polygon needs at least 3 distinct points, got {len(arr)}")

        mins = arr.min(axis=0)
        maxs = arr.max(axis=0)
        extent = float(np.max(maxs - mins))
        self._tolerance = _EDGE_TOLERANCE * max(1.0, extent)

        if validate:
            if abs(_signed_area(arr)) <= self._tolerance * max(1.0, extent):
                raise ValueError("Polygon has zero area")
            if _has_self_intersection(arr, self._tolerance * max(1.0, extent)):
                raise ValueError("Polygon is self-intersecting")

        arr.setflags(write=False)
        self._points = arr
        self._bbox = (float(mins[0]), float(mins[1]), float(maxs[0]), float(maxs[1]))

    @property
    def points(self) -> np.ndarray:
        """(N, 2) read-only vertex array, not closed."""
        return self._points

    @property
    def bounding_box(self) -> Tuple[float, float, float, float]:
        """(min_x, min_y, max_x, max_y)."""
        return self._bbox

    @property
    def area(self) -> float:
        return abs(_signed_area(self._points))

    def __len__(self) -> int:
        return len(self._points)

    def __repr__(self) -> str:
        return f"Polygon({len(self._points)} points, bbox={self._bbox})"

    def translated(self, dx: float, dy: float) -> 'Polygon':
        return Polygon(self._points + np.array([dx, dy]), validate=False)

    def contains(self, point: PointLike) -> bool:
        p = Vector2D.from_any(point)
        return bool(self.contains_points(np.array([[p.x, p.y]]))[0])

    def contains_points(self, points: np.ndarray) -> np.ndarray:
        """Vectorized containment for an (M, 2) array; boundary points are inside."""
        pts = np.asarray(points, dtype=float).reshape(-1, 2)
        if len(pts) == 0:
            return np.zeros(0, dtype=bool)

        px, py = pts[:, 0], pts[:, 1]
        tol = self._tolerance
        min_x, min_y, max_x, max_y = self._bbox

        candidates = (px >= min_x - tol) & (px <= max_x + tol) & (py >= min_y - tol) & (py <= max_y + tol)
        inside = np.zeros(len(pts), dtype=bool)
        on_edge = np.zeros(len(pts), dtype=bool)

        a = self._points
        b = np.roll(self._points, -1, axis=0)
        for (ax, ay), (bx, by) in zip(a, b):
            edge_len = np.hypot(bx - ax, by - ay)
            cross = _orientation(ax, ay, bx, by, px, py)
            on_edge |= (np.abs(cross) <= tol * edge_len) & _within_box(ax, ay, bx, by, px, py, tol)

            straddles = (ay > py) != (by > py)
            with np.errstate(divide='ignore', invalid='ignore'):
                x_cross = ax + (py - ay) * (bx - ax) / (by - ay)
            inside ^= straddles & (px < x_cross)

        return candidates & (inside | on_edge)


def _signed_area(points: np.ndarray) -> float:
    x, y = points[:, 0], points[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1)))


def circle_points(cx: float, cy: float, radius: float, resolution: int) -> np.ndarray:
    """Vertices of a regular polygon approximating a circle."""
    if radius <= 0:
        raise ValueError(f"radius must be positive, got {radius}")
    if resolution < 3:
        raise ValueError(f"resolution must be at least 3, got {resolution}")
    angles = np.linspace(0.0, 2.0 * np.pi, resolution, endpoint=False)
    return np.column_stack([cx + radius * np.cos(angles), cy + radius * np.sin(angles)])


def is_free(point: PointLike, boundary: Polygon, obstacles: Iterable[Polygon] = ()) -> bool:
    """True when the point is inside the boundary and outside every obstacle."""
    if boundary is not None and not boundary.contains(point):
        return False
    return not any(obstacle.contains(point) for obstacle in obstacles)


def free_mask(points: np.ndarray, boundary: Polygon, obstacles: Iterable[Polygon] = ()) -> np.ndarray:
    """Vectorized `is_free` over an (M, 2) array."""
    pts = np.asarray(points, dtype=float).reshape(-1, 2)
    mask = np.ones(len(pts), dtype=bool) if boundary is None else boundary.contains_points(pts)
    for obstacle in obstacles:
        mask &= ~obstacle.contains_points(pts)
    return mask
