"""
Spatial index over vein node positions.
Uses scipy's cKDTree for nearest-node lookups instead of brute force.
"""

import numpy as np
from scipy.spatial import cKDTree

from .profiling import INDEX, profile

# Distances closer than this are treated as ties and resolved by node order
TIE_TOLERANCE = 1e-9


class NodeSpatialIndex:
    """KD-Tree over every node position (not only tips)."""

    def __init__(self):
        self._tree: cKDTree = None
        self._positions: np.ndarray = np.empty((0, 2))

    @profile(INDEX)
    def rebuild(self, positions: np.ndarray):
        self._positions = np.asarray(positions, dtype=float).reshape(-1, 2)
        self._tree = cKDTree(self._positions) if len(self._positions) else None

    def __len__(self) -> int:
        return len(self._positions)

    def nearest_within(self, points: np.ndarray, radii: np.ndarray) -> np.ndarray:
        """
        Index of the nearest node within radii[i] of points[i], or -1.
        Equidistant nodes resolve to the lowest index.
        """
        points = np.asarray(points, dtype=float).reshape(-1, 2)
        result = np.full(len(points), -1, dtype=int)
        if self._tree is None or len(points) == 0:
            return result

        radii = np.broadcast_to(np.asarray(radii, dtype=float), (len(points),))
        candidates = self._tree.query_ball_point(points, radii)

        for i, idx in enumerate(candidates):
            if not idx:
                continue
            idx = np.sort(np.asarray(idx, dtype=int))
            dists = np.linalg.norm(self._positions[idx] - points[i], axis=1)
            # ball query uses a tiny internal epsilon; keep the <= radius contract exact
            inside = dists <= radii[i]
            if not np.any(inside):
                continue
            idx, dists = idx[inside], dists[inside]
            ties = dists <= dists.min() + TIE_TOLERANCE
            result[i] = idx[np.argmax(ties)]
        return result

    def any_within(self, points: np.ndarray, radii: np.ndarray) -> np.ndarray:
        """Boolean mask: is any node within radii[i] of points[i]."""
        points = np.asarray(points, dtype=float).reshape(-1, 2)
        if self._tree is None or len(points) == 0:
            return np.zeros(len(points), dtype=bool)
        distances, _ = self._tree.query(points)
        return distances <= np.asarray(radii, dtype=float)

