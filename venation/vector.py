"""
Simple 2D Vector class used for node and source positions.
"""

import numpy as np


class Vector2D:
    __slots__ = ('x', 'y')

    def __init__(self, x: float = 0.0, y: float = 0.0):
        self.x = float(x)
        self.y = float(y)

    def __sub__(self, other: 'Vector2D') -> 'Vector2D':
        return Vector2D(self.x - other.x, self.y - other.y)

    def __iter__(self):
        yield self.x
        yield self.y

    def __repr__(self) -> str:
        return f"Vector2D({self.x:.2f}, {self.y:.2f})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vector2D):
            return NotImplemented
        return bool(np.isclose(self.x, other.x) and np.isclose(self.y, other.y))

    __hash__ = None

    @property
    def magnitude(self) -> float:
        return float(np.hypot(self.x, self.y))

    def distance_to(self, other: 'Vector2D') -> float:
        return (self - other).magnitude

    def to_tuple(self) -> tuple:
        return (self.x, self.y)

    @classmethod
    def from_any(cls, value) -> 'Vector2D':
        """Accept a Vector2D, an (x, y) tuple/list or a length-2 array."""
        if isinstance(value, Vector2D):
            return value
        return cls(value[0], value[1])
