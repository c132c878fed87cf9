"""
AttractorSource - a point that pulls nearby vein nodes toward it until consumed.
"""

from typing import List

from .vector import Vector2D


class AttractorSource:
    __slots__ = ('position', 'influence_radius', 'consume_radius', 'alive', 'influencing')

    def __init__(self, position, influence_radius: float, consume_radius: float):
        if influence_radius <= 0 or consume_radius <= 0:
            raise ValueError(
                f"radii must be positive, got influence={influence_radius}, consume={consume_radius}"
            )
        self.position = Vector2D.from_any(position)
        self.influence_radius = float(influence_radius)
        self.consume_radius = float(consume_radius)
        self.alive = True
        # Node indices sensing this source during the current step only
        self.influencing: List[int] = []

    def distance_to(self, point) -> float:
        return self.position.distance_to(Vector2D.from_any(point))

    def is_within_influence(self, point) -> bool:
        return self.distance_to(point) <= self.influence_radius

    def is_consumed_by(self, point) -> bool:
        return self.distance_to(point) <= self.consume_radius

    def kill(self):
        self.alive = False

    def __repr__(self) -> str:
        status = "alive" if self.alive else "dead"
        return f"AttractorSource({self.position}, {status})"
