"""
VeinNode - a single node of the growing vein forest.
"""

from dataclasses import dataclass
from typing import Optional

from .vector import Vector2D


@dataclass(frozen=True, eq=False)
class VeinNode:
    """
    Immutable node. `parent` is the index of the parent node in the owning
    network's node list (None for roots), never a reference to the node.
    """
    index: int
    position: Vector2D
    parent: Optional[int] = None

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def __repr__(self) -> str:
        return f"VeinNode(#{self.index} {self.position} parent={self.parent})"
