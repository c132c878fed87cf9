"""
GrowthNetwork - owns the vein nodes and attractor sources and runs the
space colonization step.

Each alive source pulls its nearest node within influence range. Every
pulled node grows one segment toward the normalized sum of its pulls, as
long as the new position stays inside the boundary and out of every
obstacle. Sources reached by any node are consumed.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from .attractor import AttractorSource
from .geometry import Polygon, free_mask, is_free
from .profiling import CONSUMPTION, GROWTH, PAIRING, STEP, profile
from .spatial import NodeSpatialIndex
from .vector import Vector2D
from .vein import VeinNode


COINCIDENT_TOLERANCE = 1e-9


class GrowthStatus(Enum):
    GROWING = 'growing'      # the last step added nodes or consumed sources
    STALLED = 'stalled'      # sources remain but nothing can reach or grow toward them
    EXHAUSTED = 'exhausted'  # every source has been consumed


@dataclass(frozen=True)
class StepResult:
    iteration: int
    new_nodes: int
    consumed: int
    dormant: int   # alive sources with no node in influence range
    blocked: int   # nodes whose growth candidate was outside the free area or already occupied
    status: GrowthStatus

    @property
    def changed(self) -> bool:
        return self.new_nodes > 0 or self.consumed > 0


class GrowthNetwork:
    def __init__(
        self,
        boundary: Polygon,
        obstacles: Sequence[Polygon] = (),
        sources: Iterable[AttractorSource] = (),
        step_length: float = 5.0,
    ):
        if step_length <= 0:
            raise ValueError(f"step_length must be positive, got {step_length}")

        self.boundary = boundary
        self.obstacles: Tuple[Polygon, ...] = tuple(obstacles)
        self.step_length = float(step_length)

        self._nodes: List[VeinNode] = []
        self.sources: List[AttractorSource] = [s for s in sources if s.alive]
        self._positions = np.empty((0, 2))
        self._child_counts: List[int] = []
        self.spatial_index = NodeSpatialIndex()

        self.iteration = 0
        self.status = GrowthStatus.EXHAUSTED if not self.sources else GrowthStatus.GROWING
        self._stagnation_counter = 0

    # ------------------------------------------------------------------ setup

    def add_root(self, position) -> VeinNode:
        """Add a root node; it must lie in free space."""
        position = Vector2D.from_any(position)
        if not is_free(position, self.boundary, self.obstacles):
            raise ValueError(f"Root {position} is outside the boundary or inside an obstacle")
        node = self._append_nodes(np.array([position.to_tuple()]), [None])[0]
        self.spatial_index.rebuild(self._positions)
        return node

    def add_sources(self, sources: Iterable[AttractorSource]):
        self.sources.extend(s for s in sources if s.alive)
        if self.sources and self.status is GrowthStatus.EXHAUSTED:
            self.status = GrowthStatus.GROWING

    def _append_nodes(self, positions: np.ndarray, parents: List[Optional[int]]) -> List[VeinNode]:
        start = len(self._nodes)
        new_nodes = [
            VeinNode(start + i, Vector2D(x, y), parent)
            for i, ((x, y), parent) in enumerate(zip(positions, parents))
        ]
        self._nodes.extend(new_nodes)
        self._child_counts.extend([0] * len(new_nodes))
        for parent in parents:
            if parent is not None:
                self._child_counts[parent] += 1
        self._positions = np.vstack([self._positions, positions])
        return new_nodes

    # ------------------------------------------------------------ step phases

    def _source_arrays(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        positions = np.array([s.position.to_tuple() for s in self.sources]).reshape(-1, 2)
        influence = np.array([s.influence_radius for s in self.sources])
        consume = np.array([s.consume_radius for s in self.sources])
        return positions, influence, consume

    @profile(PAIRING)
    def _pair_sources(self, source_positions: np.ndarray, influence: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Nearest node per source (-1 if dormant) and the unit vector node -> source."""
        targets = self.spatial_index.nearest_within(source_positions, influence)
        paired = targets >= 0

        units = np.zeros_like(source_positions)
        diff = source_positions[paired] - self._positions[targets[paired]]
        norms = np.linalg.norm(diff, axis=1, keepdims=True)
        safe = norms[:, 0] > 1e-10
        unit = np.zeros_like(diff)
        unit[safe] = diff[safe] / norms[safe]
        units[paired] = unit

        for source, target in zip(self.sources, targets):
            if target >= 0:
                source.influencing.append(int(target))

        return targets, units

    @profile(GROWTH)
    def _grow_nodes(self, targets: np.ndarray, units: np.ndarray) -> Tuple[int, int]:
        """Append one child per pulled node whose candidate lies in free space."""
        paired = targets >= 0
        if not np.any(paired):
            return 0, 0

        accumulated = np.zeros_like(self._positions)
        pulls = np.zeros(len(self._positions), dtype=int)
        np.add.at(accumulated, targets[paired], units[paired])
        np.add.at(pulls, targets[paired], 1)

        growing = np.nonzero(pulls)[0]
        sums = accumulated[growing]
        norms = np.linalg.norm(sums, axis=1)
        movable = norms > 1e-10
        growing, sums, norms = growing[movable], sums[movable], norms[movable]
        if len(growing) == 0:
            return 0, 0

        directions = sums / norms[:, None]
        candidates = self._positions[growing] + directions * self.step_length
        # a candidate on top of an existing node would repeat forever
        occupied = self.spatial_index.any_within(candidates, np.full(len(candidates), COINCIDENT_TOLERANCE))
        free = free_mask(candidates, self.boundary, self.obstacles) & ~occupied

        if np.any(free):
            self._append_nodes(candidates[free], [int(i) for i in growing[free]])
            self.spatial_index.rebuild(self._positions)

        return int(np.count_nonzero(free)), int(np.count_nonzero(~free))

    @profile(CONSUMPTION)
    def _consume_sources(self, source_positions: np.ndarray, consume: np.ndarray) -> int:
        reached = self.spatial_index.any_within(source_positions, consume)
        for source, hit in zip(self.sources, reached):
            if hit:
                source.kill()
        self.sources = [s for s in self.sources if s.alive]
        return int(np.count_nonzero(reached))

    @staticmethod
    def _reset_scratch(sources: Iterable[AttractorSource]):
        for source in sources:
            source.influencing = []

    @profile(STEP)
    def step(self) -> StepResult:
        """
        Run one growth iteration: pairing, growth, consumption, scratch reset.
        A network with no sources or no nodes is a valid no-op.
        """
        self.iteration += 1
        stepped_sources = list(self.sources)

        new_nodes = consumed = dormant = blocked = 0
        if self.sources and self._nodes:
            source_positions, influence, consume = self._source_arrays()

            targets, units = self._pair_sources(source_positions, influence)
            dormant = int(np.count_nonzero(targets < 0))

            new_nodes, blocked = self._grow_nodes(targets, units)
            consumed = self._consume_sources(source_positions, consume)

        self._reset_scratch(stepped_sources)

        if not self.sources:
            self.status = GrowthStatus.EXHAUSTED
        elif new_nodes or consumed:
            self.status = GrowthStatus.GROWING
        else:
            self.status = GrowthStatus.STALLED

        return StepResult(self.iteration, new_nodes, consumed, dormant, blocked, self.status)

    def grow(
        self,
        max_iterations: Optional[int] = None,
        stagnation_limit: Optional[int] = None,
        callback: Optional[Callable[['GrowthNetwork', StepResult], None]] = None,
    ) -> int:
        """
        Step until a fixed point, `max_iterations` or `stagnation_limit`
        consecutive steps without consumption. Returns the steps taken.
        """
        print(f"Starting growth with {len(self.sources)} sources and {len(self._nodes)} roots...")

        steps = 0
        while max_iterations is None or steps < max_iterations:
            result = self.step()
            steps += 1

            if callback:
                callback(self, result)

            self._stagnation_counter = 0 if result.consumed else self._stagnation_counter + 1

            if self.iteration % 50 == 0:
                print(f"  Iteration {self.iteration}: {len(self._nodes)} nodes, "
                      f"{len(self.sources)} sources remaining")

            if not result.changed:
                break
            if stagnation_limit is not None and self._stagnation_counter >= stagnation_limit:
                print(f"Growth stopped due to stagnation (no sources consumed for {stagnation_limit} iterations)")
                break

        if self.status is GrowthStatus.STALLED:
            print(f"Growth stalled after {self.iteration} iterations: "
                  f"{len(self.sources)} sources are out of reach")
        elif self.status is GrowthStatus.EXHAUSTED:
            print(f"Growth complete after {self.iteration} iterations: all sources consumed")
        else:
            print(f"Growth paused after {self.iteration} iterations")
        print(f"  Final nodes: {len(self._nodes)}")
        print(f"  Remaining sources: {len(self.sources)}")

        return steps

    # --------------------------------------------------------------- snapshot

    @property
    def nodes(self) -> Tuple[VeinNode, ...]:
        """Read-only view of the node list in append order."""
        return tuple(self._nodes)

    @property
    def positions(self) -> np.ndarray:
        """(N, 2) copy of node positions in node order."""
        return self._positions.copy()

    @property
    def roots(self) -> List[VeinNode]:
        return [n for n in self._nodes if n.is_root]

    @property
    def tips(self) -> List[VeinNode]:
        return [n for n in self._nodes if self._child_counts[n.index] == 0]

    @property
    def alive_sources(self) -> List[AttractorSource]:
        return list(self.sources)

    def is_tip(self, node: Union[VeinNode, int]) -> bool:
        index = node.index if isinstance(node, VeinNode) else node
        return self._child_counts[index] == 0

    def parent_of(self, node: VeinNode) -> Optional[VeinNode]:
        return None if node.parent is None else self._nodes[node.parent]

    def lineage(self, node: Union[VeinNode, int]) -> List[VeinNode]:
        """Nodes from `node` back to its root, inclusive."""
        current = self._nodes[node.index if isinstance(node, VeinNode) else node]
        path = [current]
        while current.parent is not None:
            current = self._nodes[current.parent]
            path.append(current)
        return path

    def depth(self, node: Union[VeinNode, int]) -> int:
        return len(self.lineage(node)) - 1

    def depths(self) -> np.ndarray:
        """Depth of every node; parents always precede children in the node list."""
        result = np.zeros(len(self._nodes), dtype=int)
        for node in self._nodes:
            if node.parent is not None:
                result[node.index] = result[node.parent] + 1
        return result

    def segments(self) -> List[Tuple[Tuple[float, float], Tuple[float, float]]]:
        """All parent -> child segments as ((x1, y1), (x2, y2)) tuples for drawing."""
        return [
            (self._nodes[n.parent].position.to_tuple(), n.position.to_tuple())
            for n in self._nodes
            if n.parent is not None
        ]

    def __repr__(self) -> str:
        return (f"GrowthNetwork({len(self._nodes)} nodes, {len(self.sources)} sources, "
                f"status={self.status.value})")
