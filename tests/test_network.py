"""Growth step behaviour of GrowthNetwork."""

import numpy as np
import pytest

from venation.attractor import AttractorSource
from venation.geometry import Polygon, circle_points
from venation.network import GrowthNetwork, GrowthStatus
from venation.sources import grid_sources


def _network(boundary, sources, roots, obstacles=(), step_length=4.0) -> GrowthNetwork:
    network = GrowthNetwork(boundary, obstacles, sources, step_length=step_length)
    for root in roots:
        network.add_root(root)
    return network


def test_single_source_is_reached_and_consumed_on_step_24(big_square) -> None:
    source = AttractorSource((0, 100), influence_radius=150, consume_radius=5)
    network = _network(big_square, [source], [(0, 0)])

    first = network.step()
    assert first.new_nodes == 1
    np.testing.assert_allclose(network.nodes[1].position.to_tuple(), (0.0, 4.0), atol=1e-9)
    assert network.nodes[1].parent == 0

    for _ in range(22):
        assert network.step().consumed == 0
    assert source.alive

    result = network.step()
    assert result.iteration == 24
    assert result.consumed == 1
    assert not source.alive
    assert network.sources == []
    assert result.status is GrowthStatus.EXHAUSTED

    idle = network.step()
    assert idle.new_nodes == 0
    assert idle.consumed == 0
    assert len(network.nodes) == 25


def test_grow_runs_to_the_fixed_point(big_square) -> None:
    source = AttractorSource((0, 100), influence_radius=150, consume_radius=5)
    network = _network(big_square, [source], [(0, 0)])

    steps = network.grow()

    assert steps == 25
    assert network.status is GrowthStatus.EXHAUSTED


def test_equidistant_nodes_resolve_to_first_in_order(big_square) -> None:
    source = AttractorSource((0, 50), influence_radius=100, consume_radius=1)
    network = _network(big_square, [source], [(-10, 0), (10, 0)])

    network.step()

    assert len(network.nodes) == 3
    assert network.nodes[2].parent == 0


def test_pulls_from_several_sources_are_summed(big_square) -> None:
    sources = [
        AttractorSource((100, 0), influence_radius=150, consume_radius=5),
        AttractorSource((0, 100), influence_radius=150, consume_radius=5),
    ]
    network = _network(big_square, sources, [(0, 0)])

    result = network.step()

    assert result.new_nodes == 1
    expected = 4 / np.sqrt(2)
    np.testing.assert_allclose(network.nodes[1].position.to_tuple(), (expected, expected))


def test_opposing_pulls_cancel_and_stall(big_square) -> None:
    sources = [
        AttractorSource((50, 0), influence_radius=100, consume_radius=5),
        AttractorSource((-50, 0), influence_radius=100, consume_radius=5),
    ]
    network = _network(big_square, sources, [(0, 0)])

    result = network.step()

    assert result.new_nodes == 0
    assert result.status is GrowthStatus.STALLED
    assert all(s.alive for s in sources)


def test_child_onto_an_existing_node_is_blocked(big_square) -> None:
    # both sources keep pulling the root toward the child it already has
    sources = [
        AttractorSource((10, 1), influence_radius=100, consume_radius=1),
        AttractorSource((-10, 1), influence_radius=100, consume_radius=1),
    ]
    network = _network(big_square, sources, [(0, 0)])

    results = [network.step() for _ in range(30)]

    assert results[0].new_nodes == 1
    assert results[1].new_nodes == 0
    assert results[1].blocked == 1
    assert len(network.nodes) == 2
    assert len(np.unique(network.positions, axis=0)) == 2
    assert results[-1].status is GrowthStatus.STALLED
    assert all(s.alive for s in sources)
    assert network.grow(max_iterations=30) == 1


def test_nodes_snapshot_is_read_only(big_square) -> None:
    network = _network(big_square, [AttractorSource((0, 50), 100, 5)], [(0, 0)])
    snapshot = network.nodes

    assert isinstance(snapshot, tuple)
    network.step()
    assert len(snapshot) == 1
    assert len(network.nodes) == 2
    with pytest.raises(AttributeError):
        network.nodes = ()


def test_source_out_of_range_is_dormant(big_square) -> None:
    source = AttractorSource((0, 300), influence_radius=100, consume_radius=5)
    network = _network(big_square, [source], [(0, 0)])

    result = network.step()

    assert result.dormant == 1
    assert result.new_nodes == 0
    assert result.status is GrowthStatus.STALLED


def test_obstacle_enclosed_source_stalls_forever(big_square) -> None:
    obstacle = Polygon([(-20, 40), (20, 40), (20, 60), (-20, 60)])
    source = AttractorSource((0, 50), influence_radius=150, consume_radius=5)
    network = _network(big_square, [source], [(0, 0)], obstacles=[obstacle])

    results = [network.step() for _ in range(50)]

    assert len(network.nodes) == 10  # root plus tips at y = 4 .. 36
    assert not obstacle.contains_points(network.positions).any()
    assert source.alive
    assert network.sources == [source]
    assert results[9].blocked == 1
    assert results[-1].status is GrowthStatus.STALLED
    assert network.status is not GrowthStatus.EXHAUSTED


def test_growth_never_leaves_the_boundary() -> None:
    boundary = Polygon([(-50, -50), (50, -50), (50, 50), (-50, 50)])
    outside = AttractorSource((0, 60), influence_radius=100, consume_radius=5)
    network = _network(boundary, [outside], [(0, 0)])

    network.grow(max_iterations=100)

    assert boundary.contains_points(network.positions).all()
    assert network.nodes[-1].position.y == pytest.approx(48.0)
    assert network.status is GrowthStatus.STALLED


def test_empty_networks_are_no_ops(big_square) -> None:
    no_sources = _network(big_square, [], [(0, 0)])
    result = no_sources.step()
    assert (result.new_nodes, result.consumed) == (0, 0)
    assert result.status is GrowthStatus.EXHAUSTED

    no_nodes = _network(big_square, [AttractorSource((0, 0), 10, 1)], [])
    result = no_nodes.step()
    assert (result.new_nodes, result.consumed) == (0, 0)
    assert result.status is GrowthStatus.STALLED


def test_roots_must_be_in_free_space(big_square) -> None:
    obstacle = Polygon(circle_points(0, 0, 50, 32))
    network = GrowthNetwork(big_square, [obstacle])

    with pytest.raises(ValueError):
        network.add_root((0, 0))
    with pytest.raises(ValueError):
        network.add_root((600, 0))

    network.add_root((100, 100))
    assert len(network.roots) == 1


def test_influence_scratch_is_cleared_after_each_step(big_square) -> None:
    sources = [AttractorSource((0, 100), 150, 5), AttractorSource((0, -100), 150, 5)]
    network = _network(big_square, sources, [(0, 0)])

    network.step()

    assert all(s.influencing == [] for s in sources)


def test_lineage_tips_and_segments(big_square) -> None:
    source = AttractorSource((0, 100), influence_radius=150, consume_radius=5)
    network = _network(big_square, [source], [(0, 0)])
    for _ in range(3):
        network.step()

    tip = network.nodes[-1]
    assert [n.index for n in network.lineage(tip)] == [3, 2, 1, 0]
    assert network.depth(tip) == 3
    assert network.depths().tolist() == [0, 1, 2, 3]
    assert network.tips == [tip]
    assert network.is_tip(3) and not network.is_tip(0)
    assert network.parent_of(tip) is network.nodes[2]
    assert network.segments()[0] == ((0.0, 0.0), (0.0, 4.0))


def test_growth_invariants_on_a_full_scene() -> None:
    boundary = Polygon(circle_points(600, 450, 350, 100))
    obstacle = Polygon(circle_points(600, 520, 200, 100))
    sources = grid_sources(40, 40, boundary, [obstacle], influence_radius=100, consume_radius=5)
    network = GrowthNetwork(boundary, [obstacle], sources, step_length=5.0)
    network.add_root((600, 750))

    consumed_sources = []
    alive_counts = [len(network.sources)]
    for _ in range(300):
        before = list(network.sources)
        result = network.step()
        consumed_sources.extend(s for s in before if not s.alive)
        assert alive_counts[-1] - len(network.sources) == result.consumed
        alive_counts.append(len(network.sources))
        if not result.changed:
            break

    assert len(network.nodes) > 50
    assert consumed_sources
    assert alive_counts == sorted(alive_counts, reverse=True)

    positions = network.positions
    assert boundary.contains_points(positions).all()
    assert not obstacle.contains_points(positions).any()

    for node in network.nodes:
        if node.parent is not None:
            parent = network.nodes[node.parent]
            assert node.position.distance_to(parent.position) == pytest.approx(5.0, abs=1e-9)
            assert node.parent < node.index
        assert len(network.lineage(node)) <= len(network.nodes)
        assert network.lineage(node)[-1].is_root

    alive_ids = {id(s) for s in network.sources}
    assert all(id(s) not in alive_ids and not s.alive for s in consumed_sources)
