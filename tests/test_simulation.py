"""Simulation context and its commands."""

import pytest

from venation.config import VenationConfig
from venation.geometry import is_free
from venation.network import StepResult
from venation.shapes import BoundaryShape
from venation.simulation import (
    Reset,
    Simulation,
    ToggleBoundsVisible,
    ToggleObstaclesVisible,
    command_for_key,
)


def _small_config(**overrides) -> VenationConfig:
    values = dict(source_pattern='random', num_sources=60)
    values.update(overrides)
    return VenationConfig(**values)


def test_default_scene_has_free_sources_and_a_root() -> None:
    sim = Simulation(_small_config())

    assert sim.shape is BoundaryShape.TRIANGLE
    assert len(sim.network.roots) == 1
    assert len(sim.network.sources) == 60
    assert all(is_free(s.position, sim.boundary, sim.obstacles) for s in sim.network.sources)
    assert sim.network.boundary is sim.boundary


def test_key_map() -> None:
    assert command_for_key('r') == Reset()
    assert command_for_key('b') == ToggleBoundsVisible()
    assert command_for_key('o') == ToggleObstaclesVisible()
    assert command_for_key('3') == Reset(BoundaryShape.CIRCLE)
    assert command_for_key('x') is None


def test_visibility_toggles_do_not_touch_growth() -> None:
    sim = Simulation(_small_config())
    network = sim.network

    sim.apply(ToggleBoundsVisible())
    sim.apply(ToggleObstaclesVisible())

    assert sim.show_bounds is False
    assert sim.show_obstacles is False
    assert sim.network is network

    assert sim.handle_key('b')
    assert sim.show_bounds is True
    assert not sim.handle_key('z')


def test_reset_rebuilds_network_and_switches_shape() -> None:
    sim = Simulation(_small_config())
    sim.tick()
    old_network = sim.network

    sim.apply(Reset())
    assert sim.network is not old_network
    assert sim.shape is BoundaryShape.TRIANGLE
    assert sim.frame == 0
    assert sim.network.iteration == 0

    sim.handle_key('3')
    assert sim.shape is BoundaryShape.CIRCLE
    assert sim.boundary.bounding_box == pytest.approx((250.0, 100.0, 950.0, 800.0), abs=1e-6)
    assert sim.network.boundary is sim.boundary


def test_leaf_root_inside_the_center_obstacle_is_skipped() -> None:
    blocked = Simulation(_small_config(shape='leaf', obstacles='center'))
    assert blocked.network.nodes == ()

    clear = Simulation(_small_config(shape='leaf', obstacles='none'))
    assert len(clear.network.roots) == 1


def test_tick_advances_one_step() -> None:
    sim = Simulation(_small_config())

    result = sim.tick()

    assert isinstance(result, StepResult)
    assert sim.frame == 1
    assert sim.network.iteration == 1


def test_unknown_command_is_rejected() -> None:
    sim = Simulation(_small_config())
    with pytest.raises(TypeError):
        sim.apply("reset")


def test_unknown_shape_name_is_rejected() -> None:
    with pytest.raises(ValueError):
        Simulation(_small_config(shape='hexagon'))
