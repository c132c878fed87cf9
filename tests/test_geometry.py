"""Polygon containment and validation."""

import numpy as np
import pytest

from venation.geometry import Polygon, circle_points, free_mask, is_free
from venation.vector import Vector2D


L_SHAPE = [(0, 0), (10, 0), (10, 4), (4, 4), (4, 10), (0, 10)]


def test_square_contains_interior_and_rejects_exterior(big_square) -> None:
    assert big_square.contains((0, 0))
    assert big_square.contains(Vector2D(499.9, -499.9))
    assert not big_square.contains((500.1, 0))
    assert not big_square.contains((0, -600))


def test_boundary_points_count_as_inside(big_square) -> None:
    assert big_square.contains((500, 0))
    assert big_square.contains((0, -500))
    assert big_square.contains((500, 500))
    assert big_square.contains((-500, 500))


def test_non_convex_polygon() -> None:
    poly = Polygon(L_SHAPE)
    assert poly.contains((2, 8))
    assert poly.contains((7, 2))
    assert not poly.contains((7, 7))
    assert poly.contains((4, 7))  # on the inner edge


def test_contains_points_matches_scalar_query() -> None:
    poly = Polygon(L_SHAPE)
    grid = np.array([(x, y) for y in np.linspace(-1, 11, 25) for x in np.linspace(-1, 11, 25)])

    vectorized = poly.contains_points(grid)
    scalar = np.array([poly.contains(p) for p in grid])

    np.testing.assert_array_equal(vectorized, scalar)
    assert poly.contains_points(np.empty((0, 2))).shape == (0,)


def test_closing_vertex_and_duplicates_are_dropped() -> None:
    poly = Polygon([(0, 0), (1, 0), (1, 0), (1, 1), (0, 1), (0, 0)])
    assert len(poly) == 4
    assert poly.area == pytest.approx(1.0)
    assert poly.bounding_box == (0.0, 0.0, 1.0, 1.0)


def test_points_are_read_only(unit_box) -> None:
    with pytest.raises(ValueError):
        unit_box.points[0, 0] = 5.0


@pytest.mark.parametrize(
    "points",
    [
        [(0, 0), (1, 1)],
        [(0, 0), (1, 0), (2, 0)],
        [(0, 0), (10, 10), (10, 0), (0, 10)],
        [(0, 0), (float('nan'), 0), (1, 1)],
    ],
)
def test_invalid_polygons_are_rejected(points) -> None:
    with pytest.raises(ValueError):
        Polygon(points)


def test_dense_outline_validates_without_quadratic_memory() -> None:
    pts = circle_points(0.0, 0.0, 100.0, 5000)
    poly = Polygon(pts)
    assert len(poly) == 5000
    assert poly.contains((0, 0))
    assert not poly.contains((100.5, 0))

    swapped = pts.copy()
    swapped[[1000, 1001]] = swapped[[1001, 1000]]
    with pytest.raises(ValueError, match="self-intersecting"):
        Polygon(swapped)


def test_translated_keeps_shape(unit_box) -> None:
    moved = unit_box.translated(10, -5)
    assert moved.bounding_box == (10.0, -5.0, 110.0, 95.0)
    assert moved.contains((60, 45))
    assert not moved.contains((5, 45))


def test_circle_points_lie_on_circle() -> None:
    pts = circle_points(3.0, -2.0, 7.0, 100)
    assert pts.shape == (100, 2)
    np.testing.assert_allclose(np.hypot(pts[:, 0] - 3.0, pts[:, 1] + 2.0), 7.0)
    assert Polygon(pts).contains((3.0, -2.0))

    with pytest.raises(ValueError):
        circle_points(0, 0, 1, 2)


def test_free_space_filters(unit_box) -> None:
    hole = Polygon(circle_points(50, 50, 10, 32))

    assert is_free((10, 10), unit_box, [hole])
    assert not is_free((50, 50), unit_box, [hole])
    assert not is_free((150, 50), unit_box, [hole])

    mask = free_mask(np.array([[10, 10], [50, 50], [150, 50]]), unit_box, [hole])
    assert mask.tolist() == [True, False, False]
