"""Shared fixtures for the venation tests."""

import numpy as np
import pytest

from venation.geometry import Polygon


@pytest.fixture(autouse=True)
def _seed_random() -> None:
    np.random.seed(1234)


@pytest.fixture
def big_square() -> Polygon:
    """Square centered at the origin with half-side 500."""
    return Polygon([(-500, -500), (500, -500), (500, 500), (-500, 500)])


@pytest.fixture
def unit_box() -> Polygon:
    return Polygon([(0, 0), (100, 0), (100, 100), (0, 100)])
