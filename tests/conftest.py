"""Shared fixtures for py_mapcanvas tests."""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from py_mapcanvas.core.point_field import PointField
from py_mapcanvas.core.terrain import TerrainType


def make_grid_field(width, height, terrain_fn, spacing=10.0, padding=None):
    """
    Build a PointField on a regular lattice with terrain chosen per point.

    Args:
        width, height: Canvas size
        terrain_fn: Callable (x, y) -> TerrainType
        spacing: Lattice spacing
        padding: Padding around the canvas; defaults to 20% of the larger side
    """
    if padding is None:
        padding = max(width, height) * 0.2
    xs = np.arange(-padding + spacing / 2, width + padding, spacing)
    ys = np.arange(-padding + spacing / 2, height + padding, spacing)
    points = np.array([(x, y) for x in xs for y in ys], dtype=np.float64)
    terrain = np.array([terrain_fn(x, y) for x, y in points], dtype=np.int8)
    return PointField(
        width=width,
        height=height,
        padding=padding,
        seed=0,
        points=points,
        elevation=np.zeros(len(points)),
        terrain=terrain,
    )


@pytest.fixture
def grid_field():
    """Factory fixture for lattice point fields."""
    return make_grid_field


@pytest.fixture
def grass_field():
    """300x300 canvas covered in grassland."""
    return make_grid_field(300, 300, lambda x, y: TerrainType.GRASSLAND)
