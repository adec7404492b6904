"""Tests for the spatial index."""

import numpy as np
import pytest
from shapely.geometry import Point, Polygon

from py_mapcanvas.core.spatial_index import SpatialIndex, get_boundary_points


class TestBoundaryPoints:
    """Test sentinel point generation."""

    def test_surrounds_points(self):
        """All input points lie inside the sentinel hull."""
        rng = np.random.default_rng(0)
        points = rng.random((100, 2)) * [300, 200]
        boundary = get_boundary_points(points)
        assert boundary.shape == (8, 2)
        hull = Polygon(boundary[[0, 2, 4, 6]])
        assert all(hull.contains(Point(p)) for p in points)


class TestSpatialIndex:
    """Test nearest-point and Voronoi queries."""

    def setup_method(self):
        rng = np.random.default_rng(42)
        self.points = rng.random((400, 2)) * [200, 150]
        self.index = SpatialIndex(self.points)
        self.bounds = (0.0, 0.0, 200.0, 150.0)

    def test_find_nearest_matches_brute_force(self):
        rng = np.random.default_rng(7)
        for x, y in rng.random((50, 2)) * [200, 150]:
            expected = np.argmin(np.hypot(self.points[:, 0] - x, self.points[:, 1] - y))
            assert self.index.find_nearest(x, y) == expected

    def test_find_nearest_many_shape(self):
        xs, ys = np.meshgrid(np.arange(0, 20, 2.0), np.arange(0, 10, 2.0))
        result = self.index.find_nearest_many(xs, ys)
        assert result.shape == xs.shape
        assert result[0, 0] == self.index.find_nearest(0.0, 0.0)

    def test_find_nearest_many_empty(self):
        assert len(self.index.find_nearest_many(np.empty(0), np.empty(0))) == 0

    def test_cell_contains_its_point(self):
        for i in range(0, 400, 37):
            polygon = self.index.cell_boundary(i, self.bounds)
            assert len(polygon) >= 3
            assert Polygon(polygon).buffer(1e-9).contains(Point(self.points[i]))

    def test_cells_clipped_to_bounds(self):
        for i in range(0, 400, 11):
            polygon = self.index.cell_boundary(i, self.bounds)
            assert np.all(polygon[:, 0] >= -1e-9)
            assert np.all(polygon[:, 0] <= 200 + 1e-9)
            assert np.all(polygon[:, 1] >= -1e-9)
            assert np.all(polygon[:, 1] <= 150 + 1e-9)

    def test_cells_partition_bounds(self):
        """Clipped cells tile the clipping rectangle."""
        total = sum(Polygon(self.index.cell_boundary(i, self.bounds)).area for i in range(400))
        assert total == pytest.approx(200 * 150, rel=1e-6)

    def test_cell_outside_bounds_is_empty(self):
        central = self.index.find_nearest(100.0, 75.0)
        far = self.index.cell_boundary(central, (1000.0, 1000.0, 1010.0, 1010.0))
        assert far.shape == (0, 2)

    def test_points_are_read_only(self):
        with pytest.raises(ValueError):
            self.index.points[0, 0] = 1.0

    def test_rejects_bad_input(self):
        with pytest.raises(ValueError):
            SpatialIndex(np.empty((0, 2)))
