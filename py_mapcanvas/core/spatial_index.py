"""
Nearest-point lookup and Voronoi cells over a point field.

Thin adapter over scipy.spatial: a cKDTree answers nearest-point queries and
a Voronoi diagram (built on first use) provides cell polygons, clipped to a
rectangle with shapely.
"""

from functools import cached_property
from typing import Tuple

import numpy as np
import structlog
from scipy.spatial import Voronoi, cKDTree
from shapely.geometry import Polygon, box

logger = structlog.get_logger()

Bounds = Tuple[float, float, float, float]


def get_boundary_points(points: np.ndarray, margin_factor: float = 10.0) -> np.ndarray:
    """
    Generate far sentinel points around a point set.

    Every input point lies strictly inside their convex hull, so all input
    Voronoi regions are finite and can be clipped afterwards.

    Args:
        points: (N, 2) coordinates
        margin_factor: Sentinel distance as a multiple of the point set's span

    Returns:
        (8, 2) array of sentinel coordinates
    """
    x_min, y_min = points.min(axis=0)
    x_max, y_max = points.max(axis=0)
    cx, cy = (x_min + x_max) / 2, (y_min + y_max) / 2
    reach = max(x_max - x_min, y_max - y_min, 1.0) * margin_factor

    return np.array(
        [
            [cx - reach, cy - reach],
            [cx, cy - reach],
            [cx + reach, cy - reach],
            [cx + reach, cy],
            [cx + reach, cy + reach],
            [cx, cy + reach],
            [cx - reach, cy + reach],
            [cx - reach, cy],
        ]
    )


class SpatialIndex:
    """Read-only spatial queries over a fixed point array."""

    def __init__(self, points: np.ndarray):
        self.points = np.asarray(points, dtype=np.float64)
        if self.points.ndim != 2 or self.points.shape[1] != 2 or len(self.points) == 0:
            raise ValueError("SpatialIndex needs a non-empty (N, 2) point array")
        self.points.setflags(write=False)
        self._tree = cKDTree(self.points)

    def __len__(self) -> int:
        return len(self.points)

    def find_nearest(self, x: float, y: float) -> int:
        """Index of the point closest to ``(x, y)``."""
        _, index = self._tree.query((x, y))
        return int(index)

    def find_nearest_many(self, xs, ys) -> np.ndarray:
        """Indices of the closest points for paired coordinate arrays."""
        query = np.column_stack([np.ravel(xs), np.ravel(ys)])
        if len(query) == 0:
            return np.empty(0, dtype=np.intp)
        _, indices = self._tree.query(query)
        return np.asarray(indices, dtype=np.intp).reshape(np.shape(xs))

    @cached_property
    def voronoi(self) -> Voronoi:
        """Voronoi diagram of the points plus far sentinels."""
        boundary = get_boundary_points(self.points)
        vor = Voronoi(np.vstack([self.points, boundary]))
        logger.debug(
            "Voronoi diagram calculated",
            points=len(self.points),
            vertices=len(vor.vertices),
            ridges=len(vor.ridge_points),
        )
        return vor

    def cell_boundary(self, index: int, bounds: Bounds) -> np.ndarray:
        """
        Voronoi cell polygon of point ``index`` clipped to ``bounds``.

        Args:
            index: Point index
            bounds: (x0, y0, x1, y1) clipping rectangle

        Returns:
            (k, 2) array of polygon vertices (not closed), empty when the cell
            does not overlap the rectangle
        """
        vor = self.voronoi
        region = vor.regions[vor.point_region[index]]
        if not region or -1 in region:
            return np.empty((0, 2))

        vertices = vor.vertices[region]
        # Cells are convex, so ordering by angle around the mean gives a simple ring
        center = vertices.mean(axis=0)
        order = np.argsort(np.arctan2(vertices[:, 1] - center[1], vertices[:, 0] - center[0]))
        clipped = Polygon(vertices[order]).intersection(box(*bounds))
        if clipped.is_empty or clipped.geom_type != "Polygon":
            return np.empty((0, 2))

        return np.asarray(clipped.exterior.coords)[:-1]
