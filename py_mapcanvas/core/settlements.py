"""
Settlement placement.

Cities go to the centers of large grassland areas: a coarse grid is scored by
the amount of grassland around each node, local maxima become candidates and
the best ones are accepted greedily subject to a minimum spacing.
Villages are rejection sampled: random canvas positions are kept when enough
of their surroundings is grassland or dry plains and they keep their
distance from cities and other villages.

Neighborhoods are sampled on a 5 unit lattice inside a circle, using only
samples that fall on the canvas; terrain at a sample is the terrain of the
nearest point of the field.
"""

from functools import lru_cache
from typing import List, Optional, Sequence, Tuple

import numpy as np
import structlog
from pydantic import BaseModel, ConfigDict, Field
from sklearn.neighbors import KDTree

from .name_generator import NameGenerator, SettlementTier
from .point_field import PointField
from .spatial_index import SpatialIndex
from .terrain import TerrainType
from ..utils.random import get_rng

logger = structlog.get_logger()

VALID_SETTLEMENT_TERRAIN = (TerrainType.GRASSLAND, TerrainType.DRY_PLAINS)


class SettlementOptions(BaseModel):
    """Settlement placement options."""

    sample_step: int = Field(default=5, gt=0, description="Lattice step of neighborhood samples")

    # City parameters
    score_grid_size: int = Field(default=10, gt=0, description="Cell size of the grassland score grid")
    score_radius: int = Field(default=30, gt=0, description="Neighborhood radius for grassland scores")
    min_city_score: int = Field(default=100, description="Minimum grassland samples for a city candidate")
    city_check_radius: int = Field(default=40, gt=0, description="Neighborhood radius of the city terrain check")
    city_grass_ratio: float = Field(default=0.7, description="Required grassland share around a city")
    min_city_distance: float = Field(default=100.0, description="Minimum distance between cities")
    min_cities: int = Field(default=1, ge=0, description="Lower bound of the random city target")
    max_cities: int = Field(default=3, ge=0, description="Upper bound of the random city target")

    # Village parameters
    village_check_radius: int = Field(default=20, gt=0, description="Neighborhood radius of the village terrain check")
    village_valid_ratio: float = Field(
        default=0.5, description="Required grassland or dry plains share around a village"
    )
    min_village_city_distance: float = Field(default=60.0, description="Minimum village to city distance")
    min_village_distance: float = Field(default=40.0, description="Minimum distance between villages")
    min_villages: int = Field(default=2, ge=0, description="Lower bound of the random village target")
    max_villages: int = Field(default=4, ge=0, description="Upper bound of the random village target")
    village_attempts: int = Field(default=1000, ge=0, description="Rejection sampling budget")


class Settlement(BaseModel):
    """A placed settlement."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(description="Settlement identifier, unique within a layout")
    x: float = Field(description="X coordinate")
    y: float = Field(description="Y coordinate")
    tier: SettlementTier = Field(description="City or village")
    name: str = Field(default="", description="Settlement name")

    @property
    def position(self) -> Tuple[float, float]:
        return self.x, self.y


class SettlementLayout(BaseModel):
    """All settlements of one map."""

    model_config = ConfigDict(frozen=True)

    cities: List[Settlement] = Field(default_factory=list)
    villages: List[Settlement] = Field(default_factory=list)

    @property
    def all(self) -> List[Settlement]:
        return list(self.cities) + list(self.villages)


@lru_cache(maxsize=16)
def neighborhood_offsets(radius: int, step: int) -> Tuple[np.ndarray, np.ndarray]:
    """Lattice offsets ``(dx, dy)`` within a circle of ``radius``."""
    steps = np.arange(-radius, radius + 1, step, dtype=np.float64)
    dx, dy = np.meshgrid(steps, steps, indexing="ij")
    inside = np.sqrt(dx * dx + dy * dy) <= radius
    return dx[inside], dy[inside]


def nearest_distance(positions: Sequence[Tuple[float, float]], x: float, y: float) -> float:
    """Distance from ``(x, y)`` to the closest of ``positions`` (inf when empty)."""
    if not positions:
        return float("inf")
    tree = KDTree(np.asarray(positions, dtype=np.float64))
    distances, _ = tree.query([[x, y]], k=1)
    return float(distances[0][0])


class SettlementPlacer:
    """Places and names cities and villages on a point field."""

    def __init__(
        self,
        field: PointField,
        index: SpatialIndex,
        options: Optional[SettlementOptions] = None,
        rng: Optional[np.random.Generator] = None,
        name_generator: Optional[NameGenerator] = None,
    ) -> None:
        """
        Args:
            field: Classified point field
            index: Spatial index over ``field.points``
            options: Placement options
            rng: Generator for targets and village sampling
            name_generator: Name source; defaults to one sharing ``rng``
        """
        self.field = field
        self.index = index
        self.options = options or SettlementOptions()
        self.rng = rng if rng is not None else get_rng()
        self.name_generator = name_generator or NameGenerator(self.rng)
        self.width = field.width
        self.height = field.height

    def _on_canvas(self, xs, ys) -> np.ndarray:
        return (xs >= 0) & (xs < self.width) & (ys >= 0) & (ys < self.height)

    def sample_neighborhood(self, x: float, y: float, radius: int) -> np.ndarray:
        """Terrain of the on-canvas lattice samples around ``(x, y)``."""
        dx, dy = neighborhood_offsets(radius, self.options.sample_step)
        xs, ys = x + dx, y + dy
        inside = self._on_canvas(xs, ys)
        if not inside.any():
            return np.empty(0, dtype=self.field.terrain.dtype)
        nearest = self.index.find_nearest_many(xs[inside], ys[inside])
        return self.field.terrain[nearest]

    def is_valid_location(self, x: float, y: float, tier: SettlementTier) -> bool:
        """
        Check the terrain around a candidate location.

        Cities need mostly grassland; villages accept grassland and dry plains
        mixed with other terrain.
        """
        if not (0 <= x < self.width and 0 <= y < self.height):
            return False

        if tier == SettlementTier.CITY:
            samples = self.sample_neighborhood(x, y, self.options.city_check_radius)
            if len(samples) == 0:
                return False
            grass = np.count_nonzero(samples == TerrainType.GRASSLAND)
            return grass / len(samples) >= self.options.city_grass_ratio

        samples = self.sample_neighborhood(x, y, self.options.village_check_radius)
        if len(samples) == 0:
            return False
        valid = np.count_nonzero(np.isin(samples, VALID_SETTLEMENT_TERRAIN))
        return valid / len(samples) >= self.options.village_valid_ratio

    def grassland_scores(self) -> np.ndarray:
        """
        Grassland sample counts on the score grid, indexed ``[gx, gy]``.

        Node ``(gx, gy)`` is scored around ``(gx * size, gy * size)``.
        """
        size = self.options.score_grid_size
        gxs = np.arange(0, self.width, size, dtype=np.float64)
        gys = np.arange(0, self.height, size, dtype=np.float64)
        dx, dy = neighborhood_offsets(self.options.score_radius, self.options.sample_step)

        xs = gxs[:, None, None] + dx[None, None, :]
        ys = gys[None, :, None] + dy[None, None, :]
        xs, ys = np.broadcast_arrays(xs, ys)

        inside = self._on_canvas(xs, ys)
        grass = np.zeros(xs.shape, dtype=bool)
        nearest = self.index.find_nearest_many(xs[inside], ys[inside])
        grass[inside] = self.field.terrain[nearest] == TerrainType.GRASSLAND

        return grass.sum(axis=2)

    def find_grassland_centers(self) -> List[Tuple[float, float, int]]:
        """
        Local maxima of the grassland score grid.

        Returns:
            ``(x, y, score)`` candidates, best score first
        """
        scores = self.grassland_scores()
        size = self.options.score_grid_size
        n_x, n_y = scores.shape
        centers = []

        for gx in range(1, n_x - 1):
            for gy in range(1, n_y - 1):
                score = scores[gx, gy]
                if score < self.options.min_city_score:
                    continue
                window = scores[gx - 1 : gx + 2, gy - 1 : gy + 2]
                if window.max() > score:
                    continue
                centers.append(((gx + 0.5) * size, (gy + 0.5) * size, int(score)))

        centers.sort(key=lambda c: c[2], reverse=True)
        logger.debug("Grassland centers found", candidates=len(centers))
        return centers

    def place_cities(self) -> List[Tuple[float, float]]:
        """
        Place cities on the best grassland centers with minimum spacing.

        Returns:
            City positions in acceptance order
        """
        target = int(self.rng.integers(self.options.min_cities, self.options.max_cities + 1))
        cities: List[Tuple[float, float]] = []
        if target == 0:
            return cities

        for x, y, score in self.find_grassland_centers():
            if nearest_distance(cities, x, y) < self.options.min_city_distance:
                continue
            if not self.is_valid_location(x, y, SettlementTier.CITY):
                continue
            cities.append((x, y))
            if len(cities) >= target:
                break

        logger.info("Placed cities", placed=len(cities), target=target)
        return cities

    def place_villages(self, cities: Sequence[Tuple[float, float]]) -> List[Tuple[float, float]]:
        """
        Rejection sample villages.

        Running out of attempts is not an error; fewer villages are returned.
        """
        target = int(self.rng.integers(self.options.min_villages, self.options.max_villages + 1))
        villages: List[Tuple[float, float]] = []
        attempts = 0

        while len(villages) < target and attempts < self.options.village_attempts:
            attempts += 1
            x = float(self.rng.random() * self.width)
            y = float(self.rng.random() * self.height)

            if not self.is_valid_location(x, y, SettlementTier.VILLAGE):
                continue
            if nearest_distance(cities, x, y) < self.options.min_village_city_distance:
                continue
            if nearest_distance(villages, x, y) < self.options.min_village_distance:
                continue
            villages.append((x, y))

        if len(villages) < target:
            logger.info(
                "Village budget exhausted",
                placed=len(villages),
                target=target,
                attempts=attempts,
            )
        else:
            logger.info("Placed villages", placed=len(villages), attempts=attempts)
        return villages

    def generate(self) -> SettlementLayout:
        """Place and name all settlements."""
        cities = self.place_cities()
        villages = self.place_villages(cities)

        city_names = self.name_generator.generate_names(SettlementTier.CITY, len(cities))
        village_names = self.name_generator.generate_names(SettlementTier.VILLAGE, len(villages))

        next_id = 1
        city_settlements = []
        for (x, y), name in zip(cities, city_names):
            city_settlements.append(
                Settlement(id=next_id, x=x, y=y, tier=SettlementTier.CITY, name=name)
            )
            next_id += 1

        village_settlements = []
        for (x, y), name in zip(villages, village_names):
            village_settlements.append(
                Settlement(id=next_id, x=x, y=y, tier=SettlementTier.VILLAGE, name=name)
            )
            next_id += 1

        return SettlementLayout(cities=city_settlements, villages=village_settlements)
