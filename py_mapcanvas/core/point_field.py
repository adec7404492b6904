"""
Point field generation.

Scatters sample points over a rectangle padded beyond the visible canvas and
classifies each point into a terrain category from layered noise. A radial
edge fade pulls elevation to zero towards the padded boundary, so the map is
always surrounded by water.
"""

import math
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
import structlog
from pydantic import BaseModel, Field

from .noise import POINT_FIELD_OCTAVES, NoiseSampler
from .terrain import TERRAIN_COLORS, TerrainType, classify_elevations
from ..utils.random import make_rng, new_seed

logger = structlog.get_logger()


class PointFieldOptions(BaseModel):
    """Point scatter and elevation options."""

    point_count: int = Field(default=3000, ge=3, description="Number of sample points")
    padding_ratio: float = Field(
        default=0.2, ge=0.0, description="Padding on each side, as a share of max(width, height)"
    )
    fade_scale: float = Field(
        default=1.2, gt=0.0, description="Radial distance multiplier; fade reaches zero at 1/fade_scale"
    )
    fade_power: float = Field(default=1.5, gt=0.0, description="Exponent of the edge fade curve")


@dataclass(frozen=True, eq=False)
class PointField:
    """Sample points with their elevation and terrain category."""

    width: int
    height: int
    padding: float
    seed: int
    points: np.ndarray      # (N, 2) float coordinates in canvas space
    elevation: np.ndarray   # (N,) faded elevation
    terrain: np.ndarray     # (N,) TerrainType values, co-indexed with points

    def __post_init__(self):
        if len(self.points) != len(self.terrain) or len(self.points) != len(self.elevation):
            raise ValueError("points, elevation and terrain must be co-indexed")

    def __len__(self) -> int:
        return len(self.points)

    @property
    def colors(self) -> List[str]:
        """Hex color per point."""
        return [TERRAIN_COLORS[TerrainType(t)] for t in self.terrain]

    @property
    def padded_bounds(self):
        """(x0, y0, x1, y1) of the scatter rectangle."""
        return (
            -self.padding,
            -self.padding,
            self.width + self.padding,
            self.height + self.padding,
        )


def compute_padding(width: float, height: float, ratio: float = 0.2) -> float:
    return max(width, height) * ratio


def edge_fade(distance, scale: float = 1.2, power: float = 1.5):
    """
    Radial falloff: 1 at the center, 0 from ``distance = 1 / scale`` outwards.

    Works on scalars and numpy arrays.
    """
    return (1.0 - np.minimum(1.0, np.asarray(distance, dtype=np.float64) * scale)) ** power


def normalized_distance(xs, ys, padding: float, padded_width: float, padded_height: float):
    """Distance from the padded rectangle's center, 1.0 at its corners."""
    nx = (np.asarray(xs, dtype=np.float64) + padding) / padded_width - 0.5
    ny = (np.asarray(ys, dtype=np.float64) + padding) / padded_height - 0.5
    return np.sqrt(nx * nx + ny * ny) / math.sqrt(0.5)


def generate_point_field(
    width: int,
    height: int,
    options: Optional[PointFieldOptions] = None,
    seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
    noise: Optional[NoiseSampler] = None,
) -> PointField:
    """
    Scatter points and classify their terrain.

    Args:
        width: Canvas width
        height: Canvas height
        options: Scatter options
        seed: Seed for both the scatter and the noise; gives reproducible fields
        rng: Generator for the scatter (ignored when ``seed`` is given)
        noise: Noise sampler (ignored when ``seed`` is given)

    Returns:
        PointField with co-indexed points, elevation and terrain
    """
    options = options or PointFieldOptions()

    if seed is not None:
        rng = make_rng(seed)
        noise = NoiseSampler(seed)
    else:
        rng = rng if rng is not None else make_rng()
        noise = noise if noise is not None else NoiseSampler(new_seed(rng))

    padding = compute_padding(width, height, options.padding_ratio)
    padded_width = width + padding * 2
    padded_height = height + padding * 2

    logger.info(
        "Generating point field",
        width=width,
        height=height,
        points=options.point_count,
        padding=padding,
        seed=noise.seed,
    )

    points = np.column_stack(
        [
            rng.random(options.point_count) * padded_width - padding,
            rng.random(options.point_count) * padded_height - padding,
        ]
    )

    distance = normalized_distance(points[:, 0], points[:, 1], padding, padded_width, padded_height)
    fade = edge_fade(distance, options.fade_scale, options.fade_power)

    elevation = noise.layered_many(points[:, 0], points[:, 1], POINT_FIELD_OCTAVES) * fade
    terrain = classify_elevations(elevation)

    counts = {TerrainType(t).name.lower(): int(np.sum(terrain == t)) for t in TerrainType}
    logger.info("Point field classified", **counts)

    return PointField(
        width=width,
        height=height,
        padding=padding,
        seed=noise.seed,
        points=points,
        elevation=elevation,
        terrain=terrain,
    )
