"""Seeded gradient noise sampling."""

from typing import Iterable, Optional, Sequence, Tuple

import numpy as np
from opensimplex import OpenSimplex

from ..utils.random import get_rng, new_seed

# (frequency divisor, weight) pairs used for point field elevation
POINT_FIELD_OCTAVES: Sequence[Tuple[float, float]] = ((200.0, 0.5), (100.0, 0.3), (50.0, 0.2))


class NoiseSampler:
    """
    Deterministic 2D simplex noise for a seed fixed at construction.

    A new sampler is created for every regenerated map so maps differ from
    run to run unless a seed is given.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = new_seed(get_rng()) if seed is None else int(seed)
        self._simplex = OpenSimplex(seed=self.seed)

    def sample(self, x: float, y: float) -> float:
        """Raw noise value in [-1, 1] at ``(x, y)``."""
        return self._simplex.noise2(x, y)

    def sample01(self, x: float, y: float) -> float:
        """Noise remapped to [0, 1]."""
        return (self._simplex.noise2(x, y) + 1.0) / 2.0

    def layered(
        self, x: float, y: float, octaves: Iterable[Tuple[float, float]] = POINT_FIELD_OCTAVES
    ) -> float:
        """
        Weighted sum of [0, 1] noise octaves.

        Args:
            x, y: Coordinates
            octaves: ``(frequency divisor, weight)`` pairs; each octave samples
                the noise at ``(x / divisor, y / divisor)``

        Returns:
            Elevation in [0, sum of weights]
        """
        elevation = 0.0
        for divisor, weight in octaves:
            elevation += self.sample01(x / divisor, y / divisor) * weight
        return elevation

    def layered_many(
        self,
        xs: np.ndarray,
        ys: np.ndarray,
        octaves: Iterable[Tuple[float, float]] = POINT_FIELD_OCTAVES,
    ) -> np.ndarray:
        """``layered`` for paired coordinate arrays."""
        octaves = list(octaves)
        return np.array(
            [self.layered(float(x), float(y), octaves) for x, y in zip(xs, ys)],
            dtype=np.float64,
        )
