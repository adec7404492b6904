"""
Random number generation utilities.

Every random draw in map generation and rendering goes through an explicit
``numpy.random.Generator`` so callers can inject a seeded one. This module
also keeps a process-wide default generator for hosts that do not care.
"""

from typing import Optional

import numpy as np

# Global generator instance
_rng: Optional[np.random.Generator] = None

# OpenSimplex seeds are plain ints; keep them in 31 bits
MAX_SEED = 2**31 - 1


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Create a generator, seeded when ``seed`` is given."""
    return np.random.default_rng(seed)


def new_seed(rng: np.random.Generator) -> int:
    """Draw a fresh noise seed from ``rng``."""
    return int(rng.integers(0, MAX_SEED))


def set_random_seed(seed: Optional[int]) -> None:
    """
    Reset the default generator.

    Args:
        seed: Seed to use, or None for OS entropy
    """
    global _rng
    _rng = make_rng(seed)


def get_rng() -> np.random.Generator:
    """
    Get the default generator instance.

    Returns:
        numpy Generator shared by callers that were not given one
    """
    global _rng
    if _rng is None:
        _rng = make_rng()
    return _rng
