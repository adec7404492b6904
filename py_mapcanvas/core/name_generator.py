"""
Settlement name generation.

Names are a prefix and a suffix drawn independently from fixed per-tier
tables. Collisions with names already used in the same tier are retried a
bounded number of times; the last draw is kept even if it still collides, so
uniqueness is best-effort.
"""

from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np
from pydantic import BaseModel, Field

from ..utils.random import get_rng


class SettlementTier(str, Enum):
    """Settlement sizes."""

    CITY = "city"
    VILLAGE = "village"


class NameTable(BaseModel):
    """Prefix and suffix parts for one tier."""

    prefixes: List[str] = Field(description="Leading name parts")
    suffixes: List[str] = Field(description="Trailing name parts")

    def combinations(self) -> int:
        return len(self.prefixes) * len(self.suffixes)


DEFAULT_NAME_TABLES: Dict[SettlementTier, NameTable] = {
    SettlementTier.CITY: NameTable(
        prefixes=[
            "Elder", "Storm", "Iron", "High", "Dawn", "Dusk", "Moon", "Sun",
            "Star", "Dragon", "Crystal", "Silver", "Golden", "Shadow", "Frost",
        ],
        suffixes=[
            "haven", "spire", "keep", "guard", "hold", "gate", "fall", "rise",
            "peak", "crown", "realm", "forge", "heart", "watch", "ward",
        ],
    ),
    SettlementTier.VILLAGE: NameTable(
        prefixes=[
            "Green", "Red", "Blue", "Oak", "Pine", "Maple", "River", "Lake",
            "Hill", "Stone", "Wood", "Meadow", "Spring", "Summer", "Winter",
        ],
        suffixes=[
            "brook", "wood", "vale", "dale", "field", "stead", "ton", "ford",
            "cross", "bridge", "mill", "shore", "haven", "rest", "home",
        ],
    ),
}


class NameGenerator:
    """Prefix/suffix name generator."""

    def __init__(
        self,
        rng: Optional[np.random.Generator] = None,
        tables: Optional[Dict[SettlementTier, NameTable]] = None,
        max_attempts: int = 50,
    ):
        """Initialize name generator with optional generator for deterministic names."""
        self.rng = rng if rng is not None else get_rng()
        self.tables = tables or DEFAULT_NAME_TABLES
        self.max_attempts = max_attempts

    def _pick(self, parts: Sequence[str]) -> str:
        return parts[int(self.rng.integers(0, len(parts)))]

    def generate_name(self, tier: SettlementTier, used_names: Iterable[str] = ()) -> str:
        """Generate a name for ``tier``, avoiding ``used_names`` when possible.

        Args:
            tier: Settlement tier selecting the tables
            used_names: Names already taken in this tier

        Returns:
            Generated name; may collide after ``max_attempts`` draws
        """
        table = self.tables[SettlementTier(tier)]
        used = set(used_names)

        name = ""
        for _ in range(self.max_attempts):
            name = self._pick(table.prefixes) + self._pick(table.suffixes)
            if name not in used:
                break
        return name

    def generate_names(self, tier: SettlementTier, count: int) -> List[str]:
        """Generate ``count`` names for one tier, each avoiding the earlier ones."""
        names: List[str] = []
        for _ in range(count):
            names.append(self.generate_name(tier, names))
        return names
