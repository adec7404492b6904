"""
Terrain categories, their colors and the per-category visibility switches.

Elevation is classified into five fixed categories. Hidden categories are
not removed from the data; the rasterizer paints them with a randomly chosen
visible category instead.
"""

from enum import IntEnum
from typing import Dict, List, Tuple

import numpy as np
import structlog

logger = structlog.get_logger()


class TerrainType(IntEnum):
    """Terrain categories, ordered from lowest to highest elevation."""

    WATER = 0
    DRY_PLAINS = 1
    GRASSLAND = 2
    ROCKY = 3
    SNOW = 4


# Canonical names used by the UI and configuration
TERRAIN_NAMES = {
    TerrainType.WATER: "water",
    TerrainType.DRY_PLAINS: "dry_plains",
    TerrainType.GRASSLAND: "grassland",
    TerrainType.ROCKY: "rocky",
    TerrainType.SNOW: "snow",
}

TERRAIN_COLORS = {
    TerrainType.WATER: "#1E90FF",
    TerrainType.DRY_PLAINS: "#8B4513",
    TerrainType.GRASSLAND: "#4CAF50",
    TerrainType.ROCKY: "#A9A9A9",
    TerrainType.SNOW: "#FFFFFF",
}

# Lower bounds (exclusive) of each land category, highest first
ELEVATION_THRESHOLDS: List[Tuple[float, TerrainType]] = [
    (0.7, TerrainType.SNOW),
    (0.55, TerrainType.ROCKY),
    (0.35, TerrainType.GRASSLAND),
    (0.25, TerrainType.DRY_PLAINS),
]

WATER_COLOR = TERRAIN_COLORS[TerrainType.WATER]

# Order in which substitute candidates are listed
SUBSTITUTION_ORDER = [
    TerrainType.SNOW,
    TerrainType.ROCKY,
    TerrainType.GRASSLAND,
    TerrainType.DRY_PLAINS,
    TerrainType.WATER,
]

LAND_TYPES = [t for t in SUBSTITUTION_ORDER if t != TerrainType.WATER]


def hex_to_rgb(color: str) -> Tuple[int, int, int]:
    """Convert ``#RRGGBB`` to an RGB tuple."""
    color = color.lstrip("#")
    return int(color[0:2], 16), int(color[2:4], 16), int(color[4:6], 16)


# Palette indexed by TerrainType value, for vectorized painting
TERRAIN_RGB = np.array(
    [hex_to_rgb(TERRAIN_COLORS[t]) for t in sorted(TERRAIN_COLORS)], dtype=np.uint8
)


def parse_terrain_type(name) -> TerrainType:
    """
    Resolve a terrain category from its name or value.

    Accepts ``"dry_plains"``, ``"dryPlains"``, ``"Dry Plains"`` and TerrainType
    members alike.
    """
    if isinstance(name, TerrainType):
        return name
    if isinstance(name, (int, np.integer)):
        return TerrainType(int(name))
    key = str(name).strip().replace(" ", "_").replace("-", "_")
    if key.isupper():
        key = key.lower()
    # camelCase -> snake_case
    key = "".join("_" + c.lower() if c.isupper() else c for c in key).lstrip("_")
    key = key.replace("__", "_")
    for terrain_type, terrain_name in TERRAIN_NAMES.items():
        if terrain_name == key:
            return terrain_type
    raise ValueError(f"Unknown terrain type: {name!r}")


def classify_elevation(elevation: float) -> TerrainType:
    """Map an elevation value to its terrain category."""
    for threshold, terrain_type in ELEVATION_THRESHOLDS:
        if elevation > threshold:
            return terrain_type
    return TerrainType.WATER


def classify_elevations(elevations: np.ndarray) -> np.ndarray:
    """Vectorized ``classify_elevation``; returns an int8 array of TerrainType values."""
    terrain = np.full(len(elevations), TerrainType.WATER, dtype=np.int8)
    # Apply lowest threshold first so higher categories overwrite
    for threshold, terrain_type in reversed(ELEVATION_THRESHOLDS):
        terrain[elevations > threshold] = terrain_type
    return terrain


class TerrainVisibility:
    """
    Per-category visibility switches.

    At least one category always stays visible, so a substitute color can
    always be drawn for hidden ones.
    """

    def __init__(self, **flags: bool):
        self._visible: Dict[TerrainType, bool] = {t: True for t in TerrainType}
        for name, enabled in flags.items():
            self._visible[parse_terrain_type(name)] = bool(enabled)
        if not any(self._visible.values()):
            raise ValueError("At least one terrain type must stay visible")

    def is_visible(self, terrain_type) -> bool:
        return self._visible[parse_terrain_type(terrain_type)]

    def set_visible(self, terrain_type, enabled: bool) -> bool:
        """
        Show or hide a category.

        Returns:
            True if the switch now holds ``enabled``; False when the request
            was rejected because it would hide the last visible category.
        """
        terrain_type = parse_terrain_type(terrain_type)
        if not enabled and self._visible[terrain_type] and len(self.visible_types()) == 1:
            logger.warning(
                "Refusing to hide last visible terrain type",
                terrain=TERRAIN_NAMES[terrain_type],
            )
            return False
        self._visible[terrain_type] = bool(enabled)
        return True

    def visible_types(self, include_water: bool = True) -> List[TerrainType]:
        """Visible categories in substitution order."""
        return [
            t
            for t in SUBSTITUTION_ORDER
            if self._visible[t] and (include_water or t != TerrainType.WATER)
        ]

    def hidden_types(self) -> List[TerrainType]:
        return [t for t in SUBSTITUTION_ORDER if not self._visible[t]]

    def key(self) -> Tuple[bool, ...]:
        """Hashable snapshot used to tag render caches."""
        return tuple(self._visible[t] for t in TerrainType)

    def as_dict(self) -> Dict[str, bool]:
        return {TERRAIN_NAMES[t]: self._visible[t] for t in TerrainType}

    def copy(self) -> "TerrainVisibility":
        return TerrainVisibility(**self.as_dict())

    def __eq__(self, other) -> bool:
        return isinstance(other, TerrainVisibility) and self.key() == other.key()

    def __repr__(self) -> str:
        return f"TerrainVisibility({self.as_dict()})"
