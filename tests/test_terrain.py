"""Tests for terrain categories and visibility switches."""

import numpy as np
import pytest

from py_mapcanvas.core.terrain import (
    TERRAIN_COLORS,
    TERRAIN_RGB,
    TerrainType,
    TerrainVisibility,
    classify_elevation,
    classify_elevations,
    hex_to_rgb,
    parse_terrain_type,
)


class TestClassification:
    """Test elevation thresholds."""

    @pytest.mark.parametrize(
        "elevation,expected",
        [
            (0.95, TerrainType.SNOW),
            (0.71, TerrainType.SNOW),
            (0.7, TerrainType.ROCKY),
            (0.56, TerrainType.ROCKY),
            (0.55, TerrainType.GRASSLAND),
            (0.36, TerrainType.GRASSLAND),
            (0.35, TerrainType.DRY_PLAINS),
            (0.26, TerrainType.DRY_PLAINS),
            (0.25, TerrainType.WATER),
            (0.0, TerrainType.WATER),
        ],
    )
    def test_thresholds(self, elevation, expected):
        """Thresholds are exclusive lower bounds."""
        assert classify_elevation(elevation) == expected

    def test_vectorized_matches_scalar(self):
        """Array classification agrees with the scalar form."""
        values = np.linspace(0, 1, 101)
        terrain = classify_elevations(values)
        assert [TerrainType(t) for t in terrain] == [classify_elevation(v) for v in values]

    def test_palette(self):
        """RGB palette is indexed by TerrainType value."""
        for terrain_type, color in TERRAIN_COLORS.items():
            assert tuple(TERRAIN_RGB[terrain_type]) == hex_to_rgb(color)
        assert hex_to_rgb("#1E90FF") == (30, 144, 255)


class TestParseTerrainType:
    """Test terrain name parsing."""

    @pytest.mark.parametrize("name", ["dry_plains", "dryPlains", "Dry Plains", "DRY_PLAINS", 1])
    def test_spellings(self, name):
        assert parse_terrain_type(name) == TerrainType.DRY_PLAINS

    def test_unknown(self):
        with pytest.raises(ValueError):
            parse_terrain_type("lava")


class TestTerrainVisibility:
    """Test visibility switches."""

    def test_all_visible_by_default(self):
        visibility = TerrainVisibility()
        assert all(visibility.is_visible(t) for t in TerrainType)
        assert visibility.hidden_types() == []

    def test_hide_and_show(self):
        visibility = TerrainVisibility()
        assert visibility.set_visible("grassland", False)
        assert not visibility.is_visible(TerrainType.GRASSLAND)
        assert TerrainType.GRASSLAND not in visibility.visible_types()
        assert visibility.set_visible("grassland", True)
        assert visibility == TerrainVisibility()

    def test_last_visible_cannot_be_hidden(self):
        """Hiding every category is refused for the last one."""
        visibility = TerrainVisibility(snow=False, rocky=False, grassland=False, dry_plains=False)
        assert visibility.visible_types() == [TerrainType.WATER]
        assert not visibility.set_visible("water", False)
        assert visibility.is_visible("water")

    def test_constructor_rejects_all_hidden(self):
        with pytest.raises(ValueError):
            TerrainVisibility(snow=False, rocky=False, grassland=False, dry_plains=False, water=False)

    def test_land_only_candidates(self):
        visibility = TerrainVisibility(rocky=False)
        assert visibility.visible_types(include_water=False) == [
            TerrainType.SNOW,
            TerrainType.GRASSLAND,
            TerrainType.DRY_PLAINS,
        ]

    def test_key_and_copy(self):
        visibility = TerrainVisibility(water=False)
        clone = visibility.copy()
        assert clone.key() == visibility.key()
        clone.set_visible("water", True)
        assert clone.key() != visibility.key()
