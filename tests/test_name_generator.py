"""Tests for settlement name generation."""

from py_mapcanvas.core.name_generator import (
    DEFAULT_NAME_TABLES,
    NameGenerator,
    NameTable,
    SettlementTier,
)
from py_mapcanvas.utils.random import make_rng


class TestNameGenerator:
    """Test prefix/suffix names."""

    def test_deterministic_with_seed(self):
        """Test that same generator seed produces same names."""
        a = NameGenerator(make_rng(42))
        b = NameGenerator(make_rng(42))
        assert a.generate_names(SettlementTier.CITY, 5) == b.generate_names(SettlementTier.CITY, 5)

    def test_names_built_from_tables(self):
        generator = NameGenerator(make_rng(7))
        for tier in SettlementTier:
            table = DEFAULT_NAME_TABLES[tier]
            for name in generator.generate_names(tier, 10):
                assert any(
                    name == prefix + suffix
                    for prefix in table.prefixes
                    for suffix in table.suffixes
                )

    def test_avoids_used_names(self):
        tables = {
            SettlementTier.CITY: NameTable(prefixes=["Ash", "Oak"], suffixes=["ford"]),
            SettlementTier.VILLAGE: NameTable(prefixes=["Elm"], suffixes=["ton"]),
        }
        generator = NameGenerator(make_rng(3), tables)
        assert generator.generate_name(SettlementTier.CITY, ["Ashford"]) == "Oakford"
        assert sorted(generator.generate_names(SettlementTier.CITY, 2)) == ["Ashford", "Oakford"]

    def test_duplicates_when_table_exhausted(self):
        """Uniqueness is best-effort: the last draw is kept."""
        tables = {
            SettlementTier.CITY: NameTable(prefixes=["Ash"], suffixes=["ford"]),
            SettlementTier.VILLAGE: NameTable(prefixes=["Elm"], suffixes=["ton"]),
        }
        generator = NameGenerator(make_rng(3), tables, max_attempts=5)
        assert generator.generate_names(SettlementTier.VILLAGE, 3) == ["Elmton"] * 3

    def test_table_combinations(self):
        assert DEFAULT_NAME_TABLES[SettlementTier.CITY].combinations() == 15 * 15
