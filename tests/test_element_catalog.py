"""
Tests for the element catalog.
"""

import pytest

from isotopic.isotope_core.config_loader import load_config
from isotopic.isotope_core.element_catalog import ElementCatalog, WASTE


@pytest.fixture
def catalog():
    return ElementCatalog(load_config())


class TestElementCatalog:
    """Lookup by atomic number and symbol."""

    def test_length_excludes_waste(self, catalog):
        assert len(catalog) == 92
        assert catalog.max_atomic_number == 92

    def test_index_zero_is_waste(self, catalog):
        assert catalog[0] is WASTE
        assert catalog[0].is_waste
        assert not catalog[0].can_fuse

    def test_lookup(self, catalog):
        assert catalog[1].name == "Hydrogen"
        assert catalog.helium.symbol == "He"
        assert catalog.carbon.atomic_number == 6
        assert catalog[92].name == "Uranium"

    def test_out_of_range(self, catalog):
        with pytest.raises(IndexError):
            catalog[93]
        with pytest.raises(IndexError):
            catalog[-1]
        assert catalog.get(93) is None
        assert catalog.get(0) is None

    def test_by_symbol_case_insensitive(self, catalog):
        assert catalog.by_symbol("fe").atomic_number == 26
        assert catalog.by_symbol("TC").atomic_number == 43
        assert catalog.by_symbol("Xx") is None

    def test_stability(self, catalog):
        assert catalog.is_unstable(43)
        assert not catalog.is_unstable(26)
        assert catalog[43].base_half_life == 24.0
        assert catalog[1].base_half_life is None
        symbols = {t.symbol for t in catalog.unstable_types}
        assert {"Tc", "Pm", "Po", "U"} <= symbols
        assert "Fe" not in symbols

    def test_heavy_threshold(self, catalog):
        assert catalog.is_heavy(26)
        assert catalog.is_heavy(92)
        assert not catalog.is_heavy(25)
        assert not catalog[0].is_heavy

    def test_iteration_in_atomic_order(self, catalog):
        numbers = [t.atomic_number for t in catalog]
        assert numbers == list(range(1, 93))
        assert 0 not in catalog
        assert 92 in catalog
