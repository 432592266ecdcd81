"""Tests for the membrane catalog and lookup."""

import pytest

from ro_calc.membrane_catalog import (
    DEFAULT_MEMBRANE_CATALOG,
    GENERIC_MEMBRANE,
    build_catalog,
    find_membrane,
    normalize_membrane_name,
    resolve_catalog,
)
from ro_calc.schemas import MembraneSpec


class TestDefaultCatalog:

    @pytest.mark.unit
    def test_default_catalog_is_immutable_tuple(self):
        assert isinstance(DEFAULT_MEMBRANE_CATALOG, tuple)
        assert all(isinstance(m, MembraneSpec) for m in DEFAULT_MEMBRANE_CATALOG)

    @pytest.mark.unit
    def test_default_entries(self):
        ids = [m.id for m in DEFAULT_MEMBRANE_CATALOG]
        assert ids == ['espa2ld', 'cpa3', 'lfc3ld4040']

        espa = DEFAULT_MEMBRANE_CATALOG[0]
        assert espa.area_m2 == pytest.approx(37.16)
        assert espa.a_value == pytest.approx(4.43)


class TestLookup:

    @pytest.mark.unit
    @pytest.mark.parametrize("name,expected", [
        ('LFC3-LD-4040', 'lfc3ld4040'),
        ('lfc3_ld_4040', 'lfc3ld4040'),
        (' Lfc3 LD 4040 ', 'lfc3ld4040'),
        (None, ''),
    ])
    def test_normalize_membrane_name(self, name, expected):
        assert normalize_membrane_name(name) == expected

    @pytest.mark.unit
    @pytest.mark.parametrize("model,expected_id", [
        ('cpa3', 'cpa3'),
        ('CPA3-4040', 'cpa3'),
        ('LFC3-LD-4040', 'lfc3ld4040'),
        ('unknown-model', 'espa2ld'),
        (None, 'espa2ld'),
    ])
    def test_find_membrane(self, model, expected_id):
        assert find_membrane(DEFAULT_MEMBRANE_CATALOG, model).id == expected_id

    @pytest.mark.unit
    def test_empty_catalog_uses_generic(self):
        assert find_membrane((), 'cpa3') is GENERIC_MEMBRANE


class TestCatalogResolution:

    @pytest.mark.unit
    def test_config_catalog_wins(self):
        custom = build_catalog([{'id': 'custom', 'area_m2': 30.0}])
        assert resolve_catalog(list(custom), DEFAULT_MEMBRANE_CATALOG) == custom

    @pytest.mark.unit
    def test_injected_default(self):
        injected = build_catalog([{'id': 'injected'}])
        assert resolve_catalog([], injected) == injected

    @pytest.mark.unit
    def test_configured_default(self):
        assert resolve_catalog([]) == DEFAULT_MEMBRANE_CATALOG

    @pytest.mark.unit
    def test_build_catalog_accepts_models(self):
        spec = MembraneSpec(id='m')
        catalog = build_catalog([spec, {'id': 'n'}])
        assert catalog[0] is spec
        assert catalog[1].id == 'n'
        assert build_catalog(None) == ()
