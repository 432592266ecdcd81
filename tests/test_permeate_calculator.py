"""Tests for ion rejection and the ion-by-ion mass balance."""

import pytest

from ro_calc.ions import IonType
from ro_calc.permeate_calculator import (
    class_rejection_pct,
    get_ion_rejection,
    calculate_membrane_rejections,
    standard_rejections,
    calculate_ion_balance,
)
from ro_calc.schemas import MembraneSpec


@pytest.fixture
def membrane():
    return MembraneSpec(id='test', rejection=99.5)


class TestClassRejection:
    """Rejection by ion class relative to the nominal salt rejection."""

    @pytest.mark.unit
    @pytest.mark.parametrize("ion,expected", [
        (IonType.NA, 99.5),      # nominal passage
        (IonType.CL, 99.5),
        (IonType.CA, 99.85),     # 0.3x passage
        (IonType.SO4, 99.85),
        (IonType.HCO3, 99.0),    # 2x passage
        (IonType.SIO2, 98.75),   # 2.5x passage
        (IonType.B, 80.0),       # fixed
        (IonType.CO2, 0.0),      # passes freely
    ])
    def test_class_rejection(self, ion, expected):
        assert class_rejection_pct(ion, 99.5) == pytest.approx(expected)


class TestIonRejection:

    @pytest.mark.unit
    def test_fraction_returned(self, membrane):
        assert get_ion_rejection(IonType.NA, membrane) == pytest.approx(0.995)

    @pytest.mark.unit
    def test_co2_never_rejected(self, membrane):
        assert get_ion_rejection(IonType.CO2, membrane, age_years=5, sp_increase_per_year=0.1) == 0.0

    @pytest.mark.unit
    def test_override_wins(self):
        spec = MembraneSpec.model_validate({'id': 'm', 'rejection': 99.5, 'ion_rejections': {'Na+': 97.0}})
        assert get_ion_rejection(IonType.NA, spec) == pytest.approx(0.97)
        assert get_ion_rejection(IonType.CL, spec) == pytest.approx(0.995)

    @pytest.mark.unit
    def test_aging_increases_passage(self, membrane):
        # passage 0.5 % grows by 1.1^2
        rejection = get_ion_rejection(IonType.NA, membrane, age_years=2, sp_increase_per_year=0.1)
        assert rejection == pytest.approx((100 - 0.5 * 1.21) / 100)

    @pytest.mark.unit
    def test_rejection_clamped(self):
        loose = MembraneSpec(id='loose', rejection=60.0)
        # Silica passage would be 100 %, clamped to 60 % rejection
        assert get_ion_rejection(IonType.SIO2, loose) == pytest.approx(0.60)
        # Divalent rejection on a tight membrane is capped at 99.9 %
        tight = MembraneSpec(id='tight', rejection=99.9)
        assert get_ion_rejection(IonType.CA, tight) == pytest.approx(0.999)

    @pytest.mark.unit
    def test_membrane_rejections_cover_feed(self, membrane):
        ions = {IonType.CA: 120.0, IonType.NA: 300.0, IonType.CL: 450.0}
        rejections = calculate_membrane_rejections(ions, membrane)
        assert list(rejections) == [IonType.CA, IonType.NA, IonType.CL]

    @pytest.mark.unit
    def test_standard_table(self):
        rejections = standard_rejections({IonType.NA: 1.0, IonType.B: 1.0, IonType.SO4: 1.0})
        assert rejections == {
            IonType.NA: pytest.approx(0.985),
            IonType.SO4: pytest.approx(0.998),
            IonType.B: pytest.approx(0.70),
        }


class TestIonBalance:
    """Test permeate/concentrate split."""

    @pytest.mark.unit
    def test_single_ion(self):
        perm, conc = calculate_ion_balance({IonType.NA: 100.0}, {IonType.NA: 0.9}, 0.5)
        assert perm[IonType.NA] == pytest.approx(10.0)
        assert conc[IonType.NA] == pytest.approx(190.0)

    @pytest.mark.unit
    @pytest.mark.parametrize("recovery", [0.01, 0.5, 0.75, 0.99])
    def test_ion_mass_conserved(self, membrane, recovery):
        feed = {IonType.CA: 120.0, IonType.NA: 300.0, IonType.HCO3: 150.0, IonType.CL: 450.0}
        rejections = calculate_membrane_rejections(feed, membrane)
        q_feed = 22.7
        perm, conc = calculate_ion_balance(feed, rejections, recovery, q_feed)

        for ion, cf in feed.items():
            mass_out = q_feed * recovery * perm[ion] + q_feed * (1 - recovery) * conc[ion]
            assert mass_out == pytest.approx(q_feed * cf)

    @pytest.mark.unit
    def test_full_recovery_capped(self):
        perm, conc = calculate_ion_balance({IonType.NA: 100.0}, {IonType.NA: 0.99}, 1.0)
        assert conc[IonType.NA] == pytest.approx((100.0 - 0.99 * 1.0) / 0.01)

    @pytest.mark.unit
    def test_zero_feed_flow_treated_as_unit(self):
        result = calculate_ion_balance({IonType.NA: 100.0}, {IonType.NA: 0.9}, 0.5, feed_flow=0.0)
        assert result == calculate_ion_balance({IonType.NA: 100.0}, {IonType.NA: 0.9}, 0.5)

    @pytest.mark.unit
    def test_missing_rejection_fully_rejected(self):
        perm, conc = calculate_ion_balance({IonType.MG: 50.0}, {}, 0.5)
        assert perm[IonType.MG] == 0.0
        assert conc[IonType.MG] == pytest.approx(100.0)

    @pytest.mark.unit
    def test_concentrate_rises_with_recovery(self, membrane):
        feed = {IonType.NA: 300.0, IonType.CL: 450.0}
        rejections = calculate_membrane_rejections(feed, membrane)
        _, low = calculate_ion_balance(feed, rejections, 0.5)
        _, high = calculate_ion_balance(feed, rejections, 0.8)
        assert high[IonType.CL] > low[IonType.CL]
