"""Tests for the stage pressure drop models."""

import pytest

from ro_calc.constants import GPM_PER_M3H
from ro_calc.pressure_drop_calculator import (
    average_flow_per_vessel_m3h,
    calculate_stage_pressure_drop,
)
from ro_calc.units import psi_to_bar


class TestAverageFlow:

    @pytest.mark.unit
    def test_arithmetic_average_per_vessel(self):
        assert average_flow_per_vessel_m3h(100.0, 50.0, 5) == pytest.approx(15.0)

    @pytest.mark.unit
    def test_no_vessels(self):
        assert average_flow_per_vessel_m3h(100.0, 50.0, 0) == 0.0


class TestStagePressureDrop:

    @pytest.mark.unit
    def test_power_law(self):
        dp = calculate_stage_pressure_drop(10.0, 10.0, 1, 1, model='power_law')
        assert dp == pytest.approx(psi_to_bar(0.012 * (10.0 * GPM_PER_M3H) ** 1.7))

    @pytest.mark.unit
    def test_power_law_scales_with_elements(self):
        one = calculate_stage_pressure_drop(20.0, 10.0, 2, 1, model='power_law')
        seven = calculate_stage_pressure_drop(20.0, 10.0, 2, 7, model='power_law')
        assert seven == pytest.approx(7 * one)

    @pytest.mark.unit
    def test_power_law_superlinear_in_flow(self):
        low = calculate_stage_pressure_drop(10.0, 5.0, 1, 6, model='power_law')
        high = calculate_stage_pressure_drop(20.0, 10.0, 1, 6, model='power_law')
        assert high > 2 * low

    @pytest.mark.unit
    def test_linear(self):
        assert calculate_stage_pressure_drop(10.0, 5.0, 2, 7, model='linear') == pytest.approx(1.4)

    @pytest.mark.unit
    @pytest.mark.parametrize("vessels,elements", [(0, 7), (6, 0)])
    def test_no_vessels_or_elements(self, vessels, elements):
        assert calculate_stage_pressure_drop(10.0, 5.0, vessels, elements) == 0.0

    @pytest.mark.unit
    def test_default_model_is_power_law(self):
        assert calculate_stage_pressure_drop(10.0, 10.0, 1, 1) == pytest.approx(
            calculate_stage_pressure_drop(10.0, 10.0, 1, 1, model='power_law')
        )
