"""Tests for the design-limit warning rules."""

import pytest

from ro_calc.design_limits import (
    evaluate_design_limits,
    feed_flow_per_vessel_ceiling_m3h,
    flux_ceiling,
)
from ro_calc.units import FlowUnit


def make_stage(**overrides):
    stage = {
        'index': 1,
        'area_m2': 1560.72,
        'highest_flux_lmh': 8.3,
        'feed_per_vessel_m3h': 3.8,
        'raw_concentrate_pressure_bar': 2.5,
        'feed_osmotic_bar': 0.78,
        'avg_osmotic_bar': 1.08,
        'concentrate_osmotic_bar': 1.55,
    }
    stage.update(overrides)
    return stage


class TestCeilings:

    @pytest.mark.unit
    def test_flux_ceiling_by_unit(self):
        assert flux_ceiling(FlowUnit.GPM) == 20.0
        assert flux_ceiling(FlowUnit.M3H) == 34.0

    @pytest.mark.unit
    def test_feed_flow_ceiling(self):
        assert feed_flow_per_vessel_ceiling_m3h() == pytest.approx(17.03, rel=1e-3)


class TestRules:

    @pytest.mark.unit
    def test_within_limits(self):
        assert evaluate_design_limits([make_stage()], FlowUnit.GPM) == []

    @pytest.mark.unit
    def test_flux_limit_us_units(self):
        # 48.5 lmh is about 28.6 gfd
        warnings = evaluate_design_limits([make_stage(highest_flux_lmh=48.5)], FlowUnit.GPM)
        assert len(warnings) == 1
        assert 'highest flux' in warnings[0]
        assert 'gfd' in warnings[0]

    @pytest.mark.unit
    def test_flux_limit_metric_units(self):
        assert evaluate_design_limits([make_stage(highest_flux_lmh=33.0)], FlowUnit.M3H) == []
        warnings = evaluate_design_limits([make_stage(highest_flux_lmh=35.0)], FlowUnit.M3H)
        assert 'lmh' in warnings[0]

    @pytest.mark.unit
    def test_feed_flow_per_vessel(self):
        warnings = evaluate_design_limits([make_stage(feed_per_vessel_m3h=22.7)], FlowUnit.GPM)
        assert len(warnings) == 1
        assert 'feed flow per vessel' in warnings[0]
        assert 'gpm' in warnings[0]

    @pytest.mark.unit
    def test_negative_concentrate_pressure(self):
        warnings = evaluate_design_limits([make_stage(raw_concentrate_pressure_bar=-1.0)], FlowUnit.M3H)
        assert len(warnings) == 1
        assert 'concentrate pressure is negative' in warnings[0]

    @pytest.mark.unit
    @pytest.mark.parametrize("key,value", [
        ('feed_osmotic_bar', -0.1),
        ('avg_osmotic_bar', float('nan')),
        ('concentrate_osmotic_bar', float('inf')),
    ])
    def test_invalid_osmotic_pressure(self, key, value):
        warnings = evaluate_design_limits([make_stage(**{key: value})], FlowUnit.M3H)
        assert warnings == [f"Stage 1: invalid osmotic pressure ({value})"]

    @pytest.mark.unit
    def test_no_active_area(self):
        warnings = evaluate_design_limits([make_stage(area_m2=0.0, highest_flux_lmh=0.0)], FlowUnit.GPM)
        assert warnings[0].startswith('No active membrane area')

    @pytest.mark.unit
    def test_stage_order(self):
        stages = [
            make_stage(index=1, highest_flux_lmh=50.0),
            make_stage(index=2, raw_concentrate_pressure_bar=-0.5),
        ]
        warnings = evaluate_design_limits(stages, FlowUnit.GPM)
        assert [w.split(':')[0] for w in warnings] == ['Stage 1', 'Stage 2']
