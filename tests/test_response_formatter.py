"""
Tests for response formatting utilities.
"""

import json

import pytest
from ro_calc import calculate_ion_passage, calculate_system, run_hydraulic_balance
from ro_calc.response_formatter import (
    get_flow_decimals,
    format_report_response,
    format_ion_passage_response,
    format_hydraulic_balance_response,
    format_error_response
)

CONFIG = {
    'feed_flow': 100,
    'flow_unit': 'gpm',
    'recovery': 50,
    'feed_ions': {'ca': 120, 'na': 300, 'cl': 450, 'hco3': 150},
    'vessels': 6,
    'elements_per_vessel': 7,
}


def decimals(value):
    text = repr(value)
    return len(text.split('.')[1]) if '.' in text else 0


class TestFlowDecimals:

    @pytest.mark.unit
    @pytest.mark.parametrize("unit,expected", [
        ('gpm', 2),
        ('m3/h', 2),
        ('gpd', 1),
        ('m3/d', 1),
        ('mgd', 3),
        ('migd', 3),
        ('mld', 3),
        ('unknown', 2),
    ])
    def test_flow_decimals(self, unit, expected):
        assert get_flow_decimals(unit) == expected


class TestFormatReportResponse:
    """Tests for system report formatting."""

    @pytest.mark.unit
    def test_success_envelope(self):
        response = format_report_response(calculate_system(CONFIG))

        assert response["status"] == "success"
        assert response["warnings"] == []
        assert response["results"]["schema_version"] == "1.0.0"

    @pytest.mark.unit
    def test_json_safe(self):
        response = format_report_response(calculate_system(CONFIG))
        reloaded = json.loads(json.dumps(response))

        assert reloaded == response
        assert response["results"]["system_results"]["flow_unit"] == "gpm"
        assert "ca" in response["results"]["feed_ion_concentrations"]

    @pytest.mark.unit
    def test_rounding(self):
        results = format_report_response(calculate_system(CONFIG))["results"]
        system = results["system_results"]

        assert system["permeate_flow"] == 50.0
        assert decimals(system["feed_pressure"]) <= 1
        assert decimals(system["avg_flux"]) <= 1
        assert decimals(system["highest_beta"]) <= 2
        assert all(decimals(v) <= 3 for v in results["permeate_ion_concentrations"].values())
        assert all(decimals(s["flux"]) <= 1 for s in results["stage_results"])

    @pytest.mark.unit
    def test_flow_rounding_by_unit(self):
        config = dict(CONFIG, feed_flow=1.23456, flow_unit='mgd')
        system = format_report_response(calculate_system(config))["results"]["system_results"]
        assert system["feed_flow"] == 1.235

        config = dict(CONFIG, feed_flow=123456.789, flow_unit='gpd')
        system = format_report_response(calculate_system(config))["results"]["system_results"]
        assert system["feed_flow"] == 123456.8

    @pytest.mark.unit
    def test_warnings_surface(self):
        response = format_report_response(calculate_system(dict(CONFIG, vessels=1)))
        assert response["warnings"] == response["results"]["design_warnings"]
        assert len(response["warnings"]) == 2

    @pytest.mark.unit
    def test_missing_lsi_stays_null(self):
        response = format_report_response(calculate_system(dict(CONFIG, feed_ions={'na': 300, 'cl': 450})))
        assert response["results"]["concentrate_parameters"]["langelier"] is None


class TestOtherResponses:

    @pytest.mark.unit
    def test_ion_passage_response(self):
        response = format_ion_passage_response(
            calculate_ion_passage(CONFIG['feed_ions'], {'recovery': 75})
        )
        assert response["status"] == "success"
        assert decimals(response["results"]["beta"]) <= 2
        assert "na" in response["results"]["permeate_ions"]

    @pytest.mark.unit
    def test_hydraulic_balance_response(self):
        response = format_hydraulic_balance_response(run_hydraulic_balance(CONFIG))
        results = response["results"]
        assert results["unit"] == "gpm"
        assert results["permeate_flow"] == 50.0
        assert decimals(results["calc_flux"]) <= 1


class TestFormatErrorResponse:
    """Tests for error response formatting."""

    @pytest.mark.unit
    def test_format_error_response(self):
        """Test formatting error response."""
        error = ValueError("Unknown operation 'optimize'")
        request_params = {"operation": "optimize"}

        response = format_error_response(error, request_params)

        assert response["status"] == "error"
        assert response["error"]["type"] == "ValueError"
        assert response["error"]["message"] == "Unknown operation 'optimize'"
        assert response["error"]["request_parameters"] == request_params
