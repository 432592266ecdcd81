"""
Response formatting utilities for the RO performance calculator.

Turns result models into JSON-safe dicts with display rounding applied.
"""

from typing import Any, Dict, Iterable, Mapping

from .helpers import convert_numpy_types
from .schemas import HydraulicBalance, IonPassageResult, SystemReport
from .units import FlowUnit, parse_flow_unit

# Flow decimals by unit family: per-hour units 2, per-day units 1, million-per-day units 3
FLOW_DECIMALS = {
    FlowUnit.GPM: 2,
    FlowUnit.M3H: 2,
    FlowUnit.GPD: 1,
    FlowUnit.M3D: 1,
    FlowUnit.MGD: 3,
    FlowUnit.MIGD: 3,
    FlowUnit.MLD: 3,
}

PRESSURE_DECIMALS = 1
FLUX_DECIMALS = 1
BETA_DECIMALS = 2
CONCENTRATION_DECIMALS = 3
TDS_DECIMALS = 2

FLOW_FIELDS = (
    'feed_flow',
    'permeate_flow',
    'concentrate_flow',
    'feed_flow_per_vessel',
    'concentrate_flow_per_vessel',
)
PRESSURE_FIELDS = (
    'feed_pressure',
    'concentrate_pressure',
    'permeate_pressure',
    'net_driving_pressure',
    'pressure_drop',
    'osmotic_pressure',
    'effective_osmotic_pressure',
)
FLUX_FIELDS = ('avg_flux', 'avg_flux_lmh', 'avg_flux_gfd', 'flux', 'highest_flux', 'calc_flux')
BETA_FIELDS = ('beta', 'highest_beta')


def get_flow_decimals(unit: Any) -> int:
    return FLOW_DECIMALS.get(parse_flow_unit(unit), 2)


def _round_fields(data: Dict[str, Any], fields: Iterable[str], decimals: int) -> None:
    for field in fields:
        value = data.get(field)
        if isinstance(value, float):
            data[field] = round(value, decimals)


def _round_map(values: Mapping[str, float], decimals: int) -> Dict[str, float]:
    return {key: round(value, decimals) for key, value in values.items()}


def _round_hydraulics(data: Dict[str, Any], flow_decimals: int) -> None:
    _round_fields(data, FLOW_FIELDS, flow_decimals)
    _round_fields(data, PRESSURE_FIELDS, PRESSURE_DECIMALS)
    _round_fields(data, FLUX_FIELDS, FLUX_DECIMALS)
    _round_fields(data, BETA_FIELDS, BETA_DECIMALS)
    _round_fields(data, ('recovery_pct', 'area', 'total_area'), 1)
    _round_fields(data, ('feed_tds', 'permeate_tds', 'concentrate_tds'), TDS_DECIMALS)


def format_report_response(report: SystemReport) -> Dict[str, Any]:
    """
    Format a system report for display.

    Args:
        report: Result of calculate_system

    Returns:
        JSON-safe response with rounded display values
    """
    data = convert_numpy_types(report.model_dump(mode='json'))
    flow_decimals = get_flow_decimals(data['system_results']['flow_unit'])

    _round_hydraulics(data['system_results'], flow_decimals)
    for stage in data['stage_results']:
        _round_hydraulics(stage, flow_decimals)

    for key in ('feed_ion_concentrations', 'permeate_ion_concentrations', 'concentrate_ion_concentrations'):
        data[key] = _round_map(data[key], CONCENTRATION_DECIMALS)
    data['concentrate_saturation'] = _round_map(data['concentrate_saturation'], 1)

    concentrate = data['concentrate_parameters']
    _round_fields(concentrate, ('tds',), TDS_DECIMALS)
    _round_fields(concentrate, ('osmotic_pressure',), PRESSURE_DECIMALS)
    _round_fields(concentrate, ('ph', 'concentration_factor', 'langelier', 'phs'), 2)
    _round_fields(concentrate, ('ccpp',), 1)

    permeate = data['permeate_parameters']
    _round_fields(permeate, ('tds',), TDS_DECIMALS)
    _round_fields(permeate, ('osmotic_pressure',), PRESSURE_DECIMALS)
    _round_fields(permeate, ('ph',), 2)

    return {
        "status": "success",
        "message": "RO system calculation completed",
        "results": data,
        "warnings": list(data['design_warnings']),
    }


def format_ion_passage_response(result: IonPassageResult) -> Dict[str, Any]:
    """
    Format an ion passage estimate for display.

    Args:
        result: Result of calculate_ion_passage

    Returns:
        JSON-safe response with rounded concentrations
    """
    data = convert_numpy_types(result.model_dump(mode='json'))
    data['permeate_ions'] = _round_map(data['permeate_ions'], CONCENTRATION_DECIMALS)
    data['concentrate_ions'] = _round_map(data['concentrate_ions'], CONCENTRATION_DECIMALS)
    _round_fields(data, ('permeate_tds',), TDS_DECIMALS)
    _round_fields(data, ('lsi',), 2)
    _round_fields(data, BETA_FIELDS, BETA_DECIMALS)

    return {
        "status": "success",
        "message": "Ion passage calculation completed",
        "results": data,
    }


def format_hydraulic_balance_response(balance: HydraulicBalance) -> Dict[str, Any]:
    data = convert_numpy_types(balance.model_dump(mode='json'))
    _round_hydraulics(data, get_flow_decimals(data['unit']))
    return {
        "status": "success",
        "message": "Hydraulic balance completed",
        "results": data,
    }


def format_error_response(error: Exception, request_params: Dict[str, Any]) -> Dict[str, Any]:
    """
    Format an error response.

    Args:
        error: The exception that occurred
        request_params: Original request parameters

    Returns:
        Formatted error response
    """
    return {
        "status": "error",
        "error": {
            "type": type(error).__name__,
            "message": str(error),
            "request_parameters": request_params
        }
    }
