# -*- coding: utf-8 -*-
"""
Unit normalization for flows, pressures, flux and temperature.

All internal math runs on m3/h, bar, lmh, m2 and degrees Celsius. The flow
unit chosen by the caller decides the display units of every output
("master unit rule"): US flow units report psi, gfd and ft2, metric flow
units report bar, lmh and m2.
"""

import logging
from enum import Enum
from typing import Any

from .constants import (
    FLOW_TO_M3H,
    BAR_TO_PSI,
    LMH_PER_GFD,
    FT2_TO_M2,
    A_VALUE_GFD_PSI_TO_LMH_BAR,
    DEFAULT_A_VALUE_LMH_BAR,
)
from .helpers import coerce_float

logger = logging.getLogger(__name__)


class FlowUnit(str, Enum):
    GPM = 'gpm'
    M3H = 'm3/h'
    M3D = 'm3/d'
    GPD = 'gpd'
    MGD = 'mgd'
    MIGD = 'migd'
    MLD = 'mld'


US_FLOW_UNITS = frozenset({FlowUnit.GPM, FlowUnit.GPD, FlowUnit.MGD, FlowUnit.MIGD})

_FLOW_UNIT_ALIASES = {
    'm3h': FlowUnit.M3H,
    'm3/hr': FlowUnit.M3H,
    'cmh': FlowUnit.M3H,
    'm3d': FlowUnit.M3D,
    'cmd': FlowUnit.M3D,
}


def parse_flow_unit(tag: Any) -> FlowUnit:
    """
    Parse a flow unit tag leniently.

    Unknown or malformed tags fall back to m3/h (conversion factor 1) and
    are logged rather than raised.
    """
    if isinstance(tag, FlowUnit):
        return tag
    key = str(tag or '').strip().lower().replace('³', '3').replace(' ', '')
    try:
        return FlowUnit(key)
    except ValueError:
        pass
    if key in _FLOW_UNIT_ALIASES:
        return _FLOW_UNIT_ALIASES[key]
    logger.warning(f"Unknown flow unit {tag!r}, treating flow as m3/h")
    return FlowUnit.M3H


def flow_factor(unit: FlowUnit) -> float:
    """Conversion factor from ``unit`` to m3/h."""
    return FLOW_TO_M3H.get(unit.value, 1.0)


def to_m3h(value: float, unit: FlowUnit) -> float:
    return value * flow_factor(unit)


def from_m3h(value_m3h: float, unit: FlowUnit) -> float:
    return value_m3h / flow_factor(unit)


def is_us_unit(unit: FlowUnit) -> bool:
    return unit in US_FLOW_UNITS


def pressure_unit(unit: FlowUnit) -> str:
    return 'psi' if is_us_unit(unit) else 'bar'


def flux_unit(unit: FlowUnit) -> str:
    return 'gfd' if is_us_unit(unit) else 'lmh'


def area_unit(unit: FlowUnit) -> str:
    return 'ft2' if is_us_unit(unit) else 'm2'


def bar_to_psi(value_bar: float) -> float:
    return value_bar * BAR_TO_PSI


def psi_to_bar(value_psi: float) -> float:
    return value_psi / BAR_TO_PSI


def lmh_to_gfd(value_lmh: float) -> float:
    return value_lmh / LMH_PER_GFD


def m2_to_ft2(value_m2: float) -> float:
    return value_m2 / FT2_TO_M2


def ft2_to_m2(value_ft2: float) -> float:
    return value_ft2 * FT2_TO_M2


def fahrenheit_to_celsius(value_f: float) -> float:
    return (value_f - 32.0) * 5.0 / 9.0


def display_pressure(value_bar: float, unit: FlowUnit) -> float:
    """Convert an internal bar value to the display pressure unit."""
    return bar_to_psi(value_bar) if is_us_unit(unit) else value_bar


def input_pressure_to_bar(value: float, unit: FlowUnit) -> float:
    """Convert a caller pressure given in the display unit to bar."""
    return psi_to_bar(value) if is_us_unit(unit) else value


def display_flux(value_lmh: float, unit: FlowUnit) -> float:
    return lmh_to_gfd(value_lmh) if is_us_unit(unit) else value_lmh


def display_area(value_m2: float, unit: FlowUnit) -> float:
    return m2_to_ft2(value_m2) if is_us_unit(unit) else value_m2


def sanitize_a_value(a_value: Any) -> float:
    """
    Normalize a water permeability coefficient to lmh/bar.

    Catalog values below 1.0 are in the gfd/psi convention and are
    converted; missing or non-positive values fall back to the default.
    """
    a = coerce_float(a_value, 0.0)
    if a <= 0:
        return DEFAULT_A_VALUE_LMH_BAR
    if a < 1.0:
        return a * A_VALUE_GFD_PSI_TO_LMH_BAR
    return a
