# -*- coding: utf-8 -*-
"""
Constants for RO performance calculations.

Values are resolved through the configuration system (config/*.yaml and
RO_CALC_ environment overrides) with hard-coded fallbacks, so the module
works without any config files present.
"""

from .config import get_config

# Flow conversion to the internal basis (m3/h)
FLOW_TO_M3H = {
    'gpm': 0.2271247,    # 3.78541 * 60 / 1000
    'm3/h': 1.0,
    'm3/d': 1 / 24,
    'gpd': 0.00378541 / 24,
    'mgd': 157.725,      # 3785.41 / 24
    'migd': 189.42,      # 4546.09 / 24
    'mld': 41.6667,      # 1000 / 24
}
FLOW_TO_M3H.update(get_config('units.flow_to_m3h', {}) or {})

BAR_TO_PSI = get_config('units.bar_to_psi', 14.5038)
LMH_PER_GFD = get_config('units.lmh_per_gfd', 1.6976)
FT2_TO_M2 = get_config('units.ft2_to_m2', 0.09290304)
GPM_PER_M3H = 1 / FLOW_TO_M3H['gpm']

# gfd/psi -> lmh/bar (1.6976 * 14.5038)
A_VALUE_GFD_PSI_TO_LMH_BAR = get_config('units.a_value_gfd_psi_to_lmh_bar', 24.62)

# Recovery bounds (percent)
MIN_RECOVERY_PCT = get_config('recovery.min_pct', 1.0)
MAX_RECOVERY_PCT = get_config('recovery.max_pct', 99.0)
DEFAULT_RECOVERY_PCT = get_config('recovery.default_pct', 50.0)

# Default train layout
DEFAULT_ELEMENTS_PER_VESSEL = get_config('element.elements_per_vessel', 7)
STANDARD_ELEMENT_AREA_FT2 = get_config('element.standard_area_ft2', 400.0)
DEFAULT_FEED_PH = get_config('chemistry.default_feed_ph', 7.0)
DEFAULT_TEMPERATURE_C = get_config('chemistry.default_temperature_c', 25.0)

# Liquid-water temperature range (degrees C)
MIN_TEMPERATURE_C = get_config('chemistry.min_temperature_c', 0.0)
MAX_TEMPERATURE_C = get_config('chemistry.max_temperature_c', 100.0)

# Membrane transport
DEFAULT_A_VALUE_LMH_BAR = get_config('transport.default_a_value_lmh_bar', 2.95)
MIN_A_VALUE_LMH_BAR = get_config('transport.min_a_value_lmh_bar', 0.001)
BETA_COEFFICIENT = get_config('transport.beta_coefficient', 0.15)
BETA_FLUX_FLOOR_LMH = get_config('transport.beta_flux_floor_lmh', 0.5)
OSMOTIC_BAR_PER_MG_L = get_config('transport.osmotic_bar_per_mg_l', 0.00076)
TCF_CONSTANT = get_config('transport.tcf_constant', 2640.0)

# Pressure drop
PRESSURE_DROP_MODEL = get_config('pressure_drop.model', 'power_law')
PRESSURE_DROP_K_PSI = get_config('pressure_drop.power_law.k_psi', 0.012)
PRESSURE_DROP_EXPONENT = get_config('pressure_drop.power_law.exponent', 1.7)
PRESSURE_DROP_BAR_PER_ELEMENT = get_config('pressure_drop.linear.bar_per_element', 0.2)

# Rejection
MIN_REJECTION_PCT = get_config('rejection.min_pct', 60.0)
MAX_REJECTION_PCT = get_config('rejection.max_pct', 99.9)
DEFAULT_NOMINAL_REJECTION_PCT = get_config('rejection.default_nominal_pct', 99.7)
BORON_REJECTION_PCT = get_config('rejection.boron_pct', 80.0)

# Salt passage multipliers relative to the nominal passage, by rejection class
PASSAGE_FACTORS = {
    'monovalent': get_config('rejection.passage_factors.monovalent', 1.0),
    'divalent': get_config('rejection.passage_factors.divalent', 0.3),
    'alkalinity': get_config('rejection.passage_factors.alkalinity', 2.0),
    'silica': get_config('rejection.passage_factors.silica', 2.5),
    'default': get_config('rejection.passage_factors.default', 1.0),
}

# Fixed rejection table (percent) for chemistry-only estimates
STANDARD_REJECTION_PCT = {
    'na': 98.5, 'k': 98.5, 'nh4': 98.0, 'cl': 98.5, 'no3': 93.0,
    'f': 98.5, 'br': 98.5, 'hco3': 95.0, 'co3': 99.5,
    'ca': 99.0, 'mg': 99.0, 'ba': 99.0, 'sr': 99.0, 'fe': 99.0, 'mn': 99.0,
    'so4': 99.8, 'po4': 99.8, 'sio2': 97.0, 'b': 70.0, 'co2': 0.0,
}
STANDARD_REJECTION_PCT.update(get_config('rejection.standard_table_pct', {}) or {})

# Water chemistry
PERMEATE_PH_OFFSET = get_config('chemistry.permeate_ph_offset', 1.0)
PKA1_CARBONATE = get_config('chemistry.pka1_carbonate', 6.35)
PKA2_CARBONATE = get_config('chemistry.pka2_carbonate', 10.33)
CCPP_PER_LSI = get_config('chemistry.ccpp_per_lsi', 50.0)

# Product-over-solubility divisors; results are percent of saturation
SATURATION_DIVISORS = {
    'caso4': 2000.0,
    'baso4': 50.0,
    'srso4': 2000.0,
    'sio2': 1.2,
    'ca3po42': 100.0,
    'caf2': 500.0,
}
SATURATION_DIVISORS.update(get_config('chemistry.saturation_divisors', {}) or {})

# mg/L -> mg/L as CaCO3
CA_TO_CACO3 = 2.497
HCO3_TO_CACO3 = 0.8202
CO3_TO_CACO3 = 1.6667

# Design limits
MAX_FLUX_GFD = get_config('design_limits.max_flux_gfd', 20.0)
MAX_FLUX_LMH = get_config('design_limits.max_flux_lmh', 34.0)
MAX_FEED_FLOW_PER_VESSEL_GPM = get_config('design_limits.max_feed_flow_per_vessel_gpm', 75.0)

# Default membrane catalog records (see membrane_catalog.py)
DEFAULT_MEMBRANE_RECORDS = get_config('membrane_catalog', None) or [
    {'id': 'espa2ld', 'name': 'ESPA2-LD-4040', 'area_ft2': 400, 'area_m2': 37.16,
     'a_value': 4.43, 'rejection': 99.6},
    {'id': 'cpa3', 'name': 'CPA3-4040', 'area_ft2': 400, 'area_m2': 37.16,
     'a_value': 2.95, 'rejection': 99.7},
    {'id': 'lfc3ld4040', 'name': 'LFC3-LD-4040', 'area_ft2': 404, 'area_m2': 37.53,
     'a_value': 2.95, 'rejection': 99.6},
]
