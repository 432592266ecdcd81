"""
Pydantic schemas for the RO performance calculator.

Defines the data contracts for configuration inputs and report outputs.
Input models sanitize once at the boundary: malformed or out-of-range
values are coerced to safe defaults instead of raising.
"""

import logging
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .constants import (
    DEFAULT_A_VALUE_LMH_BAR,
    DEFAULT_ELEMENTS_PER_VESSEL,
    DEFAULT_FEED_PH,
    DEFAULT_NOMINAL_REJECTION_PCT,
    DEFAULT_RECOVERY_PCT,
    DEFAULT_TEMPERATURE_C,
    MAX_RECOVERY_PCT,
    MAX_REJECTION_PCT,
    MAX_TEMPERATURE_C,
    MIN_RECOVERY_PCT,
    MIN_REJECTION_PCT,
    MIN_TEMPERATURE_C,
    STANDARD_ELEMENT_AREA_FT2,
)
from .helpers import clamp, coerce_float, coerce_int
from .ions import IonType, normalize_ion_map, parse_ion_key
from .units import FlowUnit, fahrenheit_to_celsius, ft2_to_m2, m2_to_ft2, parse_flow_unit, sanitize_a_value

logger = logging.getLogger(__name__)

# Schema versions
SCHEMA_VERSION_INPUT = "1.0.0"
SCHEMA_VERSION_RESULTS = "1.0.0"

# Relative ft2/m2 mismatch tolerated before the m2 value wins
AREA_CONSISTENCY_TOLERANCE = 0.02


def _field_default(cls, info):
    return cls.model_fields[info.field_name].default


def _clamp_rejection(value: Any, default: float) -> float:
    return clamp(coerce_float(value, default), MIN_REJECTION_PCT, MAX_REJECTION_PCT)


def _as_fraction(value: Any) -> float:
    """Yearly rates may be given as a fraction (0.07) or a percent (7)."""
    rate = max(coerce_float(value, 0.0), 0.0)
    if rate > 1.0:
        rate = rate / 100.0
    return clamp(rate, 0.0, 0.99)


# ============================================================================
# Input Schemas
# ============================================================================

class MembraneSpec(BaseModel):
    """Catalog record for one membrane element model."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: Optional[str] = None
    area_ft2: float = Field(STANDARD_ELEMENT_AREA_FT2, description="Active area per element (ft2)")
    area_m2: float = Field(ft2_to_m2(STANDARD_ELEMENT_AREA_FT2), description="Active area per element (m2)")
    a_value: float = Field(DEFAULT_A_VALUE_LMH_BAR, description="Water permeability (lmh/bar)")
    rejection: float = Field(DEFAULT_NOMINAL_REJECTION_PCT, description="Nominal salt rejection (%)")
    ion_rejections: Dict[IonType, float] = Field(
        default_factory=dict,
        description="Per-ion rejection overrides (%)"
    )

    @model_validator(mode='before')
    @classmethod
    def _reconcile_areas(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if not data.get('id'):
            data['id'] = data.get('name') or 'custom'
        ft2 = coerce_float(data.get('area_ft2'), 0.0)
        m2 = coerce_float(data.get('area_m2'), 0.0)

        if ft2 <= 0 and m2 <= 0:
            ft2 = STANDARD_ELEMENT_AREA_FT2
            m2 = ft2_to_m2(ft2)
        elif m2 <= 0:
            m2 = ft2_to_m2(ft2)
        elif ft2 <= 0:
            ft2 = m2_to_ft2(m2)
        elif abs(ft2_to_m2(ft2) - m2) > AREA_CONSISTENCY_TOLERANCE * m2:
            logger.warning(
                f"Membrane {data.get('id')}: area {ft2} ft2 does not match {m2} m2, using m2"
            )
            ft2 = m2_to_ft2(m2)

        data['area_ft2'] = ft2
        data['area_m2'] = m2
        return data

    @field_validator('id', mode='before')
    @classmethod
    def _id_to_str(cls, v):
        return str(v)

    @field_validator('a_value', mode='before')
    @classmethod
    def _normalize_a_value(cls, v):
        return sanitize_a_value(v)

    @field_validator('rejection', mode='before')
    @classmethod
    def _clamp_nominal_rejection(cls, v):
        return _clamp_rejection(v, DEFAULT_NOMINAL_REJECTION_PCT)

    @field_validator('ion_rejections', mode='before')
    @classmethod
    def _parse_ion_rejections(cls, v):
        if not isinstance(v, dict):
            return {}
        overrides = {}
        for key, value in v.items():
            ion = parse_ion_key(key)
            if ion is None:
                logger.warning(f"Unknown ion {key!r} in rejection overrides ignored")
                continue
            overrides[ion] = _clamp_rejection(value, DEFAULT_NOMINAL_REJECTION_PCT)
        return overrides


class StageConfig(BaseModel):
    """One stage of pressure vessels in series with the previous stage."""

    model_config = ConfigDict(frozen=True)

    vessels: int = 0
    elements_per_vessel: int = DEFAULT_ELEMENTS_PER_VESSEL
    membrane_model: Optional[str] = None

    @field_validator('vessels', 'elements_per_vessel', mode='before')
    @classmethod
    def _non_negative_int(cls, v, info):
        return coerce_int(v, _field_default(cls, info), minimum=0)


class ROSystemConfig(BaseModel):
    """Complete RO train configuration for one calculation."""

    model_config = ConfigDict(frozen=True)

    schema_version: str = Field(SCHEMA_VERSION_INPUT)
    feed_flow: float = 0.0
    flow_unit: FlowUnit = FlowUnit.GPM
    flow_basis: Literal['feed', 'permeate'] = 'feed'
    recovery: float = Field(DEFAULT_RECOVERY_PCT, description="System recovery (%)")
    feed_ions: Dict[IonType, float] = Field(default_factory=dict, description="Feed ions (mg/L)")
    feed_ph: float = DEFAULT_FEED_PH
    temperature: float = DEFAULT_TEMPERATURE_C
    temperature_unit: Literal['C', 'F'] = 'C'
    vessels: int = 1
    elements_per_vessel: int = DEFAULT_ELEMENTS_PER_VESSEL
    membrane_model: Optional[str] = None
    stages: List[StageConfig] = Field(default_factory=list)
    membrane_catalog: List[MembraneSpec] = Field(default_factory=list)
    feed_pressure: Optional[float] = Field(None, description="Override, display pressure unit")
    permeate_pressure: float = Field(0.0, description="Backpressure, display pressure unit")
    membrane_age_years: float = 0.0
    flux_decline_per_year: float = 0.0
    sp_increase_per_year: float = 0.0
    fouling_factor: float = 1.0

    @field_validator('flow_unit', mode='before')
    @classmethod
    def _parse_unit(cls, v):
        return parse_flow_unit(v)

    @field_validator('flow_basis', mode='before')
    @classmethod
    def _parse_basis(cls, v):
        return 'permeate' if str(v or '').strip().lower() == 'permeate' else 'feed'

    @field_validator('temperature_unit', mode='before')
    @classmethod
    def _parse_temperature_unit(cls, v):
        return 'F' if str(v or '').strip().upper().startswith('F') else 'C'

    @field_validator('feed_flow', 'permeate_pressure', 'membrane_age_years', mode='before')
    @classmethod
    def _non_negative(cls, v, info):
        return max(coerce_float(v, _field_default(cls, info)), 0.0)

    @field_validator('recovery', mode='before')
    @classmethod
    def _clamp_recovery(cls, v):
        return clamp(coerce_float(v, DEFAULT_RECOVERY_PCT), MIN_RECOVERY_PCT, MAX_RECOVERY_PCT)

    @field_validator('feed_ions', mode='before')
    @classmethod
    def _parse_ions(cls, v):
        return normalize_ion_map(v)

    @field_validator('feed_ph', mode='before')
    @classmethod
    def _clamp_ph(cls, v):
        return clamp(coerce_float(v, DEFAULT_FEED_PH), 0.0, 14.0)

    @field_validator('temperature', mode='before')
    @classmethod
    def _coerce_temperature(cls, v):
        return coerce_float(v, DEFAULT_TEMPERATURE_C)

    @field_validator('vessels', 'elements_per_vessel', mode='before')
    @classmethod
    def _non_negative_int(cls, v, info):
        return coerce_int(v, _field_default(cls, info), minimum=0)

    @field_validator('stages', 'membrane_catalog', mode='before')
    @classmethod
    def _none_to_list(cls, v):
        return list(v) if v else []

    @field_validator('feed_pressure', mode='before')
    @classmethod
    def _optional_pressure(cls, v):
        pressure = coerce_float(v, 0.0)
        return pressure if pressure > 0 else None

    @field_validator('flux_decline_per_year', 'sp_increase_per_year', mode='before')
    @classmethod
    def _yearly_rate(cls, v):
        return _as_fraction(v)

    @field_validator('fouling_factor', mode='before')
    @classmethod
    def _clamp_fouling(cls, v):
        factor = coerce_float(v, 1.0)
        if factor <= 0:
            logger.warning(f"Fouling factor {v!r} is not positive, using 1.0")
            return 1.0
        return min(factor, 1.0)

    @property
    def recovery_fraction(self) -> float:
        return self.recovery / 100.0

    @property
    def temperature_c(self) -> float:
        if self.temperature_unit == 'F':
            return clamp(fahrenheit_to_celsius(self.temperature), MIN_TEMPERATURE_C, MAX_TEMPERATURE_C)
        return clamp(self.temperature, MIN_TEMPERATURE_C, MAX_TEMPERATURE_C)


class IonPassageParameters(BaseModel):
    """Operating point for the chemistry-only ion passage estimate."""

    model_config = ConfigDict(frozen=True)

    recovery: float = Field(DEFAULT_RECOVERY_PCT, description="Recovery (%)")
    flux_lmh: float = 15.0
    feed_ph: float = DEFAULT_FEED_PH
    temperature_c: float = DEFAULT_TEMPERATURE_C

    @field_validator('recovery', mode='before')
    @classmethod
    def _clamp_recovery(cls, v):
        return clamp(coerce_float(v, DEFAULT_RECOVERY_PCT), MIN_RECOVERY_PCT, MAX_RECOVERY_PCT)

    @field_validator('flux_lmh', mode='before')
    @classmethod
    def _non_negative_flux(cls, v):
        return max(coerce_float(v, 15.0), 0.0)

    @field_validator('feed_ph', mode='before')
    @classmethod
    def _clamp_ph(cls, v):
        return clamp(coerce_float(v, DEFAULT_FEED_PH), 0.0, 14.0)

    @field_validator('temperature_c', mode='before')
    @classmethod
    def _coerce_temperature(cls, v):
        return clamp(coerce_float(v, DEFAULT_TEMPERATURE_C), MIN_TEMPERATURE_C, MAX_TEMPERATURE_C)


# ============================================================================
# Output Schemas
# ============================================================================

class SystemResults(BaseModel):
    """System-level hydraulics, in display units."""

    flow_unit: FlowUnit
    flux_unit: str
    pressure_unit: str
    area_unit: str
    feed_flow: float = Field(..., ge=0)
    permeate_flow: float = Field(..., ge=0)
    concentrate_flow: float = Field(..., ge=0)
    recovery_pct: float
    feed_flow_per_vessel: float = Field(..., ge=0)
    concentrate_flow_per_vessel: float = Field(..., ge=0)
    total_vessels: int = Field(..., ge=0)
    total_elements: int = Field(..., ge=0)
    total_area: float = Field(..., ge=0)
    avg_flux: float = Field(..., ge=0)
    avg_flux_lmh: float = Field(..., ge=0)
    avg_flux_gfd: float = Field(..., ge=0)
    highest_flux: float = Field(..., ge=0)
    highest_beta: float
    feed_pressure: float = Field(..., ge=0)
    concentrate_pressure: float = Field(..., ge=0)
    permeate_pressure: float = Field(..., ge=0)
    net_driving_pressure: float
    pressure_drop: float = Field(..., ge=0)
    osmotic_pressure: float
    effective_osmotic_pressure: float
    effective_a_value_lmh_bar: float
    feed_tds: float = Field(..., ge=0)
    feed_ph: float
    temperature_c: float
    mass_balance_ok: bool


class StageResult(BaseModel):
    """Results for a single stage, in display units."""

    index: int = Field(..., ge=1)
    vessels: int = Field(..., ge=0)
    elements_per_vessel: int = Field(..., ge=0)
    membrane_model: Optional[str] = None
    feed_flow: float = Field(..., ge=0)
    permeate_flow: float = Field(..., ge=0)
    concentrate_flow: float = Field(..., ge=0)
    recovery_pct: float
    feed_flow_per_vessel: float = Field(..., ge=0)
    concentrate_flow_per_vessel: float = Field(..., ge=0)
    area: float = Field(..., ge=0)
    flux: float = Field(..., ge=0)
    highest_flux: float = Field(..., ge=0)
    beta: float
    feed_pressure: float = Field(..., ge=0)
    concentrate_pressure: float = Field(..., ge=0)
    pressure_drop: float = Field(..., ge=0)
    net_driving_pressure: float
    osmotic_pressure: float
    feed_tds: float = Field(..., ge=0)
    permeate_tds: float = Field(..., ge=0)
    concentrate_tds: float = Field(..., ge=0)
    flux_unit: str
    pressure_unit: str


class ConcentrateParameters(BaseModel):
    tds: float = Field(..., ge=0)
    osmotic_pressure: float
    ph: float
    concentration_factor: float
    langelier: Optional[float] = None
    phs: Optional[float] = None
    ccpp: float = Field(0.0, ge=0, description="mg/L as CaCO3")
    scaling_tendency: Optional[str] = None


class PermeateParameters(BaseModel):
    tds: float = Field(..., ge=0)
    osmotic_pressure: float
    ph: float


class ConcentrateSaturation(BaseModel):
    """Percent of saturation for sparingly soluble salts in the concentrate."""

    caso4: float = 0.0
    baso4: float = 0.0
    srso4: float = 0.0
    sio2: float = 0.0
    ca3po42: float = 0.0
    caf2: float = 0.0


class SystemReport(BaseModel):
    """Complete calculation report."""

    schema_version: str = Field(SCHEMA_VERSION_RESULTS)
    system_results: SystemResults
    feed_ion_concentrations: Dict[IonType, float]
    permeate_ion_concentrations: Dict[IonType, float]
    concentrate_ion_concentrations: Dict[IonType, float]
    concentrate_saturation: ConcentrateSaturation
    concentrate_parameters: ConcentrateParameters
    permeate_parameters: PermeateParameters
    stage_results: List[StageResult]
    design_warnings: List[str] = Field(default_factory=list)


class IonPassageResult(BaseModel):
    permeate_ions: Dict[IonType, float]
    concentrate_ions: Dict[IonType, float]
    permeate_tds: float = Field(..., ge=0)
    lsi: Optional[float] = None
    beta: float


class HydraulicBalance(BaseModel):
    feed_flow: float = Field(..., ge=0)
    concentrate_flow: float = Field(..., ge=0)
    permeate_flow: float = Field(..., ge=0)
    total_elements: int = Field(..., ge=0)
    total_area: float = Field(..., ge=0)
    calc_flux: float = Field(..., ge=0)
    unit: FlowUnit
    flux_unit: str
    area_unit: str
