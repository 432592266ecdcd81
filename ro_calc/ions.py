"""
Ion identifiers, rejection classes and feed-water normalization.

Ion keys from callers are free-form ("ca", "Ca2+", "SO4-2", "Ca_2+"); they
are parsed once into the IonType enum so the calculation never branches on
raw strings.
"""

import logging
import re
from enum import Enum
from typing import Any, Dict, Mapping

from .constants import PKA1_CARBONATE, PKA2_CARBONATE
from .helpers import coerce_float

logger = logging.getLogger(__name__)


class IonType(str, Enum):
    """Dissolved species tracked by the calculator, in reporting order."""

    CA = 'ca'
    MG = 'mg'
    NA = 'na'
    K = 'k'
    NH4 = 'nh4'
    BA = 'ba'
    SR = 'sr'
    FE = 'fe'
    MN = 'mn'
    CO3 = 'co3'
    HCO3 = 'hco3'
    NO3 = 'no3'
    CL = 'cl'
    F = 'f'
    BR = 'br'
    SO4 = 'so4'
    PO4 = 'po4'
    SIO2 = 'sio2'
    B = 'b'
    CO2 = 'co2'


class RejectionClass(str, Enum):
    MONOVALENT = 'monovalent'
    DIVALENT = 'divalent'
    ALKALINITY = 'alkalinity'
    SILICA = 'silica'
    BORON = 'boron'
    CO2 = 'co2'
    DEFAULT = 'default'


ION_REJECTION_CLASS = {
    IonType.NA: RejectionClass.MONOVALENT,
    IonType.K: RejectionClass.MONOVALENT,
    IonType.NH4: RejectionClass.MONOVALENT,
    IonType.CL: RejectionClass.MONOVALENT,
    IonType.NO3: RejectionClass.MONOVALENT,
    IonType.F: RejectionClass.MONOVALENT,
    IonType.BR: RejectionClass.MONOVALENT,
    IonType.CA: RejectionClass.DIVALENT,
    IonType.MG: RejectionClass.DIVALENT,
    IonType.BA: RejectionClass.DIVALENT,
    IonType.SR: RejectionClass.DIVALENT,
    IonType.FE: RejectionClass.DIVALENT,
    IonType.MN: RejectionClass.DIVALENT,
    IonType.SO4: RejectionClass.DIVALENT,
    IonType.PO4: RejectionClass.DIVALENT,
    IonType.HCO3: RejectionClass.ALKALINITY,
    IonType.CO3: RejectionClass.ALKALINITY,
    IonType.SIO2: RejectionClass.SILICA,
    IonType.B: RejectionClass.BORON,
    IonType.CO2: RejectionClass.CO2,
}

# Charge and molecular weight (g/mol)
ION_PROPERTIES = {
    IonType.CA: {"charge": 2, "mw": 40.08, "name": "Calcium"},
    IonType.MG: {"charge": 2, "mw": 24.31, "name": "Magnesium"},
    IonType.NA: {"charge": 1, "mw": 22.99, "name": "Sodium"},
    IonType.K: {"charge": 1, "mw": 39.10, "name": "Potassium"},
    IonType.NH4: {"charge": 1, "mw": 18.04, "name": "Ammonium"},
    IonType.BA: {"charge": 2, "mw": 137.33, "name": "Barium"},
    IonType.SR: {"charge": 2, "mw": 87.62, "name": "Strontium"},
    IonType.FE: {"charge": 2, "mw": 55.85, "name": "Iron(II)"},
    IonType.MN: {"charge": 2, "mw": 54.94, "name": "Manganese"},
    IonType.CO3: {"charge": -2, "mw": 60.01, "name": "Carbonate"},
    IonType.HCO3: {"charge": -1, "mw": 61.02, "name": "Bicarbonate"},
    IonType.NO3: {"charge": -1, "mw": 62.00, "name": "Nitrate"},
    IonType.CL: {"charge": -1, "mw": 35.45, "name": "Chloride"},
    IonType.F: {"charge": -1, "mw": 19.00, "name": "Fluoride"},
    IonType.BR: {"charge": -1, "mw": 79.90, "name": "Bromide"},
    IonType.SO4: {"charge": -2, "mw": 96.06, "name": "Sulfate"},
    IonType.PO4: {"charge": -3, "mw": 94.97, "name": "Phosphate"},
    IonType.SIO2: {"charge": 0, "mw": 60.08, "name": "Silica"},
    IonType.B: {"charge": 0, "mw": 10.81, "name": "Boron"},
    IonType.CO2: {"charge": 0, "mw": 44.01, "name": "Carbon dioxide"},
}

_ION_ALIASES = {
    'calcium': IonType.CA,
    'magnesium': IonType.MG,
    'sodium': IonType.NA,
    'potassium': IonType.K,
    'ammonium': IonType.NH4,
    'barium': IonType.BA,
    'strontium': IonType.SR,
    'iron': IonType.FE,
    'manganese': IonType.MN,
    'carbonate': IonType.CO3,
    'bicarbonate': IonType.HCO3,
    'nitrate': IonType.NO3,
    'chloride': IonType.CL,
    'fluoride': IonType.F,
    'bromide': IonType.BR,
    'sulfate': IonType.SO4,
    'sulphate': IonType.SO4,
    'phosphate': IonType.PO4,
    'silica': IonType.SIO2,
    'sio3': IonType.SIO2,
    'boron': IonType.B,
    'b(oh)4': IonType.B,
}

# Trailing charge notation, sign first ("-2", "+") or count first ("2+", "_2-")
_CHARGE_SUFFIXES = (
    re.compile(r'[_\s]*[+-]+\d*$'),
    re.compile(r'[_\s]*\d*[+-]+$'),
)


def parse_ion_key(key: Any):
    """
    Parse a caller ion key into an IonType.

    Returns None for keys that do not name a tracked species.
    """
    if isinstance(key, IonType):
        return key
    text = str(key).strip().lower()
    candidates = [text] + [pattern.sub('', text) for pattern in _CHARGE_SUFFIXES]
    for candidate in candidates:
        candidate = candidate.rstrip('_ ')
        try:
            return IonType(candidate)
        except ValueError:
            if candidate in _ION_ALIASES:
                return _ION_ALIASES[candidate]
    return None


def get_rejection_class(ion: IonType) -> RejectionClass:
    return ION_REJECTION_CLASS.get(ion, RejectionClass.DEFAULT)


def order_ion_map(ions: Mapping[IonType, float]) -> Dict[IonType, float]:
    """Return a copy of ``ions`` in IonType declaration order."""
    return {ion: ions[ion] for ion in IonType if ion in ions}


def normalize_ion_map(raw: Any) -> Dict[IonType, float]:
    """
    Parse a caller ion mapping into {IonType: mg/L}.

    Unknown keys are dropped with a warning; non-numeric or negative
    concentrations become 0. Duplicate spellings of one ion are summed.
    """
    if not isinstance(raw, Mapping):
        if raw:
            logger.warning(f"Ion composition must be a mapping, got {type(raw).__name__}")
        return {}

    parsed: Dict[IonType, float] = {}
    for key, value in raw.items():
        ion = parse_ion_key(key)
        if ion is None:
            logger.warning(f"Unknown ion {key!r} ignored")
            continue
        concentration = max(coerce_float(value, 0.0), 0.0)
        parsed[ion] = parsed.get(ion, 0.0) + concentration

    return order_ion_map(parsed)


def infer_carbonate_speciation(ions: Mapping[IonType, float], ph: float) -> Dict[IonType, float]:
    """
    Fill in carbonate and CO2 from bicarbonate and pH when they are absent.

    Uses the carbonic acid equilibria (pKa1, pKa2) on a molar basis.
    Species already supplied by the caller are never overwritten.
    """
    result = dict(ions)
    hco3 = result.get(IonType.HCO3, 0.0)
    if hco3 <= 0:
        return order_ion_map(result)

    hco3_mmol = hco3 / ION_PROPERTIES[IonType.HCO3]["mw"]
    if IonType.CO3 not in result:
        co3_mmol = hco3_mmol * 10 ** (ph - PKA2_CARBONATE)
        result[IonType.CO3] = co3_mmol * ION_PROPERTIES[IonType.CO3]["mw"]
    if IonType.CO2 not in result:
        co2_mmol = hco3_mmol * 10 ** (PKA1_CARBONATE - ph)
        result[IonType.CO2] = co2_mmol * ION_PROPERTIES[IonType.CO2]["mw"]

    return order_ion_map(result)


def total_dissolved_solids(ions: Mapping[IonType, float]) -> float:
    """Sum of ion concentrations (mg/L); dissolved CO2 gas is excluded."""
    return sum(conc for ion, conc in order_ion_map(ions).items() if ion is not IonType.CO2)


def calculate_charge_balance(ions: Mapping[IonType, float]) -> float:
    """
    Calculate charge balance for an ion composition.

    Returns:
        Charge balance percentage (positive = excess cations)
    """
    cation_meq = 0.0
    anion_meq = 0.0

    for ion, conc_mg_l in ions.items():
        props = ION_PROPERTIES[ion]
        meq_l = conc_mg_l / props["mw"] * abs(props["charge"])
        if props["charge"] > 0:
            cation_meq += meq_l
        elif props["charge"] < 0:
            anion_meq += meq_l

    total_meq = cation_meq + anion_meq
    if total_meq == 0:
        return 0.0

    return (cation_meq - anion_meq) / total_meq * 100
