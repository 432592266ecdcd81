"""
Scaling indices for the RO concentrate.

Empirical correlations only: pH shift across the membrane, Langelier
Saturation Index from the standard saturation-pH correlation, calcium
carbonate precipitation potential and product-over-solubility
supersaturation for sparingly soluble salts.
"""

import math
import logging
from typing import Dict, Mapping, Optional, Tuple

from .constants import (
    CA_TO_CACO3,
    CCPP_PER_LSI,
    CO3_TO_CACO3,
    HCO3_TO_CACO3,
    PERMEATE_PH_OFFSET,
    SATURATION_DIVISORS,
)
from .helpers import clamp
from .ions import IonType

logger = logging.getLogger(__name__)


def get_scaling_tendency(SI: float) -> str:
    """
    Interpret a saturation index (e.g. LSI) for scaling tendency.

    Args:
        SI: Saturation index

    Returns:
        Scaling tendency description
    """
    if SI < -0.5:
        return "Undersaturated - No scaling"
    elif -0.5 <= SI < 0:
        return "Near equilibrium - Low scaling risk"
    elif 0 <= SI < 0.5:
        return "Slightly supersaturated - Moderate scaling risk"
    elif 0.5 <= SI < 1.0:
        return "Supersaturated - High scaling risk"
    else:
        return "Highly supersaturated - Severe scaling risk"


def calculate_permeate_ph(feed_ph: float) -> float:
    """CO2 passes the membrane while alkalinity is rejected, so permeate pH drops."""
    return clamp(feed_ph - PERMEATE_PH_OFFSET, 0.0, 14.0)


def concentration_factor(recovery_fraction: float) -> float:
    """Ideal concentrate/feed concentration ratio, 1 / (1 - r)."""
    return 1.0 / (1.0 - min(max(recovery_fraction, 0.0), 0.99))


def calculate_concentrate_ph(feed_ph: float, recovery_fraction: float) -> float:
    return clamp(feed_ph + math.log10(concentration_factor(recovery_fraction)), 0.0, 14.0)


def calcium_as_caco3(ions: Mapping[IonType, float]) -> float:
    return ions.get(IonType.CA, 0.0) * CA_TO_CACO3


def alkalinity_as_caco3(ions: Mapping[IonType, float]) -> float:
    return (ions.get(IonType.HCO3, 0.0) * HCO3_TO_CACO3
            + ions.get(IonType.CO3, 0.0) * CO3_TO_CACO3)


def calculate_phs(calcium_caco3: float,
                  alkalinity_caco3: float,
                  tds_mg_l: float,
                  temperature_c: float = 25.0) -> Optional[float]:
    """
    Saturation pH for calcium carbonate.

    pHs = (9.3 + A + B) - (C + D)
        A = (log10 TDS - 1) / 10
        B = -13.12 * log10(T + 273) + 34.55
        C = log10(Ca as CaCO3) - 0.4
        D = log10(alkalinity as CaCO3)

    Returns None when calcium or alkalinity is absent.
    """
    if calcium_caco3 <= 0 or alkalinity_caco3 <= 0:
        return None

    A = (math.log10(max(tds_mg_l, 1.0)) - 1) / 10
    B = -13.12 * math.log10(temperature_c + 273) + 34.55
    C = math.log10(calcium_caco3) - 0.4
    D = math.log10(alkalinity_caco3)
    return (9.3 + A + B) - (C + D)


def calculate_lsi(ph: float,
                  ions: Mapping[IonType, float],
                  tds_mg_l: float,
                  temperature_c: float = 25.0) -> Tuple[Optional[float], Optional[float]]:
    """
    Langelier Saturation Index, LSI = pH - pHs.

    Returns:
        (lsi, phs); both None when calcium or alkalinity is absent
    """
    phs = calculate_phs(calcium_as_caco3(ions), alkalinity_as_caco3(ions), tds_mg_l, temperature_c)
    if phs is None:
        return None, None
    return ph - phs, phs


def calculate_ccpp(lsi: Optional[float]) -> float:
    """Calcium carbonate precipitation potential (mg/L as CaCO3), zero unless LSI > 0."""
    if lsi is None or lsi <= 0:
        return 0.0
    return CCPP_PER_LSI * lsi


def calculate_saturation_ratios(ions: Mapping[IonType, float]) -> Dict[str, float]:
    """
    Percent of saturation for sparingly soluble salts.

    Each value is the product of the relevant concentrations (mg/L) over
    an empirical solubility divisor; ions absent from ``ions`` count as zero.
    """
    ca = ions.get(IonType.CA, 0.0)
    so4 = ions.get(IonType.SO4, 0.0)

    return {
        'caso4': ca * so4 / SATURATION_DIVISORS['caso4'],
        'baso4': ions.get(IonType.BA, 0.0) * so4 / SATURATION_DIVISORS['baso4'],
        'srso4': ions.get(IonType.SR, 0.0) * so4 / SATURATION_DIVISORS['srso4'],
        'sio2': ions.get(IonType.SIO2, 0.0) / SATURATION_DIVISORS['sio2'],
        'ca3po42': ca * ions.get(IonType.PO4, 0.0) / SATURATION_DIVISORS['ca3po42'],
        'caf2': ca * ions.get(IonType.F, 0.0) / SATURATION_DIVISORS['caf2'],
    }
