# -*- coding: utf-8 -*-
"""
Membrane transport model.

Solution-diffusion style relations used for sizing:

    J_w = A_eff * NDP
    P_feed = NDP + pi_avg + P_permeate + dP / 2

Pressures are in bar, flux in lmh (L/m2/h), A-values in lmh/bar.
"""

import math
import logging
from typing import Tuple

from .constants import (
    BETA_COEFFICIENT,
    BETA_FLUX_FLOOR_LMH,
    MAX_TEMPERATURE_C,
    MIN_A_VALUE_LMH_BAR,
    MIN_TEMPERATURE_C,
    OSMOTIC_BAR_PER_MG_L,
    TCF_CONSTANT,
)
from .helpers import clamp, safe_divide

logger = logging.getLogger(__name__)

REFERENCE_TEMPERATURE_K = 298.15


def calculate_flux_lmh(permeate_m3h: float, area_m2: float) -> float:
    """Average permeate flux over the active area; zero without area."""
    return safe_divide(permeate_m3h * 1000.0, area_m2)


def calculate_beta(recovery_fraction: float, flux_lmh: float) -> float:
    """
    Concentration polarization factor.

    Rises with recovery and falls as flux increases:
    beta = 1 + k * sqrt(r) * (1 + 2 / max(flux, floor))
    """
    recovery = max(recovery_fraction, 0.0)
    flux = max(flux_lmh, BETA_FLUX_FLOOR_LMH)
    return 1.0 + BETA_COEFFICIENT * math.sqrt(recovery) * (1.0 + 2.0 / flux)


def calculate_highest_flux(flux_lmh: float, beta: float) -> float:
    """Worst local flux in a vessel, the value checked against design limits."""
    return flux_lmh * beta


def temperature_correction_factor(temperature_c: float) -> float:
    """
    Temperature correction factor for membrane permeability.

    FilmTec correlation: TCF = exp[K * (1/298.15 - 1/(273.15 + T))], K = 2640.
    """
    t = clamp(temperature_c, MIN_TEMPERATURE_C, MAX_TEMPERATURE_C)
    return math.exp(TCF_CONSTANT * (1 / REFERENCE_TEMPERATURE_K - 1 / (273.15 + t)))


def effective_a_value(a_nominal: float,
                      age_years: float = 0.0,
                      flux_decline_per_year: float = 0.0,
                      fouling_factor: float = 1.0,
                      temperature_c: float = 25.0) -> float:
    """
    Derate the catalog A-value for age, fouling and temperature.

    A_eff = A * fouling * (1 - decline)^age * TCF
    """
    decline = clamp(flux_decline_per_year, 0.0, 0.99)
    age = max(age_years, 0.0)
    a_eff = (a_nominal * fouling_factor * (1.0 - decline) ** age
             * temperature_correction_factor(temperature_c))
    return max(a_eff, MIN_A_VALUE_LMH_BAR)


def calculate_ndp(flux_lmh: float, a_effective: float) -> float:
    """Net driving pressure (bar) needed to produce ``flux_lmh``."""
    return flux_lmh / max(a_effective, MIN_A_VALUE_LMH_BAR)


def osmotic_pressure_bar(tds_mg_l: float, temperature_c: float = 25.0) -> float:
    """
    Osmotic pressure from TDS.

    pi (bar) = 0.00076 * TDS (mg/L), scaled by absolute temperature
    relative to 25 C (van't Hoff).
    """
    temp_factor = (273.15 + temperature_c) / REFERENCE_TEMPERATURE_K
    return OSMOTIC_BAR_PER_MG_L * tds_mg_l * temp_factor


def average_concentration_factor(recovery_fraction: float) -> float:
    """
    Log-mean feed-side concentration factor, -ln(1 - r) / r.

    Returns 1 for negligible recovery.
    """
    if recovery_fraction <= 0.01:
        return 1.0
    r = min(recovery_fraction, 0.99)
    return -math.log(1.0 - r) / r


def average_osmotic_pressure_bar(feed_tds_mg_l: float,
                                 recovery_fraction: float,
                                 temperature_c: float = 25.0) -> float:
    """Average osmotic pressure along the feed/concentrate channel."""
    return (osmotic_pressure_bar(feed_tds_mg_l, temperature_c)
            * average_concentration_factor(recovery_fraction))


def required_feed_pressure_bar(ndp_bar: float,
                               avg_osmotic_bar: float,
                               permeate_pressure_bar: float,
                               pressure_drop_bar: float) -> float:
    """Feed pressure = NDP + average osmotic + permeate backpressure + half the drop."""
    return ndp_bar + avg_osmotic_bar + permeate_pressure_bar + pressure_drop_bar / 2.0


def concentrate_pressure_bar(feed_pressure_bar: float,
                             pressure_drop_bar: float) -> Tuple[float, float]:
    """
    Concentrate pressure after the vessel pressure drop.

    Returns (reported, raw): the reported value never goes below zero,
    the raw value keeps the sign so callers can flag the violation.
    """
    raw = feed_pressure_bar - pressure_drop_bar
    return max(raw, 0.0), raw
