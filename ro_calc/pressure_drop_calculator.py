"""
Pressure drop calculator for RO stages.

The power-law model follows the FilmTec design correlations: the drop per
element scales super-linearly with the arithmetic average flow per vessel.
The linear model spreads a fixed drop per element along the vessel.
"""

from typing import Optional

from .constants import (
    GPM_PER_M3H,
    PRESSURE_DROP_BAR_PER_ELEMENT,
    PRESSURE_DROP_EXPONENT,
    PRESSURE_DROP_K_PSI,
    PRESSURE_DROP_MODEL,
)
from .units import psi_to_bar


def average_flow_per_vessel_m3h(feed_flow_m3h: float,
                                reject_flow_m3h: float,
                                n_vessels: int) -> float:
    """Arithmetic average of feed and reject flow per vessel (not log-mean)."""
    if n_vessels <= 0:
        return 0.0
    return ((feed_flow_m3h + reject_flow_m3h) / 2) / n_vessels


def calculate_stage_pressure_drop(
    feed_flow_m3h: float,
    reject_flow_m3h: float,
    n_vessels: int,
    n_elements_per_vessel: int,
    model: Optional[str] = None
) -> float:
    """
    Calculate pressure drop across an RO stage.

    Parameters
    ----------
    feed_flow_m3h : float
        Stage feed flow rate (m3/h)
    reject_flow_m3h : float
        Stage reject/concentrate flow rate (m3/h)
    n_vessels : int
        Number of pressure vessels in parallel
    n_elements_per_vessel : int
        Number of elements in series per vessel
    model : str, optional
        'power_law' or 'linear'; defaults to the configured model

    Returns
    -------
    float
        Total pressure drop across the stage in bar
    """
    if n_vessels <= 0 or n_elements_per_vessel <= 0:
        return 0.0

    model = model or PRESSURE_DROP_MODEL
    if model == 'linear':
        return PRESSURE_DROP_BAR_PER_ELEMENT * n_elements_per_vessel

    avg_flow_gpm = average_flow_per_vessel_m3h(feed_flow_m3h, reject_flow_m3h, n_vessels) * GPM_PER_M3H

    # dP = k * Q^n with Q in gpm and dP in psi, per element in series
    dp_per_element_psi = PRESSURE_DROP_K_PSI * (avg_flow_gpm ** PRESSURE_DROP_EXPONENT)
    return psi_to_bar(dp_per_element_psi * n_elements_per_vessel)
