"""
Design-limit rule set.

Rules are advisory: each violation becomes a human-readable warning
string and the calculation always completes.
"""

import math
import logging
from typing import Dict, List, Sequence

from .constants import MAX_FEED_FLOW_PER_VESSEL_GPM, MAX_FLUX_GFD, MAX_FLUX_LMH
from .units import (
    FlowUnit,
    display_pressure,
    flux_unit,
    from_m3h,
    is_us_unit,
    lmh_to_gfd,
    pressure_unit,
    to_m3h,
)

logger = logging.getLogger(__name__)


def flux_ceiling(unit: FlowUnit) -> float:
    """Highest-flux ceiling in the display flux unit."""
    return MAX_FLUX_GFD if is_us_unit(unit) else MAX_FLUX_LMH


def feed_flow_per_vessel_ceiling_m3h() -> float:
    return to_m3h(MAX_FEED_FLOW_PER_VESSEL_GPM, FlowUnit.GPM)


def _check_flux(stage: Dict, unit: FlowUnit) -> List[str]:
    highest = stage['highest_flux_lmh']
    if is_us_unit(unit):
        highest = lmh_to_gfd(highest)
    ceiling = flux_ceiling(unit)
    if highest > ceiling:
        return [
            f"Stage {stage['index']}: highest flux {highest:.1f} {flux_unit(unit)} "
            f"exceeds the {ceiling:.1f} {flux_unit(unit)} design limit"
        ]
    return []


def _check_feed_flow_per_vessel(stage: Dict, unit: FlowUnit) -> List[str]:
    ceiling_m3h = feed_flow_per_vessel_ceiling_m3h()
    if stage['feed_per_vessel_m3h'] > ceiling_m3h:
        flow_label = unit.value
        return [
            f"Stage {stage['index']}: feed flow per vessel "
            f"{from_m3h(stage['feed_per_vessel_m3h'], unit):.2f} {flow_label} exceeds the "
            f"{from_m3h(ceiling_m3h, unit):.2f} {flow_label} design limit"
        ]
    return []


def _check_concentrate_pressure(stage: Dict, unit: FlowUnit) -> List[str]:
    raw = stage['raw_concentrate_pressure_bar']
    if raw < 0:
        return [
            f"Stage {stage['index']}: concentrate pressure is negative "
            f"({display_pressure(raw, unit):.1f} {pressure_unit(unit)}); "
            f"feed pressure cannot overcome the pressure drop"
        ]
    return []


def _check_osmotic_pressure(stage: Dict, unit: FlowUnit) -> List[str]:
    for key in ('feed_osmotic_bar', 'avg_osmotic_bar', 'concentrate_osmotic_bar'):
        value = stage[key]
        if not math.isfinite(value) or value < 0:
            return [f"Stage {stage['index']}: invalid osmotic pressure ({value})"]
    return []


STAGE_RULES = (
    _check_flux,
    _check_feed_flow_per_vessel,
    _check_concentrate_pressure,
    _check_osmotic_pressure,
)


def evaluate_design_limits(stages: Sequence[Dict], unit: FlowUnit) -> List[str]:
    """
    Evaluate every rule for every stage, in stage order.

    Parameters
    ----------
    stages : sequence of dict
        Internal stage records (m3/h, bar, lmh) from the stage calculator
    unit : FlowUnit
        Master unit used to phrase the messages

    Returns
    -------
    list of str
        Design warnings; empty when the train is within limits
    """
    warnings = []
    if not stages or sum(stage['area_m2'] for stage in stages) <= 0:
        warnings.append("No active membrane area configured; flux and pressures are zero")

    for stage in stages:
        for rule in STAGE_RULES:
            warnings.extend(rule(stage, unit))

    for message in warnings:
        logger.warning(message)
    return warnings
