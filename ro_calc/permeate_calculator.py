"""
Permeate and concentrate quality by ion-by-ion mass balance.

Permeate concentration comes from the ion rejection; the concentrate is
then solved from Qf*Cf = Qp*Cp + Qc*Cc so rejected mass accumulates
exactly in the concentrate.
"""

import logging
from typing import Dict, Mapping, Tuple

from .constants import (
    BORON_REJECTION_PCT,
    MAX_REJECTION_PCT,
    MIN_REJECTION_PCT,
    PASSAGE_FACTORS,
    STANDARD_REJECTION_PCT,
)
from .flow_solver import clamp_recovery_fraction
from .helpers import clamp
from .ions import IonType, RejectionClass, get_rejection_class, order_ion_map
from .schemas import MembraneSpec

logger = logging.getLogger(__name__)


def class_rejection_pct(ion: IonType, nominal_rejection_pct: float) -> float:
    """
    Rejection (%) for an ion from its class and the nominal salt rejection.

    Monovalent ions see the nominal passage, divalent ions less, alkalinity
    and silica more; boron is fixed and CO2 passes unrejected.
    """
    rejection_class = get_rejection_class(ion)
    if rejection_class is RejectionClass.CO2:
        return 0.0
    if rejection_class is RejectionClass.BORON:
        return BORON_REJECTION_PCT

    nominal_passage = 100.0 - nominal_rejection_pct
    passage = nominal_passage * PASSAGE_FACTORS.get(rejection_class.value, 1.0)
    return 100.0 - passage


def get_ion_rejection(ion: IonType,
                      membrane: MembraneSpec,
                      age_years: float = 0.0,
                      sp_increase_per_year: float = 0.0) -> float:
    """
    Rejection fraction (0-1) for one ion on one membrane.

    Per-membrane overrides take priority over the class rule. Salt passage
    grows by (1 + sp_increase)^age with membrane age.
    """
    if get_rejection_class(ion) is RejectionClass.CO2:
        return 0.0

    if ion in membrane.ion_rejections:
        rejection_pct = membrane.ion_rejections[ion]
    else:
        rejection_pct = class_rejection_pct(ion, membrane.rejection)

    passage_pct = (100.0 - rejection_pct) * (1.0 + max(sp_increase_per_year, 0.0)) ** max(age_years, 0.0)
    rejection_pct = clamp(100.0 - passage_pct, MIN_REJECTION_PCT, MAX_REJECTION_PCT)
    return rejection_pct / 100.0


def calculate_membrane_rejections(ions: Mapping[IonType, float],
                                  membrane: MembraneSpec,
                                  age_years: float = 0.0,
                                  sp_increase_per_year: float = 0.0) -> Dict[IonType, float]:
    """Rejection fractions for every ion present in ``ions``."""
    return {
        ion: get_ion_rejection(ion, membrane, age_years, sp_increase_per_year)
        for ion in order_ion_map(ions)
    }


def standard_rejections(ions: Mapping[IonType, float]) -> Dict[IonType, float]:
    """Rejection fractions from the fixed standard table (catalog independent)."""
    rejections = {}
    for ion in order_ion_map(ions):
        if ion.value in STANDARD_REJECTION_PCT:
            rejections[ion] = STANDARD_REJECTION_PCT[ion.value] / 100.0
        else:
            logger.warning(f"No standard rejection for {ion.value}, using 98%")
            rejections[ion] = 0.98
    return rejections


def calculate_ion_balance(
    feed_ions: Mapping[IonType, float],
    rejections: Mapping[IonType, float],
    recovery_fraction: float,
    feed_flow: float = 1.0
) -> Tuple[Dict[IonType, float], Dict[IonType, float]]:
    """
    Split each feed ion into permeate and concentrate.

    Parameters
    ----------
    feed_ions : mapping
        Feed concentrations (mg/L)
    rejections : mapping
        Rejection fraction per ion; missing ions are treated as fully rejected
    recovery_fraction : float
        Permeate/feed flow ratio
    feed_flow : float
        Feed flow in any unit; only the ratio matters, a zero flow is
        treated as a unit flow

    Returns
    -------
    tuple[dict, dict]
        (permeate_conc, concentrate_conc), both in mg/L
    """
    recovery = clamp(recovery_fraction, 0.0, clamp_recovery_fraction(1.0))
    q_feed = feed_flow if feed_flow > 0 else 1.0
    q_permeate = q_feed * recovery
    q_concentrate = q_feed - q_permeate

    permeate_conc = {}
    concentrate_conc = {}

    for ion, feed_conc in order_ion_map(feed_ions).items():
        rejection = rejections.get(ion, 1.0)
        permeate_conc[ion] = feed_conc * (1.0 - rejection)

        # Recovery is capped below 1, so the concentrate flow stays positive
        mass_in = q_feed * feed_conc
        mass_out_permeate = q_permeate * permeate_conc[ion]
        concentrate_conc[ion] = (mass_in - mass_out_permeate) / q_concentrate

    return permeate_conc, concentrate_conc
