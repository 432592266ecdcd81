# -*- coding: utf-8 -*-
"""
Mass-balance flow solver.

Derives feed, permeate and concentrate flows at system, stage and vessel
level from one driving flow and the recovery fraction. All flows are m3/h.
"""

import logging
from typing import Dict, List, Sequence

from .constants import MIN_RECOVERY_PCT, MAX_RECOVERY_PCT
from .helpers import clamp, safe_divide

logger = logging.getLogger(__name__)


def clamp_recovery_fraction(recovery_fraction: float) -> float:
    """Keep recovery inside [1 %, 99 %] so neither flow blows up."""
    return clamp(recovery_fraction, MIN_RECOVERY_PCT / 100.0, MAX_RECOVERY_PCT / 100.0)


def solve_system_flows(flow_m3h: float,
                       recovery_fraction: float,
                       basis: str = 'feed') -> Dict[str, float]:
    """
    Solve the system flow triple.

    Parameters
    ----------
    flow_m3h : float
        Driving flow in m3/h, feed or permeate depending on ``basis``
    recovery_fraction : float
        Permeate/feed ratio, clamped to [0.01, 0.99]
    basis : str
        'feed' (default) or 'permeate'

    Returns
    -------
    dict
        feed_m3h, permeate_m3h, concentrate_m3h and the recovery used
    """
    recovery = clamp_recovery_fraction(recovery_fraction)
    flow = max(flow_m3h, 0.0)

    if basis == 'permeate':
        permeate = flow
        feed = permeate / recovery
    else:
        feed = flow
        permeate = feed * recovery

    concentrate = max(feed - permeate, 0.0)

    return {
        'feed_m3h': feed,
        'permeate_m3h': permeate,
        'concentrate_m3h': concentrate,
        'recovery': recovery,
    }


def split_stage_permeate(total_permeate_m3h: float,
                         stage_areas_m2: Sequence[float]) -> List[float]:
    """
    Apportion system permeate to stages by their share of active area.

    Stages share equally when no stage has any area.
    """
    n_stages = len(stage_areas_m2)
    if n_stages == 0:
        return []

    total_area = sum(stage_areas_m2)
    if total_area <= 0:
        return [total_permeate_m3h / n_stages] * n_stages

    return [total_permeate_m3h * area / total_area for area in stage_areas_m2]


def per_vessel_flow(stage_flow_m3h: float, n_vessels: int) -> float:
    """Flow through each vessel of a stage; zero when the stage has no vessels."""
    return safe_divide(stage_flow_m3h, n_vessels)


def calculate_vessel_flows(feed_m3h: float,
                           concentrate_m3h: float,
                           first_stage_vessels: int,
                           last_stage_vessels: int) -> Dict[str, float]:
    """
    Per-vessel feed (first stage) and concentrate (last stage) flows.

    The two ends are computed independently since vessel counts differ
    by stage.
    """
    return {
        'feed_per_vessel_m3h': per_vessel_flow(feed_m3h, first_stage_vessels),
        'concentrate_per_vessel_m3h': per_vessel_flow(concentrate_m3h, last_stage_vessels),
    }


def partition_stage_flows(feed_m3h: float,
                          stage_permeates_m3h: Sequence[float]) -> List[Dict[str, float]]:
    """
    Run the series mass balance: each stage feeds on the upstream concentrate.

    Returns one dict per stage with feed, permeate, concentrate and recovery.
    """
    stages = []
    stage_feed = feed_m3h
    for permeate in stage_permeates_m3h:
        permeate = min(permeate, stage_feed)
        concentrate = max(stage_feed - permeate, 0.0)
        stages.append({
            'feed_m3h': stage_feed,
            'permeate_m3h': permeate,
            'concentrate_m3h': concentrate,
            'recovery': safe_divide(permeate, stage_feed),
        })
        stage_feed = concentrate
    return stages
