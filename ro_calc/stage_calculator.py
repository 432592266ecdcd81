"""
Stage partitioner for RO trains with stages in series.

Each stage feeds on the concentrate of the stage before it. Permeate is
apportioned by active area, each stage runs its own ion balance on its own
feed water, and pressures are propagated from the pump down the train.

Stage records are plain dicts in internal units (m3/h, bar, lmh, mg/L).
"""

import logging
from typing import Dict, List, Mapping, Optional, Sequence

from .flow_solver import partition_stage_flows, per_vessel_flow, split_stage_permeate
from .helpers import safe_divide
from .ions import IonType, total_dissolved_solids
from .membrane_catalog import find_membrane
from .permeate_calculator import calculate_ion_balance, calculate_membrane_rejections
from .pressure_drop_calculator import calculate_stage_pressure_drop
from .schemas import MembraneSpec, ROSystemConfig, StageConfig
from .transport import (
    average_osmotic_pressure_bar,
    calculate_beta,
    calculate_flux_lmh,
    calculate_highest_flux,
    calculate_ndp,
    concentrate_pressure_bar,
    effective_a_value,
    osmotic_pressure_bar,
    required_feed_pressure_bar,
)

logger = logging.getLogger(__name__)


def resolve_stages(config: ROSystemConfig) -> List[StageConfig]:
    """
    Stages that take part in the calculation.

    Stages without vessels are skipped; when none remain, a single stage
    is built from the top-level vessel layout.
    """
    active = [stage for stage in config.stages if stage.vessels > 0]
    if active:
        return active
    return [StageConfig(
        vessels=config.vessels,
        elements_per_vessel=config.elements_per_vessel,
        membrane_model=config.membrane_model,
    )]


def stage_membranes(config: ROSystemConfig,
                    stages: Sequence[StageConfig],
                    catalog: Sequence[MembraneSpec]) -> List[MembraneSpec]:
    return [find_membrane(catalog, stage.membrane_model or config.membrane_model) for stage in stages]


def stage_area_m2(stage: StageConfig, membrane: MembraneSpec) -> float:
    return stage.vessels * stage.elements_per_vessel * membrane.area_m2


def required_system_feed_pressure(stages: Sequence[Dict]) -> float:
    """
    Pump pressure that lets every stage reach its required inlet pressure.

    A stage's inlet sees the pump pressure minus all upstream drops.
    """
    upstream_drop = 0.0
    pressure = 0.0
    for stage in stages:
        pressure = max(pressure, stage['required_feed_pressure_bar'] + upstream_drop)
        upstream_drop += stage['pressure_drop_bar']
    return pressure


def propagate_stage_pressures(stages: Sequence[Dict], feed_pressure_bar: float) -> None:
    """Walk the pump pressure down the train, stage concentrate feeding the next stage."""
    pressure = feed_pressure_bar
    for stage in stages:
        reported, raw = concentrate_pressure_bar(pressure, stage['pressure_drop_bar'])
        stage['feed_pressure_bar'] = pressure
        stage['concentrate_pressure_bar'] = reported
        stage['raw_concentrate_pressure_bar'] = raw
        pressure = reported


def blend_stage_permeate_ions(stages: Sequence[Dict]) -> Dict[IonType, float]:
    """
    Combined permeate of the train, flow-weighted over the stage permeates.

    Falls back to the lead stage permeate when the train makes no permeate.
    """
    total_permeate = sum(stage['permeate_m3h'] for stage in stages)
    if total_permeate <= 0:
        return dict(stages[0]['permeate_ions'])

    blended = {}
    for ion in stages[0]['permeate_ions']:
        ion_mass = sum(stage['permeate_m3h'] * stage['permeate_ions'].get(ion, 0.0) for stage in stages)
        blended[ion] = safe_divide(ion_mass, total_permeate)
    return blended


def train_concentrate_ions(stages: Sequence[Dict]) -> Dict[IonType, float]:
    """The concentrate leaving the train is the last stage's concentrate."""
    return dict(stages[-1]['concentrate_ions'])


def calculate_stage(index: int,
                    stage: StageConfig,
                    membrane: MembraneSpec,
                    flows: Mapping[str, float],
                    feed_ions: Mapping[IonType, float],
                    config: ROSystemConfig,
                    temperature_c: float,
                    permeate_pressure_bar: float) -> Dict:
    """Hydraulics, chemistry and required inlet pressure for one stage."""
    area = stage_area_m2(stage, membrane)
    recovery = flows['recovery']

    flux = calculate_flux_lmh(flows['permeate_m3h'], area)
    beta = calculate_beta(recovery, flux)
    a_eff = effective_a_value(
        membrane.a_value,
        age_years=config.membrane_age_years,
        flux_decline_per_year=config.flux_decline_per_year,
        fouling_factor=config.fouling_factor,
        temperature_c=temperature_c,
    )
    ndp = calculate_ndp(flux, a_eff)

    rejections = calculate_membrane_rejections(
        feed_ions, membrane, config.membrane_age_years, config.sp_increase_per_year
    )
    permeate_ions, concentrate_ions = calculate_ion_balance(
        feed_ions, rejections, recovery, flows['feed_m3h']
    )
    feed_tds = total_dissolved_solids(feed_ions)
    concentrate_tds = total_dissolved_solids(concentrate_ions)

    avg_osmotic = average_osmotic_pressure_bar(feed_tds, recovery, temperature_c)
    pressure_drop = calculate_stage_pressure_drop(
        feed_flow_m3h=flows['feed_m3h'],
        reject_flow_m3h=flows['concentrate_m3h'],
        n_vessels=stage.vessels,
        n_elements_per_vessel=stage.elements_per_vessel,
    )

    return {
        'index': index,
        'vessels': stage.vessels,
        'elements_per_vessel': stage.elements_per_vessel,
        'membrane': membrane,
        'area_m2': area,
        'feed_m3h': flows['feed_m3h'],
        'permeate_m3h': flows['permeate_m3h'],
        'concentrate_m3h': flows['concentrate_m3h'],
        'recovery': recovery,
        'feed_per_vessel_m3h': per_vessel_flow(flows['feed_m3h'], stage.vessels),
        'concentrate_per_vessel_m3h': per_vessel_flow(flows['concentrate_m3h'], stage.vessels),
        'flux_lmh': flux,
        'beta': beta,
        'highest_flux_lmh': calculate_highest_flux(flux, beta),
        'a_effective_lmh_bar': a_eff,
        'ndp_bar': ndp,
        'feed_osmotic_bar': osmotic_pressure_bar(feed_tds, temperature_c),
        'avg_osmotic_bar': avg_osmotic,
        'concentrate_osmotic_bar': osmotic_pressure_bar(concentrate_tds, temperature_c),
        'pressure_drop_bar': pressure_drop,
        'required_feed_pressure_bar': required_feed_pressure_bar(
            ndp, avg_osmotic, permeate_pressure_bar, pressure_drop
        ),
        'feed_ions': dict(feed_ions),
        'permeate_ions': permeate_ions,
        'concentrate_ions': concentrate_ions,
        'feed_tds': feed_tds,
        'permeate_tds': total_dissolved_solids(permeate_ions),
        'concentrate_tds': concentrate_tds,
    }


def calculate_stages(config: ROSystemConfig,
                     catalog: Sequence[MembraneSpec],
                     system_flows: Mapping[str, float],
                     feed_ions: Mapping[IonType, float],
                     temperature_c: float,
                     permeate_pressure_bar: float = 0.0,
                     feed_pressure_bar: Optional[float] = None) -> List[Dict]:
    """
    Resolve every stage of the train in series.

    Parameters
    ----------
    config : ROSystemConfig
        Normalized configuration
    catalog : sequence of MembraneSpec
        Catalog used to look up stage membranes
    system_flows : mapping
        Output of flow_solver.solve_system_flows
    feed_ions : mapping
        System feed water (mg/L), speciation included
    temperature_c : float
        Feed temperature
    permeate_pressure_bar : float
        Permeate backpressure
    feed_pressure_bar : float, optional
        Pump pressure override; when None the pump pressure is the
        highest requirement over all stages

    Returns
    -------
    list of dict
        Stage records in internal units
    """
    stage_configs = resolve_stages(config)
    membranes = stage_membranes(config, stage_configs, catalog)
    areas = [stage_area_m2(stage, membrane) for stage, membrane in zip(stage_configs, membranes)]

    permeates = split_stage_permeate(system_flows['permeate_m3h'], areas)
    stage_flows = partition_stage_flows(system_flows['feed_m3h'], permeates)

    stages = []
    stage_feed_ions = feed_ions
    for index, (stage, membrane, flows) in enumerate(zip(stage_configs, membranes, stage_flows), start=1):
        record = calculate_stage(
            index, stage, membrane, flows, stage_feed_ions,
            config, temperature_c, permeate_pressure_bar
        )
        logger.debug(
            f"Stage {index}: {stage.vessels}x{stage.elements_per_vessel} {membrane.id}, "
            f"recovery {record['recovery']:.3f}, flux {record['flux_lmh']:.2f} lmh, "
            f"required {record['required_feed_pressure_bar']:.2f} bar"
        )
        stages.append(record)
        stage_feed_ions = record['concentrate_ions']

    if feed_pressure_bar is None:
        feed_pressure_bar = required_system_feed_pressure(stages)
    propagate_stage_pressures(stages, feed_pressure_bar)

    return stages
