"""
RO performance calculator entry points.

calculate_system runs the full train: flows, stages, pressures, chemistry
and design warnings. calculate_ion_passage and run_hydraulic_balance are
the lighter chemistry-only and flows-only calculations.

Inputs are normalized once at the boundary by the pydantic schemas; every
calculation below works in m3/h, bar, lmh, m2 and degrees Celsius and only
the report is converted to the display units of the flow unit.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Sequence, Union

import numpy as np

from .design_limits import evaluate_design_limits
from .flow_solver import calculate_vessel_flows, solve_system_flows
from .helpers import check_mass_balance, format_array_notation
from .ions import (
    calculate_charge_balance,
    infer_carbonate_speciation,
    normalize_ion_map,
    total_dissolved_solids,
)
from .membrane_catalog import find_membrane, resolve_catalog
from .permeate_calculator import calculate_ion_balance, standard_rejections
from .scaling_prediction import (
    calculate_ccpp,
    calculate_concentrate_ph,
    calculate_lsi,
    calculate_permeate_ph,
    calculate_saturation_ratios,
    concentration_factor,
    get_scaling_tendency,
)
from .schemas import (
    ConcentrateParameters,
    ConcentrateSaturation,
    HydraulicBalance,
    IonPassageParameters,
    IonPassageResult,
    MembraneSpec,
    PermeateParameters,
    ROSystemConfig,
    StageResult,
    SystemReport,
    SystemResults,
)
from .stage_calculator import (
    blend_stage_permeate_ions,
    calculate_stages,
    resolve_stages,
    train_concentrate_ions,
)
from .transport import (
    average_osmotic_pressure_bar,
    calculate_beta,
    calculate_flux_lmh,
    calculate_ndp,
    osmotic_pressure_bar,
)
from .units import (
    FlowUnit,
    area_unit,
    display_area,
    display_flux,
    display_pressure,
    flux_unit,
    from_m3h,
    input_pressure_to_bar,
    lmh_to_gfd,
    pressure_unit,
    to_m3h,
)

logger = logging.getLogger(__name__)

ConfigInput = Union[ROSystemConfig, Mapping[str, Any], None]

# Feed analyses outside this cation/anion imbalance are logged
CHARGE_BALANCE_TOLERANCE_PCT = 10.0


def _coerce_config(config: ConfigInput) -> ROSystemConfig:
    if isinstance(config, ROSystemConfig):
        return config
    return ROSystemConfig.model_validate(dict(config or {}))


def _stage_result(stage: Dict, unit: FlowUnit) -> StageResult:
    """Convert an internal stage record to display units."""
    return StageResult(
        index=stage['index'],
        vessels=stage['vessels'],
        elements_per_vessel=stage['elements_per_vessel'],
        membrane_model=stage['membrane'].id,
        feed_flow=from_m3h(stage['feed_m3h'], unit),
        permeate_flow=from_m3h(stage['permeate_m3h'], unit),
        concentrate_flow=from_m3h(stage['concentrate_m3h'], unit),
        recovery_pct=stage['recovery'] * 100.0,
        feed_flow_per_vessel=from_m3h(stage['feed_per_vessel_m3h'], unit),
        concentrate_flow_per_vessel=from_m3h(stage['concentrate_per_vessel_m3h'], unit),
        area=display_area(stage['area_m2'], unit),
        flux=display_flux(stage['flux_lmh'], unit),
        highest_flux=display_flux(stage['highest_flux_lmh'], unit),
        beta=stage['beta'],
        feed_pressure=display_pressure(stage['feed_pressure_bar'], unit),
        concentrate_pressure=display_pressure(stage['concentrate_pressure_bar'], unit),
        pressure_drop=display_pressure(stage['pressure_drop_bar'], unit),
        net_driving_pressure=display_pressure(stage['ndp_bar'], unit),
        osmotic_pressure=display_pressure(stage['avg_osmotic_bar'], unit),
        feed_tds=stage['feed_tds'],
        permeate_tds=stage['permeate_tds'],
        concentrate_tds=stage['concentrate_tds'],
        flux_unit=flux_unit(unit),
        pressure_unit=pressure_unit(unit),
    )


def calculate_system(config: ConfigInput,
                     catalog: Optional[Sequence[MembraneSpec]] = None) -> SystemReport:
    """
    Calculate steady-state performance of an RO train.

    Parameters
    ----------
    config : ROSystemConfig or mapping
        Train configuration; mappings are validated (and sanitized) once
    catalog : sequence of MembraneSpec, optional
        Default membrane catalog; a catalog inside ``config`` takes
        precedence, and the configured catalog is used when both are absent

    Returns
    -------
    SystemReport
        Results in the display units implied by ``config.flow_unit``.
        Physical-limit violations are reported in ``design_warnings``.
    """
    config = _coerce_config(config)
    unit = config.flow_unit
    catalog = resolve_catalog(config.membrane_catalog, catalog)
    temperature_c = config.temperature_c

    feed_ions = infer_carbonate_speciation(config.feed_ions, config.feed_ph)
    if not feed_ions:
        logger.warning("Feed ion composition is empty, water quality results are zero")
    else:
        imbalance_pct = calculate_charge_balance(config.feed_ions)
        if abs(imbalance_pct) > CHARGE_BALANCE_TOLERANCE_PCT:
            logger.info(f"Feed water charge imbalance {imbalance_pct:.1f}%")

    flows = solve_system_flows(to_m3h(config.feed_flow, unit), config.recovery_fraction, config.flow_basis)
    recovery = flows['recovery']

    permeate_pressure_bar = input_pressure_to_bar(config.permeate_pressure, unit)
    feed_pressure_override_bar = None
    if config.feed_pressure is not None:
        feed_pressure_override_bar = input_pressure_to_bar(config.feed_pressure, unit) + permeate_pressure_bar

    stages = calculate_stages(
        config, catalog, flows, feed_ions, temperature_c,
        permeate_pressure_bar=permeate_pressure_bar,
        feed_pressure_bar=feed_pressure_override_bar,
    )
    lead = stages[0]

    permeate_ions = blend_stage_permeate_ions(stages)
    concentrate_ions = train_concentrate_ions(stages)
    feed_tds = total_dissolved_solids(feed_ions)
    permeate_tds = total_dissolved_solids(permeate_ions)
    concentrate_tds = total_dissolved_solids(concentrate_ions)

    concentrate_ph = calculate_concentrate_ph(config.feed_ph, recovery)
    lsi, phs = calculate_lsi(concentrate_ph, concentrate_ions, concentrate_tds, temperature_c)

    total_area_m2 = sum(stage['area_m2'] for stage in stages)
    total_vessels = sum(stage['vessels'] for stage in stages)
    total_elements = sum(stage['vessels'] * stage['elements_per_vessel'] for stage in stages)
    total_pressure_drop = sum(stage['pressure_drop_bar'] for stage in stages)
    avg_flux_lmh = calculate_flux_lmh(flows['permeate_m3h'], total_area_m2)
    vessel_flows = calculate_vessel_flows(
        flows['feed_m3h'], flows['concentrate_m3h'], lead['vessels'], stages[-1]['vessels']
    )

    balanced, imbalance = check_mass_balance(
        flows['feed_m3h'], flows['permeate_m3h'], flows['concentrate_m3h']
    )
    if not balanced:
        logger.warning(f"Flow mass balance does not close: error {imbalance:.3e} m3/h")

    design_warnings = evaluate_design_limits(stages, unit)

    system_results = SystemResults(
        flow_unit=unit,
        flux_unit=flux_unit(unit),
        pressure_unit=pressure_unit(unit),
        area_unit=area_unit(unit),
        feed_flow=from_m3h(flows['feed_m3h'], unit),
        permeate_flow=from_m3h(flows['permeate_m3h'], unit),
        concentrate_flow=from_m3h(flows['concentrate_m3h'], unit),
        recovery_pct=recovery * 100.0,
        feed_flow_per_vessel=from_m3h(vessel_flows['feed_per_vessel_m3h'], unit),
        concentrate_flow_per_vessel=from_m3h(vessel_flows['concentrate_per_vessel_m3h'], unit),
        total_vessels=total_vessels,
        total_elements=total_elements,
        total_area=display_area(total_area_m2, unit),
        avg_flux=display_flux(avg_flux_lmh, unit),
        avg_flux_lmh=avg_flux_lmh,
        avg_flux_gfd=lmh_to_gfd(avg_flux_lmh),
        highest_flux=display_flux(float(np.max([s['highest_flux_lmh'] for s in stages])), unit),
        highest_beta=float(np.max([s['beta'] for s in stages])),
        feed_pressure=display_pressure(lead['feed_pressure_bar'], unit),
        concentrate_pressure=display_pressure(stages[-1]['concentrate_pressure_bar'], unit),
        permeate_pressure=display_pressure(permeate_pressure_bar, unit),
        net_driving_pressure=display_pressure(
            calculate_ndp(avg_flux_lmh, lead['a_effective_lmh_bar']), unit
        ),
        pressure_drop=display_pressure(total_pressure_drop, unit),
        osmotic_pressure=display_pressure(osmotic_pressure_bar(feed_tds, temperature_c), unit),
        effective_osmotic_pressure=display_pressure(
            average_osmotic_pressure_bar(feed_tds, recovery, temperature_c), unit
        ),
        effective_a_value_lmh_bar=lead['a_effective_lmh_bar'],
        feed_tds=feed_tds,
        feed_ph=config.feed_ph,
        temperature_c=temperature_c,
        mass_balance_ok=balanced,
    )

    logger.info(
        f"Calculated {format_array_notation([s['vessels'] for s in stages])} train: recovery {recovery * 100:.1f}%, "
        f"feed pressure {lead['feed_pressure_bar']:.2f} bar, "
        f"{len(design_warnings)} warning(s)"
    )

    return SystemReport(
        system_results=system_results,
        feed_ion_concentrations=feed_ions,
        permeate_ion_concentrations=permeate_ions,
        concentrate_ion_concentrations=concentrate_ions,
        concentrate_saturation=ConcentrateSaturation(**calculate_saturation_ratios(concentrate_ions)),
        concentrate_parameters=ConcentrateParameters(
            tds=concentrate_tds,
            osmotic_pressure=display_pressure(osmotic_pressure_bar(concentrate_tds, temperature_c), unit),
            ph=concentrate_ph,
            concentration_factor=concentration_factor(recovery),
            langelier=lsi,
            phs=phs,
            ccpp=calculate_ccpp(lsi),
            scaling_tendency=get_scaling_tendency(lsi) if lsi is not None else None,
        ),
        permeate_parameters=PermeateParameters(
            tds=permeate_tds,
            osmotic_pressure=display_pressure(osmotic_pressure_bar(permeate_tds, temperature_c), unit),
            ph=calculate_permeate_ph(config.feed_ph),
        ),
        stage_results=[_stage_result(stage, unit) for stage in stages],
        design_warnings=design_warnings,
    )


def calculate_ion_passage(feed_ions: Any,
                          system_parameters: Union[IonPassageParameters, Mapping[str, Any], None] = None
                          ) -> IonPassageResult:
    """
    Estimate permeate and concentrate chemistry without a membrane catalog.

    Uses the fixed standard rejection table. ``system_parameters`` carries
    recovery (%), flux (lmh), feed pH and temperature (C).
    """
    if not isinstance(system_parameters, IonPassageParameters):
        system_parameters = IonPassageParameters.model_validate(dict(system_parameters or {}))

    recovery = system_parameters.recovery / 100.0
    ions = infer_carbonate_speciation(normalize_ion_map(feed_ions), system_parameters.feed_ph)

    permeate_ions, concentrate_ions = calculate_ion_balance(ions, standard_rejections(ions), recovery)
    concentrate_ph = calculate_concentrate_ph(system_parameters.feed_ph, recovery)
    lsi, _ = calculate_lsi(
        concentrate_ph, concentrate_ions,
        total_dissolved_solids(concentrate_ions), system_parameters.temperature_c
    )

    return IonPassageResult(
        permeate_ions=permeate_ions,
        concentrate_ions=concentrate_ions,
        permeate_tds=total_dissolved_solids(permeate_ions),
        lsi=lsi,
        beta=calculate_beta(recovery, system_parameters.flux_lmh),
    )


def run_hydraulic_balance(config: ConfigInput,
                          membrane_spec: Union[MembraneSpec, Mapping[str, Any], None] = None
                          ) -> HydraulicBalance:
    """
    Flows, installed area and average flux only.

    Every stage is assumed to use ``membrane_spec``; when it is omitted the
    membrane is looked up from the configuration's model and catalog.
    """
    config = _coerce_config(config)
    unit = config.flow_unit

    if membrane_spec is None:
        membrane = find_membrane(resolve_catalog(config.membrane_catalog), config.membrane_model)
    elif isinstance(membrane_spec, MembraneSpec):
        membrane = membrane_spec
    else:
        membrane = MembraneSpec.model_validate(dict(membrane_spec))

    flows = solve_system_flows(to_m3h(config.feed_flow, unit), config.recovery_fraction, config.flow_basis)
    total_elements = sum(stage.vessels * stage.elements_per_vessel for stage in resolve_stages(config))
    total_area_m2 = total_elements * membrane.area_m2

    return HydraulicBalance(
        feed_flow=from_m3h(flows['feed_m3h'], unit),
        concentrate_flow=from_m3h(flows['concentrate_m3h'], unit),
        permeate_flow=from_m3h(flows['permeate_m3h'], unit),
        total_elements=total_elements,
        total_area=display_area(total_area_m2, unit),
        calc_flux=display_flux(calculate_flux_lmh(flows['permeate_m3h'], total_area_m2), unit),
        unit=unit,
        flux_unit=flux_unit(unit),
        area_unit=area_unit(unit),
    )
