# -*- coding: utf-8 -*-
"""
RO performance calculator package.
"""

from .ro_calculator import (
    calculate_system,
    calculate_ion_passage,
    run_hydraulic_balance
)
from .schemas import (
    ROSystemConfig,
    StageConfig,
    MembraneSpec,
    IonPassageParameters,
    SystemReport,
    SystemResults,
    StageResult,
    IonPassageResult,
    HydraulicBalance
)
from .units import FlowUnit
from .ions import IonType, RejectionClass
from .membrane_catalog import (
    DEFAULT_MEMBRANE_CATALOG,
    build_catalog,
    find_membrane
)
from .response_formatter import (
    format_report_response,
    format_error_response
)

__all__ = [
    # Calculations
    "calculate_system",
    "calculate_ion_passage",
    "run_hydraulic_balance",

    # Schemas
    "ROSystemConfig",
    "StageConfig",
    "MembraneSpec",
    "IonPassageParameters",
    "SystemReport",
    "SystemResults",
    "StageResult",
    "IonPassageResult",
    "HydraulicBalance",

    # Enumerations
    "FlowUnit",
    "IonType",
    "RejectionClass",

    # Membrane catalog
    "DEFAULT_MEMBRANE_CATALOG",
    "build_catalog",
    "find_membrane",

    # Formatting
    "format_report_response",
    "format_error_response"
]
