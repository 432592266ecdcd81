# -*- coding: utf-8 -*-
"""
Helper functions for RO performance calculations.

Input sanitation favors best-effort numbers over exceptions: malformed
values are coerced to safe defaults and logged.
"""

import math
import logging
import numpy as np
from typing import Any, List, Optional, Tuple

logger = logging.getLogger(__name__)


def coerce_float(value: Any, default: float = 0.0) -> float:
    """
    Convert a value to a finite float, falling back to ``default``.

    Strings such as ``"12.5"`` are accepted; None, empty strings,
    non-numeric text, NaN and infinities return the default.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        logger.debug(f"Non-numeric value {value!r}, using {default}")
        return default
    if not math.isfinite(result):
        return default
    return result


def coerce_int(value: Any, default: int = 0, minimum: Optional[int] = None) -> int:
    """Convert a value to an int (truncating floats), falling back to ``default``."""
    result = int(coerce_float(value, default))
    if minimum is not None and result < minimum:
        return minimum
    return result


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp ``value`` into [lower, upper] and return a native float."""
    return float(np.clip(value, lower, upper))


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning ``default`` when the denominator is zero or negative."""
    if denominator <= 0:
        return default
    return numerator / denominator


def format_array_notation(vessel_counts: List[int]) -> str:
    """
    Format vessel counts as array notation.

    Example: [10, 5, 3] -> "10:5:3"
    """
    return ':'.join(str(n) for n in vessel_counts)


def check_mass_balance(feed_flow: float,
                       permeate_flow: float,
                       concentrate_flow: float,
                       tolerance: float = 1e-6) -> Tuple[bool, float]:
    """
    Check mass balance closure.

    Returns:
    --------
    Tuple[bool, float] : (is_balanced, error_magnitude)
    """
    error = abs(feed_flow - (permeate_flow + concentrate_flow))
    scale = max(abs(feed_flow), 1.0)
    return error <= tolerance * scale, error


def convert_numpy_types(obj):
    """
    Recursively convert numpy types to native Python types for JSON serialization.

    Parameters:
    -----------
    obj : Any
        Object that may contain numpy types

    Returns:
    --------
    Any : Object with numpy types converted to Python types
    """
    if isinstance(obj, np.bool_):
        return bool(obj)
    elif isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.floating):
        return float(obj)
    elif isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, dict):
        return {key: convert_numpy_types(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [convert_numpy_types(item) for item in obj]
    elif isinstance(obj, tuple):
        return tuple(convert_numpy_types(item) for item in obj)
    else:
        return obj
