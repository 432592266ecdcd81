"""
Command-line entrypoint for RO calculations.

Reads JSON input from stdin, runs the requested calculation, and writes
JSON to stdout. All logging is routed to stderr to keep stdout strictly
JSON-only.

Payload:
    {"operation": "system", "config": {...}}
    {"operation": "ion_passage", "feed_ions": {...}, "system_parameters": {...}}
    {"operation": "hydraulic_balance", "config": {...}, "membrane_spec": {...}}

The operation defaults to "system"; for "system" and "hydraulic_balance"
the configuration may also be given as the payload itself.
"""

import sys
import json
from typing import Any, Dict

from .logging_config import configure_logging
from .response_formatter import (
    format_error_response,
    format_hydraulic_balance_response,
    format_ion_passage_response,
    format_report_response,
)
from .ro_calculator import calculate_ion_passage, calculate_system, run_hydraulic_balance

OPERATIONS = ("system", "ion_passage", "hydraulic_balance")


def _config_from_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    if "config" in payload:
        return payload["config"] or {}
    return {k: v for k, v in payload.items() if k not in ("operation", "membrane_spec")}


def run_operation(payload: Dict[str, Any]) -> Dict[str, Any]:
    operation = payload.get("operation", "system")

    if operation == "system":
        return format_report_response(calculate_system(_config_from_payload(payload)))
    elif operation == "ion_passage":
        return format_ion_passage_response(
            calculate_ion_passage(payload.get("feed_ions"), payload.get("system_parameters"))
        )
    elif operation == "hydraulic_balance":
        return format_hydraulic_balance_response(
            run_hydraulic_balance(_config_from_payload(payload), payload.get("membrane_spec"))
        )
    raise ValueError(f"Unknown operation {operation!r}, expected one of {', '.join(OPERATIONS)}")


def main() -> int:
    # Ensure logs go to stderr
    configure_logging()

    try:
        raw = sys.stdin.read()
        payload: Dict[str, Any] = json.loads(raw) if raw.strip() else {}
        if not isinstance(payload, dict):
            raise ValueError("payload must be a JSON object")
    except ValueError as e:
        err = {"status": "error", "message": f"Invalid JSON input: {e}"}
        print(json.dumps(err), end="")
        return 1

    try:
        results = run_operation(payload)
        print(json.dumps(results), end="")
        return 0
    except Exception as e:
        print(json.dumps(format_error_response(e, payload)), end="")
        return 2


if __name__ == "__main__":
    sys.exit(main())
