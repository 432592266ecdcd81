"""
Centralized logging configuration for the RO calculator.

All logging goes to stderr so the command-line entry point can keep
stdout strictly JSON.
"""

import logging
import sys


def configure_logging(level=logging.INFO):
    """
    Configure the root logger to use a single stderr handler.

    Args:
        level: Root log level (default INFO)
    """
    root_logger = logging.getLogger()

    # Remove ALL existing handlers from root logger
    root_logger.handlers = []

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(
        logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    )

    root_logger.addHandler(stderr_handler)
    root_logger.setLevel(level)

    # Per-ion sanitation messages are noisy in batch use
    logging.getLogger('ro_calc.ions').setLevel(max(level, logging.WARNING))
