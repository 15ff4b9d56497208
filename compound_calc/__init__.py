"""Compound interest calculator: engine, history store and JSON API."""

import logging

from compound_calc.config import COMPOUND_CALC_LOG_LEVEL

# Configure logging for compound_calc
_logger = logging.getLogger("compound_calc")

if not _logger.handlers:
    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s: %(message)s"))
    _logger.addHandler(_handler)


def configure_logging(level: str) -> None:
    """Set the package log level; unknown level names fall back to INFO."""
    _logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))


configure_logging(COMPOUND_CALC_LOG_LEVEL.get())
