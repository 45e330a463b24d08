"""Pricing package."""

from license_calculator.pricing.calculator import (
    MONTHS_PER_YEAR,
    compute_total,
    display_mode,
    parse_quantity,
)

__all__ = ["MONTHS_PER_YEAR", "compute_total", "display_mode", "parse_quantity"]
