"""
Utility functions for pyarcarbon.

This module provides common utilities used throughout the codebase.
"""

from .string_utils import normalize_code, normalize_species_code, to_camel_case, to_snake_case
from .conversions import (
    C_TO_CO2E,
    M2_PER_HECTARE,
    carbon_to_co2e,
)

__all__ = [
    "normalize_code",
    "normalize_species_code",
    "to_camel_case",
    "to_snake_case",
    "C_TO_CO2E",
    "M2_PER_HECTARE",
    "carbon_to_co2e",
]
