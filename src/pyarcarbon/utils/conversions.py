"""
Unit conversion constants for carbon accounting.
"""

__all__ = [
    'C_TO_CO2E',
    'M2_PER_HECTARE',
    'carbon_to_co2e',
]


# Molecular weight ratio CO2 / C = 44 / 12
C_TO_CO2E = 44.0 / 12.0

M2_PER_HECTARE = 10_000.0


def carbon_to_co2e(carbon: float) -> float:
    """Convert tonnes of elemental carbon to tonnes of CO2 equivalent."""
    return carbon * C_TO_CO2E
