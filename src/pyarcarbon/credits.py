"""
Carbon credit (VER) accounting.

All rates are fractions in [0, 1]. The buffer is withheld first; the
non-additionality deduction is capped at what remains, so issuable credits
plus both deductions never exceed the total.
"""
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from .exceptions import validate_non_negative, validate_proportion
from .inputs import ProjectInputs

__all__ = [
    'DEFAULT_BUFFER_FRACTION',
    'DEFAULT_NON_ADDITIONALITY_FRACTION',
    'DEFAULT_CARBON_PRICE',
    'CreditSummary',
    'calculate_credits',
    'resolve_buffer_fraction',
    'resolve_non_additionality_fraction',
    'credits_for_project',
]

DEFAULT_BUFFER_FRACTION = 0.20
DEFAULT_NON_ADDITIONALITY_FRACTION = 0.10
DEFAULT_CARBON_PRICE = 5.0


@dataclass(frozen=True)
class CreditSummary:
    """Credit accounting result (1 VER = 1 tCO2e).

    Attributes:
        total_vers: Final cumulative sequestration
        buffer_fraction: Buffer rate applied
        non_additionality_fraction: Non-additionality rate applied
        carbon_price: Price per VER
        buffer_deducted: Credits withheld against reversal
        non_additionality_deducted: Credits attributed to the baseline
        issuable_vers: Credits available for issuance
        estimated_revenue: issuable_vers x carbon_price
    """
    total_vers: float
    buffer_fraction: float
    non_additionality_fraction: float
    carbon_price: float
    buffer_deducted: float
    non_additionality_deducted: float
    issuable_vers: float
    estimated_revenue: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def calculate_credits(total_vers: float,
                      buffer_fraction: float = DEFAULT_BUFFER_FRACTION,
                      non_additionality_fraction: float = DEFAULT_NON_ADDITIONALITY_FRACTION,
                      carbon_price: float = DEFAULT_CARBON_PRICE) -> CreditSummary:
    """Deduct buffer and non-additionality from total credits.

    Args:
        total_vers: Final cumulative sequestration (tCO2e)
        buffer_fraction: Buffer rate in [0, 1]
        non_additionality_fraction: Non-additionality rate in [0, 1]
        carbon_price: Price per VER

    Returns:
        CreditSummary

    Example:
        >>> calculate_credits(1000, 0.2, 0.1, 5).issuable_vers
        700.0
    """
    validate_non_negative(total_vers, 'total_vers')
    validate_proportion(buffer_fraction, 'buffer_fraction')
    validate_proportion(non_additionality_fraction, 'non_additionality_fraction')
    validate_non_negative(carbon_price, 'carbon_price_per_tonne')

    buffer_deducted = buffer_fraction * total_vers
    non_additionality_deducted = min(non_additionality_fraction * total_vers,
                                     total_vers - buffer_deducted)
    issuable = max(0.0, total_vers - buffer_deducted - non_additionality_deducted)

    return CreditSummary(
        total_vers=total_vers,
        buffer_fraction=buffer_fraction,
        non_additionality_fraction=non_additionality_fraction,
        carbon_price=carbon_price,
        buffer_deducted=buffer_deducted,
        non_additionality_deducted=non_additionality_deducted,
        issuable_vers=issuable,
        estimated_revenue=issuable * carbon_price,
    )


def resolve_buffer_fraction(inputs: ProjectInputs) -> float:
    """Explicit buffer, else the summed risk factors, else the default."""
    if inputs.buffer_fraction is not None:
        return inputs.buffer_fraction
    if inputs.risk_factors is not None:
        return min(1.0, inputs.risk_factors.total)
    return DEFAULT_BUFFER_FRACTION


def resolve_non_additionality_fraction(inputs: ProjectInputs, total_vers: float) -> float:
    """Explicit non-additionality, else baseline removals as a share of the total.

    The baseline share is ``baseline x area x duration / total_vers`` clamped to
    [0, 1]; without baseline data the default of 10 % applies.
    """
    if inputs.non_additionality_fraction is not None:
        return inputs.non_additionality_fraction
    baseline = inputs.baseline_removals_per_hectare_year
    if baseline is not None:
        if total_vers <= 0:
            return 1.0 if baseline > 0 else 0.0
        share = baseline * inputs.project_area * inputs.project_duration / total_vers
        return max(0.0, min(1.0, share))
    return DEFAULT_NON_ADDITIONALITY_FRACTION


def credits_for_project(inputs: ProjectInputs, total_vers: float,
                        carbon_price: Optional[float] = None) -> CreditSummary:
    """Credit accounting for validated project inputs."""
    if carbon_price is None:
        carbon_price = inputs.carbon_price_per_tonne
    if carbon_price is None:
        carbon_price = DEFAULT_CARBON_PRICE
    return calculate_credits(
        total_vers,
        buffer_fraction=resolve_buffer_fraction(inputs),
        non_additionality_fraction=resolve_non_additionality_fraction(inputs, total_vers),
        carbon_price=carbon_price,
    )
