"""
Mortality model for pyarcarbon.

Mortality discipline
--------------------
Planted stems die off linearly between planting and species maturity, after
which the surviving fraction is held constant:

    effective_survival(y) = 1 - (1 - survival_rate) * min(y / maturity_year, 1)

so ``survival_rate`` is the fraction of planted stems still standing at
maturity. At y = 0 every stem is alive; with survival_rate = 1 the term is the
identity for every year.

The growth model multiplies the per-hectare aboveground biomass of a fully
stocked stand by ``effective_survival(y)``. Survival rates are validated to
[0.5, 1]; within that range, and for the growth curves in the species table,
the surviving-stand biomass never decreases from one year to the next.
"""
from dataclasses import dataclass
from typing import List

from .exceptions import InvalidInputError, validate_positive, validate_proportion

__all__ = [
    'MIN_SURVIVAL_RATE',
    'MortalityResult',
    'MortalityModel',
    'effective_survival',
    'get_mortality_model',
]

# Lowest survival rate accepted by the input validation
MIN_SURVIVAL_RATE = 0.5


@dataclass(frozen=True)
class MortalityResult:
    """Stocking of a stand at one age.

    Attributes:
        age: Stand age in years
        survival_fraction: Fraction of planted stems alive
        surviving_stems_per_ha: Live stems per hectare
        dead_stems_per_ha: Stems lost since planting per hectare
    """
    age: int
    survival_fraction: float
    surviving_stems_per_ha: float
    dead_stems_per_ha: float


def effective_survival(age: float, survival_rate: float, maturity_year: float) -> float:
    """Fraction of planted stems alive at ``age`` under linear mortality.

    Args:
        age: Stand age in years (>= 0)
        survival_rate: Fraction of stems surviving to maturity, in (0, 1]
        maturity_year: Age at which mortality stops (years, > 0)

    Returns:
        Survival fraction in [survival_rate, 1]
    """
    if age <= 0:
        return 1.0
    progress = min(age / maturity_year, 1.0)
    return 1.0 - (1.0 - survival_rate) * progress


class MortalityModel:
    """Linear mortality between planting and maturity.

    Attributes:
        survival_rate: Fraction of planted stems surviving to maturity
        maturity_year: Age at which the survival fraction levels off
    """

    def __init__(self, survival_rate: float, maturity_year: int):
        """Initialize the mortality model.

        Args:
            survival_rate: Fraction of planted stems surviving to maturity
            maturity_year: Species maturity age in years
        """
        validate_proportion(survival_rate, 'survival_rate')
        if survival_rate == 0:
            raise InvalidInputError('survival_rate', "must be positive", survival_rate)
        validate_positive(maturity_year, 'maturity_year')
        self.survival_rate = survival_rate
        self.maturity_year = maturity_year

    def survival_fraction(self, age: float) -> float:
        """Fraction of planted stems alive at ``age``."""
        return effective_survival(age, self.survival_rate, self.maturity_year)

    def apply_mortality(self, planting_density: float, age: int) -> MortalityResult:
        """Apply mortality to a planted stand.

        Args:
            planting_density: Stems planted per hectare
            age: Stand age in years

        Returns:
            MortalityResult with surviving and dead stems per hectare
        """
        fraction = self.survival_fraction(age)
        surviving = planting_density * fraction
        return MortalityResult(
            age=age,
            survival_fraction=fraction,
            surviving_stems_per_ha=surviving,
            dead_stems_per_ha=planting_density - surviving,
        )

    def mortality_schedule(self, planting_density: float, years: int) -> List[MortalityResult]:
        """Stocking for every year from 1 to ``years``."""
        return [self.apply_mortality(planting_density, age) for age in range(1, years + 1)]

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(survival_rate={self.survival_rate}, "
                f"maturity_year={self.maturity_year})")


def get_mortality_model(survival_rate: float, maturity_year: int) -> MortalityModel:
    """Create a mortality model for a species maturity and survival rate."""
    return MortalityModel(survival_rate, maturity_year)
