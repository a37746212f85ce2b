"""
Stand growth model: stem volume and aboveground biomass per hectare.

Volume follows one of two curve families, chosen by the species record:

- linear: ``V(y) = MAI * min(y, T)``; the stand stops accumulating volume at
  maturity T.
- Chapman-Richards: ``V(y) = A * (1 - exp(-k * y)) ** p`` with the asymptote
  ``A = MAI * T / (1 - exp(-k * T)) ** p`` so that the mean annual increment at
  maturity, V(T) / T, equals the (site-modified) MAI of the species.

Aboveground biomass per hectare is then

    AGB(y) = V(y) * wood_density * bef * effective_survival(y)

with the linear mortality discipline documented in ``mortality.py``.
Planting density only drives the surviving-stem count; the yield curves
describe a fully stocked stand.
"""
import math
from dataclasses import dataclass

from .logging_config import get_logger
from .mortality import MortalityModel
from .site_modifiers import SiteModifiers
from .species import CurveShape, SpeciesRecord

__all__ = [
    'GrowthModel',
    'GrowthState',
    'above_ground_biomass_per_ha',
    'chapman_richards_volume',
    'linear_volume',
]

logger = get_logger(__name__)


def linear_volume(age: float, mai: float, maturity_year: float) -> float:
    """Linear MAI accumulation, flat after maturity.

    Args:
        age: Stand age in years
        mai: Mean annual increment (m3/ha/yr)
        maturity_year: Age after which volume stops accumulating

    Returns:
        Stem volume in m3/ha
    """
    if age <= 0:
        return 0.0
    return mai * min(age, maturity_year)


def chapman_richards_volume(age: float, mai: float, maturity_year: float,
                            k: float, p: float) -> float:
    """Chapman-Richards volume scaled so that V(T) = MAI * T.

    Args:
        age: Stand age in years
        mai: Mean annual increment at maturity (m3/ha/yr)
        maturity_year: Maturity age T in years
        k: Rate parameter (1/yr)
        p: Shape exponent

    Returns:
        Stem volume in m3/ha
    """
    if age <= 0:
        return 0.0
    asymptote = mai * maturity_year / (1.0 - math.exp(-k * maturity_year)) ** p
    return asymptote * (1.0 - math.exp(-k * age)) ** p


@dataclass(frozen=True)
class GrowthState:
    """Per-hectare stand state at one age.

    Attributes:
        age: Stand age in years
        volume_per_ha: Stem volume of a fully stocked stand (m3/ha)
        survival_fraction: Fraction of planted stems alive
        surviving_stems_per_ha: Live stems per hectare
        above_ground_biomass_per_ha: Aboveground dry biomass (t d.m./ha)
    """
    age: int
    volume_per_ha: float
    survival_fraction: float
    surviving_stems_per_ha: float
    above_ground_biomass_per_ha: float


class GrowthModel:
    """Per-hectare growth of one species on one site.

    Attributes:
        species: Species table row
        modifiers: Site growth modifiers
        effective_mai: Species MAI multiplied by the modifier product
        mortality: Linear mortality model
    """

    def __init__(self, species: SpeciesRecord, modifiers: SiteModifiers,
                 survival_rate: float, wood_density: float, bef: float):
        """Initialize the growth model.

        Args:
            species: Species table row
            modifiers: Resolved site modifiers
            survival_rate: Fraction of planted stems surviving to maturity
            wood_density: Basic wood density (t/m3)
            bef: Biomass expansion factor
        """
        self.species = species
        self.modifiers = modifiers
        self.wood_density = wood_density
        self.bef = bef
        self.effective_mai = species.mean_annual_increment * modifiers.product
        self.mortality = MortalityModel(survival_rate, species.maturity_year)

        logger.debug(
            f"Growth model for {species.code.value}: effective MAI "
            f"{self.effective_mai:.3f} m3/ha/yr ({species.growth_curve.shape.value})"
        )

    def volume_per_ha(self, age: float) -> float:
        """Stem volume per hectare of a fully stocked stand at ``age``."""
        curve = self.species.growth_curve
        if curve.shape is CurveShape.CHAPMAN_RICHARDS:
            return chapman_richards_volume(
                age, self.effective_mai, self.species.maturity_year, curve.k, curve.p
            )
        return linear_volume(age, self.effective_mai, self.species.maturity_year)

    def asymptotic_volume(self) -> float:
        """Volume the curve saturates towards (m3/ha)."""
        curve = self.species.growth_curve
        maturity = self.species.maturity_year
        if curve.shape is CurveShape.CHAPMAN_RICHARDS:
            return self.effective_mai * maturity / (1.0 - math.exp(-curve.k * maturity)) ** curve.p
        return self.effective_mai * maturity

    def above_ground_biomass_per_ha(self, age: float) -> float:
        """Aboveground dry biomass per hectare at ``age`` (t d.m./ha)."""
        stocked = self.volume_per_ha(age) * self.wood_density * self.bef
        return stocked * self.mortality.survival_fraction(age)

    def state_at(self, age: int, planting_density: float) -> GrowthState:
        """Full per-hectare stand state at ``age``.

        Args:
            age: Stand age in years
            planting_density: Stems planted per hectare

        Returns:
            GrowthState for the age
        """
        stocking = self.mortality.apply_mortality(planting_density, age)
        volume = self.volume_per_ha(age)
        agb = volume * self.wood_density * self.bef * stocking.survival_fraction
        return GrowthState(
            age=age,
            volume_per_ha=volume,
            survival_fraction=stocking.survival_fraction,
            surviving_stems_per_ha=stocking.surviving_stems_per_ha,
            above_ground_biomass_per_ha=agb,
        )

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(species='{self.species.code.value}', "
                f"effective_mai={self.effective_mai:.3f})")


def above_ground_biomass_per_ha(age: float, species: SpeciesRecord, modifiers: SiteModifiers,
                                planting_density: float, survival_rate: float,
                                wood_density: float, bef: float) -> float:
    """Aboveground dry biomass per hectare at ``age``.

    Args:
        age: Stand age in years
        species: Species table row
        modifiers: Resolved site modifiers
        planting_density: Stems planted per hectare. Only the stem count
            depends on it (see GrowthModel.state_at); per-hectare biomass
            comes from the fully stocked yield curve.
        survival_rate: Fraction of stems surviving to maturity
        wood_density: Basic wood density (t/m3)
        bef: Biomass expansion factor

    Returns:
        Non-negative biomass in t d.m./ha; 0 at age 0
    """
    model = GrowthModel(species, modifiers, survival_rate, wood_density, bef)
    return model.above_ground_biomass_per_ha(age)
