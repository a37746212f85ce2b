"""
Site, rainfall and soil growth modifiers.

Each categorical site input maps to a multiplicative factor on the species
mean annual increment. A small set of species-trait interactions replace the
base factor of one category (e.g. drought-tolerant species lose less growth
on low-rainfall sites). The combined product is clamped to the bounds in
cfg/site_modifiers.yaml.
"""
from dataclasses import dataclass
from typing import Optional

from .config_loader import get_config_loader
from .exceptions import ConfigurationError
from .species import (
    RainfallClass,
    SiteQuality,
    SoilType,
    SpeciesRecord,
)

__all__ = ['SiteModifiers', 'get_site_modifiers', 'get_modifier_factor']


@dataclass(frozen=True)
class SiteModifiers:
    """Resolved growth modifiers for one project site.

    Attributes:
        site_quality: Site quality factor
        rainfall: Rainfall factor (after species interactions)
        soil: Soil factor (after species interactions)
        lower_bound: Minimum allowed combined factor
        upper_bound: Maximum allowed combined factor
    """
    site_quality: float = 1.0
    rainfall: float = 1.0
    soil: float = 1.0
    lower_bound: float = 0.1
    upper_bound: float = 1.5

    @property
    def product(self) -> float:
        """Combined multiplicative modifier, clamped to the configured bounds."""
        raw = self.site_quality * self.rainfall * self.soil
        return max(self.lower_bound, min(self.upper_bound, raw))


def get_modifier_factor(table: str, category) -> float:
    """Look up the base factor for one category.

    Args:
        table: Section of the modifier table ('site_quality', 'avg_rainfall', 'soil_type')
        category: Enum member (or string) of the matching category

    Returns:
        Base multiplicative factor
    """
    section = get_config_loader().site_modifiers[table]
    key = getattr(category, 'value', category)
    if key not in section:
        raise ConfigurationError(f"No '{table}' modifier configured for '{key}'")
    return float(section[key])


def get_site_modifiers(site_quality, avg_rainfall, soil_type,
                       species: Optional[SpeciesRecord] = None) -> SiteModifiers:
    """Resolve the growth modifiers for a site and species.

    Args:
        site_quality: SiteQuality member or label
        avg_rainfall: RainfallClass member or label
        soil_type: SoilType member or label
        species: Species record whose traits drive the interaction rules.
            Without a species only the base factors apply.

    Returns:
        SiteModifiers with the per-category factors

    Raises:
        UnknownCategoryError: If any category is not in its enumeration
    """
    site_quality = SiteQuality.from_string(site_quality)
    avg_rainfall = RainfallClass.from_string(avg_rainfall)
    soil_type = SoilType.from_string(soil_type)

    config = get_config_loader().site_modifiers
    interactions = config.get('interactions', {})
    bounds = config.get('combined_bounds', {})

    quality_factor = get_modifier_factor('site_quality', site_quality)
    rainfall_factor = get_modifier_factor('avg_rainfall', avg_rainfall)
    soil_factor = get_modifier_factor('soil_type', soil_type)

    if species is not None:
        traits = species.traits
        if avg_rainfall is RainfallClass.LOW and traits.drought_tolerant:
            rainfall_factor = interactions.get('drought_tolerant_low_rainfall', rainfall_factor)
        if avg_rainfall is RainfallClass.HIGH and traits.water_sensitive:
            rainfall_factor = interactions.get('water_sensitive_high_rainfall', rainfall_factor)
        if soil_type is SoilType.SANDY and traits.soil_preference == SoilType.SANDY.value:
            soil_factor = interactions.get('sandy_preferring_sandy_soil', soil_factor)
        if soil_type is SoilType.CLAY and traits.water_sensitive:
            soil_factor = interactions.get('water_sensitive_clay', soil_factor)

    return SiteModifiers(
        site_quality=quality_factor,
        rainfall=float(rainfall_factor),
        soil=float(soil_factor),
        lower_bound=float(bounds.get('min', 0.1)),
        upper_bound=float(bounds.get('max', 1.5)),
    )
