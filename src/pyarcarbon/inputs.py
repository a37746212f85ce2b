"""
Project input record and the form boundary.

``ProjectInputs`` is the engine's only inbound type. It stores every rate as
a fraction in [0, 1]; ``ProjectInputs.from_form`` is the single place where
whole-number percents coming from a UI form are converted.
"""
import math
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, Mapping, Optional, Union

from .exceptions import InvalidInputError
from .species import RainfallClass, SiteQuality, SoilType, SpeciesCode
from .utils import to_snake_case

__all__ = [
    'DEFAULT_PLANTING_DENSITY',
    'DEFAULT_CARBON_FRACTION',
    'DEFAULT_SURVIVAL_RATE',
    'PERCENT_FORM_FIELDS',
    'FORM_ALIASES',
    'RiskFactors',
    'ProjectInputs',
    'parse_number',
    'percent_to_fraction',
]

DEFAULT_PLANTING_DENSITY = 1600.0
DEFAULT_CARBON_FRACTION = 0.47
DEFAULT_SURVIVAL_RATE = 0.85

# Form keys carrying whole-number percents, mapped to the fraction attribute
PERCENT_FORM_FIELDS = {
    'survival_rate': 'survival_rate',
    'buffer_percentage': 'buffer_fraction',
    'non_additionality_percentage': 'non_additionality_fraction',
    'dead_attribute_percentage': 'non_additionality_fraction',
}

RISK_FORM_FIELDS = {
    'fire_risk': 'fire',
    'insect_risk': 'insect',
    'disease_risk': 'disease',
}

# Alternate form keys of the calculator UI
FORM_ALIASES = {
    'carbon_price': 'carbon_price_per_tonne',
    'custom_carbon_price': 'carbon_price_per_tonne',
}


@dataclass(frozen=True)
class RiskFactors:
    """Reversal risk components as fractions; their sum sizes the buffer."""
    fire: float = 0.05
    insect: float = 0.03
    disease: float = 0.02

    @property
    def total(self) -> float:
        return self.fire + self.insect + self.disease


@dataclass(frozen=True)
class ProjectInputs:
    """Description of an afforestation/reforestation project.

    Rates are fractions in [0, 1]. Species-dependent factors left as None
    (wood density, BEF, RSR) take the species table defaults during validation.

    Attributes:
        project_area: Planted area (ha)
        species: Species identifier
        project_duration: Crediting period (years)
        planting_density: Stems planted per hectare
        wood_density: Basic wood density (t/m3)
        bef: Biomass expansion factor (>= 1)
        rsr: Root-to-shoot ratio
        carbon_fraction: Carbon fraction of dry biomass
        site_quality: Site productivity class
        avg_rainfall: Rainfall class
        soil_type: Soil class
        survival_rate: Fraction of stems surviving to maturity
        initial_green_cover_percentage: Green cover before planting (0-100)
        target_green_cover_percentage: Green cover goal at the end (0-100)
        total_geographical_area: Area the green cover percentage refers to (ha)
        carbon_price_per_tonne: Credit price per VER
        buffer_fraction: Share of credits withheld against reversal
        non_additionality_fraction: Share of credits attributed to the baseline
        baseline_removals_per_hectare_year: Baseline removals (tCO2e/ha/yr)
        risk_factors: Reversal risk components used when no buffer is given
        project_cost: Total project cost for the cost analysis
    """
    project_area: float
    species: Union[SpeciesCode, str]
    project_duration: int
    planting_density: float = DEFAULT_PLANTING_DENSITY
    wood_density: Optional[float] = None
    bef: Optional[float] = None
    rsr: Optional[float] = None
    carbon_fraction: float = DEFAULT_CARBON_FRACTION
    site_quality: Union[SiteQuality, str] = SiteQuality.MEDIUM
    avg_rainfall: Union[RainfallClass, str] = RainfallClass.MEDIUM
    soil_type: Union[SoilType, str] = SoilType.LOAM
    survival_rate: float = DEFAULT_SURVIVAL_RATE
    initial_green_cover_percentage: Optional[float] = None
    target_green_cover_percentage: Optional[float] = None
    total_geographical_area: Optional[float] = None
    carbon_price_per_tonne: Optional[float] = None
    buffer_fraction: Optional[float] = None
    non_additionality_fraction: Optional[float] = None
    baseline_removals_per_hectare_year: Optional[float] = None
    risk_factors: Optional[RiskFactors] = field(default=None)
    project_cost: Optional[float] = None

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> "ProjectInputs":
        """Build inputs from a UI form payload.

        Keys may be camelCase ('projectArea') or snake_case. Numeric strings
        are parsed, empty strings count as absent, and the percent fields
        ('survivalRate', 'bufferPercentage', 'nonAdditionalityPercentage',
        'fireRisk', 'insectRisk', 'diseaseRisk') are divided by 100 here and
        nowhere else. Green-cover percentages stay on the 0-100 scale.
        'carbonPrice' and 'customCarbonPrice' are accepted for
        'carbonPricePerTonne'.

        Args:
            form: Mapping of form keys to raw values

        Returns:
            Unvalidated ProjectInputs

        Raises:
            InvalidInputError: If a required field is missing or a value is not numeric
        """
        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}
        risks: Dict[str, float] = {}

        for raw_key, raw_value in form.items():
            if raw_value is None or (isinstance(raw_value, str) and not raw_value.strip()):
                continue
            key = to_snake_case(raw_key)
            if key == 'carbon_price' and raw_value == 'custom':
                # price selector set to 'custom'; the value comes from customCarbonPrice
                continue
            key = FORM_ALIASES.get(key, key)
            if key in PERCENT_FORM_FIELDS:
                target = PERCENT_FORM_FIELDS[key]
                values[target] = percent_to_fraction(parse_number(raw_value, target), target)
            elif key in RISK_FORM_FIELDS:
                risks[RISK_FORM_FIELDS[key]] = percent_to_fraction(parse_number(raw_value, key), key)
            elif key in ('species', 'site_quality', 'avg_rainfall', 'soil_type'):
                values[key] = raw_value
            elif key in known:
                values[key] = parse_number(raw_value, key)

        if risks:
            values['risk_factors'] = RiskFactors(**risks)

        for required in ('project_area', 'species', 'project_duration'):
            if required not in values:
                raise InvalidInputError(required, "is required")

        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        """Plain dictionary with enum members replaced by their values."""
        data = asdict(self)
        for key, value in data.items():
            if hasattr(value, 'value'):
                data[key] = value.value
        return data


def parse_number(value: Any, field_name: str) -> float:
    """Parse a form value into a finite float.

    Args:
        value: Raw value (number or numeric string)
        field_name: Field name for error messages

    Returns:
        Parsed float

    Raises:
        InvalidInputError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise InvalidInputError(field_name, "must be a number", value)
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError):
        raise InvalidInputError(field_name, "must be a number", value) from None
    if not math.isfinite(number):
        raise InvalidInputError(field_name, "must be a finite number", value)
    return number


def percent_to_fraction(value: float, field_name: str) -> float:
    """Convert a whole-number percent (0-100) to a fraction (0-1)."""
    if not 0 <= value <= 100:
        raise InvalidInputError(field_name, "must be between 0 and 100 percent", value)
    return value / 100.0
