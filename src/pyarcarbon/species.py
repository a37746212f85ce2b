"""
Species and site category enumerations for type-safe input handling.

The enums inherit from (str, Enum) so they can be used wherever a plain
string identifier is expected, while unknown values are rejected at the
input boundary instead of silently falling back to a default.

Usage:
    from pyarcarbon.species import SpeciesCode, get_species_record

    species = SpeciesCode.from_string("teak_moderate")
    record = get_species_record(species)
    print(record.mean_annual_increment)  # 12.0
"""
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

from .config_loader import get_config_loader
from .exceptions import ConfigurationError, UnknownCategoryError
from .utils import normalize_code, normalize_species_code


class _CategoryEnum(str, Enum):
    """Shared lookup behaviour for categorical inputs."""

    @classmethod
    def field_name(cls) -> str:
        """Input field reported in UnknownCategoryError."""
        return "category"

    @classmethod
    def _aliases(cls) -> Dict[str, str]:
        return {}

    @classmethod
    def from_string(cls, value) -> "_CategoryEnum":
        """Convert a string (case-insensitive, aliases allowed) to an enum member.

        Args:
            value: Category string or existing enum member

        Returns:
            Matching enum member

        Raises:
            UnknownCategoryError: If the value is not in the enumeration
        """
        if isinstance(value, cls):
            return value
        if value is None:
            raise UnknownCategoryError(cls.field_name(), value, cls.values())
        key = cls._normalize(value)
        key = cls._aliases().get(key, key)
        for member in cls:
            if cls._normalize(member.value) == key:
                return member
        raise UnknownCategoryError(cls.field_name(), value, cls.values())

    @classmethod
    def _normalize(cls, value) -> str:
        return normalize_code(value)

    @classmethod
    def is_valid(cls, value) -> bool:
        """Check whether a value names a member of the enumeration."""
        try:
            cls.from_string(value)
        except UnknownCategoryError:
            return False
        return True

    @classmethod
    def values(cls) -> list:
        return [member.value for member in cls]


class SpeciesCode(_CategoryEnum):
    """Species (growth class) identifiers available in the species table."""

    @classmethod
    def field_name(cls) -> str:
        return "species"

    TEAK_MODERATE = "teak_moderate"
    """Teak, moderate growth. Chapman-Richards curve, maturity 15 years."""

    EUCALYPTUS_FAST = "eucalyptus_fast"
    """Fast-growing eucalyptus clones. Chapman-Richards curve, maturity 10 years."""

    NATIVE_MIXED_SLOW = "native_mixed_slow"
    """Mixed native planting. Linear MAI accumulation, maturity 20 years."""

    PINE_MODERATE = "pine_moderate"
    """Pine plantation. Chapman-Richards curve, maturity 18 years."""

    ACACIA_FAST = "acacia_fast"
    """Fast-growing acacia. Chapman-Richards curve, maturity 8 years."""

    OAK_SLOW = "oak_slow"
    """Slow-growing oak. Linear MAI accumulation, maturity 25 years."""

    @classmethod
    def _normalize(cls, value) -> str:
        return normalize_species_code(value)

    @classmethod
    def _aliases(cls) -> Dict[str, str]:
        return dict(get_config_loader().species_aliases())


class SiteQuality(_CategoryEnum):
    """Site productivity class."""

    @classmethod
    def field_name(cls) -> str:
        return "site_quality"

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @classmethod
    def _aliases(cls) -> Dict[str, str]:
        # Labels used by the calculator form
        return {'poor': 'low', 'average': 'medium', 'good': 'high'}


class RainfallClass(_CategoryEnum):
    """Average annual rainfall class."""

    @classmethod
    def field_name(cls) -> str:
        return "avg_rainfall"

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class SoilType(_CategoryEnum):
    """Soil type class."""

    @classmethod
    def field_name(cls) -> str:
        return "soil_type"

    SANDY = "Sandy"
    LOAM = "Loam"
    CLAY = "Clay"
    DEGRADED = "Degraded"
    ALLUVIAL = "Alluvial"


class CurveShape(str, Enum):
    """Volume growth curve families."""
    LINEAR = "linear"
    CHAPMAN_RICHARDS = "chapman_richards"


@dataclass(frozen=True)
class GrowthCurve:
    """Growth curve parameters of a species.

    Attributes:
        shape: Curve family
        k: Chapman-Richards rate parameter (1/yr); unused for linear curves
        p: Chapman-Richards shape exponent; unused for linear curves
    """
    shape: CurveShape
    k: float = 0.0
    p: float = 1.0


@dataclass(frozen=True)
class SpeciesTraits:
    """Ecological traits used by the site modifier interactions."""
    drought_tolerance: str = "Medium"
    water_sensitivity: str = "Low"
    soil_preference: str = "Loam"

    @property
    def drought_tolerant(self) -> bool:
        return self.drought_tolerance == "High"

    @property
    def water_sensitive(self) -> bool:
        return self.water_sensitivity == "High"


@dataclass(frozen=True)
class SpeciesRecord:
    """One row of the species table.

    Attributes:
        code: Species identifier
        name: Human readable name
        mean_annual_increment: Reference-site MAI (m3/ha/yr)
        maturity_year: Age at which the MAI is reached (years)
        growth_curve: Volume curve parameters
        wood_density: Default basic wood density (t/m3)
        bef: Default biomass expansion factor
        rsr: Default root-to-shoot ratio
        traits: Ecological traits for site interactions
    """
    code: SpeciesCode
    name: str
    mean_annual_increment: float
    maturity_year: int
    growth_curve: GrowthCurve
    wood_density: float
    bef: float
    rsr: float
    traits: SpeciesTraits


def _build_record(code: SpeciesCode, row) -> SpeciesRecord:
    try:
        curve = row['growth_curve']
        traits = row.get('traits', {})
        return SpeciesRecord(
            code=code,
            name=row.get('name', code.value),
            mean_annual_increment=float(row['mean_annual_increment']),
            maturity_year=int(row['maturity_year']),
            growth_curve=GrowthCurve(
                shape=CurveShape(curve['shape']),
                k=float(curve.get('k', 0.0)),
                p=float(curve.get('p', 1.0)),
            ),
            wood_density=float(row['wood_density']),
            bef=float(row['bef']),
            rsr=float(row['rsr']),
            traits=SpeciesTraits(**dict(traits)),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(
            f"Malformed species table entry for '{code.value}': {e}"
        ) from e


def _check_curve(record: SpeciesRecord) -> SpeciesRecord:
    """Reject Chapman-Richards parameters that let biomass fall under mortality."""
    curve = record.growth_curve
    if curve.shape is CurveShape.CHAPMAN_RICHARDS:
        kt = curve.k * record.maturity_year
        if curve.k <= 0 or curve.p <= 0 or curve.p * kt < math.exp(kt) - 1:
            raise ConfigurationError(
                f"Growth curve of '{record.code.value}' violates p*k*T >= exp(k*T) - 1 "
                f"(k={curve.k}, p={curve.p}, T={record.maturity_year})"
            )
    return record


_species_records: Dict[SpeciesCode, SpeciesRecord] = {}


def get_species_record(species) -> SpeciesRecord:
    """Look up the species table row for a species.

    Args:
        species: SpeciesCode or species identifier string

    Returns:
        The immutable SpeciesRecord

    Raises:
        UnknownCategoryError: If the species is not in the enumeration
    """
    code = SpeciesCode.from_string(species)
    if code not in _species_records:
        row = get_config_loader().load_species_config(code.value)
        _species_records[code] = _check_curve(_build_record(code, row))
    return _species_records[code]


def get_species_code(species) -> SpeciesCode:
    """Convert a species string to its SpeciesCode."""
    return SpeciesCode.from_string(species)


def validate_species_code(species) -> bool:
    """Check whether a species identifier is known."""
    return SpeciesCode.is_valid(species)


def available_species() -> Tuple[SpeciesRecord, ...]:
    """All species records in table order."""
    return tuple(get_species_record(code) for code in SpeciesCode)
