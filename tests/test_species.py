"""
Tests for the species table and categorical enumerations.
"""
import pytest

from pyarcarbon.exceptions import ConfigurationError, UnknownCategoryError
from pyarcarbon.species import (
    CurveShape,
    GrowthCurve,
    RainfallClass,
    SiteQuality,
    SoilType,
    SpeciesCode,
    SpeciesRecord,
    SpeciesTraits,
    _check_curve,
    available_species,
    get_species_code,
    get_species_record,
    validate_species_code,
)


# =============================================================================
# Parametrized Test Data
# =============================================================================

SPECIES_LOOKUP_CASES = [
    pytest.param("teak_moderate", SpeciesCode.TEAK_MODERATE, id="canonical"),
    pytest.param("Teak_Moderate", SpeciesCode.TEAK_MODERATE, id="mixed_case"),
    pytest.param("  eucalyptus fast ", SpeciesCode.EUCALYPTUS_FAST, id="spaces"),
    pytest.param("acacia-fast", SpeciesCode.ACACIA_FAST, id="dashes"),
    pytest.param("native_slow", SpeciesCode.NATIVE_MIXED_SLOW, id="alias_native_slow"),
    pytest.param("teak", SpeciesCode.TEAK_MODERATE, id="alias_teak"),
    pytest.param(SpeciesCode.OAK_SLOW, SpeciesCode.OAK_SLOW, id="enum_member"),
]

CATEGORY_CASES = [
    pytest.param(SiteQuality, "high", SiteQuality.HIGH, id="site_lowercase"),
    pytest.param(SiteQuality, "Poor", SiteQuality.LOW, id="site_alias_poor"),
    pytest.param(SiteQuality, "average", SiteQuality.MEDIUM, id="site_alias_average"),
    pytest.param(RainfallClass, "LOW", RainfallClass.LOW, id="rainfall_uppercase"),
    pytest.param(SoilType, " Alluvial ", SoilType.ALLUVIAL, id="soil_whitespace"),
    pytest.param(SoilType, "degraded", SoilType.DEGRADED, id="soil_degraded"),
]

UNKNOWN_CATEGORY_CASES = [
    pytest.param(SpeciesCode, "unobtanium", "species", id="species"),
    pytest.param(SiteQuality, "Excellent", "site_quality", id="site_quality"),
    pytest.param(RainfallClass, "Monsoon", "avg_rainfall", id="avg_rainfall"),
    pytest.param(SoilType, "Peat", "soil_type", id="soil_type"),
    pytest.param(SoilType, None, "soil_type", id="missing_value"),
]


# =============================================================================
# Enumeration Lookup
# =============================================================================

class TestCategoryLookup:
    """Tests for string to enum conversion."""

    @pytest.mark.parametrize("value,expected", SPECIES_LOOKUP_CASES)
    def test_species_from_string(self, value, expected):
        assert SpeciesCode.from_string(value) is expected
        assert get_species_code(value) is expected

    @pytest.mark.parametrize("enum_cls,value,expected", CATEGORY_CASES)
    def test_category_from_string(self, enum_cls, value, expected):
        assert enum_cls.from_string(value) is expected

    @pytest.mark.parametrize("enum_cls,value,field", UNKNOWN_CATEGORY_CASES)
    def test_unknown_category_names_field(self, enum_cls, value, field):
        with pytest.raises(UnknownCategoryError) as exc_info:
            enum_cls.from_string(value)
        assert exc_info.value.field == field
        assert exc_info.value.to_report().kind == "UnknownCategory"

    def test_unknown_category_lists_allowed_values(self):
        with pytest.raises(UnknownCategoryError) as exc_info:
            SoilType.from_string("Peat")
        assert exc_info.value.allowed == ["Sandy", "Loam", "Clay", "Degraded", "Alluvial"]

    def test_is_valid(self):
        assert validate_species_code("oak_slow")
        assert not validate_species_code("unobtanium")
        assert SiteQuality.is_valid("Good")
        assert not RainfallClass.is_valid("")

    def test_enums_behave_as_strings(self):
        assert SpeciesCode.PINE_MODERATE == "pine_moderate"
        assert SoilType.CLAY == "Clay"


# =============================================================================
# Species Table
# =============================================================================

class TestSpeciesRecords:
    """Tests for the species table rows."""

    def test_every_species_has_a_record(self):
        records = available_species()
        assert [r.code for r in records] == list(SpeciesCode)

    @pytest.mark.parametrize("species", list(SpeciesCode), ids=lambda s: s.value)
    def test_record_values_are_physical(self, species):
        record = get_species_record(species)
        assert record.mean_annual_increment > 0
        assert record.maturity_year > 0
        assert record.wood_density > 0
        assert record.bef >= 1
        assert record.rsr >= 0

    def test_teak_record(self):
        record = get_species_record("teak_moderate")
        assert record.mean_annual_increment == pytest.approx(12.0)
        assert record.maturity_year == 15
        assert record.growth_curve.shape is CurveShape.CHAPMAN_RICHARDS
        assert record.growth_curve.k == pytest.approx(0.07)
        assert record.growth_curve.p == pytest.approx(3.0)

    def test_linear_species(self):
        record = get_species_record("native_mixed_slow")
        assert record.growth_curve.shape is CurveShape.LINEAR
        assert record.traits.drought_tolerant

    def test_records_are_cached_and_immutable(self):
        record = get_species_record("pine_moderate")
        assert get_species_record(SpeciesCode.PINE_MODERATE) is record
        with pytest.raises(AttributeError):
            record.mean_annual_increment = 99.0

    def test_unknown_species_record(self):
        with pytest.raises(UnknownCategoryError) as exc_info:
            get_species_record("unobtanium")
        assert exc_info.value.field == "species"


def _record(shape, k=0.0, p=1.0, maturity_year=15):
    return SpeciesRecord(
        code=SpeciesCode.TEAK_MODERATE, name="Test teak", mean_annual_increment=12.0,
        maturity_year=maturity_year, growth_curve=GrowthCurve(shape, k=k, p=p),
        wood_density=0.55, bef=1.5, rsr=0.24, traits=SpeciesTraits(),
    )


class TestGrowthCurveGuard:
    """Tests for the Chapman-Richards parameter check."""

    @pytest.mark.parametrize("species", list(SpeciesCode), ids=lambda s: s.value)
    def test_table_curves_pass(self, species):
        record = get_species_record(species)
        assert _check_curve(record) is record

    @pytest.mark.parametrize("k,p", [
        pytest.param(0.3, 1.0, id="fast_rate_low_shape"),
        pytest.param(0.0, 3.0, id="zero_rate"),
        pytest.param(0.07, -1.0, id="negative_shape"),
    ])
    def test_bad_curve_rejected(self, k, p):
        with pytest.raises(ConfigurationError, match="violates"):
            _check_curve(_record(CurveShape.CHAPMAN_RICHARDS, k=k, p=p))

    def test_linear_curve_not_checked(self):
        record = _record(CurveShape.LINEAR)
        assert _check_curve(record) is record
