"""
String normalization helpers shared by the enum and config layers.
"""
import re

__all__ = [
    'normalize_code',
    'normalize_species_code',
    'to_camel_case',
    'to_snake_case',
]

_CAMEL_BOUNDARY = re.compile(r'(?<!^)(?=[A-Z])')


def normalize_code(code: str) -> str:
    """Normalize a categorical code for lookup.

    Strips surrounding whitespace and lower-cases the value so that
    'High', ' high ' and 'HIGH' all resolve to the same category.

    Args:
        code: Raw code string

    Returns:
        Normalized code
    """
    return str(code).strip().lower()


def normalize_species_code(code: str) -> str:
    """Normalize a species identifier.

    Species identifiers are snake_case ('teak_moderate'); spaces and dashes
    coming from spreadsheets are folded into underscores.
    """
    return re.sub(r'[\s\-]+', '_', normalize_code(code))


def to_camel_case(name: str) -> str:
    """Convert a snake_case attribute name to the camelCase form key."""
    head, *rest = name.split('_')
    return head + ''.join(part[:1].upper() + part[1:] for part in rest)


def to_snake_case(name: str) -> str:
    """Convert a camelCase form key to the snake_case attribute name."""
    return _CAMEL_BOUNDARY.sub('_', name).lower()
