"""
Custom exceptions for pyarcarbon.
Provides domain-specific error handling with structured, informative payloads.

Every error raised by the engine can be turned into an ``ErrorReport`` so the
presentation layer receives ``{kind, field, reason}`` rather than a string.
"""
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from .utils.string_utils import to_camel_case


@dataclass(frozen=True)
class ErrorReport:
    """Structured error payload handed to the presentation collaborator.

    Attributes:
        kind: Error kind ('InvalidInput', 'UnknownCategory', 'InternalConsistency', ...)
        field: Offending input field, if the error concerns a single field
        reason: Short machine-friendly explanation
        value: Offending value, if any
        form_field: camelCase form key matching ``field`` (e.g. 'projectArea')
    """
    kind: str
    field: Optional[str]
    reason: str
    value: Any = None
    form_field: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ARCarbonError(Exception):
    """Base exception for all pyarcarbon errors."""
    kind = "Error"

    def to_report(self) -> ErrorReport:
        """Convert the exception into a structured ErrorReport."""
        field = getattr(self, 'field', None)
        return ErrorReport(
            kind=self.kind,
            field=field,
            reason=getattr(self, 'reason', str(self)),
            value=getattr(self, 'value', None),
            form_field=to_camel_case(field) if field else None,
        )


class ConfigurationError(ARCarbonError):
    """Raised when there are configuration-related issues."""
    kind = "Configuration"


class InvalidInputError(ARCarbonError):
    """Raised when a project input is missing, non-positive or out of range."""
    kind = "InvalidInput"

    def __init__(self, field: str, reason: str, value: Any = None):
        self.field = field
        self.reason = reason
        self.value = value
        message = f"Invalid value for '{field}'"
        if value is not None:
            message += f": {value!r}"
        super().__init__(f"{message} ({reason})")


class UnknownCategoryError(ARCarbonError):
    """Raised when a categorical input is not in its enumeration."""
    kind = "UnknownCategory"

    def __init__(self, field: str, value: Any, allowed: Optional[list] = None):
        self.field = field
        self.value = value
        self.allowed = list(allowed) if allowed else []
        self.reason = "unknown category"
        message = f"Unknown {field} '{value}'"
        if self.allowed:
            message += f". Valid values: {self.allowed}"
        super().__init__(message)


class InternalConsistencyError(ARCarbonError):
    """Raised when a schedule invariant fails after computation.

    Unreachable for valid inputs; indicates a bug in the engine or in the
    reference tables.
    """
    kind = "InternalConsistency"

    def __init__(self, invariant: str, detail: str):
        self.invariant = invariant
        self.field = None
        self.reason = f"{invariant}: {detail}"
        super().__init__(f"Invariant '{invariant}' violated: {detail}")


class DataError(ARCarbonError):
    """Raised when there are data-related issues."""
    kind = "Data"


class InvalidDataError(DataError):
    """Raised when data is malformed or invalid."""
    def __init__(self, data_description: str, reason: str):
        self.data_description = data_description
        self.reason = reason
        super().__init__(f"Invalid {data_description}: {reason}")


# Validation utilities
def validate_positive(value: float, field: str) -> float:
    """Validate that a value is positive.

    Args:
        value: Value to validate
        field: Field name for error message

    Returns:
        The validated value

    Raises:
        InvalidInputError: If value is not positive
    """
    if value <= 0:
        raise InvalidInputError(field, "must be positive", value)
    return value


def validate_non_negative(value: float, field: str) -> float:
    """Validate that a value is zero or positive."""
    if value < 0:
        raise InvalidInputError(field, "must not be negative", value)
    return value


def validate_proportion(value: float, field: str) -> float:
    """Validate that a value is a valid proportion (0-1).

    Args:
        value: Value to validate
        field: Field name for error message

    Returns:
        The validated value

    Raises:
        InvalidInputError: If value is not in [0, 1]
    """
    if not 0 <= value <= 1:
        raise InvalidInputError(field, "must be between 0 and 1", value)
    return value


def validate_range(value: float, min_val: float, max_val: float, field: str) -> float:
    """Validate that a value is within a specific range.

    Args:
        value: Value to validate
        min_val: Minimum allowed value
        max_val: Maximum allowed value
        field: Field name for error message

    Returns:
        The validated value

    Raises:
        InvalidInputError: If value is outside the range
    """
    if not min_val <= value <= max_val:
        raise InvalidInputError(
            field, f"must be between {min_val} and {max_val}", value
        )
    return value
