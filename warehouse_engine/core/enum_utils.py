"""
Enum Utilities for VARCHAR-based Status Fields

Status columns are stored as VARCHAR(50), never as native database ENUMs.

DATA FLOW:
    INPUT (API Request):
        Pydantic Enum -> .value -> String -> Database
        Example: LotStatus.AVAILABLE -> "AVAILABLE" -> VARCHAR

    OUTPUT (API Response):
        Database -> String -> Return directly

All enum values are stored in UPPERCASE. Use create_uppercase_validator()
in schemas to accept case-insensitive input.
"""

from enum import Enum
from typing import Any, Type, Set

from pydantic import field_validator


def enum_values(enum_class: Type[Enum]) -> list:
    """Get all values from an enum class."""
    return [e.value for e in enum_class]


def normalize_to_uppercase(value: Any, valid_values: Set[str]) -> Any:
    """
    Normalize a string value to UPPERCASE if it's a valid enum value.

    Invalid values are returned untouched so Pydantic reports them.

    Examples:
        >>> normalize_to_uppercase('van', {'VAN', 'TORTON'})
        'VAN'
        >>> normalize_to_uppercase('bike', {'VAN', 'TORTON'})
        'bike'
    """
    if value is None:
        return value
    if isinstance(value, str):
        upper_v = value.strip().upper()
        if upper_v in valid_values:
            return upper_v
    return value


def create_uppercase_validator(field_name: str, valid_values: Set[str]) -> classmethod:
    """
    Create a Pydantic field_validator that normalizes values to UPPERCASE.

    Usage:
        class VehicleCreate(BaseModel):
            vehicle_type: VehicleType

            normalize_type = create_uppercase_validator('vehicle_type', VALID_VEHICLE_TYPES)
    """
    @field_validator(field_name, mode='before')
    @classmethod
    def validate(cls, v):
        return normalize_to_uppercase(v, valid_values)

    return validate
