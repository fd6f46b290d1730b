"""
doubansync/validators package marker.
"""

from doubansync.validators.field_validator import (
    FieldCheck,
    FieldValidator,
    validate_datetime,
    validate_rating,
    validate_select,
)

__all__ = [
    "FieldCheck",
    "FieldValidator",
    "validate_datetime",
    "validate_rating",
    "validate_select",
]
