"""
doubansync/mappers package marker.
"""

from doubansync.mappers.field_registry import (
    BOOK_FIELDS,
    DEFAULT_REGISTRY,
    SCREEN_FIELDS,
    STATUS_FIELD,
    FieldMappingRegistry,
    UnknownContentTypeError,
)
from doubansync.mappers.generic_mapper import ARRAY_SEPARATOR, GenericMapper, MappingOutcome

__all__ = [
    "ARRAY_SEPARATOR",
    "BOOK_FIELDS",
    "DEFAULT_REGISTRY",
    "FieldMappingRegistry",
    "GenericMapper",
    "MappingOutcome",
    "SCREEN_FIELDS",
    "STATUS_FIELD",
    "UnknownContentTypeError",
]
