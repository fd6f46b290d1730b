"""
doubansync/domain/field_mapping.py

Domain types describing how scraped fields map onto spreadsheet columns.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ContentType(str, Enum):
    """
    Catalogue kinds that select a field table and repair rules.
    """

    BOOKS = "books"
    MOVIES = "movies"
    TV = "tv"
    DOCUMENTARY = "documentary"

    @property
    def is_screen(self) -> bool:
        return self is not ContentType.BOOKS


class FieldType(str, Enum):
    """
    Destination column types.
    """

    TEXT = "text"
    NUMBER = "number"
    RATING = "rating"
    SINGLE_SELECT = "singleSelect"
    MULTI_SELECT = "multiSelect"
    DATETIME = "datetime"
    CHECKBOX = "checkbox"
    URL = "url"


@dataclass(frozen=True)
class FieldDescriptor:
    """
    Static metadata for one destination field.
    """

    source_name: str
    display_name: str
    field_type: FieldType
    required: bool = False
    nested_path: str | None = None
    notes: str | None = None
