"""
doubansync/validators/field_validator.py

Per field type acceptance rules applied after repairs.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any

from doubansync.domain.field_mapping import ContentType, FieldDescriptor, FieldType
from doubansync.domain.transform import TransformContext
from doubansync.mappers.field_registry import STATUS_FIELD, FieldMappingRegistry

RATING_MIN = 1
RATING_MAX = 5
DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")


@dataclass(frozen=True)
class FieldCheck:
    """
    Accepted value (or None) plus the warning explaining a rejection.
    """

    value: Any
    warning: str | None = None

    @property
    def rejected(self) -> bool:
        return self.warning is not None


def validate_select(value: Any, field_name: str, content_type: ContentType) -> FieldCheck:
    if field_name != STATUS_FIELD or value is None:
        return FieldCheck(value)
    allowed = FieldMappingRegistry.status_options(content_type)
    if value in allowed:
        return FieldCheck(value)
    return FieldCheck(None, f"Invalid status value: {value}, expected one of: {', '.join(allowed)}")


def validate_rating(value: Any) -> FieldCheck:
    if value is None:
        return FieldCheck(None)

    number: float | int | None
    if isinstance(value, bool):
        number = None
    elif isinstance(value, (int, float)):
        number = value
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            number = None

    if number is None or math.isnan(number):
        return FieldCheck(None, f"Invalid rating value: {value}, expected number between {RATING_MIN}-{RATING_MAX}")
    if number < RATING_MIN or number > RATING_MAX:
        return FieldCheck(None, f"Rating out of range: {number}, expected between {RATING_MIN}-{RATING_MAX}")
    return FieldCheck(number)


def validate_datetime(value: Any) -> FieldCheck:
    if value is None:
        return FieldCheck(None)
    if not isinstance(value, str):
        return FieldCheck(None, f"Invalid date format: {value}, expected string")

    text = value.strip()
    if not DATE_PATTERN.match(text):
        return FieldCheck(None, f"Invalid date format: {text}, expected YYYY-MM-DD")

    year, month, day = (int(part) for part in text.split("-"))
    if month < 1 or month > 12:
        return FieldCheck(None, f"Invalid month in date: {text}")
    if day < 1 or day > 31:
        return FieldCheck(None, f"Invalid day in date: {text}")
    try:
        date(year, month, day)
    except ValueError:
        return FieldCheck(None, f"Invalid date: {text}")
    return FieldCheck(text)


def _pass_through(value: Any, descriptor: FieldDescriptor, content_type: ContentType) -> FieldCheck:
    return FieldCheck(value)


FieldRule = Callable[[Any, FieldDescriptor, ContentType], FieldCheck]

FIELD_RULES: Mapping[FieldType, FieldRule] = {
    FieldType.SINGLE_SELECT: lambda value, descriptor, content_type: validate_select(
        value, descriptor.source_name, content_type
    ),
    FieldType.RATING: lambda value, descriptor, content_type: validate_rating(value),
    FieldType.DATETIME: lambda value, descriptor, content_type: validate_datetime(value),
    FieldType.TEXT: _pass_through,
    FieldType.NUMBER: _pass_through,
    FieldType.MULTI_SELECT: _pass_through,
    FieldType.CHECKBOX: _pass_through,
    FieldType.URL: _pass_through,
}

_unhandled = set(FieldType) - set(FIELD_RULES)
if _unhandled:
    raise RuntimeError(f"No validation rule for field types: {sorted(item.value for item in _unhandled)}")


class FieldValidator:
    """
    Nulls out values that do not fit their destination column.
    """

    def __init__(self, rules: Mapping[FieldType, FieldRule] | None = None) -> None:
        self._rules = dict(FIELD_RULES)
        if rules:
            self._rules.update(rules)

    def validate(
        self,
        data: Mapping[str, Any],
        content_type: ContentType,
        descriptors: Iterable[FieldDescriptor],
        *,
        context: TransformContext,
    ) -> dict[str, Any]:
        validated = dict(data)
        for descriptor in descriptors:
            name = descriptor.source_name
            if name not in validated:
                continue
            check = self._rules[descriptor.field_type](validated[name], descriptor, content_type)
            validated[name] = check.value
            if check.warning:
                context.warn(check.warning)
        return validated
