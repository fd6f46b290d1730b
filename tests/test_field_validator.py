"""
tests/test_field_validator.py

Pytest unit tests for per field type validation.
"""

from __future__ import annotations

import pytest

from doubansync.domain.field_mapping import ContentType
from doubansync.domain.transform import TransformContext
from doubansync.mappers.field_registry import BOOK_FIELDS, SCREEN_FIELDS
from doubansync.validators.field_validator import (
    FieldValidator,
    validate_datetime,
    validate_rating,
    validate_select,
)


# ---------------------------------------------------------------------------
# rating
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("value", [1, 5, 3.5])
def test_rating_in_range_passes(value: float) -> None:
    check = validate_rating(value)

    assert check.value == value
    assert check.rejected is False


def test_rating_string_is_parsed() -> None:
    assert validate_rating("4.5").value == 4.5


def test_rating_out_of_range() -> None:
    check = validate_rating(0)

    assert check.value is None
    assert check.warning == "Rating out of range: 0, expected between 1-5"


@pytest.mark.parametrize("value", ["five", True, float("nan")])
def test_rating_not_a_number(value: object) -> None:
    check = validate_rating(value)

    assert check.value is None
    assert check.warning.startswith("Invalid rating value:")


def test_missing_rating_is_not_an_error() -> None:
    assert validate_rating(None).rejected is False


# ---------------------------------------------------------------------------
# datetime
# ---------------------------------------------------------------------------


def test_valid_date() -> None:
    assert validate_datetime("2024-01-01").value == "2024-01-01"


@pytest.mark.parametrize(
    ("value", "message"),
    [
        ("2024-13-01", "Invalid month in date: 2024-13-01"),
        ("2024-01-32", "Invalid day in date: 2024-01-32"),
        ("2024-02-30", "Invalid date: 2024-02-30"),
        ("2024/01/01", "Invalid date format: 2024/01/01, expected YYYY-MM-DD"),
        (20240101, "Invalid date format: 20240101, expected string"),
        ("２０２４-０１-０１", "Invalid date format: ２０２４-０１-０１, expected YYYY-MM-DD"),
    ],
)
def test_invalid_dates(value: object, message: str) -> None:
    check = validate_datetime(value)

    assert check.value is None
    assert check.warning == message


# ---------------------------------------------------------------------------
# status select
# ---------------------------------------------------------------------------


def test_book_status_values() -> None:
    assert validate_select("读过", "myStatus", ContentType.BOOKS).value == "读过"

    check = validate_select("看过", "myStatus", ContentType.BOOKS)
    assert check.value is None
    assert check.warning == "Invalid status value: 看过, expected one of: 想读, 在读, 读过"


@pytest.mark.parametrize("content_type", [ContentType.MOVIES, ContentType.TV, ContentType.DOCUMENTARY])
def test_screen_status_values(content_type: ContentType) -> None:
    assert validate_select("看过", "myStatus", content_type).value == "看过"
    assert validate_select("在读", "myStatus", content_type).rejected is True


def test_other_select_fields_pass_through() -> None:
    assert validate_select("anything", "genre", ContentType.MOVIES).value == "anything"


# ---------------------------------------------------------------------------
# FieldValidator
# ---------------------------------------------------------------------------


def test_validator_nulls_rejected_values_and_warns() -> None:
    context = TransformContext(content_type="books")
    data = {"title": "红楼梦", "myRating": 9, "markDate": "2024-01-01"}

    validated = FieldValidator().validate(data, ContentType.BOOKS, BOOK_FIELDS.values(), context=context)

    assert validated == {"title": "红楼梦", "myRating": None, "markDate": "2024-01-01"}
    assert context.warnings == ["Rating out of range: 9, expected between 1-5"]
    assert context.failed_fields == 0


def test_validator_does_not_add_absent_fields() -> None:
    context = TransformContext(content_type="movies")

    validated = FieldValidator().validate({"title": "霸王别姬"}, ContentType.MOVIES, SCREEN_FIELDS.values(), context=context)

    assert validated == {"title": "霸王别姬"}
    assert context.warnings == []
