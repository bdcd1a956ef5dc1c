"""Tests for date display helpers."""

import pytest

from agenda_assistant.features.formatting import (
    INVALID_DATE,
    NO_DUE_DATE,
    NOT_SPECIFIED,
    format_due_date,
    format_event_time,
)


def test_naive_time_is_shown_as_is():
    assert format_event_time("2025-03-05T14:30:00") == "5 במרץ 2025, 14:30"


def test_aware_time_is_converted_to_display_zone():
    assert format_event_time("2025-03-05T12:30:00Z", "UTC") == "5 במרץ 2025, 12:30"
    assert format_event_time("2025-12-31T23:15:00+00:00", "UTC") == "31 בדצמבר 2025, 23:15"


@pytest.mark.parametrize("value", [None, ""])
def test_missing_event_time(value):
    assert format_event_time(value) == NOT_SPECIFIED


def test_invalid_event_time():
    assert format_event_time("next tuesday") == INVALID_DATE


def test_unknown_time_zone():
    assert format_event_time("2025-03-05T12:30:00Z", "Nowhere/Special") == INVALID_DATE


@pytest.mark.parametrize("value, expected", [
    ("2025-08-05", "5 באוגוסט 2025"),
    ("2025-08-05T00:00:00.000Z", "5 באוגוסט 2025"),
    ("2026-01-01T23:59:00+02:00", "1 בינואר 2026"),
])
def test_due_date_uses_date_part_only(value, expected):
    assert format_due_date(value) == expected


def test_missing_and_invalid_due_date():
    assert format_due_date(None) == NO_DUE_DATE
    assert format_due_date("someday") == INVALID_DATE
