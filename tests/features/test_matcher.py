"""Unit tests for the default destination heuristic."""

import pytest

from agenda_assistant.features.categories import EventCategory, TaskCategory
from agenda_assistant.features.google_services import DEMO_CALENDARS, DEMO_TASK_LISTS
from agenda_assistant.features.matcher import (
    PRIMARY_CALENDAR_ID,
    select_default,
    select_default_calendar,
    select_default_task_list,
)
from agenda_assistant.features.models import Calendar, ItemType, TaskList


def test_family_event_picks_family_calendar():
    calendars = [Calendar(id="a", summary="Personal"), Calendar(id="b", summary="Family Calendar")]
    assert select_default_calendar("family", calendars) == "b"


def test_clinic_self_task_picks_clinic_list():
    assert select_default_task_list("clinic_self", [TaskList(id="x", title="Clinic Tasks")]) == "x"


def test_empty_calendars_returns_primary():
    for category in EventCategory:
        assert select_default_calendar(category, []) == PRIMARY_CALENDAR_ID


def test_empty_task_lists_returns_no_selection():
    for category in TaskCategory:
        assert select_default_task_list(category, []) is None


def test_calendar_fallback_prefers_id_with_at_sign():
    calendars = [Calendar(id="work_id", summary="Stuff"), Calendar(id="me@example.com", summary="Me")]
    assert select_default_calendar("study_group", calendars) == "me@example.com"


def test_calendar_fallback_without_at_sign_is_first():
    calendars = [Calendar(id="one", summary="Stuff"), Calendar(id="two", summary="Other")]
    assert select_default_calendar("personal", calendars) == "one"


def test_task_fallback_is_first_list():
    lists = [TaskList(id="first", title="Groceries"), TaskList(id="second", title="Errands")]
    assert select_default_task_list("project_day_hospital", lists) == "first"


def test_unknown_category_always_falls_back():
    calendars = [Calendar(id="a", summary="unknown"), Calendar(id="b@x", summary="Family")]
    assert select_default_calendar("unknown", calendars) == "b@x"
    assert select_default_calendar("not-a-category", calendars) == "b@x"


def test_matching_is_case_insensitive_and_first_match_wins():
    calendars = [
        Calendar(id="c1", summary="STUDY group A"),
        Calendar(id="c2", summary="Study group B"),
    ]
    assert select_default_calendar("study_group", calendars) == "c1"


@pytest.mark.parametrize("category, expected", [
    ("personal", "personal@demo.com"),
    ("family", "family_demo"),
    ("clinic_private", "clinic_demo"),
    ("public_framework", "work_demo"),
    ("study_group", "study_demo"),
    ("unknown", "personal@demo.com"),
])
def test_hebrew_demo_calendars(category, expected):
    assert select_default_calendar(category, DEMO_CALENDARS) == expected


@pytest.mark.parametrize("category, expected", [
    ("personal", "personal_tasks"),
    ("home_family", "family_tasks"),
    ("clinic_self", "clinic_tasks"),
    ("clinic_secretary", "clinic_tasks"),
    ("project_day_hospital", "project_tasks"),
    ("unknown", "personal_tasks"),
])
def test_hebrew_demo_task_lists(category, expected):
    assert select_default_task_list(category, DEMO_TASK_LISTS) == expected


def test_select_default_dispatches_on_item_type():
    assert select_default("family", [], ItemType.event) == PRIMARY_CALENDAR_ID
    assert select_default("home_family", [], ItemType.task) is None


def test_matcher_is_deterministic():
    calendars = list(DEMO_CALENDARS)
    first = [select_default_calendar(c, calendars) for c in EventCategory]
    second = [select_default_calendar(c, calendars) for c in EventCategory]
    assert first == second
    assert calendars == list(DEMO_CALENDARS)
