"""Picks the default destination (calendar or task list) for an extracted item.

This is a name heuristic, not a classifier: each category has a few keywords,
and the first destination whose lowercased name contains one of them wins.
Keywords cover the Hebrew names used by the original deployment as well as
English names.
"""

from typing import Dict, Optional, Sequence, Tuple, Union

from agenda_assistant.features.categories import EventCategory, TaskCategory
from agenda_assistant.features.models import Calendar, ItemType, TaskList

PRIMARY_CALENDAR_ID = "primary"

EVENT_KEYWORDS: Dict[EventCategory, Tuple[str, ...]] = {
    EventCategory.personal: ("אישי", "personal"),
    EventCategory.family: ("משפחה", "family"),
    EventCategory.clinic_private: ("קליניקה", "clinic"),
    EventCategory.public_framework: ("ציבורית", "עבודה", "work", "public"),
    EventCategory.study_group: ("למידה", "study"),
}

TASK_KEYWORDS: Dict[TaskCategory, Tuple[str, ...]] = {
    TaskCategory.personal: ("אישי", "personal"),
    TaskCategory.home_family: ("משפחה", "בית", "family", "home"),
    TaskCategory.clinic_self: ("קליניקה", "clinic"),
    TaskCategory.clinic_secretary: ("קליניקה", "clinic"),
    TaskCategory.project_day_hospital: ("פרויקט", "אשפוז יום", "project", "day hospital"),
}


def _first_match(destinations: Sequence[Union[Calendar, TaskList]], keywords: Tuple[str, ...]) -> Optional[str]:
    for destination in destinations:
        name = destination.display_name.lower()
        if any(keyword in name for keyword in keywords):
            return destination.id
    return None


def select_default_calendar(category: Union[EventCategory, str], calendars: Sequence[Calendar]) -> str:
    """Best calendar id for an event category; "primary" when there are no calendars."""
    if not calendars:
        return PRIMARY_CALENDAR_ID
    fallback = next((c.id for c in calendars if "@" in c.id), calendars[0].id)
    try:
        keywords = EVENT_KEYWORDS.get(EventCategory(category), ())
    except ValueError:
        keywords = ()
    return _first_match(calendars, keywords) or fallback


def select_default_task_list(category: Union[TaskCategory, str], task_lists: Sequence[TaskList]) -> Optional[str]:
    """Best task list id for a task category; None when there are no lists to pick from."""
    if not task_lists:
        return None
    fallback = task_lists[0].id
    try:
        keywords = TASK_KEYWORDS.get(TaskCategory(category), ())
    except ValueError:
        keywords = ()
    return _first_match(task_lists, keywords) or fallback


def select_default(
    category: str,
    destinations: Sequence[Union[Calendar, TaskList]],
    item_type: ItemType,
) -> Optional[str]:
    if item_type is ItemType.event:
        return select_default_calendar(category, destinations)  # type: ignore[arg-type]
    return select_default_task_list(category, destinations)  # type: ignore[arg-type]
