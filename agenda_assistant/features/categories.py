"""Category registry for extracted events and tasks.

Maps every category id to its localized label, a display color and the
description the extraction prompt uses to teach the model the taxonomy.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Union


class EventCategory(str, Enum):
    personal = "personal"
    family = "family"
    clinic_private = "clinic_private"
    public_framework = "public_framework"
    study_group = "study_group"
    unknown = "unknown"


class TaskCategory(str, Enum):
    personal = "personal"
    home_family = "home_family"
    clinic_self = "clinic_self"
    clinic_secretary = "clinic_secretary"
    project_day_hospital = "project_day_hospital"
    unknown = "unknown"


@dataclass(frozen=True)
class CategoryInfo:
    label: str
    color: str
    description: str = ""


EVENT_CATEGORIES: Dict[EventCategory, CategoryInfo] = {
    EventCategory.personal: CategoryInfo(
        "אישי", "#3b82f6",
        "For your personal appointments, hobbies, self-time."),
    EventCategory.family: CategoryInfo(
        "משפחה ובית", "#22c55e",
        "For family events, kids' activities, school events, vacations, household appointments "
        "(e.g., doctor). This calendar is shared with your spouse."),
    EventCategory.clinic_private: CategoryInfo(
        "קליניקה פרטית", "#ef4444",
        "For appointments with patients, professional calls, writing letters in your private clinic. "
        "A virtual assistant has view/manage access."),
    EventCategory.public_framework: CategoryInfo(
        "מסגרת ציבורית", "#a855f7",
        "For work meetings, team meetings, and dedicated time for the \"day hospital\" project "
        "in your public setting job."),
    EventCategory.study_group: CategoryInfo(
        "קבוצת למידה", "#f97316",
        "For the bi-weekly learning group meetings. This calendar is shared with the group."),
    EventCategory.unknown: CategoryInfo("ללא קטגוריה", "#6b7280"),
}

TASK_CATEGORIES: Dict[TaskCategory, CategoryInfo] = {
    TaskCategory.personal: CategoryInfo(
        "אישי", "#3b82f6",
        "Things you need to do for yourself."),
    TaskCategory.home_family: CategoryInfo(
        "בית ומשפחה", "#22c55e",
        "Shared list with your spouse for the home. e.g., \"buy milk\", \"fix the faucet\"."),
    TaskCategory.clinic_self: CategoryInfo(
        "קליניקה (לביצועי)", "#ef4444",
        "Tasks for you to do related to the clinic. e.g., \"call patient X\", \"review medication for Y\"."),
    TaskCategory.clinic_secretary: CategoryInfo(
        "קליניקה (למזכירה)", "#ec4899",
        "Administrative tasks that can be delegated to a secretary."),
    TaskCategory.project_day_hospital: CategoryInfo(
        "פרויקט אשפוז יום", "#6366f1",
        "Tasks related to the day hospital project. e.g., \"write protocol\", \"contact procurement\"."),
    TaskCategory.unknown: CategoryInfo("ללא קטגוריה", "#6b7280"),
}


def event_category_info(category: Union[EventCategory, str]) -> CategoryInfo:
    try:
        return EVENT_CATEGORIES[EventCategory(category)]
    except ValueError:
        return EVENT_CATEGORIES[EventCategory.unknown]


def task_category_info(category: Union[TaskCategory, str]) -> CategoryInfo:
    try:
        return TASK_CATEGORIES[TaskCategory(category)]
    except ValueError:
        return TASK_CATEGORIES[TaskCategory.unknown]


def taxonomy_prompt_section() -> str:
    """Renders both category sets as the bullet lists embedded in the extraction prompt."""
    lines = ["**Event Categories:**"]
    for category, info in EVENT_CATEGORIES.items():
        if category is not EventCategory.unknown:
            lines.append(f"- '{category.value}': {info.description}")
    lines.append("")
    lines.append("**Task Categories:**")
    for category, info in TASK_CATEGORIES.items():
        if category is not TaskCategory.unknown:
            lines.append(f"- '{category.value}': {info.description}")
    return "\n".join(lines)
