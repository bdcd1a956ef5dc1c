"""Pydantic models for extracted items, destinations and the signed-in user."""

from enum import Enum
from typing import Any, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from agenda_assistant.features.categories import EventCategory, TaskCategory


class ItemType(str, Enum):
    event = "event"
    task = "task"


def _coerce_category(value: Any, enum_cls: type[Enum]) -> Any:
    # The model occasionally invents categories; those become "unknown".
    if value is None:
        return enum_cls("unknown")
    if isinstance(value, str) and value not in {member.value for member in enum_cls}:
        return enum_cls("unknown")
    return value


# --- Schemas for Structured Data Extraction (what the LLM returns) ---

class EventDraft(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    title: str = Field(..., min_length=1, description="The title or summary of the event.")
    start_time: Optional[str] = Field(default=None, alias="startTime",
                                      description="The start date and time in ISO 8601 format. Null if not found.")
    end_time: Optional[str] = Field(default=None, alias="endTime",
                                    description="The end date and time in ISO 8601 format. Null if not found.")
    description: Optional[str] = Field(default=None, description="A brief description of the event. Null if not found.")
    location: Optional[str] = Field(default=None, description="The location of the event. Null if not found.")
    category: EventCategory = Field(default=EventCategory.unknown, description="The category of the event.")

    @field_validator("category", mode="before")
    @classmethod
    def _unknown_category(cls, value: Any) -> Any:
        return _coerce_category(value, EventCategory)


class TaskDraft(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    title: str = Field(..., min_length=1, description="The title or content of the task.")
    due_date: Optional[str] = Field(default=None, alias="dueDate",
                                    description="The due date in ISO 8601 format (date only). Null if not found.")
    category: TaskCategory = Field(default=TaskCategory.unknown, description="The category of the task.")

    @field_validator("category", mode="before")
    @classmethod
    def _unknown_category(cls, value: Any) -> Any:
        return _coerce_category(value, TaskCategory)


class ExtractionPayload(BaseModel):
    """Top-level object the extraction service must return. Both arrays are required."""
    events: list[EventDraft] = Field(..., description="A list of potential calendar events found in the text.")
    tasks: list[TaskDraft] = Field(..., description="A list of potential tasks found in the text.")


# --- Items as held by the session ---

class ExtractedEvent(EventDraft):
    id: str

    def with_category(self, category: Union[EventCategory, str]) -> "ExtractedEvent":
        return self.model_copy(update={"category": EventCategory(category)})


class ExtractedTask(TaskDraft):
    id: str

    def with_category(self, category: Union[TaskCategory, str]) -> "ExtractedTask":
        return self.model_copy(update={"category": TaskCategory(category)})


class AnalysisResult(BaseModel):
    """One extraction call's output. Treated as an immutable snapshot."""
    model_config = ConfigDict(frozen=True)

    events: Tuple[ExtractedEvent, ...] = ()
    tasks: Tuple[ExtractedTask, ...] = ()
    mode: Literal["live", "demo"] = "live"

    def find(self, item_id: str, item_type: ItemType) -> Union[ExtractedEvent, ExtractedTask]:
        items = self.events if item_type is ItemType.event else self.tasks
        for item in items:
            if item.id == item_id:
                return item
        raise KeyError(item_id)

    def with_category(self, item_id: str, item_type: ItemType, category: str) -> "AnalysisResult":
        """Returns a new snapshot with one item's category replaced.

        Raises:
            KeyError: if no item of that type has the id.
            ValueError: if the category is not in that item type's set.
        """
        self.find(item_id, item_type)
        if item_type is ItemType.event:
            events = tuple(e.with_category(category) if e.id == item_id else e for e in self.events)
            return self.model_copy(update={"events": events})
        tasks = tuple(t.with_category(category) if t.id == item_id else t for t in self.tasks)
        return self.model_copy(update={"tasks": tasks})

    def item_ids(self) -> list[str]:
        return [e.id for e in self.events] + [t.id for t in self.tasks]


# --- Destinations (read-only, sourced from the Google account) ---

class Calendar(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    summary: str = ""
    background_color: Optional[str] = Field(default=None, alias="backgroundColor")

    @property
    def display_name(self) -> str:
        return self.summary


class TaskList(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""

    @property
    def display_name(self) -> str:
        return self.title


class UserProfile(BaseModel):
    name: str
    email: Optional[str] = None
    picture: Optional[str] = None
