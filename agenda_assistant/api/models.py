"""Pydantic models for API request and response bodies.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from agenda_assistant.features.models import Calendar, ExtractedEvent, ExtractedTask, ItemType, TaskList, UserProfile
from agenda_assistant.features.session import Session


class AnalyzeRequest(BaseModel):
    """Request model for submitting free text for extraction.
    """
    text: str = Field(..., description="The free text to analyze.")


class CategoryUpdateRequest(BaseModel):
    category: str = Field(..., description="New category id for the item.")


class ConfirmRequest(BaseModel):
    destination_id: Optional[str] = Field(
        default=None,
        description="Calendar or task list id. Events default to 'primary'; tasks require one."
    )


class EventItem(BaseModel):
    event: ExtractedEvent
    confirmed: bool = False
    error: Optional[str] = None
    suggested_destination: Optional[str] = None


class TaskItem(BaseModel):
    task: ExtractedTask
    confirmed: bool = False
    error: Optional[str] = None
    suggested_destination: Optional[str] = None


class AnalysisResponse(BaseModel):
    mode: str
    events: List[EventItem]
    tasks: List[TaskItem]


class SessionResponse(BaseModel):
    state: str
    view: str
    demo_mode: bool
    profile: Optional[UserProfile] = None
    config_error: Optional[str] = None
    notice: Optional[str] = None
    calendars: List[Calendar] = []
    task_lists: List[TaskList] = []
    confirmed_items: List[str] = []
    failed_items: Dict[str, str] = {}


class SignInResponse(BaseModel):
    login_url: Optional[str] = None
    session: Optional[SessionResponse] = None


class ConfirmResponse(BaseModel):
    item_id: str
    confirmed: bool
    destination_id: Optional[str] = None


def build_session_response(session: Session, demo_mode: bool) -> SessionResponse:
    return SessionResponse(
        state=session.state.value,
        view=session.view.value,
        demo_mode=demo_mode,
        profile=session.profile,
        config_error=session.config_error,
        notice=session.notice,
        calendars=list(session.calendars),
        task_lists=list(session.task_lists),
        confirmed_items=sorted(session.confirmed_items),
        failed_items=dict(session.failed_items),
    )


def build_analysis_response(session: Session) -> Optional[AnalysisResponse]:
    """Current result with per-item confirmation state and suggested destinations."""
    result = session.result
    if result is None:
        return None
    confirmed = session.confirmed_items
    return AnalysisResponse(
        mode=result.mode,
        events=[
            EventItem(
                event=event,
                confirmed=event.id in confirmed,
                error=session.failed_items.get(event.id),
                suggested_destination=session.suggested_destination(event.id, ItemType.event),
            )
            for event in result.events
        ],
        tasks=[
            TaskItem(
                task=task,
                confirmed=task.id in confirmed,
                error=session.failed_items.get(task.id),
                suggested_destination=session.suggested_destination(task.id, ItemType.task),
            )
            for task in result.tasks
        ],
    )
