"""Service classes for interacting with Google Calendar and Google Tasks APIs."""

import logging
import time
from typing import Any, Dict, List, Optional

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build, Resource
from googleapiclient.errors import HttpError

from agenda_assistant.core.errors import ListFetchError, RemoteWriteError
from agenda_assistant.features.models import Calendar, ExtractedEvent, ExtractedTask, TaskList

logger = logging.getLogger(__name__)


def build_event_body(event: ExtractedEvent, timezone_name: str) -> Dict[str, Any]:
    """Maps an extracted event onto a Calendar API event resource.

    A missing end time becomes the start time. None-valued fields are dropped.
    """
    event_body = {
        'summary': event.title,
        'location': event.location,
        'description': event.description,
        'start': {
            'dateTime': event.start_time,
            'timeZone': timezone_name,
        },
        'end': {
            'dateTime': event.end_time or event.start_time,
            'timeZone': timezone_name,
        },
    }
    return {k: v for k, v in event_body.items() if v is not None}


def build_task_body(task: ExtractedTask) -> Dict[str, Any]:
    """Maps an extracted task onto a Tasks API task resource.

    The Tasks API only stores the date part of `due`, given as RFC 3339 at
    midnight UTC.
    """
    task_body: Dict[str, Any] = {'title': task.title}
    if task.due_date:
        task_body['due'] = f"{task.due_date.split('T')[0]}T00:00:00.000Z"
    return task_body


class GoogleAccountClient:
    """Calendar and Tasks calls for one set of authorized credentials."""

    def __init__(self, credentials: Credentials, timezone_name: str = "Asia/Jerusalem"):
        self.credentials = credentials
        self.timezone_name = timezone_name

    def _service(self, name: str, version: str) -> Resource:
        return build(name, version, credentials=self.credentials)

    def list_calendars(self) -> List[Calendar]:
        try:
            response = self._service('calendar', 'v3').calendarList().list().execute()
        except HttpError as error:
            logger.error(f"An HTTP error occurred while listing calendars: {error}", exc_info=True)
            raise ListFetchError(f"Calendar list request failed: {error}") from error
        except Exception as e:
            logger.error(f"An unexpected error occurred while listing calendars: {e}", exc_info=True)
            raise ListFetchError(f"Calendar list request failed: {e}") from e
        items = (response or {}).get('items') or []
        logger.info(f"Fetched {len(items)} calendars.")
        return [Calendar.model_validate(item) for item in items]

    def list_task_lists(self) -> List[TaskList]:
        try:
            response = self._service('tasks', 'v1').tasklists().list().execute()
        except HttpError as error:
            logger.error(f"An HTTP error occurred while listing task lists: {error}", exc_info=True)
            raise ListFetchError(f"Task list request failed: {error}") from error
        except Exception as e:
            logger.error(f"An unexpected error occurred while listing task lists: {e}", exc_info=True)
            raise ListFetchError(f"Task list request failed: {e}") from e
        items = (response or {}).get('items') or []
        logger.info(f"Fetched {len(items)} task lists.")
        return [TaskList.model_validate(item) for item in items]

    def create_event(self, event: ExtractedEvent, calendar_id: str = 'primary') -> Optional[str]:
        """Adds an event to the given calendar.

        Returns:
            The HTML link to the created event.

        Raises:
            RemoteWriteError: If the event has no start time or the API call fails.
        """
        if not event.start_time:
            raise RemoteWriteError(f"Event '{event.title}' has no start time",
                                   user_message="לא ניתן להוסיף אירוע ללא מועד התחלה.")
        event_body = build_event_body(event, self.timezone_name)
        logger.debug(f"Attempting to create Google Calendar event in '{calendar_id}': {event_body}")
        try:
            created_event = self._service('calendar', 'v3').events().insert(
                calendarId=calendar_id,
                body=event_body
            ).execute()
        except HttpError as error:
            logger.error(f"An HTTP error occurred while creating Google Calendar event: {error}", exc_info=True)
            raise RemoteWriteError(f"Calendar insert failed: {error}") from error
        except Exception as e:
            logger.error(f"An unexpected error occurred while creating Google Calendar event: {e}", exc_info=True)
            raise RemoteWriteError(f"Calendar insert failed: {e}") from e

        event_link = created_event.get('htmlLink')
        logger.info(f"Successfully created Google Calendar event. ID: {created_event.get('id')}, Link: {event_link}")
        return event_link

    def create_task(self, task: ExtractedTask, task_list_id: str) -> Optional[str]:
        """Adds a task to the given task list.

        Returns:
            The ID of the created task.

        Raises:
            RemoteWriteError: If no task list was given or the API call fails.
        """
        if not task_list_id:
            raise RemoteWriteError("Task list ID is required to create a task.",
                                   user_message="יש לבחור רשימת משימות.")
        task_body = build_task_body(task)
        logger.debug(f"Attempting to create Google Task in '{task_list_id}': {task_body}")
        try:
            created_task = self._service('tasks', 'v1').tasks().insert(
                tasklist=task_list_id,
                body=task_body
            ).execute()
        except HttpError as error:
            logger.error(f"An HTTP error occurred while creating Google Task: {error}", exc_info=True)
            raise RemoteWriteError(f"Task insert failed: {error}") from error
        except Exception as e:
            logger.error(f"An unexpected error occurred while creating Google Task: {e}", exc_info=True)
            raise RemoteWriteError(f"Task insert failed: {e}") from e

        task_id = created_task.get('id')
        logger.info(f"Successfully created Google Task. ID: {task_id}")
        return task_id


DEMO_CALENDARS = [
    Calendar(id='personal@demo.com', summary='אישי', background_color='#7986cb'),
    Calendar(id='family_demo', summary='משפחה', background_color='#33b679'),
    Calendar(id='clinic_demo', summary='קליניקה', background_color='#d50000'),
    Calendar(id='work_demo', summary='עבודה (מסגרת ציבורית)', background_color='#8e24aa'),
    Calendar(id='study_demo', summary='קבוצת למידה', background_color='#e67c73'),
]

DEMO_TASK_LISTS = [
    TaskList(id='personal_tasks', title='אישי'),
    TaskList(id='family_tasks', title='בית ומשפחה'),
    TaskList(id='clinic_tasks', title='קליניקה'),
    TaskList(id='project_tasks', title='פרויקט אשפוז יום'),
]


class DemoAccountClient:
    """Fixture-backed account. Writes are logged and remembered, never sent."""

    def __init__(self, latency_seconds: float = 0.0):
        self.latency_seconds = latency_seconds
        self.created: List[Dict[str, Any]] = []

    def _pause(self) -> None:
        if self.latency_seconds:
            time.sleep(self.latency_seconds)

    def list_calendars(self) -> List[Calendar]:
        logger.info("DEMO MODE: Returning mock calendar lists.")
        self._pause()
        return list(DEMO_CALENDARS)

    def list_task_lists(self) -> List[TaskList]:
        logger.info("DEMO MODE: Returning mock task lists.")
        self._pause()
        return list(DEMO_TASK_LISTS)

    def create_event(self, event: ExtractedEvent, calendar_id: str = 'primary') -> Optional[str]:
        logger.info(f"DEMO MODE: Pretending to add event \"{event.title}\" to calendar \"{calendar_id}\"")
        self._pause()
        self.created.append({'type': 'event', 'id': event.id, 'destination': calendar_id})
        return None

    def create_task(self, task: ExtractedTask, task_list_id: str) -> Optional[str]:
        if not task_list_id:
            raise RemoteWriteError("Task list ID is required to create a task.",
                                   user_message="יש לבחור רשימת משימות.")
        logger.info(f"DEMO MODE: Pretending to add task \"{task.title}\" to list \"{task_list_id}\"")
        self._pause()
        self.created.append({'type': 'task', 'id': task.id, 'destination': task_list_id})
        return None
