"""Service layer for extracting events and tasks from free text.

`AnalysisClient` is the single entry point. It delegates the actual
extraction to an `ExtractionBackend` selected once at startup (OpenAI or the
offline demo fixtures), validates the returned payload and stamps every item
with a fresh identifier.
"""

import json
import logging
import time
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Dict, Literal, Optional

from openai import OpenAI
from pydantic import ValidationError

from agenda_assistant.core.config import Settings
from agenda_assistant.core.errors import ConfigurationError, ExtractionError
from agenda_assistant.features.categories import taxonomy_prompt_section
from agenda_assistant.features.models import (
    AnalysisResult,
    ExtractedEvent,
    ExtractedTask,
    ExtractionPayload,
)
from agenda_assistant.interfaces.extraction_interface import ExtractionBackend

logger = logging.getLogger(__name__)

EXTRACTION_FUNCTION_NAME = "record_events_and_tasks"


def build_extraction_prompt(text: str, current_year: int) -> str:
    """Builds the instruction text sent with every live extraction request."""
    return f"""Analyze the following text (it is usually written in Hebrew). Extract all potential calendar events and tasks.
The current year is {current_year}.

For each item, you MUST categorize it into one of the specified categories based on the context.

{taxonomy_prompt_section()}

If a category is unclear from the text, use 'unknown'.

For each event, provide: title, startTime, endTime, description, location, and category.
For each task, provide: title, dueDate, and category.

Use ISO 8601 format for all dates and times. If information like location, description, or date is missing, return null for that field.
Respond ONLY by calling the {EXTRACTION_FUNCTION_NAME} function with data matching its schema.

Text to analyze:
---
{text}
---
"""


class OpenAIExtractionBackend:
    """Live extraction using an OpenAI chat model with a forced function call."""

    mode: Literal["live", "demo"] = "live"

    def __init__(self, settings: Settings):
        self.model_name = settings.OPENAI_CHAT_MODEL_NAME
        self.client: Optional[OpenAI] = OpenAI(api_key=settings.OPENAI_API_KEY) if settings.OPENAI_API_KEY else None
        if self.client is None:
            logger.warning("OpenAI API key is not configured. Live extraction will fail with a configuration error.")

    def extract(self, text: str, current_year: int) -> Dict[str, Any]:
        if self.client is None:
            raise ConfigurationError("OpenAI API is not configured. The OPENAI_API_KEY environment variable is missing.")

        tools = [
            {
                "type": "function",
                "function": {
                    "name": EXTRACTION_FUNCTION_NAME,
                    "description": "Record the calendar events and tasks found in the text.",
                    "parameters": ExtractionPayload.model_json_schema(by_alias=True),
                }
            }
        ]
        messages = [
            {"role": "system", "content": "You are an expert assistant that extracts calendar events and tasks from text."},
            {"role": "user", "content": build_extraction_prompt(text, current_year)},
        ]

        logger.debug(f"Sending extraction request to OpenAI. Model: {self.model_name}, text length: {len(text)}")
        try:
            response = self.client.chat.completions.create(
                model=self.model_name,
                messages=messages,
                tools=tools,
                tool_choice={"type": "function", "function": {"name": EXTRACTION_FUNCTION_NAME}}
            )
        except Exception as e:
            logger.error(f"Error calling OpenAI API for extraction: {e}", exc_info=True)
            raise ExtractionError(f"Failed to analyze text with OpenAI API: {e}") from e

        message = response.choices[0].message
        if not message.tool_calls or message.tool_calls[0].function.name != EXTRACTION_FUNCTION_NAME:
            logger.warning(f"OpenAI did not return the expected function call. Response message: {message}")
            raise ExtractionError("OpenAI did not return the expected function call.")

        arguments = message.tool_calls[0].function.arguments
        logger.debug(f"OpenAI returned function call with arguments: {arguments}")
        try:
            return json.loads(arguments)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse JSON arguments from OpenAI: {e}. Raw args: {arguments}")
            raise ExtractionError("Invalid JSON received from OpenAI.") from e


class DemoExtractionBackend:
    """Offline extraction returning a fixed example of two events and two tasks."""

    mode: Literal["live", "demo"] = "demo"

    def __init__(self, latency_seconds: float = 0.0, now: Callable[[], datetime] = lambda: datetime.now(timezone.utc)):
        self.latency_seconds = latency_seconds
        self._now = now

    def extract(self, text: str, current_year: int) -> Dict[str, Any]:
        logger.info("DEMO MODE: Returning mock analysis result.")
        if self.latency_seconds:
            time.sleep(self.latency_seconds)
        now = self._now()
        in_two_days = now + timedelta(days=2)
        in_three_days = now + timedelta(days=3)
        return {
            "events": [
                {
                    "title": "פגישה עם דני",
                    "startTime": in_two_days.isoformat(),
                    "endTime": (in_two_days + timedelta(hours=1)).isoformat(),
                    "description": "שיחה על הפרויקט החדש",
                    "location": "בית קפה במרכז",
                    "category": "public_framework",
                },
                {
                    "title": "חוג כדורגל של הילד",
                    "startTime": in_three_days.isoformat(),
                    "endTime": (in_three_days + timedelta(minutes=90)).isoformat(),
                    "description": None,
                    "location": "מגרש עירוני",
                    "category": "family",
                },
            ],
            "tasks": [
                {
                    "title": "להכין את המצגת",
                    "dueDate": (now + timedelta(days=1)).date().isoformat(),
                    "category": "project_day_hospital",
                },
                {
                    "title": "לקנות חלב",
                    "dueDate": None,
                    "category": "home_family",
                },
            ],
        }


class AnalysisClient:
    """Turns text into an `AnalysisResult` through the configured backend."""

    def __init__(
        self,
        backend: ExtractionBackend,
        clock: Callable[[], float] = time.time,
        today: Callable[[], date] = date.today,
    ):
        self.backend = backend
        self._clock = clock
        self._today = today

    @property
    def mode(self) -> str:
        return self.backend.mode

    def analyze(self, text: str) -> AnalysisResult:
        """Extracts events and tasks from text.

        Args:
            text: Non-empty free text. Callers validate this first.

        Returns:
            AnalysisResult with fresh, unique ids on every item.

        Raises:
            ValueError: If text is empty or whitespace.
            ConfigurationError: If the extraction service is not configured.
            ExtractionError: If the call fails or the payload has the wrong shape.
        """
        if not text or not text.strip():
            raise ValueError("Text to analyze must not be empty")

        raw = self.backend.extract(text, current_year=self._today().year)
        payload = self._validate(raw)

        stamp = int(self._clock() * 1000)
        events = tuple(
            ExtractedEvent(id=f"evt-{stamp}-{index}", **draft.model_dump())
            for index, draft in enumerate(payload.events)
        )
        tasks = tuple(
            ExtractedTask(id=f"tsk-{stamp}-{index}", **draft.model_dump())
            for index, draft in enumerate(payload.tasks)
        )
        logger.info(f"Extracted {len(events)} events and {len(tasks)} tasks ({self.backend.mode} mode).")
        return AnalysisResult(events=events, tasks=tasks, mode=self.backend.mode)

    @staticmethod
    def _validate(raw: Any) -> ExtractionPayload:
        if not isinstance(raw, dict):
            raise ExtractionError(f"Invalid JSON structure received from API: expected an object, got {type(raw).__name__}")
        for key in ("events", "tasks"):
            if not isinstance(raw.get(key), list):
                raise ExtractionError(f"Invalid JSON structure received from API: '{key}' must be an array")
        try:
            return ExtractionPayload.model_validate(raw)
        except ValidationError as e:
            logger.error(f"Extraction payload failed validation: {e}")
            raise ExtractionError(f"Invalid item in extraction payload: {e}") from e


def build_analysis_client(settings: Settings, demo_mode: bool) -> AnalysisClient:
    if demo_mode:
        return AnalysisClient(DemoExtractionBackend(latency_seconds=settings.DEMO_LATENCY_SECONDS))
    return AnalysisClient(OpenAIExtractionBackend(settings))
