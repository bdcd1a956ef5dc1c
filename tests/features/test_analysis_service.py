"""Unit tests for the analysis service."""

import json
from datetime import date, datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from openai import OpenAI

from agenda_assistant.core.config import Settings
from agenda_assistant.core.errors import ConfigurationError, ExtractionError
from agenda_assistant.features.analysis_service import (
    EXTRACTION_FUNCTION_NAME,
    AnalysisClient,
    DemoExtractionBackend,
    OpenAIExtractionBackend,
    build_analysis_client,
    build_extraction_prompt,
)
from agenda_assistant.features.categories import EventCategory, TaskCategory
from agenda_assistant.interfaces.extraction_interface import ExtractionBackend


@pytest.fixture
def mock_openai_client():
    with patch('agenda_assistant.features.analysis_service.OpenAI') as mock_client_constructor:
        mock_instance = MagicMock(spec=OpenAI)
        mock_instance.chat = MagicMock()
        mock_client_constructor.return_value = mock_instance
        yield mock_instance


@pytest.fixture
def openai_settings():
    return Settings(OPENAI_API_KEY="fake_api_key", OPENAI_CHAT_MODEL_NAME="gpt-test", _env_file=None)


class MockToolCallFunction:
    def __init__(self, name, arguments_json_string):
        self.name = name
        self.arguments = arguments_json_string


class MockToolCall:
    def __init__(self, function_name, arguments_json_string):
        self.function = MockToolCallFunction(function_name, arguments_json_string)


class MockMessage:
    def __init__(self, tool_calls=None):
        self.tool_calls = tool_calls if tool_calls else []


class MockChoice:
    def __init__(self, message):
        self.message = message


class MockChatCompletion:
    def __init__(self, choices):
        self.choices = choices


def _completion(arguments, function_name=EXTRACTION_FUNCTION_NAME):
    return MockChatCompletion([MockChoice(MockMessage([MockToolCall(function_name, arguments)]))])


class StaticBackend:
    mode = "live"

    def __init__(self, payload):
        self.payload = payload
        self.calls = []

    def extract(self, text, current_year):
        self.calls.append((text, current_year))
        return self.payload


# --- Demo backend ---

def test_demo_analysis_returns_two_events_and_two_tasks():
    client = AnalysisClient(DemoExtractionBackend())

    result = client.analyze("anything at all")

    assert result.mode == "demo"
    assert len(result.events) == 2
    assert len(result.tasks) == 2
    assert [e.category for e in result.events] == [EventCategory.public_framework, EventCategory.family]
    assert [t.category for t in result.tasks] == [TaskCategory.project_day_hospital, TaskCategory.home_family]
    ids = result.item_ids()
    assert len(ids) == len(set(ids)) == 4


def test_demo_times_are_relative_to_now():
    now = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)
    client = AnalysisClient(DemoExtractionBackend(now=lambda: now))

    result = client.analyze("text")

    assert result.events[0].start_time == "2025-03-03T09:00:00+00:00"
    assert result.events[0].end_time == "2025-03-03T10:00:00+00:00"
    assert result.events[1].end_time == "2025-03-04T10:30:00+00:00"
    assert result.tasks[0].due_date == "2025-03-02"
    assert result.tasks[1].due_date is None


def test_ids_are_fresh_per_analysis():
    ticks = iter([1000.0, 1000.5])
    client = AnalysisClient(DemoExtractionBackend(), clock=lambda: next(ticks))

    first = client.analyze("text")
    second = client.analyze("text")

    assert first.events[0].id == "evt-1000000-0"
    assert second.events[0].id == "evt-1000500-0"
    assert second.tasks[1].id == "tsk-1000500-1"
    assert not set(first.item_ids()) & set(second.item_ids())


# --- Validation ---

@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_analyze_rejects_empty_text(text):
    backend = StaticBackend({"events": [], "tasks": []})
    with pytest.raises(ValueError):
        AnalysisClient(backend).analyze(text)
    assert backend.calls == []


def test_analyze_passes_current_year():
    backend = StaticBackend({"events": [], "tasks": []})
    AnalysisClient(backend, today=lambda: date(2031, 6, 1)).analyze("hello")
    assert backend.calls == [("hello", 2031)]


def test_empty_arrays_are_a_valid_result():
    result = AnalysisClient(StaticBackend({"events": [], "tasks": []})).analyze("nothing here")
    assert result.events == ()
    assert result.tasks == ()
    assert result.mode == "live"


@pytest.mark.parametrize("payload", [
    {"events": []},
    {"tasks": []},
    {"events": {}, "tasks": []},
    {"events": [], "tasks": "none"},
    [],
])
def test_missing_or_malformed_arrays_raise_extraction_error(payload):
    with pytest.raises(ExtractionError):
        AnalysisClient(StaticBackend(payload)).analyze("text")


def test_item_without_title_raises_extraction_error():
    payload = {"events": [{"startTime": "2025-01-01T10:00:00"}], "tasks": []}
    with pytest.raises(ExtractionError):
        AnalysisClient(StaticBackend(payload)).analyze("text")


def test_unknown_category_is_coerced():
    payload = {
        "events": [{"title": "Dinner", "category": "party"}],
        "tasks": [{"title": "Buy milk", "category": None}],
    }
    result = AnalysisClient(StaticBackend(payload)).analyze("text")
    assert result.events[0].category is EventCategory.unknown
    assert result.tasks[0].category is TaskCategory.unknown


# --- OpenAI backend ---

def test_openai_extraction_success(mock_openai_client, openai_settings):
    arguments = json.dumps({
        "events": [{"title": "Team meeting", "startTime": "2025-05-01T10:00:00",
                    "endTime": None, "description": None, "location": "Room 4",
                    "category": "public_framework"}],
        "tasks": [{"title": "Write protocol", "dueDate": "2025-05-03", "category": "project_day_hospital"}],
    })
    mock_openai_client.chat.completions.create.return_value = _completion(arguments)

    client = AnalysisClient(OpenAIExtractionBackend(openai_settings))
    result = client.analyze("Team meeting on May 1st at 10, write the protocol by the 3rd")

    assert client.mode == "live"
    assert result.events[0].title == "Team meeting"
    assert result.events[0].location == "Room 4"
    assert result.events[0].end_time is None
    assert result.tasks[0].due_date == "2025-05-03"

    call_kwargs = mock_openai_client.chat.completions.create.call_args.kwargs
    assert call_kwargs["model"] == "gpt-test"
    assert call_kwargs["tool_choice"] == {"type": "function", "function": {"name": EXTRACTION_FUNCTION_NAME}}
    parameters = call_kwargs["tools"][0]["function"]["parameters"]
    assert set(parameters["required"]) == {"events", "tasks"}


def test_openai_api_failure_raises_extraction_error(mock_openai_client, openai_settings):
    mock_openai_client.chat.completions.create.side_effect = Exception("API connection error")

    with pytest.raises(ExtractionError):
        OpenAIExtractionBackend(openai_settings).extract("text", 2025)


def test_openai_without_tool_call_raises_extraction_error(mock_openai_client, openai_settings):
    mock_openai_client.chat.completions.create.return_value = MockChatCompletion([MockChoice(MockMessage())])

    with pytest.raises(ExtractionError):
        OpenAIExtractionBackend(openai_settings).extract("text", 2025)


def test_openai_wrong_function_raises_extraction_error(mock_openai_client, openai_settings):
    mock_openai_client.chat.completions.create.return_value = _completion("{}", function_name="something_else")

    with pytest.raises(ExtractionError):
        OpenAIExtractionBackend(openai_settings).extract("text", 2025)


def test_openai_invalid_json_raises_extraction_error(mock_openai_client, openai_settings):
    mock_openai_client.chat.completions.create.return_value = _completion("{not json")

    with pytest.raises(ExtractionError):
        OpenAIExtractionBackend(openai_settings).extract("text", 2025)


def test_openai_without_api_key_raises_configuration_error():
    backend = OpenAIExtractionBackend(Settings(OPENAI_API_KEY=None, _env_file=None))

    with pytest.raises(ConfigurationError):
        AnalysisClient(backend).analyze("text")


def test_prompt_lists_taxonomy_and_year():
    prompt = build_extraction_prompt("שלום", 2026)

    assert "The current year is 2026." in prompt
    assert "'clinic_secretary'" in prompt
    assert "'study_group'" in prompt
    assert "שלום" in prompt


def test_build_analysis_client_selects_backend(openai_settings):
    assert build_analysis_client(openai_settings, demo_mode=True).mode == "demo"
    with patch('agenda_assistant.features.analysis_service.OpenAI'):
        assert build_analysis_client(openai_settings, demo_mode=False).mode == "live"


def test_backends_satisfy_protocol(openai_settings):
    assert isinstance(DemoExtractionBackend(), ExtractionBackend)
    with patch('agenda_assistant.features.analysis_service.OpenAI'):
        assert isinstance(OpenAIExtractionBackend(openai_settings), ExtractionBackend)
