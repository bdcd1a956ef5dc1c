"""Shared fixtures: demo settings and in-memory account / identity fakes."""

import threading
from typing import List, Optional

import pytest

from agenda_assistant.core.config import Settings
from agenda_assistant.core.errors import ListFetchError, RemoteWriteError
from agenda_assistant.features.analysis_service import AnalysisClient, DemoExtractionBackend
from agenda_assistant.features.auth import AuthOutcome
from agenda_assistant.features.models import Calendar, ExtractedEvent, ExtractedTask, TaskList, UserProfile
from agenda_assistant.features.session import Session


class FakeAccount:
    """Account client double that records writes and can be told to fail."""

    def __init__(self, calendars=None, task_lists=None):
        self.calendars: List[Calendar] = calendars if calendars is not None else [
            Calendar(id="me@example.com", summary="Personal"),
            Calendar(id="fam", summary="Family Calendar"),
        ]
        self.task_lists: List[TaskList] = task_lists if task_lists is not None else [
            TaskList(id="inbox", title="My Tasks"),
            TaskList(id="clinic", title="Clinic Tasks"),
        ]
        self.fail_lists = False
        self.fail_writes = False
        self.writes: List[tuple] = []
        # When set, list and write calls block until the event is released.
        self.hold: Optional[threading.Event] = None

    def _wait(self):
        if self.hold is not None:
            self.hold.wait(timeout=5)

    def list_calendars(self):
        self._wait()
        if self.fail_lists:
            raise ListFetchError("calendars unavailable")
        return self.calendars

    def list_task_lists(self):
        return self.task_lists

    def create_event(self, event: ExtractedEvent, calendar_id: str):
        self._wait()
        self.writes.append(("event", event.id, calendar_id))
        if self.fail_writes:
            raise RemoteWriteError("insert failed")
        return "http://calendar/link"

    def create_task(self, task: ExtractedTask, task_list_id: str):
        self._wait()
        self.writes.append(("task", task.id, task_list_id))
        if self.fail_writes:
            raise RemoteWriteError("insert failed")
        return "task-1"


class FakeIdentity:
    def __init__(self, outcome: Optional[AuthOutcome] = None, account: Optional[FakeAccount] = None):
        self.outcome = outcome or AuthOutcome.signed_in(UserProfile(name="Dana"))
        self.account = account or FakeAccount()
        self.signed_in = self.outcome.profile is not None
        self.sign_out_calls = 0

    def initialize(self):
        return self.outcome

    def sign_in_url(self):
        return None

    def complete_sign_in(self, code=None):
        self.signed_in = True
        return UserProfile(name="Dana")

    def account_client(self):
        return self.account if self.signed_in else None

    def current_profile(self):
        return UserProfile(name="Dana") if self.signed_in else None

    def sign_out(self):
        self.sign_out_calls += 1
        self.signed_in = False


@pytest.fixture
def demo_settings(tmp_path):
    return Settings(
        DEMO_MODE=True,
        GOOGLE_OAUTH_TOKENS_PATH=str(tmp_path / "tokens.json"),
        GOOGLE_CLIENT_SECRET_JSON_PATH=str(tmp_path / "client_secret.json"),
        _env_file=None,
    )


@pytest.fixture
def fake_account():
    return FakeAccount()


@pytest.fixture
def fake_identity(fake_account):
    return FakeIdentity(account=fake_account)


@pytest.fixture
def demo_analysis():
    return AnalysisClient(DemoExtractionBackend())


@pytest.fixture
def session(fake_identity, demo_analysis):
    return Session(identity=fake_identity, analysis=demo_analysis)


@pytest.fixture
def make_session(fake_account, demo_analysis):
    """Builds a session whose identity resolves to the given outcome."""
    def _make(outcome: Optional[AuthOutcome] = None) -> Session:
        return Session(identity=FakeIdentity(outcome=outcome, account=fake_account), analysis=demo_analysis)
    return _make
