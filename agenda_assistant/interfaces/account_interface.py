"""Interface definitions for the user's external account (calendars, task lists, identity).
"""

from typing import List, Optional, Protocol, runtime_checkable

from agenda_assistant.features.auth import AuthOutcome
from agenda_assistant.features.models import Calendar, ExtractedEvent, ExtractedTask, TaskList, UserProfile


@runtime_checkable
class AccountClient(Protocol):
    """CRUD calls against the account that receives confirmed items."""

    def list_calendars(self) -> List[Calendar]:
        """Raises ListFetchError on failure."""
        ...

    def list_task_lists(self) -> List[TaskList]:
        """Raises ListFetchError on failure."""
        ...

    def create_event(self, event: ExtractedEvent, calendar_id: str) -> Optional[str]:
        """Creates the event and returns its link or id. Raises RemoteWriteError on failure."""
        ...

    def create_task(self, task: ExtractedTask, task_list_id: str) -> Optional[str]:
        """Creates the task and returns its id. Raises RemoteWriteError on failure."""
        ...


@runtime_checkable
class IdentityProvider(Protocol):
    """Sign-in / sign-out against the identity provider.

    `initialize` resolves once readiness is known; the returned outcome holds
    either a profile (signed in), None (signed out) or a configuration error.
    """

    def initialize(self) -> AuthOutcome:
        ...

    def sign_in_url(self) -> Optional[str]:
        """URL the browser must visit to sign in, or None when sign-in completes locally."""
        ...

    def complete_sign_in(self, code: Optional[str] = None) -> UserProfile:
        """Finishes sign-in (exchanging the OAuth code when there is one) and returns the profile."""
        ...

    def account_client(self) -> Optional[AccountClient]:
        """Account client for the signed-in user, or None when signed out."""
        ...

    def sign_out(self) -> None:
        ...

    def current_profile(self) -> Optional[UserProfile]:
        ...
