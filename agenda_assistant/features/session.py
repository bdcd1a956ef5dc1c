"""Session state: sign-in readiness, destination lists, the current analysis and confirmations.

The session is a small state machine:

    UNINITIALIZED -> INITIALIZING -> READY_SIGNED_OUT | READY_SIGNED_IN | CONFIG_ERROR
    READY_SIGNED_OUT <-> READY_SIGNED_IN

CONFIG_ERROR is terminal. All state lives on one event loop; blocking
provider calls run in the thread pool and their results are applied back on
the loop, so no locking is needed.
"""

import asyncio
import logging
from enum import Enum
from typing import Dict, FrozenSet, Optional, Set, Tuple, Union

from fastapi.concurrency import run_in_threadpool

from agenda_assistant.core.errors import (
    ConfigurationError,
    InvalidTransitionError,
    ListFetchError,
    NotSignedInError,
    RemoteWriteError,
    SessionNotReadyError,
)
from agenda_assistant.features.analysis_service import AnalysisClient
from agenda_assistant.features.auth import AuthOutcome
from agenda_assistant.features.matcher import PRIMARY_CALENDAR_ID, select_default_calendar, select_default_task_list
from agenda_assistant.features.models import (
    AnalysisResult,
    Calendar,
    ExtractedEvent,
    ExtractedTask,
    ItemType,
    TaskList,
    UserProfile,
)
from agenda_assistant.interfaces.account_interface import IdentityProvider

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY_SIGNED_OUT = "ready_signed_out"
    READY_SIGNED_IN = "ready_signed_in"
    CONFIG_ERROR = "config_error"


class SessionView(str, Enum):
    """Which surface the UI shows for the current state."""
    loading = "loading"
    config_error = "config_error"
    signed_out = "signed_out"
    workspace = "workspace"


READY_STATES = (SessionState.READY_SIGNED_OUT, SessionState.READY_SIGNED_IN)


class Session:
    def __init__(self, identity: IdentityProvider, analysis: AnalysisClient):
        self.identity = identity
        self.analysis = analysis
        self.state = SessionState.UNINITIALIZED
        self.profile: Optional[UserProfile] = None
        self.config_error: Optional[str] = None
        self.notice: Optional[str] = None
        self.calendars: Tuple[Calendar, ...] = ()
        self.task_lists: Tuple[TaskList, ...] = ()
        self.result: Optional[AnalysisResult] = None
        self.failed_items: Dict[str, str] = {}
        self._confirmed: Set[str] = set()
        # Bumped on sign-out; awaited work started under an older value is discarded.
        self._generation = 0

    # --- Readiness ---

    @property
    def is_ready(self) -> bool:
        return self.state in READY_STATES

    @property
    def is_signed_in(self) -> bool:
        return self.state is SessionState.READY_SIGNED_IN

    @property
    def view(self) -> SessionView:
        if self.state is SessionState.CONFIG_ERROR:
            return SessionView.config_error
        if not self.is_ready:
            return SessionView.loading
        if self.is_signed_in:
            return SessionView.workspace
        return SessionView.signed_out

    @property
    def confirmed_items(self) -> FrozenSet[str]:
        return frozenset(self._confirmed)

    def _transition(self, allowed_from: Tuple[SessionState, ...], target: SessionState) -> None:
        if self.state not in allowed_from:
            raise InvalidTransitionError(f"Cannot move from {self.state.value} to {target.value}")
        logger.info(f"Session state: {self.state.value} -> {target.value}")
        self.state = target

    def _require_ready(self) -> None:
        if self.state is SessionState.CONFIG_ERROR:
            raise ConfigurationError(self.config_error or "Session is misconfigured")
        if not self.is_ready:
            raise SessionNotReadyError(f"Session is {self.state.value}")

    def begin_initialization(self) -> None:
        self._transition((SessionState.UNINITIALIZED,), SessionState.INITIALIZING)

    async def initialize(self) -> None:
        """Runs the identity provider's initialization and applies its outcome."""
        self.begin_initialization()
        try:
            outcome = await run_in_threadpool(self.identity.initialize)
        except Exception as e:
            logger.error(f"Identity provider initialization failed: {e}", exc_info=True)
            outcome = AuthOutcome.failed(str(e))
        await self.resolve(outcome)

    async def resolve(self, outcome: AuthOutcome) -> None:
        if outcome.is_pending:
            raise InvalidTransitionError("Cannot resolve the session with a pending auth outcome")
        if outcome.config_error is not None:
            self._transition((SessionState.INITIALIZING,), SessionState.CONFIG_ERROR)
            self.config_error = outcome.config_error
            logger.error(f"Session configuration error: {outcome.config_error}")
            return
        if outcome.profile is None:
            self._transition((SessionState.INITIALIZING,), SessionState.READY_SIGNED_OUT)
            return
        self._transition((SessionState.INITIALIZING,), SessionState.READY_SIGNED_IN)
        await self._enter_signed_in(outcome.profile)

    # --- Sign-in / sign-out ---

    async def sign_in(self, profile: UserProfile) -> None:
        self._require_ready()
        self._transition((SessionState.READY_SIGNED_OUT,), SessionState.READY_SIGNED_IN)
        await self._enter_signed_in(profile)

    async def _enter_signed_in(self, profile: UserProfile) -> None:
        self.profile = profile
        self.notice = None
        await self.refresh_destinations()

    async def refresh_destinations(self) -> None:
        """Fetches calendars and task lists concurrently.

        Any failure leaves both lists empty and sets a non-fatal notice; the
        session stays signed in. Results that arrive after a sign-out are
        dropped.
        """
        account = self.identity.account_client()
        if account is None:
            logger.warning("No account client available; destination lists left empty.")
            self.calendars, self.task_lists = (), ()
            return
        generation = self._generation
        try:
            calendars, task_lists = await asyncio.gather(
                run_in_threadpool(account.list_calendars),
                run_in_threadpool(account.list_task_lists),
            )
        except Exception as e:
            if self._is_stale(generation):
                logger.info(f"Discarding list fetch failure after sign-out: {e}")
                return
            error = e if isinstance(e, ListFetchError) else ListFetchError(str(e))
            logger.error(f"Error fetching Google lists: {e}")
            self.calendars, self.task_lists = (), ()
            self.notice = error.user_message
            return
        if self._is_stale(generation):
            logger.info("Discarding destination lists fetched before sign-out.")
            return
        self.calendars = tuple(calendars or ())
        self.task_lists = tuple(task_lists or ())
        logger.info(f"Loaded {len(self.calendars)} calendars and {len(self.task_lists)} task lists.")

    async def sign_out(self) -> None:
        self._require_ready()
        self._transition((SessionState.READY_SIGNED_IN,), SessionState.READY_SIGNED_OUT)
        self._generation += 1
        await run_in_threadpool(self.identity.sign_out)
        self.profile = None
        self.calendars, self.task_lists = (), ()
        self.result = None
        self.notice = None
        self._reset_confirmations()

    def _is_stale(self, generation: int) -> bool:
        return generation != self._generation

    # --- Analysis ---

    def _reset_confirmations(self) -> None:
        self._confirmed = set()
        self.failed_items = {}

    async def analyze(self, text: str) -> AnalysisResult:
        """Runs a new extraction, replacing the previous result and confirmations."""
        self._require_ready()
        self.result = None
        self._reset_confirmations()
        generation = self._generation
        result = await run_in_threadpool(self.analysis.analyze, text)
        if self._is_stale(generation):
            logger.info("Discarding analysis result that finished after sign-out.")
            return result
        self.result = result
        return result

    def _current_result(self) -> AnalysisResult:
        if self.result is None:
            raise KeyError("No analysis result")
        return self.result

    def get_item(self, item_id: str, item_type: ItemType) -> Union[ExtractedEvent, ExtractedTask]:
        return self._current_result().find(item_id, item_type)

    def set_category(self, item_id: str, item_type: ItemType, category: str) -> Union[ExtractedEvent, ExtractedTask]:
        """Overrides an item's category locally. Never re-sends confirmed items."""
        self.result = self._current_result().with_category(item_id, item_type, category)
        return self.result.find(item_id, item_type)

    def suggested_destination(self, item_id: str, item_type: ItemType) -> Optional[str]:
        item = self.get_item(item_id, item_type)
        if item_type is ItemType.event:
            return select_default_calendar(item.category, self.calendars)
        return select_default_task_list(item.category, self.task_lists)

    # --- Confirmation ---

    async def confirm(self, item_id: str, item_type: ItemType, destination_id: Optional[str]) -> None:
        """Commits an item to the chosen destination.

        The item is marked confirmed before the remote call and stays marked
        if the call fails; the failure is kept in `failed_items` and re-raised.
        Confirming an already confirmed item does nothing.

        Raises:
            NotSignedInError: If no account is signed in.
            KeyError: If the item is not in the current result.
            ValueError: If a task has no destination list.
            RemoteWriteError: If the create call fails.
        """
        self._require_ready()
        if not self.is_signed_in:
            raise NotSignedInError("Confirming items requires a signed-in account")
        item = self.get_item(item_id, item_type)
        if item_id in self._confirmed:
            logger.info(f"Item {item_id} already confirmed; ignoring.")
            return
        if item_type is ItemType.task and not destination_id:
            raise ValueError("A task list must be selected before confirming a task")
        account = self.identity.account_client()
        if account is None:
            raise NotSignedInError("No account client available")

        self._confirmed.add(item_id)
        generation = self._generation
        try:
            if item_type is ItemType.event:
                await run_in_threadpool(account.create_event, item, destination_id or PRIMARY_CALENDAR_ID)
            else:
                await run_in_threadpool(account.create_task, item, destination_id)
        except RemoteWriteError as e:
            if not self._is_stale(generation):
                self.failed_items[item_id] = e.user_message
            raise
        logger.info(f"Confirmed {item_type.value} {item_id} into {destination_id or PRIMARY_CALENDAR_ID}.")
