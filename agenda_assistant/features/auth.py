"""Outcome of the identity provider's initialization or sign-in."""

from typing import Optional

from agenda_assistant.core.errors import InvalidTransitionError
from agenda_assistant.features.models import UserProfile


class AuthOutcome:
    """A two-state future: pending, then resolved exactly once.

    Resolved with a profile means signed in, with `None` means ready but
    signed out, and with a configuration error means the session cannot
    start until the environment is fixed.
    """

    def __init__(self) -> None:
        self._resolved = False
        self._profile: Optional[UserProfile] = None
        self._config_error: Optional[str] = None

    @classmethod
    def signed_in(cls, profile: UserProfile) -> "AuthOutcome":
        outcome = cls()
        outcome.resolve_profile(profile)
        return outcome

    @classmethod
    def signed_out(cls) -> "AuthOutcome":
        outcome = cls()
        outcome.resolve_profile(None)
        return outcome

    @classmethod
    def failed(cls, config_error: str) -> "AuthOutcome":
        outcome = cls()
        outcome.resolve_error(config_error)
        return outcome

    @property
    def is_pending(self) -> bool:
        return not self._resolved

    @property
    def profile(self) -> Optional[UserProfile]:
        return self._profile

    @property
    def config_error(self) -> Optional[str]:
        return self._config_error

    def resolve_profile(self, profile: Optional[UserProfile]) -> None:
        self._check_pending()
        self._profile = profile
        self._resolved = True

    def resolve_error(self, config_error: str) -> None:
        self._check_pending()
        self._config_error = config_error or "Unknown configuration error"
        self._resolved = True

    def _check_pending(self) -> None:
        if self._resolved:
            raise InvalidTransitionError("AuthOutcome is already resolved")

    def __repr__(self) -> str:
        if self.is_pending:
            return "AuthOutcome(pending)"
        if self._config_error:
            return f"AuthOutcome(config_error={self._config_error!r})"
        return f"AuthOutcome(profile={self._profile!r})"
