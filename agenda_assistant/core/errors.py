"""Error types shared across the Agenda Assistant services.

Every error carries a `user_message`: the localized text shown in the UI.
The exception message itself stays technical and goes to the logs.
"""


class AgendaAssistantError(Exception):
    """Base class for all application errors."""

    default_user_message = "אירעה שגיאה. אנא נסה שוב."

    def __init__(self, message: str, user_message: str | None = None):
        super().__init__(message)
        self.user_message = user_message or self.default_user_message


class ConfigurationError(AgendaAssistantError):
    """Missing or invalid credentials. Fatal for the session, no retry path."""

    default_user_message = "האפליקציה אינה מוגדרת כראוי. ודא שמשתני הסביבה של מפתחות ה-API מוגדרים."


class ExtractionError(AgendaAssistantError):
    """The extraction call failed or returned a malformed payload. Retryable."""

    default_user_message = "אירעה שגיאה בניתוח הטקסט. אנא נסה שוב."


class ListFetchError(AgendaAssistantError):
    """Calendars or task lists could not be loaded. Non-fatal."""

    default_user_message = "לא ניתן היה לטעון את רשימת היומנים והמשימות."


class RemoteWriteError(AgendaAssistantError):
    """Creating an event or task in the user's account failed."""

    default_user_message = "ההוספה נכשלה. בדוק את החיבור לחשבון Google."


class SessionNotReadyError(AgendaAssistantError):
    """An operation was attempted before the session finished initializing."""

    default_user_message = "האפליקציה עדיין נטענת."


class NotSignedInError(AgendaAssistantError):
    """An operation needs a signed-in Google account."""

    default_user_message = "יש להתחבר עם חשבון Google."


class InvalidTransitionError(AgendaAssistantError):
    """The session state machine was asked to make an illegal transition."""
