"""Interface definition for the text extraction backends.
"""

from typing import Any, Dict, Literal, Protocol, runtime_checkable


@runtime_checkable
class ExtractionBackend(Protocol):
    """A protocol for services that turn free text into raw event/task data.

    The live backend calls OpenAI; the demo backend returns fixtures. Exactly
    one of them is selected when the app starts.
    """

    mode: Literal["live", "demo"]

    def extract(self, text: str, current_year: int) -> Dict[str, Any]:
        """Extracts candidate events and tasks from text.

        Args:
            text: The user's free text. Never empty.
            current_year: Year used to resolve relative dates.

        Returns:
            A JSON-like dict with "events" and "tasks" arrays. Items carry no ids.

        Raises:
            ConfigurationError: If the backend has no credentials.
            ExtractionError: If the call fails or the output is not JSON.
        """
        ...
