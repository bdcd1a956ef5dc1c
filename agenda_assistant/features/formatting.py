"""Display helpers for dates shown on event and task cards."""

import logging
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

HEBREW_MONTHS = [
    "ינואר", "פברואר", "מרץ", "אפריל", "מאי", "יוני",
    "יולי", "אוגוסט", "ספטמבר", "אוקטובר", "נובמבר", "דצמבר",
]

NOT_SPECIFIED = "לא צוין"
NO_DUE_DATE = "ללא תאריך יעד"
INVALID_DATE = "תאריך לא חוקי"


def format_event_time(iso_string: Optional[str], timezone_name: str = "Asia/Jerusalem") -> str:
    """'5 במרץ 2025, 14:30' in the display time zone. Naive times are taken as already local."""
    if not iso_string:
        return NOT_SPECIFIED
    try:
        dt = datetime.fromisoformat(iso_string.replace("Z", "+00:00"))
        if dt.tzinfo is not None:
            dt = dt.astimezone(ZoneInfo(timezone_name))
    except (ValueError, ZoneInfoNotFoundError):
        logger.debug(f"Could not format event time {iso_string!r}")
        return INVALID_DATE
    return f"{dt.day} ב{HEBREW_MONTHS[dt.month - 1]} {dt.year}, {dt:%H:%M}"


def format_due_date(iso_string: Optional[str]) -> str:
    """Formats only the date part, so a UTC-midnight due date never shifts a day."""
    if not iso_string:
        return NO_DUE_DATE
    try:
        d = date.fromisoformat(iso_string.split("T")[0])
    except ValueError:
        return INVALID_DATE
    return f"{d.day} ב{HEBREW_MONTHS[d.month - 1]} {d.year}"
