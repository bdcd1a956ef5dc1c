"""Script to run an extraction from the command line.

Reads text from a file (or stdin), runs the configured analysis client and
prints the result as JSON, with the destination each item would default to.

    python scripts/analyze_text.py notes.txt
    echo "..." | python scripts/analyze_text.py --demo
"""

import argparse
import json
import logging
import os
import sys

# Ensure the main package is in the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from agenda_assistant.core.config import get_settings
from agenda_assistant.core.errors import AgendaAssistantError
from agenda_assistant.core.logging_config import configure_logging
from agenda_assistant.features.analysis_service import build_analysis_client
from agenda_assistant.features.google_services import DEMO_CALENDARS, DEMO_TASK_LISTS
from agenda_assistant.features.matcher import select_default_calendar, select_default_task_list

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Extract calendar events and tasks from text.")
    parser.add_argument("path", nargs="?", help="File to read. Reads stdin when omitted.")
    parser.add_argument("--demo", action="store_true", help="Use the offline demo backend.")
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings.log_level)

    if args.path:
        with open(args.path, "r", encoding="utf-8") as f:
            text = f.read()
    else:
        text = sys.stdin.read()
    if not text.strip():
        logger.error("No text to analyze.")
        return 2

    demo_mode = args.demo or settings.resolve_demo_mode()
    client = build_analysis_client(settings, demo_mode)
    try:
        result = client.analyze(text)
    except AgendaAssistantError as e:
        logger.error(f"Analysis failed: {e}")
        return 1

    output = result.model_dump(mode="json", by_alias=True)
    for event in output["events"]:
        event["suggestedCalendar"] = select_default_calendar(event["category"], DEMO_CALENDARS)
    for task in output["tasks"]:
        task["suggestedTaskList"] = select_default_task_list(task["category"], DEMO_TASK_LISTS)
    print(json.dumps(output, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
