"""Dependencies module for Agenda Assistant.

The app builds one `AppContext` at startup and keeps it on `app.state`.
FastAPI dependencies below hand its parts to the routers; nothing is kept in
module-level globals.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

from agenda_assistant.core.config import Settings
from agenda_assistant.features.analysis_service import AnalysisClient, build_analysis_client
from agenda_assistant.features.categories import event_category_info, task_category_info
from agenda_assistant.features.formatting import format_due_date, format_event_time
from agenda_assistant.features.identity import build_identity_provider
from agenda_assistant.features.session import Session
from agenda_assistant.interfaces.account_interface import IdentityProvider

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    demo_mode: bool
    analysis: AnalysisClient
    identity: IdentityProvider
    session: Session
    templates: Jinja2Templates


def get_templates(settings: Settings) -> Jinja2Templates:
    base_dir = Path(__file__).resolve().parent.parent.parent
    template_dir = base_dir / "templates"
    if not template_dir.is_dir():
        template_dir = Path("templates")
    templates = Jinja2Templates(directory=str(template_dir))
    templates.env.filters["event_time"] = lambda value: format_event_time(value, settings.CALENDAR_TIMEZONE)
    templates.env.filters["due_date"] = format_due_date
    templates.env.globals["event_category_info"] = event_category_info
    templates.env.globals["task_category_info"] = task_category_info
    return templates


def build_context(settings: Settings) -> AppContext:
    """Selects demo or live collaborators once and wires them together."""
    demo_mode = settings.resolve_demo_mode()
    logger.info(f"Building application context in {'DEMO' if demo_mode else 'LIVE'} mode.")
    analysis = build_analysis_client(settings, demo_mode)
    identity = build_identity_provider(settings, demo_mode)
    return AppContext(
        settings=settings,
        demo_mode=demo_mode,
        analysis=analysis,
        identity=identity,
        session=Session(identity=identity, analysis=analysis),
        templates=get_templates(settings),
    )


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_session(request: Request) -> Session:
    return get_context(request).session
