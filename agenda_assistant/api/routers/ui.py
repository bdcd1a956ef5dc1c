"""API Router for the HTML interface.

The page is server-rendered: every form posts back here and gets the whole
page re-rendered with the session's current state.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from agenda_assistant.api.models import build_analysis_response
from agenda_assistant.api.routers.items import EMPTY_TEXT_MESSAGE
from agenda_assistant.core.dependencies import AppContext, get_context
from agenda_assistant.core.errors import AgendaAssistantError
from agenda_assistant.features.categories import EVENT_CATEGORIES, TASK_CATEGORIES
from agenda_assistant.features.models import ItemType

logger = logging.getLogger(__name__)
router = APIRouter()


def _render(
    request: Request,
    context: AppContext,
    error: Optional[str] = None,
    text: str = "",
    status_code: int = status.HTTP_200_OK,
) -> HTMLResponse:
    session = context.session
    return context.templates.TemplateResponse(
        request,
        "index.html",
        {
            "session": session,
            "view": session.view.value,
            "demo_mode": context.demo_mode,
            "analysis": build_analysis_response(session),
            "event_categories": EVENT_CATEGORIES,
            "task_categories": TASK_CATEGORIES,
            "error": error or session.notice,
            "text": text,
        },
        status_code=status_code,
    )


@router.get("/", response_class=HTMLResponse, name="home")
async def home(request: Request, context: AppContext = Depends(get_context)):
    return _render(request, context)


@router.post("/ui/analyze", response_class=HTMLResponse, name="ui_analyze")
async def ui_analyze(request: Request, text: str = Form(""), context: AppContext = Depends(get_context)):
    if not text.strip():
        return _render(request, context, error=EMPTY_TEXT_MESSAGE, text=text, status_code=status.HTTP_400_BAD_REQUEST)
    try:
        await context.session.analyze(text)
    except AgendaAssistantError as e:
        logger.error(f"Error analyzing text: {e}")
        return _render(request, context, error=e.user_message, text=text)
    return _render(request, context, text=text)


@router.post("/ui/items/{item_type}/{item_id}/category", response_class=HTMLResponse, name="ui_category")
async def ui_category(
    request: Request,
    item_type: ItemType,
    item_id: str,
    category: str = Form(...),
    context: AppContext = Depends(get_context),
):
    try:
        context.session.set_category(item_id, item_type, category)
    except (KeyError, ValueError) as e:
        logger.warning(f"Rejected category change for {item_id}: {e}")
        return _render(request, context, error="הפריט או הקטגוריה אינם קיימים.", status_code=status.HTTP_400_BAD_REQUEST)
    return _render(request, context)


@router.post("/ui/items/{item_type}/{item_id}/confirm", response_class=HTMLResponse, name="ui_confirm")
async def ui_confirm(
    request: Request,
    item_type: ItemType,
    item_id: str,
    destination_id: Optional[str] = Form(None),
    context: AppContext = Depends(get_context),
):
    try:
        await context.session.confirm(item_id, item_type, destination_id)
    except AgendaAssistantError as e:
        return _render(request, context, error=e.user_message)
    except (KeyError, ValueError) as e:
        logger.warning(f"Rejected confirmation for {item_id}: {e}")
        return _render(request, context, error="לא ניתן לאשר את הפריט.", status_code=status.HTTP_400_BAD_REQUEST)
    return _render(request, context)


@router.post("/ui/sign-out", name="ui_sign_out")
async def ui_sign_out(context: AppContext = Depends(get_context)):
    if context.session.is_signed_in:
        await context.session.sign_out()
    return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
