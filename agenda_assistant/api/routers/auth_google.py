"""API Router for Google OAuth 2.0 flow."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, RedirectResponse

from agenda_assistant.core.dependencies import AppContext, get_context
from agenda_assistant.core.errors import NotSignedInError
from agenda_assistant.features.session import SessionState

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/auth/google/login", name="google_login")
async def google_oauth_login(context: AppContext = Depends(get_context)):
    """Initiates the Google OAuth 2.0 authorization flow."""
    session = context.session
    if session.state is SessionState.CONFIG_ERROR:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=session.config_error)

    authorization_url = await run_in_threadpool(context.identity.sign_in_url)
    if not authorization_url:
        # Demo mode: nothing to redirect to, sign in directly.
        profile = await run_in_threadpool(context.identity.complete_sign_in)
        if not session.is_signed_in:
            await session.sign_in(profile)
        return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)

    logger.info("Redirecting user to Google OAuth consent screen.")
    return RedirectResponse(authorization_url)


@router.get("/auth/google/callback", name="google_callback", response_class=HTMLResponse)
async def google_oauth_callback(
    request: Request,
    code: str = Query(...),
    context: AppContext = Depends(get_context),
):
    """Handles the callback from Google after user authorization."""
    logger.info("Received callback from Google OAuth with authorization code.")
    session = context.session
    try:
        profile = await run_in_threadpool(context.identity.complete_sign_in, code)
    except NotSignedInError as e:
        return context.templates.TemplateResponse(
            request, "message_display.html",
            {"title": "Google Authentication Failed", "message": e.user_message},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    if session.is_signed_in:
        session.profile = profile
        await session.refresh_destinations()
    else:
        await session.sign_in(profile)
    return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
