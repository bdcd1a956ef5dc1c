"""API Router for the session: readiness, sign-in and sign-out."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool

from agenda_assistant.api.models import SessionResponse, SignInResponse, build_session_response
from agenda_assistant.core.dependencies import AppContext, get_context
from agenda_assistant.features.session import SessionState
from agenda_assistant.core.errors import (
    ConfigurationError,
    InvalidTransitionError,
    NotSignedInError,
    SessionNotReadyError,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/session", response_model=SessionResponse)
async def get_session_state(context: AppContext = Depends(get_context)):
    """Returns the current session state, destinations and confirmation set."""
    return build_session_response(context.session, context.demo_mode)


@router.post("/session/sign-in", response_model=SignInResponse)
async def sign_in(context: AppContext = Depends(get_context)):
    """Starts sign-in.

    In live mode this returns the Google consent URL the browser must visit;
    the OAuth callback finishes the flow. In demo mode sign-in completes
    immediately and the new session state is returned.
    """
    session = context.session
    if session.state is SessionState.CONFIG_ERROR:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=session.config_error)
    if session.is_signed_in:
        return SignInResponse(session=build_session_response(session, context.demo_mode))

    try:
        login_url = await run_in_threadpool(context.identity.sign_in_url)
        if login_url:
            return SignInResponse(login_url=login_url)
        profile = await run_in_threadpool(context.identity.complete_sign_in)
        await session.sign_in(profile)
    except SessionNotReadyError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.user_message)
    except NotSignedInError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.user_message)
    except Exception as e:
        logger.error(f"Unexpected error during sign-in: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred while signing in."
        )
    return SignInResponse(session=build_session_response(session, context.demo_mode))


@router.post("/session/sign-out", response_model=SessionResponse)
async def sign_out(context: AppContext = Depends(get_context)):
    """Signs out, clearing destinations, results and confirmations."""
    try:
        await context.session.sign_out()
    except ConfigurationError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.user_message)
    except (SessionNotReadyError, InvalidTransitionError) as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return build_session_response(context.session, context.demo_mode)
