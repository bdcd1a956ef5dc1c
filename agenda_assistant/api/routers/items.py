"""API Router for analysis results: analyze, category override and confirmation."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from agenda_assistant.api.models import (
    AnalysisResponse,
    AnalyzeRequest,
    CategoryUpdateRequest,
    ConfirmRequest,
    ConfirmResponse,
    build_analysis_response,
)
from agenda_assistant.core.errors import (
    ConfigurationError,
    ExtractionError,
    NotSignedInError,
    RemoteWriteError,
    SessionNotReadyError,
)
from agenda_assistant.features.models import ItemType
from agenda_assistant.features.session import Session
from agenda_assistant.core.dependencies import get_session

logger = logging.getLogger(__name__)
router = APIRouter()

EMPTY_TEXT_MESSAGE = "נא להזין טקסט לניתוח."


@router.post("/analyze", response_model=AnalysisResponse)
async def analyze_text_endpoint(request: AnalyzeRequest, session: Session = Depends(get_session)):
    """Extracts events and tasks from the submitted text, replacing any previous result."""
    if not request.text.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=EMPTY_TEXT_MESSAGE)

    logger.info(f"Received analysis request ({len(request.text)} characters).")
    try:
        await session.analyze(request.text)
    except ConfigurationError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.user_message)
    except SessionNotReadyError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.user_message)
    except ExtractionError as e:
        logger.error(f"Error analyzing text: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.user_message)
    except Exception as e:
        logger.error(f"Unexpected error during analysis: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred while analyzing the text."
        )
    return build_analysis_response(session)


@router.get("/analysis", response_model=Optional[AnalysisResponse])
async def get_analysis(session: Session = Depends(get_session)):
    """Returns the current result, or null when nothing has been analyzed yet."""
    return build_analysis_response(session)


@router.patch("/items/{item_type}/{item_id}/category", response_model=AnalysisResponse)
async def update_item_category(
    item_type: ItemType,
    item_id: str,
    request: CategoryUpdateRequest,
    session: Session = Depends(get_session),
):
    """Overrides an item's category. This is a local change; nothing is sent to Google."""
    try:
        session.set_category(item_id, item_type, request.category)
    except KeyError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No {item_type.value} with id '{item_id}'")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"'{request.category}' is not a valid {item_type.value} category"
        )
    return build_analysis_response(session)


@router.post("/items/{item_type}/{item_id}/confirm", response_model=ConfirmResponse)
async def confirm_item(
    item_type: ItemType,
    item_id: str,
    request: ConfirmRequest,
    session: Session = Depends(get_session),
):
    """Adds one item to the chosen calendar or task list."""
    logger.info(f"Received request to confirm {item_type.value} {item_id} into {request.destination_id!r}")
    try:
        await session.confirm(item_id, item_type, request.destination_id)
    except KeyError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No {item_type.value} with id '{item_id}'")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except NotSignedInError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.user_message)
    except ConfigurationError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.user_message)
    except SessionNotReadyError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.user_message)
    except RemoteWriteError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.user_message)
    return ConfirmResponse(item_id=item_id, confirmed=True, destination_id=request.destination_id)
