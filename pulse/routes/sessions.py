"""Survey-taking session endpoints.

Flow:
1. POST /api/sessions starts a session (optionally prefilled from a photo)
2. PUT /api/sessions/{id}/answers/{question_id} records an answer
3. POST /api/sessions/{id}/advance moves on; on the last question the
   survey is scored and the result returned
4. DELETE /api/sessions/{id} cancels without storing anything and
   returns the final state (back on the survey list)
"""

from fastapi import APIRouter, Depends, HTTPException

from pulse.schemas.session import AnswerRequest, SessionStartRequest, SessionState
from pulse.services.survey_loader import SurveyNotFoundError
from pulse.services.survey_session import (
    SessionError,
    SessionNotFoundError,
    SurveySessionService,
    get_session_service,
)
from pulse.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/sessions")


def _session_http_error(exc: SessionError) -> HTTPException:
    if isinstance(exc, SessionNotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    return HTTPException(status_code=409, detail=str(exc))


@router.post("", response_model=SessionState, status_code=201)
async def start_session(
    request: SessionStartRequest,
    service: SurveySessionService = Depends(get_session_service)
) -> SessionState:
    try:
        session = service.start(request.survey_id, request.user_id, request.initial_answers)
    except SurveyNotFoundError:
        raise HTTPException(status_code=404, detail=f"Survey '{request.survey_id}' not found")
    return session.to_state()


@router.get("/{session_id}", response_model=SessionState)
async def get_session(
    session_id: str,
    service: SurveySessionService = Depends(get_session_service)
) -> SessionState:
    try:
        return service.get(session_id).to_state()
    except SessionError as e:
        raise _session_http_error(e)


@router.put("/{session_id}/answers/{question_id}", response_model=SessionState)
async def answer_question(
    session_id: str,
    question_id: str,
    request: AnswerRequest,
    service: SurveySessionService = Depends(get_session_service)
) -> SessionState:
    """Record an answer; invalid answers are rejected with the message to show."""
    try:
        validation = service.answer(session_id, question_id, request.value)
        session = service.get(session_id)
    except SessionError as e:
        raise _session_http_error(e)

    if not validation.is_valid:
        raise HTTPException(
            status_code=422,
            detail={"question_id": question_id, "message": validation.error_message}
        )
    return session.to_state()


@router.post("/{session_id}/advance", response_model=SessionState)
async def advance_session(
    session_id: str,
    service: SurveySessionService = Depends(get_session_service)
) -> SessionState:
    """Go to the next question, or submit the survey on the last one."""
    try:
        session = service.advance(session_id)
    except SessionError as e:
        raise _session_http_error(e)
    return session.to_state()


@router.delete("/{session_id}", response_model=SessionState)
async def cancel_session(
    session_id: str,
    service: SurveySessionService = Depends(get_session_service)
) -> SessionState:
    try:
        session = service.cancel(session_id)
    except SessionError as e:
        raise _session_http_error(e)
    return session.to_state()
