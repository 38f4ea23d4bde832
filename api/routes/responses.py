"""
Response API Routes - Thin Controller Layer.

Handles HTTP concerns (request/response, validation, status codes)
and delegates business logic to ResponseSessionService.

Endpoints:
- POST /responses/sessions - Open (lookup-or-create) a respondent's session
- GET /responses/sessions/{session_id}/progress - Progress recomputed from stored answers
- GET /responses/sessions/{session_id}/resume - Resume position
- POST /responses/sessions/{session_id}/advance - Store an answer and move on
- POST /responses/sessions/{session_id}/complete - Submit the session
- POST /responses/assessments/{participant_assessment_id}/retake - Reopen a completed assessment
- GET /responses/cohort-assessments/{cohort_assessment_id}/catalog - Resolved question set
"""

from typing import Optional
from fastapi import APIRouter, BackgroundTasks, HTTPException, Depends
from sqlmodel import Session

from api.auth import verify_api_key, get_current_client, ensure_client_scope
from api.errors import to_http_exception
from api.models.response_schemas import (
    OpenSessionRequest,
    AdvanceRequest,
    CompleteRequest,
    SessionViewResponse,
    SessionResponse,
    ProgressResponse,
    ResumePositionResponse,
    AdvanceResponse,
    CatalogResponse,
    ErrorResponse,
)
from services import ResponseSessionService
from services.errors import WorkflowError
from utils.database import get_db

router = APIRouter(
    prefix="/responses",
    tags=["Responses"],
    dependencies=[Depends(verify_api_key)]
)

# ============ DEPENDENCY INJECTION ============


def get_response_session_service(db: Session = Depends(get_db)) -> ResponseSessionService:
    """Get ResponseSessionService instance with injected dependencies."""
    return ResponseSessionService(db)


def _check_session_scope(service: ResponseSessionService, session_id: str, client_id: int):
    session = service.get_session(session_id)
    ensure_client_scope(
        service.catalog_service.owning_client_id(session.participant_assessment_id),
        client_id,
        f"Response session {session_id}",
    )
    return session


# ============ SESSION ENDPOINTS ============

@router.post(
    "/sessions",
    response_model=SessionViewResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Respondent does not match the nomination"},
        404: {"model": ErrorResponse, "description": "Participant assessment or nomination not found"},
        422: {"model": ErrorResponse, "description": "No question set configured"},
        503: {"model": ErrorResponse, "description": "State cannot be determined right now"},
    }
)
def open_session(
    request: OpenSessionRequest,
    service: ResponseSessionService = Depends(get_response_session_service),
    client_id: int = Depends(get_current_client)
):
    """
    Open a respondent's session, creating it on first use.

    Returns the resolved question set, saved answers, progress and the
    position to resume at. Reviewers must hold an **accepted** nomination.
    """
    try:
        ensure_client_scope(
            service.catalog_service.owning_client_id(request.participant_assessment_id),
            client_id,
            f"Participant assessment {request.participant_assessment_id}",
        )
        view = service.open_session(request.participant_assessment_id, request.respondent.to_ref())
        return SessionViewResponse.from_view(view)
    except HTTPException:
        raise
    except WorkflowError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to open session: {str(e)}")


@router.get("/sessions/{session_id}/progress", response_model=ProgressResponse)
def get_progress(
    session_id: str,
    service: ResponseSessionService = Depends(get_response_session_service),
    client_id: int = Depends(get_current_client)
):
    """Current progress `{answered, total, percentage}`, recomputed from stored answers."""
    try:
        _check_session_scope(service, session_id, client_id)
        return ProgressResponse.from_progress(service.get_progress(session_id))
    except HTTPException:
        raise
    except WorkflowError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get progress: {str(e)}")


@router.get("/sessions/{session_id}/resume", response_model=ResumePositionResponse)
def get_resume_position(
    session_id: str,
    service: ResponseSessionService = Depends(get_response_session_service),
    client_id: int = Depends(get_current_client)
):
    """Position `{question_index, step_index}` a reload of this session lands on."""
    try:
        _check_session_scope(service, session_id, client_id)
        return ResumePositionResponse.from_position(service.get_resume_position(session_id))
    except HTTPException:
        raise
    except WorkflowError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get resume position: {str(e)}")


@router.post(
    "/sessions/{session_id}/advance",
    response_model=AdvanceResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Session or question not found"},
        409: {"model": ErrorResponse, "description": "Session already completed"},
        503: {"model": ErrorResponse, "description": "Answer not saved; do not advance"},
    }
)
def advance(
    session_id: str,
    request: AdvanceRequest,
    background_tasks: BackgroundTasks,
    service: ResponseSessionService = Depends(get_response_session_service),
    client_id: int = Depends(get_current_client)
):
    """
    Save the answer to a question (blank clears it) and move to the next one.

    Answering the last question completes the session.
    """
    try:
        _check_session_scope(service, session_id, client_id)
        result = service.advance(
            session_id=session_id,
            question_id=request.question_id,
            answer_text=request.answer_text,
            background_tasks=background_tasks,
        )
        return AdvanceResponse.from_result(result)
    except HTTPException:
        raise
    except WorkflowError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to save answer: {str(e)}")


@router.post("/sessions/{session_id}/complete", response_model=SessionResponse)
def complete(
    session_id: str,
    background_tasks: BackgroundTasks,
    request: Optional[CompleteRequest] = None,
    service: ResponseSessionService = Depends(get_response_session_service),
    client_id: int = Depends(get_current_client)
):
    """Submit a session. Unanswered questions do not block submission."""
    try:
        _check_session_scope(service, session_id, client_id)
        request = request or CompleteRequest()
        session = service.complete(
            session_id=session_id,
            question_id=request.question_id,
            answer_text=request.answer_text,
            background_tasks=background_tasks,
        )
        return SessionResponse.model_validate(session)
    except HTTPException:
        raise
    except WorkflowError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to complete session: {str(e)}")


@router.post(
    "/assessments/{participant_assessment_id}/retake",
    response_model=SessionResponse,
    responses={409: {"model": ErrorResponse, "description": "Assessment is not completed"}}
)
def retake(
    participant_assessment_id: str,
    service: ResponseSessionService = Depends(get_response_session_service),
    client_id: int = Depends(get_current_client)
):
    """Clear a completed assessment's answers and reopen its session (same session id)."""
    try:
        ensure_client_scope(
            service.catalog_service.owning_client_id(participant_assessment_id),
            client_id,
            f"Participant assessment {participant_assessment_id}",
        )
        return SessionResponse.model_validate(service.retake(participant_assessment_id))
    except HTTPException:
        raise
    except WorkflowError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to retake assessment: {str(e)}")


# ============ CATALOG ENDPOINTS ============

@router.get(
    "/cohort-assessments/{cohort_assessment_id}/catalog",
    response_model=CatalogResponse,
    responses={422: {"model": ErrorResponse, "description": "No question set configured"}}
)
def get_catalog(
    cohort_assessment_id: str,
    service: ResponseSessionService = Depends(get_response_session_service),
    client_id: int = Depends(get_current_client)
):
    """Question set resolved for a cohort assessment (plan override or system default)."""
    try:
        ensure_client_scope(
            service.catalog_service.cohort_assessment_client_id(cohort_assessment_id),
            client_id,
            f"Cohort assessment {cohort_assessment_id}",
        )
        return CatalogResponse.from_catalog(service.catalog_service.resolve(cohort_assessment_id))
    except HTTPException:
        raise
    except WorkflowError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to resolve catalog: {str(e)}")
