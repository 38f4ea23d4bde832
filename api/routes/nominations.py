"""
Nomination API Routes - Thin Controller Layer.

Handles HTTP concerns and delegates the nomination lifecycle to
NominationService.

Endpoints:
- POST /nominations - Nominate a batch of internal and external reviewers
- GET /nominations - List nominations of a participant assessment
- GET /nominations/summary - Derived counts and remaining quota
- GET /nominations/inbox - Nominations addressed to an internal reviewer
- POST /nominations/{nomination_id}/accept - Reviewer accepts
- POST /nominations/{nomination_id}/reject - Reviewer declines
- DELETE /nominations/{nomination_id} - Nominator withdraws a pending nomination
- POST /nominations/participant-assessments - Ensure a participant assessment exists
"""

from fastapi import APIRouter, BackgroundTasks, HTTPException, Depends, Query, Response, status
from sqlmodel import Session
from typing import List

from api.auth import verify_api_key, get_current_client, ensure_client_scope
from api.errors import to_http_exception
from api.models.nomination_schemas import (
    CreateNominationsRequest,
    NominationActionRequest,
    EnsureParticipantAssessmentRequest,
    NominationBatchResponse,
    NominationResponse,
    NominationStatusResponse,
    NominationSummaryResponse,
    ParticipantAssessmentResponse,
)
from api.models.response_schemas import ErrorResponse
from services import NominationService
from services.errors import WorkflowError
from utils.database import get_db

router = APIRouter(
    prefix="/nominations",
    tags=["Nominations"],
    dependencies=[Depends(verify_api_key)]
)

# ============ DEPENDENCY INJECTION ============


def get_nomination_service(db: Session = Depends(get_db)) -> NominationService:
    """Get NominationService instance with injected dependencies."""
    return NominationService(db)


def _check_assessment_scope(service: NominationService, participant_assessment_id: str, client_id: int):
    ensure_client_scope(
        service.catalog_service.owning_client_id(participant_assessment_id),
        client_id,
        f"Participant assessment {participant_assessment_id}",
    )


def _check_nomination_scope(service: NominationService, nomination_id: str, client_id: int):
    nomination = service.get_nomination(nomination_id)
    _check_assessment_scope(service, nomination.participant_assessment_id, client_id)


# ============ NOMINATION ENDPOINTS ============

@router.post(
    "",
    response_model=NominationBatchResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        403: {"model": ErrorResponse, "description": "Nominations disabled or caller is not the participant"},
        409: {"description": "Quota exceeded, or nothing to nominate (all duplicates / all failed)"},
    }
)
def create_nominations(
    request: CreateNominationsRequest,
    background_tasks: BackgroundTasks,
    service: NominationService = Depends(get_nomination_service),
    client_id: int = Depends(get_current_client)
):
    """
    Nominate reviewers for a participant assessment.

    - Already-active reviewers are skipped (`skipped_duplicates`)
    - Per-email problems are itemised in `errors` while the rest are created
    - A batch that would exceed the quota is rejected whole (409)
    - New external reviewers receive an invitation after the response is sent
    """
    try:
        _check_assessment_scope(service, request.participant_assessment_id, client_id)
        result = service.create_nominations(
            participant_assessment_id=request.participant_assessment_id,
            nominated_by_id=request.nominated_by_id,
            reviewer_ids=request.reviewer_ids,
            external_emails=[reviewer.email for reviewer in request.external_reviewers],
            external_names={r.email: r.name for r in request.external_reviewers if r.name},
            background_tasks=background_tasks,
        )
        return NominationBatchResponse.from_result(result)
    except HTTPException:
        raise
    except WorkflowError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to create nominations: {str(e)}")


@router.get("", response_model=List[NominationResponse])
def list_nominations(
    participant_assessment_id: str = Query(...),
    include_rejected: bool = Query(True),
    service: NominationService = Depends(get_nomination_service),
    client_id: int = Depends(get_current_client)
):
    """Nominations of a participant assessment, oldest first."""
    try:
        _check_assessment_scope(service, participant_assessment_id, client_id)
        views = service.list_nominations(participant_assessment_id, include_rejected=include_rejected)
        return [NominationResponse.from_view(view) for view in views]
    except HTTPException:
        raise
    except WorkflowError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to list nominations: {str(e)}")


@router.get("/summary", response_model=NominationSummaryResponse)
def get_summary(
    participant_assessment_id: str = Query(...),
    service: NominationService = Depends(get_nomination_service),
    client_id: int = Depends(get_current_client)
):
    """Active, accepted and completed-review counts with the remaining quota."""
    try:
        _check_assessment_scope(service, participant_assessment_id, client_id)
        return NominationSummaryResponse.from_summary(service.summary(participant_assessment_id))
    except HTTPException:
        raise
    except WorkflowError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to summarise nominations: {str(e)}")


@router.get("/inbox", response_model=List[NominationResponse])
def get_reviewer_inbox(
    reviewer_id: str = Query(...),
    service: NominationService = Depends(get_nomination_service),
    client_id: int = Depends(get_current_client)
):
    """Nominations addressed to an internal reviewer, newest first."""
    try:
        views = service.list_for_reviewer(reviewer_id)
        return [
            NominationResponse.from_view(view)
            for view in views
            if service.catalog_service.owning_client_id(view.participant_assessment_id) == client_id
        ]
    except WorkflowError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to load reviewer inbox: {str(e)}")


@router.post("/{nomination_id}/accept", response_model=NominationStatusResponse)
def accept_nomination(
    nomination_id: str,
    request: NominationActionRequest,
    service: NominationService = Depends(get_nomination_service),
    client_id: int = Depends(get_current_client)
):
    """Accept a pending nomination. The reviewer's session is created on first answer."""
    try:
        _check_nomination_scope(service, nomination_id, client_id)
        return NominationStatusResponse.model_validate(service.accept(nomination_id, request.actor_id))
    except HTTPException:
        raise
    except WorkflowError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to accept nomination: {str(e)}")


@router.post("/{nomination_id}/reject", response_model=NominationStatusResponse)
def reject_nomination(
    nomination_id: str,
    request: NominationActionRequest,
    service: NominationService = Depends(get_nomination_service),
    client_id: int = Depends(get_current_client)
):
    """Decline a pending nomination. The reviewer may be nominated again later."""
    try:
        _check_nomination_scope(service, nomination_id, client_id)
        return NominationStatusResponse.model_validate(service.reject(nomination_id, request.actor_id))
    except HTTPException:
        raise
    except WorkflowError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to reject nomination: {str(e)}")


@router.delete("/{nomination_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_nomination(
    nomination_id: str,
    nominated_by_id: str = Query(...),
    service: NominationService = Depends(get_nomination_service),
    client_id: int = Depends(get_current_client)
):
    """Withdraw a nomination. Only the nominator may, and only while it is pending."""
    try:
        _check_nomination_scope(service, nomination_id, client_id)
        service.delete(nomination_id, nominated_by_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except HTTPException:
        raise
    except WorkflowError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to delete nomination: {str(e)}")


# ============ PARTICIPANT ASSESSMENT ENDPOINTS ============

@router.post("/participant-assessments", response_model=ParticipantAssessmentResponse)
def ensure_participant_assessment(
    request: EnsureParticipantAssessmentRequest,
    service: NominationService = Depends(get_nomination_service),
    client_id: int = Depends(get_current_client)
):
    """Return the participant's assessment record, creating it on first interaction."""
    try:
        ensure_client_scope(
            service.catalog_service.cohort_assessment_client_id(request.cohort_assessment_id),
            client_id,
            f"Cohort assessment {request.cohort_assessment_id}",
        )
        assessment = service.ensure_participant_assessment(request.participant_id, request.cohort_assessment_id)
        return ParticipantAssessmentResponse.model_validate(assessment)
    except HTTPException:
        raise
    except WorkflowError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to load participant assessment: {str(e)}")
