from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional, List, Dict, Literal
from datetime import datetime

from services.types import ExternalNominee, NominationBatchResult, NominationSummary, NominationView


# ============ Request Schemas ============

class ExternalReviewerInput(BaseModel):
    email: str
    name: Optional[str] = None


class CreateNominationsRequest(BaseModel):
    participant_assessment_id: str
    nominated_by_id: str = Field(description="Participant making the nominations")
    reviewer_ids: List[str] = Field(default_factory=list, description="Internal reviewer (client user) ids")
    external_reviewers: List[ExternalReviewerInput] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_not_empty(self):
        if not self.reviewer_ids and not self.external_reviewers:
            raise ValueError("At least one reviewer_id or external reviewer is required")
        return self


class NominationActionRequest(BaseModel):
    actor_id: str = Field(description="Reviewer id (internal) or external reviewer id responding")


class EnsureParticipantAssessmentRequest(BaseModel):
    participant_id: str
    cohort_assessment_id: str


# ============ Response Schemas ============

class NomineeResponse(BaseModel):
    type: Literal["internal", "external"]
    reviewer_id: Optional[str] = None
    external_reviewer_id: Optional[str] = None
    email: Optional[str] = None


class NominationResponse(BaseModel):
    id: str
    participant_assessment_id: str
    nominee: NomineeResponse
    nominated_by_id: str
    request_status: str
    review_status: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_view(cls, view: NominationView) -> "NominationResponse":
        if isinstance(view.nominee, ExternalNominee):
            nominee = NomineeResponse(
                type="external",
                external_reviewer_id=view.nominee.external_reviewer_id,
                email=view.nominee.email,
            )
        else:
            nominee = NomineeResponse(type="internal", reviewer_id=view.nominee.reviewer_id)
        return cls(
            id=view.id,
            participant_assessment_id=view.participant_assessment_id,
            nominee=nominee,
            nominated_by_id=view.nominated_by_id,
            request_status=view.request_status,
            review_status=view.review_status,
            created_at=view.created_at,
        )


class NominationStatusResponse(BaseModel):
    """Result of accept / reject"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    request_status: str
    updated_at: datetime


class NominationBatchResponse(BaseModel):
    created: List[str]
    skipped_duplicates: List[str]
    errors: Dict[str, str] = Field(description="Per-reviewer problems; present alongside created ones on partial failure")
    remaining_capacity: int
    partial_failure: bool

    @classmethod
    def from_result(cls, result: NominationBatchResult) -> "NominationBatchResponse":
        return cls(
            created=result.created,
            skipped_duplicates=result.skipped_duplicates,
            errors=result.errors,
            remaining_capacity=result.remaining_capacity,
            partial_failure=result.partial_failure,
        )


class NominationSummaryResponse(BaseModel):
    active: int
    accepted: int
    reviews_completed: int
    quota: int
    remaining: int

    @classmethod
    def from_summary(cls, summary: NominationSummary) -> "NominationSummaryResponse":
        return cls(
            active=summary.active,
            accepted=summary.accepted,
            reviews_completed=summary.reviews_completed,
            quota=summary.quota,
            remaining=summary.remaining,
        )


class ParticipantAssessmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    participant_id: str
    cohort_assessment_id: str
    status: str
    submitted_at: Optional[datetime] = None
    allow_reviewer_nominations: bool
