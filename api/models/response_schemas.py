from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional, List, Dict, Literal
from datetime import datetime

from services.types import (
    AdvanceResult,
    Catalog,
    ParticipantRespondent,
    Progress,
    RespondentRef,
    ResumePosition,
    ReviewerRespondent,
    SessionView,
)


# ============ Request Schemas ============

class RespondentPayload(BaseModel):
    """Who is answering: the participant, or a reviewer through an accepted nomination"""
    type: Literal["participant", "reviewer"] = "participant"
    nomination_id: Optional[str] = Field(default=None, description="Required for reviewers")
    reviewer_id: Optional[str] = Field(default=None, description="Acting client user for internal reviews")

    @model_validator(mode="after")
    def check_reviewer_fields(self):
        if self.type == "reviewer" and not self.nomination_id:
            raise ValueError("nomination_id is required for reviewer respondents")
        return self

    def to_ref(self) -> RespondentRef:
        if self.type == "reviewer":
            return ReviewerRespondent(nomination_id=self.nomination_id, reviewer_id=self.reviewer_id)
        return ParticipantRespondent()


class OpenSessionRequest(BaseModel):
    participant_assessment_id: str
    respondent: RespondentPayload = Field(default_factory=RespondentPayload)


class AdvanceRequest(BaseModel):
    question_id: str
    answer_text: Optional[str] = Field(default=None, description="Blank or missing clears the answer")


class CompleteRequest(BaseModel):
    question_id: Optional[str] = Field(default=None, description="Optional final answer to store first")
    answer_text: Optional[str] = None


# ============ Response Schemas ============

class ErrorResponse(BaseModel):
    detail: str


class QuestionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    question_text: str
    question_type: str
    question_order: int
    required: bool
    step_id: Optional[str] = None


class QuestionGroupResponse(BaseModel):
    step_id: Optional[str] = None
    title: Optional[str] = None
    step_order: Optional[int] = None
    questions: List[QuestionResponse]


class CatalogResponse(BaseModel):
    question_set_id: str
    assessment_type_id: str
    is_system: bool
    is_step_grouped: bool
    has_steps: bool
    nomination_quota: Optional[int] = None
    total_questions: int
    groups: List[QuestionGroupResponse]

    @classmethod
    def from_catalog(cls, catalog: Catalog) -> "CatalogResponse":
        return cls(
            question_set_id=catalog.question_set_id,
            assessment_type_id=catalog.assessment_type_id,
            is_system=catalog.is_system,
            is_step_grouped=catalog.is_step_grouped,
            has_steps=catalog.has_steps,
            nomination_quota=catalog.nomination_quota,
            total_questions=catalog.total_questions,
            groups=[
                QuestionGroupResponse(
                    step_id=group.step_id,
                    title=group.step.title if group.step else None,
                    step_order=group.step.step_order if group.step else None,
                    questions=[QuestionResponse.model_validate(q) for q in group.questions],
                )
                for group in catalog.groups
            ],
        )


class ProgressResponse(BaseModel):
    answered: int
    total: int
    percentage: int = Field(description="Whole-number completion percentage (0-100)")

    @classmethod
    def from_progress(cls, progress: Progress) -> "ProgressResponse":
        return cls(answered=progress.answered, total=progress.total, percentage=progress.percentage)


class ResumePositionResponse(BaseModel):
    question_index: int
    step_index: Optional[int] = None

    @classmethod
    def from_position(cls, position: ResumePosition) -> "ResumePositionResponse":
        return cls(question_index=position.question_index, step_index=position.step_index)


class SessionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    participant_assessment_id: str
    assessment_definition_id: str
    respondent_type: str
    reviewer_nomination_id: Optional[str] = None
    status: str
    completion_percent: int
    last_question_id: Optional[str] = None
    last_step_id: Optional[str] = None
    started_at: datetime
    submitted_at: Optional[datetime] = None
    updated_at: datetime


class SessionViewResponse(BaseModel):
    session: SessionResponse
    catalog: CatalogResponse
    answers: Dict[str, str]
    resume: ResumePositionResponse
    progress: ProgressResponse
    assessment_status: Optional[str] = None

    @classmethod
    def from_view(cls, view: SessionView) -> "SessionViewResponse":
        return cls(
            session=SessionResponse.model_validate(view.session),
            catalog=CatalogResponse.from_catalog(view.catalog),
            answers=view.answers,
            resume=ResumePositionResponse.from_position(view.resume),
            progress=ProgressResponse.from_progress(view.progress),
            assessment_status=view.assessment_status,
        )


class AdvanceResponse(BaseModel):
    session: SessionResponse
    progress: ProgressResponse
    next_position: Optional[ResumePositionResponse] = None
    completed: bool = False

    @classmethod
    def from_result(cls, result: AdvanceResult) -> "AdvanceResponse":
        return cls(
            session=SessionResponse.model_validate(result.session),
            progress=ProgressResponse.from_progress(result.progress),
            next_position=(
                ResumePositionResponse.from_position(result.next_position)
                if result.next_position else None
            ),
            completed=result.completed,
        )
