from datetime import datetime
from typing import Optional
import uuid

from sqlmodel import SQLModel, Field

from models.enums import SessionStatus


class ResponseSession(SQLModel, table=True):
    """
    One respondent's resumable attempt at one question set.

    `owner_key` materialises (participant_assessment_id, assessment_definition_id,
    respondent_type, reviewer_nomination_id) so that the store enforces one
    session per owner, including participant sessions with no nomination.
    """
    __tablename__ = "response_sessions"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    owner_key: str = Field(index=True, nullable=False, sa_column_kwargs={"unique": True})

    participant_assessment_id: str = Field(foreign_key="participant_assessments.id", index=True)
    assessment_definition_id: str = Field(foreign_key="assessment_definitions.id", index=True)
    respondent_type: str = Field(index=True)  # participant | reviewer
    reviewer_nomination_id: Optional[str] = Field(default=None, foreign_key="reviewer_nominations.id", index=True)

    # Reviewer sessions set exactly one of these
    respondent_client_user_id: Optional[str] = Field(default=None)
    respondent_external_reviewer_id: Optional[str] = Field(default=None, foreign_key="external_reviewers.id")

    # Progress snapshot, written alongside every answer
    status: str = Field(default=SessionStatus.IN_PROGRESS.value)
    completion_percent: int = Field(default=0)
    last_question_id: Optional[str] = Field(default=None)
    last_step_id: Optional[str] = Field(default=None)

    # Timestamps
    started_at: datetime = Field(default_factory=datetime.utcnow)
    submitted_at: Optional[datetime] = None
    updated_at: datetime = Field(default_factory=datetime.utcnow)
