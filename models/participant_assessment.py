from datetime import datetime
from typing import Optional
import uuid

from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint

from models.enums import AssessmentStatus


class ParticipantAssessment(SQLModel, table=True):
    """
    A participant's record for one cohort assessment.

    `status` is a cached projection of the participant's response session,
    kept in sync by the status driver.
    """
    __tablename__ = "participant_assessments"
    __table_args__ = (
        UniqueConstraint("participant_id", "cohort_assessment_id", name="uq_participant_assessments_participant_ca"),
    )

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    participant_id: str = Field(index=True)
    cohort_assessment_id: str = Field(foreign_key="cohort_assessments.id", index=True)
    status: str = Field(default=AssessmentStatus.NOT_STARTED.value, index=True)
    score: Optional[float] = Field(default=None)
    submitted_at: Optional[datetime] = None
    allow_reviewer_nominations: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
