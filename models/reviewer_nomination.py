from datetime import datetime
from typing import Optional
import uuid

from sqlmodel import SQLModel, Field

from models.enums import NominationRequestStatus, ReviewStatus


class ReviewerNomination(SQLModel, table=True):
    """
    A participant's request for a colleague to review them.

    Internal nominations reference a client user (`reviewer_id`), external ones
    an ExternalReviewer (`external_reviewer_id`); `is_external` tells them apart.
    """
    __tablename__ = "reviewer_nominations"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    participant_assessment_id: str = Field(foreign_key="participant_assessments.id", index=True)
    reviewer_id: Optional[str] = Field(default=None, index=True)
    external_reviewer_id: Optional[str] = Field(default=None, foreign_key="external_reviewers.id", index=True)
    is_external: bool = Field(default=False)
    nominated_by_id: str = Field(index=True)

    request_status: str = Field(default=NominationRequestStatus.PENDING.value, index=True)
    # Internal reviews only; external reviews track progress on the ExternalReviewer row
    review_status: Optional[str] = Field(default=ReviewStatus.NOT_STARTED.value)
    review_submitted_at: Optional[datetime] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
