from datetime import datetime
from typing import Optional
import uuid

from sqlmodel import SQLModel, Field


class CohortAssessment(SQLModel, table=True):
    """An assessment of a given type scheduled for a cohort."""
    __tablename__ = "cohort_assessments"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    cohort_id: str = Field(foreign_key="cohorts.id", index=True)
    assessment_type_id: str = Field(foreign_key="assessment_types.id", index=True)
    name: Optional[str] = Field(default=None)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
