from datetime import datetime
from typing import Optional
import uuid

from sqlmodel import SQLModel, Field


class AssessmentType(SQLModel, table=True):
    """
    Kind of questionnaire, e.g. "360" (flat) or "Pulse" (step-grouped).
    """
    __tablename__ = "assessment_types"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str = Field(index=True)
    description: Optional[str] = Field(default=None)
    is_step_grouped: bool = Field(default=False)  # pulse forms are partitioned into steps
    created_at: datetime = Field(default_factory=datetime.utcnow)
