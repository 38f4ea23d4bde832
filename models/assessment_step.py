from datetime import datetime
from typing import Optional
import uuid

from sqlmodel import SQLModel, Field


class AssessmentStep(SQLModel, table=True):
    """An ordered step of a step-grouped (pulse) question set."""
    __tablename__ = "assessment_steps"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    assessment_definition_id: str = Field(foreign_key="assessment_definitions.id", index=True)
    step_order: int = Field(default=0, index=True)
    title: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)
