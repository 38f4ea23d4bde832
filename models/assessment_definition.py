from datetime import datetime
from typing import Optional
import uuid

from sqlmodel import SQLModel, Field


class AssessmentDefinition(SQLModel, table=True):
    """
    A question set for one assessment type.

    Exactly one definition per type is the system default (`is_system`);
    plans may point at customized definitions instead.
    """
    __tablename__ = "assessment_definitions"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    assessment_type_id: str = Field(foreign_key="assessment_types.id", index=True)
    name: str
    description: Optional[str] = Field(default=None)
    is_system: bool = Field(default=False, index=True)
    # Explicit reviewer quota; when unset the quota is derived from is_system and the type
    nomination_quota: Optional[int] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
