from datetime import datetime
from typing import Optional
import uuid

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import Text


class AssessmentQuestion(SQLModel, table=True):
    """
    Individual question within a question set.
    `step_id` is null for flat forms and for the ungrouped tail of pulse forms.
    """
    __tablename__ = "assessment_questions"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    assessment_definition_id: str = Field(foreign_key="assessment_definitions.id", index=True)
    step_id: Optional[str] = Field(default=None, foreign_key="assessment_steps.id", index=True)
    question_text: str = Field(sa_column=Column(Text))
    question_type: str = Field(default="text")
    question_order: int = Field(default=0, index=True)  # Sequence within the question set
    required: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)
