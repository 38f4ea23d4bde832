from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import Text, UniqueConstraint


class AssessmentResponse(SQLModel, table=True):
    """
    One answer of a response session.

    Unique per (session_id, question_id); clearing an answer keeps the row
    with `is_answered = False`.
    """
    __tablename__ = "assessment_responses"
    __table_args__ = (
        UniqueConstraint("session_id", "question_id", name="uq_assessment_responses_session_question"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    session_id: str = Field(foreign_key="response_sessions.id", index=True)
    question_id: str = Field(foreign_key="assessment_questions.id", index=True)
    answer_text: Optional[str] = Field(default=None, sa_column=Column(Text))
    is_answered: bool = Field(default=False, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
