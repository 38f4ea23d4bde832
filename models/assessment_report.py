from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint


class AssessmentReport(SQLModel, table=True):
    """Pointer to the latest generated report file of a participant assessment."""
    __tablename__ = "assessment_reports"
    __table_args__ = (
        UniqueConstraint("participant_assessment_id", "report_type", name="uq_assessment_reports_pa_type"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    participant_assessment_id: str = Field(foreign_key="participant_assessments.id", index=True)
    report_type: str = Field(default="pulse")
    storage_path: str
    source_updated_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
