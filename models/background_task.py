from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlmodel import SQLModel, Field

from models.enums import TaskStatus


class BackgroundTask(SQLModel, table=True):
    """
    One attempt at a fire-and-forget side effect.

    Rows are written before the work starts so an attempt that dies midway
    is still visible as INITIATED or PENDING. Attempts are never retried;
    a later trigger records a new row.
    """
    __tablename__ = "background_tasks"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    task_type: str = Field(index=True)
    status: str = Field(default=TaskStatus.INITIATED.value, index=True)
    triggered_by: Optional[str] = Field(default=None, description="e.g. participant_submitted, review_submitted")

    # Entity the side effect is about, e.g. ("participant_assessment", <id>)
    related_entity_type: str
    related_entity_id: str = Field(index=True)

    result: Optional[str] = Field(default=None, description="JSON summary of what was produced")
    error_message: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def is_finished(self) -> bool:
        return self.status in (TaskStatus.SUCCESS.value, TaskStatus.FAILED.value)
