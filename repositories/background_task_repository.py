"""
Repository for BackgroundTask records.

Side effects (report regeneration) record one row per attempt so that a
failed regeneration is visible without ever blocking the workflow.
"""

from typing import Optional
from datetime import datetime
from sqlmodel import Session
from models.background_task import BackgroundTask
from models.enums import TaskStatus
from repositories.base_repository import BaseRepository


class BackgroundTaskRepository(BaseRepository[BackgroundTask]):
    """Repository for side-effect attempts."""

    def __init__(self, db_session: Session):
        super().__init__(db_session, BackgroundTask)

    def record_attempt(
        self,
        task_type: str,
        participant_assessment_id: str,
        trigger: Optional[str] = None,
    ) -> BackgroundTask:
        """
        Record a queued side effect for a participant assessment (INITIATED).

        Args:
            task_type: e.g. "report_regeneration"
            participant_assessment_id: Assessment the side effect is about
            trigger: What caused it, e.g. "participant_submitted"
        """
        return self.create(BackgroundTask(
            task_type=task_type,
            triggered_by=trigger,
            related_entity_type="participant_assessment",
            related_entity_id=participant_assessment_id,
        ))

    def transition(
        self,
        task_id: str,
        status: TaskStatus,
        result: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> Optional[BackgroundTask]:
        """Move an attempt forward; returns None if the row is gone."""
        task = self.get_by_id(task_id)
        if not task:
            return None

        now = datetime.utcnow()
        task.status = status.value
        if status == TaskStatus.PENDING:
            task.started_at = task.started_at or now
        elif status in (TaskStatus.SUCCESS, TaskStatus.FAILED):
            task.completed_at = now
        task.result = result or task.result
        task.error_message = error_message or task.error_message
        return self.update(task)
