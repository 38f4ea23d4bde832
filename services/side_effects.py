"""
Fire-and-forget side effects of the workflow.

Both side effects run at most once per trigger and are never retried. A
failure is logged (and recorded on the BackgroundTask row where one exists)
but never propagates into the session, status or nomination write that
triggered it.
"""
import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional

import httpx
from fastapi import BackgroundTasks
from sqlalchemy.engine import Engine
from sqlmodel import Session

from config.settings import settings
from models.external_reviewer import ExternalReviewer
from models.enums import ReportTrigger, TaskStatus
from models.participant_assessment import ParticipantAssessment
from repositories.assessment_report_repository import AssessmentReportRepository
from repositories.background_task_repository import BackgroundTaskRepository
from utils.database import get_engine

logger = logging.getLogger(__name__)

REPORT_TASK_TYPE = "report_regeneration"
REPORT_TYPE = "pulse"


class InvitationSender:
    """Delivers external reviewer invitations to the configured webhook."""

    def __init__(self, webhook_url: Optional[str] = None, timeout: Optional[float] = None):
        self.webhook_url = webhook_url if webhook_url is not None else settings.INVITATION_WEBHOOK_URL
        self.timeout = timeout or settings.INVITATION_TIMEOUT_SECONDS

    def build_payload(
        self,
        reviewer: ExternalReviewer,
        participant_assessment_id: str,
        nominated_by_id: str,
    ) -> Dict[str, Any]:
        return {
            "event": "external_reviewer_invited",
            "external_reviewer_id": reviewer.id,
            "email": reviewer.email,
            "name": reviewer.name,
            "client_id": reviewer.client_id,
            "participant_assessment_id": participant_assessment_id,
            "nominated_by_id": nominated_by_id,
        }

    def send(self, payload: Dict[str, Any]) -> bool:
        """
        Deliver one invitation built by `build_payload`.

        The payload is a plain dict so the call can run after the request's
        database session is closed.

        Returns:
            True when delivered (or when no webhook is configured), False on failure
        """
        if not self.webhook_url:
            logger.info(f"No invitation webhook configured; invitation for {payload.get('email')} logged only")
            return True

        try:
            response = httpx.post(self.webhook_url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"Invitation for external reviewer {payload.get('external_reviewer_id')} failed: {e}")
            return False

        logger.info(f"Invitation sent to external reviewer {payload.get('external_reviewer_id')}")
        return True


class ReportRegenerator:
    """
    Refreshes the stored report of a participant assessment.

    Each trigger records a BackgroundTask row (INITIATED -> PENDING ->
    SUCCESS/FAILED). With FastAPI BackgroundTasks the work runs after the
    response is sent; without them it runs inline.
    """

    def __init__(self, engine: Optional[Engine] = None):
        self._engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine or get_engine()

    def report_exists(self, participant_assessment_id: str) -> bool:
        """Whether a report was already generated; lookup failures count as no."""
        try:
            with Session(self.engine) as db:
                return AssessmentReportRepository(db).get_for(participant_assessment_id, REPORT_TYPE) is not None
        except Exception as e:
            logger.warning(f"Could not check report of {participant_assessment_id}: {e}")
            return False

    def schedule(
        self,
        participant_assessment_id: str,
        background_tasks: Optional[BackgroundTasks] = None,
        trigger: ReportTrigger = ReportTrigger.PARTICIPANT_SUBMITTED,
    ) -> Optional[str]:
        """
        Queue a regeneration.

        Returns:
            BackgroundTask id, or None when disabled or the task could not be recorded
        """
        if not settings.AUTO_REGENERATE_REPORTS:
            logger.info(f"Report regeneration disabled, skipping for {participant_assessment_id}")
            return None

        try:
            with Session(self.engine) as db:
                task = BackgroundTaskRepository(db).record_attempt(
                    REPORT_TASK_TYPE, participant_assessment_id, trigger=trigger.value
                )
                task_id = task.id
        except Exception as e:
            logger.error(f"Failed to queue report regeneration for {participant_assessment_id}: {e}")
            return None

        if background_tasks is not None:
            background_tasks.add_task(self.regenerate, participant_assessment_id, task_id)
        else:
            self.regenerate(participant_assessment_id, task_id)
        return task_id

    def regenerate(self, participant_assessment_id: str, task_id: Optional[str] = None) -> bool:
        """Upsert the report pointer. Never raises."""
        try:
            self._set_task_status(task_id, TaskStatus.PENDING)

            with Session(self.engine) as db:
                assessment = db.get(ParticipantAssessment, participant_assessment_id)
                if not assessment:
                    raise LookupError(f"Participant assessment {participant_assessment_id} not found")

                report = AssessmentReportRepository(db).upsert(
                    participant_assessment_id=participant_assessment_id,
                    report_type=REPORT_TYPE,
                    storage_path=f"{settings.REPORT_STORAGE_PREFIX}/{participant_assessment_id}.pdf",
                    source_updated_at=datetime.utcnow(),
                )
                result = {"report_id": report.id, "storage_path": report.storage_path}

            self._set_task_status(task_id, TaskStatus.SUCCESS, result=json.dumps(result))
            logger.info(f"Report regenerated for participant assessment {participant_assessment_id}")
            return True

        except Exception as e:
            logger.error(f"Report regeneration failed for {participant_assessment_id}: {e}")
            try:
                self._set_task_status(task_id, TaskStatus.FAILED, error_message=str(e))
            except Exception as status_error:
                logger.error(f"Could not record failure of task {task_id}: {status_error}")
            return False

    def _set_task_status(self, task_id: Optional[str], status: TaskStatus, **kwargs) -> None:
        if not task_id:
            return
        with Session(self.engine) as db:
            BackgroundTaskRepository(db).transition(task_id, status, **kwargs)
