"""
Assessment status driver.

`ParticipantAssessment.status` is a cached projection of the participant's
response session. Every participant session load re-derives it and repairs
drift (e.g. a write that stored the answer but never reached the status
update). Drift is staleness, not an error.
"""
import logging
from datetime import datetime
from typing import Optional

from models.enums import AssessmentStatus, SessionStatus
from models.participant_assessment import ParticipantAssessment
from models.response_session import ResponseSession
from repositories.participant_assessment_repository import ParticipantAssessmentRepository

logger = logging.getLogger(__name__)


def derive_status(session: Optional[ResponseSession], answered_count: int) -> AssessmentStatus:
    """Status implied by the session snapshot and the number of stored answers."""
    if session is None and answered_count <= 0:
        return AssessmentStatus.NOT_STARTED
    if session is not None:
        if session.status == SessionStatus.COMPLETED.value or session.completion_percent == 100:
            return AssessmentStatus.COMPLETED
        if 0 < session.completion_percent < 100:
            return AssessmentStatus.IN_PROGRESS
    if answered_count > 0:
        return AssessmentStatus.IN_PROGRESS
    return AssessmentStatus.NOT_STARTED


def reconcile_status(
    repo: ParticipantAssessmentRepository,
    assessment: ParticipantAssessment,
    derived: AssessmentStatus,
    submitted_at: Optional[datetime] = None,
) -> ParticipantAssessment:
    """
    Bring the cached status in line with `derived`, writing only on mismatch.

    Args:
        repo: Repository used for the write
        assessment: Participant assessment to repair
        derived: Result of derive_status
        submitted_at: Submission time to record when the derived status is Completed
    """
    if assessment.status == derived.value:
        return assessment

    logger.info(
        f"Repairing stale status of participant assessment {assessment.id}: "
        f"{assessment.status!r} -> {derived.value!r}"
    )
    if derived == AssessmentStatus.COMPLETED:
        stamp = assessment.submitted_at or submitted_at or datetime.utcnow()
    else:
        stamp = None
    return repo.set_status(assessment, derived.value, submitted_at=stamp)
