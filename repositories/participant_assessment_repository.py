"""
Participant assessment repository.

Handles the per-participant record whose `status` mirrors the participant's
own response session.
"""
from datetime import datetime
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from models.participant_assessment import ParticipantAssessment
from repositories.base_repository import BaseRepository


class ParticipantAssessmentRepository(BaseRepository[ParticipantAssessment]):
    """Repository for participant assessments."""

    def __init__(self, db_session: Session):
        super().__init__(db_session, ParticipantAssessment)

    def get_for_participant(
        self,
        participant_id: str,
        cohort_assessment_id: str,
    ) -> Optional[ParticipantAssessment]:
        statement = (
            select(ParticipantAssessment)
            .where(ParticipantAssessment.participant_id == participant_id)
            .where(ParticipantAssessment.cohort_assessment_id == cohort_assessment_id)
            .order_by(ParticipantAssessment.created_at)
        )
        return self.db.exec(statement).first()

    def get_or_create(self, participant_id: str, cohort_assessment_id: str) -> ParticipantAssessment:
        """Return the participant's record for a cohort assessment, creating it if needed.

        Args:
            participant_id: Client user id of the participant
            cohort_assessment_id: Cohort assessment the record belongs to

        Returns:
            ParticipantAssessment instance
        """
        existing = self.get_for_participant(participant_id, cohort_assessment_id)
        if existing:
            return existing

        record = ParticipantAssessment(
            participant_id=participant_id,
            cohort_assessment_id=cohort_assessment_id,
        )
        try:
            return self.create(record)
        except IntegrityError:
            self.db.rollback()
            existing = self.get_for_participant(participant_id, cohort_assessment_id)
            if existing is None:
                raise
            return existing

    def set_status(
        self,
        participant_assessment: ParticipantAssessment,
        status: str,
        submitted_at: Optional[datetime] = None,
    ) -> ParticipantAssessment:
        """Write the cached status; `submitted_at` is replaced, including with None."""
        participant_assessment.status = status
        participant_assessment.submitted_at = submitted_at
        return self.update(participant_assessment)
