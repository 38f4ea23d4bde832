"""
Reviewer nomination repository.

"Active" nominations are those pending or accepted; they consume quota and
block re-nominating the same reviewer. Rejected rows are kept for history.
"""
from datetime import datetime
from typing import List, Optional
from sqlmodel import Session, select, func

from models.enums import ACTIVE_REQUEST_STATUSES, NominationRequestStatus, ReviewStatus
from models.reviewer_nomination import ReviewerNomination
from repositories.base_repository import BaseRepository


class ReviewerNominationRepository(BaseRepository[ReviewerNomination]):
    """Repository for reviewer nominations."""

    def __init__(self, db_session: Session):
        super().__init__(db_session, ReviewerNomination)

    def list_for_participant_assessment(
        self,
        participant_assessment_id: str,
        include_rejected: bool = True,
    ) -> List[ReviewerNomination]:
        statement = select(ReviewerNomination).where(
            ReviewerNomination.participant_assessment_id == participant_assessment_id
        )
        if not include_rejected:
            statement = statement.where(ReviewerNomination.request_status.in_(ACTIVE_REQUEST_STATUSES))
        return list(self.db.exec(statement.order_by(ReviewerNomination.created_at)).all())

    def list_active(self, participant_assessment_id: str) -> List[ReviewerNomination]:
        return self.list_for_participant_assessment(participant_assessment_id, include_rejected=False)

    def count_active(self, participant_assessment_id: str) -> int:
        statement = (
            select(func.count(ReviewerNomination.id))
            .where(ReviewerNomination.participant_assessment_id == participant_assessment_id)
            .where(ReviewerNomination.request_status.in_(ACTIVE_REQUEST_STATUSES))
        )
        return self.db.exec(statement).one()

    def list_for_reviewer(self, reviewer_id: str) -> List[ReviewerNomination]:
        """Nominations addressed to an internal reviewer, newest first."""
        statement = (
            select(ReviewerNomination)
            .where(ReviewerNomination.reviewer_id == reviewer_id)
            .where(ReviewerNomination.is_external == False)  # noqa: E712
            .order_by(ReviewerNomination.created_at.desc())
        )
        return list(self.db.exec(statement).all())

    def add_many(self, nominations: List[ReviewerNomination]) -> List[ReviewerNomination]:
        """Insert a batch of nominations in a single commit."""
        for nomination in nominations:
            self.db.add(nomination)
        self.db.commit()
        for nomination in nominations:
            self.db.refresh(nomination)
        return nominations

    def set_request_status(self, nomination: ReviewerNomination, status: str) -> ReviewerNomination:
        nomination.request_status = status
        nomination.updated_at = datetime.utcnow()
        return self.update(nomination)

    def set_review_status(
        self,
        nomination: ReviewerNomination,
        review_status: str,
        submitted_at: Optional[datetime] = None,
    ) -> ReviewerNomination:
        nomination.review_status = review_status
        nomination.review_submitted_at = submitted_at
        nomination.updated_at = datetime.utcnow()
        return self.update(nomination)

    def is_active(self, nomination: ReviewerNomination) -> bool:
        return nomination.request_status in ACTIVE_REQUEST_STATUSES

    def count_completed_reviews(self, participant_assessment_id: str) -> int:
        """Accepted internal nominations whose review is completed."""
        statement = (
            select(func.count(ReviewerNomination.id))
            .where(ReviewerNomination.participant_assessment_id == participant_assessment_id)
            .where(ReviewerNomination.request_status == NominationRequestStatus.ACCEPTED.value)
            .where(ReviewerNomination.review_status == ReviewStatus.COMPLETED.value)
        )
        return self.db.exec(statement).one()
