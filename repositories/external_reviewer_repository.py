"""
External reviewer repository.

External reviewers are deduplicated per client by lower-cased email, so the
same person nominated twice is one row.
"""
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from models.external_reviewer import ExternalReviewer
from repositories.base_repository import BaseRepository


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


class ExternalReviewerRepository(BaseRepository[ExternalReviewer]):

    def __init__(self, db_session: Session):
        super().__init__(db_session, ExternalReviewer)

    def get_by_client_and_email(self, client_id: int, email: str) -> Optional[ExternalReviewer]:
        statement = (
            select(ExternalReviewer)
            .where(ExternalReviewer.client_id == client_id)
            .where(ExternalReviewer.email == normalize_email(email))
        )
        return self.db.exec(statement).first()

    def get_or_create(
        self,
        client_id: int,
        email: str,
        name: Optional[str] = None,
        invited_by: Optional[str] = None,
    ) -> ExternalReviewer:
        """Return the client's reviewer for `email`, creating it on first use.

        Args:
            client_id: Owning client
            email: Reviewer email (normalised before lookup and insert)
            name: Display name for a newly created reviewer
            invited_by: Participant id recorded on creation

        Returns:
            ExternalReviewer instance
        """
        existing = self.get_by_client_and_email(client_id, email)
        if existing:
            return existing

        reviewer = ExternalReviewer(
            client_id=client_id,
            email=normalize_email(email),
            name=name,
            invited_by=invited_by,
        )
        try:
            return self.create(reviewer)
        except IntegrityError:
            self.db.rollback()
            existing = self.get_by_client_and_email(client_id, email)
            if existing is None:
                raise
            return existing

    def set_review_status(self, reviewer: ExternalReviewer, review_status: str) -> ExternalReviewer:
        reviewer.review_status = review_status
        return self.update(reviewer)
