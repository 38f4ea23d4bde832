"""
Response session repository.

A session is keyed by its materialised `owner_key`; the unique constraint on
that column is what makes concurrent first-opens converge on one row.
"""
from datetime import datetime
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from models.enums import SessionStatus
from models.response_session import ResponseSession
from repositories.base_repository import BaseRepository


class ResponseSessionRepository(BaseRepository[ResponseSession]):
    """Repository for response sessions."""

    def __init__(self, db_session: Session):
        super().__init__(db_session, ResponseSession)

    def get_by_owner_key(self, owner_key: str) -> Optional[ResponseSession]:
        statement = select(ResponseSession).where(ResponseSession.owner_key == owner_key)
        return self.db.exec(statement).first()

    def get_or_create(self, session: ResponseSession) -> ResponseSession:
        """
        Insert `session` unless a row with the same owner key exists.

        A unique violation on insert means another request created the row
        first; the existing row is re-read and returned.

        Args:
            session: Unsaved session carrying the owner key and identity columns

        Returns:
            The single session for that owner
        """
        existing = self.get_by_owner_key(session.owner_key)
        if existing:
            return existing
        try:
            return self.create(session)
        except IntegrityError:
            self.db.rollback()
            existing = self.get_by_owner_key(session.owner_key)
            if existing is None:
                raise
            return existing

    def list_for_participant_assessment(
        self,
        participant_assessment_id: str,
        respondent_type: Optional[str] = None,
    ) -> List[ResponseSession]:
        statement = select(ResponseSession).where(
            ResponseSession.participant_assessment_id == participant_assessment_id
        )
        if respondent_type:
            statement = statement.where(ResponseSession.respondent_type == respondent_type)
        return list(self.db.exec(statement.order_by(ResponseSession.started_at)).all())

    def save_snapshot(
        self,
        session: ResponseSession,
        completion_percent: int,
        last_question_id: Optional[str],
        last_step_id: Optional[str],
    ) -> ResponseSession:
        """Overwrite the progress snapshot (last write wins)."""
        session.completion_percent = completion_percent
        session.last_question_id = last_question_id
        session.last_step_id = last_step_id
        session.updated_at = datetime.utcnow()
        return self.update(session)

    def mark_completed(self, session: ResponseSession) -> ResponseSession:
        now = datetime.utcnow()
        session.status = SessionStatus.COMPLETED.value
        session.completion_percent = 100
        session.submitted_at = now
        session.updated_at = now
        return self.update(session)

    def reset(self, session: ResponseSession) -> ResponseSession:
        """Return a session to its freshly-opened state, keeping its id."""
        now = datetime.utcnow()
        session.status = SessionStatus.IN_PROGRESS.value
        session.completion_percent = 0
        session.last_question_id = None
        session.last_step_id = None
        session.submitted_at = None
        session.started_at = now
        session.updated_at = now
        return self.update(session)
