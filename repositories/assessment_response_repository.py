"""
Assessment response repository: the response store.

Holds at most one row per (session, question). Writes are upserts so the
client can resend an answer (retry, double click) without creating
duplicates; clearing an answer keeps the row with `is_answered=False`.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Set
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from models.assessment_question import AssessmentQuestion
from models.assessment_response import AssessmentResponse
from repositories.base_repository import BaseRepository


@dataclass(frozen=True)
class ResponseRow:
    """A stored response joined with the ordering columns of its question."""
    question_id: str
    answer_text: Optional[str]
    is_answered: bool
    step_id: Optional[str]
    question_order: int


def has_content(answer_text: Optional[str]) -> bool:
    return answer_text is not None and answer_text.strip() != ""


class AssessmentResponseRepository(BaseRepository[AssessmentResponse]):
    """Repository for per-question answers."""

    def __init__(self, db_session: Session):
        super().__init__(db_session, AssessmentResponse)

    def get_for_question(self, session_id: str, question_id: str) -> Optional[AssessmentResponse]:
        statement = (
            select(AssessmentResponse)
            .where(AssessmentResponse.session_id == session_id)
            .where(AssessmentResponse.question_id == question_id)
        )
        return self.db.exec(statement).first()

    def _apply(self, response: AssessmentResponse, answer_text: Optional[str]) -> AssessmentResponse:
        answered = has_content(answer_text)
        response.answer_text = answer_text if answered else None
        response.is_answered = answered
        response.updated_at = datetime.utcnow()
        return self.update(response)

    def upsert(
        self,
        session_id: str,
        question_id: str,
        answer_text: Optional[str],
    ) -> Optional[AssessmentResponse]:
        """
        Insert or overwrite the answer to one question.

        Blank text clears an existing answer and is a no-op when there is no
        row yet. A concurrent insert of the same key surfaces as a unique
        violation, which is resolved by updating the row that won.

        Args:
            session_id: Owning response session
            question_id: Question being answered
            answer_text: Raw answer; whitespace-only counts as blank

        Returns:
            The stored row, or None when nothing needed storing
        """
        existing = self.get_for_question(session_id, question_id)
        if existing:
            return self._apply(existing, answer_text)

        if not has_content(answer_text):
            return None

        response = AssessmentResponse(
            session_id=session_id,
            question_id=question_id,
            answer_text=answer_text,
            is_answered=True,
        )
        try:
            return self.create(response)
        except IntegrityError:
            self.db.rollback()
            existing = self.get_for_question(session_id, question_id)
            if existing is None:
                raise
            return self._apply(existing, answer_text)

    def load_all(self, session_id: str) -> List[ResponseRow]:
        """All responses of a session, in question order."""
        statement = (
            select(AssessmentResponse, AssessmentQuestion.step_id, AssessmentQuestion.question_order)
            .join(AssessmentQuestion, AssessmentQuestion.id == AssessmentResponse.question_id)
            .where(AssessmentResponse.session_id == session_id)
            .order_by(AssessmentQuestion.question_order)
        )
        rows = []
        for response, step_id, question_order in self.db.exec(statement).all():
            rows.append(ResponseRow(
                question_id=response.question_id,
                answer_text=response.answer_text,
                is_answered=response.is_answered,
                step_id=step_id,
                question_order=question_order,
            ))
        return rows

    def answered_question_ids(self, session_id: str) -> Set[str]:
        statement = (
            select(AssessmentResponse.question_id)
            .where(AssessmentResponse.session_id == session_id)
            .where(AssessmentResponse.is_answered == True)  # noqa: E712
        )
        return set(self.db.exec(statement).all())

    def delete_for_session(self, session_id: str) -> int:
        """Remove every response of a session; returns the number deleted."""
        responses = self.find_by(session_id=session_id)
        for response in responses:
            self.db.delete(response)
        self.db.commit()
        return len(responses)
