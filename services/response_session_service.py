"""
Response Session Service - Business Logic Layer.

Owns the respondent-facing write path:
- Session lookup-or-create per owner (participant or nominated reviewer)
- Answer upserts and the progress snapshot written after each answer
- Completion, with the completion percentage forced to 100
- Retake of a completed assessment, resetting the session in place
- Status repair of the participant assessment on every participant load

Every step is its own committed round trip; the next load rebuilds state
from stored rows only.
"""
import logging
from datetime import datetime
from typing import Optional, Set, Tuple

from fastapi import BackgroundTasks
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from models.enums import (
    AssessmentStatus,
    NominationRequestStatus,
    ReportTrigger,
    RespondentType,
    ReviewStatus,
    SessionStatus,
)
from models.participant_assessment import ParticipantAssessment
from models.response_session import ResponseSession
from models.reviewer_nomination import ReviewerNomination
from repositories import (
    AssessmentResponseRepository,
    ExternalReviewerRepository,
    ParticipantAssessmentRepository,
    ResponseSessionRepository,
    ReviewerNominationRepository,
)
from services.catalog_service import CatalogService
from services.errors import (
    InvalidRespondentError,
    NotFoundError,
    ResponseWriteError,
    SessionStateError,
    StoreUnavailableError,
)
from services.progress import calculate_progress
from services.resume import resolve_resume_position
from services.side_effects import ReportRegenerator
from services.status_driver import derive_status, reconcile_status
from services.types import (
    AdvanceResult,
    Catalog,
    OwnerKey,
    ParticipantRespondent,
    Progress,
    RespondentRef,
    ResumePosition,
    ReviewerRespondent,
    SessionView,
)

logger = logging.getLogger(__name__)


class ResponseSessionService:
    """
    Application service for response sessions.

    Responsibilities:
    - Validate the respondent against the participant assessment and nomination
    - Create and load sessions, and compute the resume position once per load
    - Persist answers and the progress snapshot
    - Drive participant assessment and review statuses
    - Trigger report regeneration after completion
    """

    def __init__(self, db_session: Session, report_regenerator: Optional[ReportRegenerator] = None):
        self.db = db_session

        # Repositories
        self.session_repo = ResponseSessionRepository(db_session)
        self.response_repo = AssessmentResponseRepository(db_session)
        self.assessment_repo = ParticipantAssessmentRepository(db_session)
        self.nomination_repo = ReviewerNominationRepository(db_session)
        self.external_reviewer_repo = ExternalReviewerRepository(db_session)

        self.catalog_service = CatalogService(db_session)
        self.report_regenerator = report_regenerator or ReportRegenerator(engine=db_session.get_bind())

    # ============ SESSION LIFECYCLE ============

    def get_or_create_session(
        self,
        participant_assessment_id: str,
        respondent: RespondentRef,
        catalog: Optional[Catalog] = None,
    ) -> ResponseSession:
        """
        Return the single session of an owner, creating it on first use.

        Args:
            participant_assessment_id: Assessment being answered (or reviewed)
            respondent: ParticipantRespondent or ReviewerRespondent
            catalog: Already-resolved catalog, resolved here when omitted

        Returns:
            ResponseSession (new sessions start in_progress at 0%)
        """
        if catalog is None:
            catalog = self.catalog_service.resolve_for_participant_assessment(participant_assessment_id)
        assessment = self._get_assessment(participant_assessment_id)
        owner_key, nomination = self._resolve_owner(assessment, respondent, catalog)

        candidate = ResponseSession(
            owner_key=owner_key.as_string(),
            participant_assessment_id=assessment.id,
            assessment_definition_id=catalog.question_set_id,
            respondent_type=owner_key.respondent_type,
            reviewer_nomination_id=owner_key.nomination_id,
            status=SessionStatus.IN_PROGRESS.value,
            completion_percent=0,
        )
        if nomination is not None:
            if nomination.is_external:
                candidate.respondent_external_reviewer_id = nomination.external_reviewer_id
            else:
                candidate.respondent_client_user_id = nomination.reviewer_id

        try:
            session = self.session_repo.get_or_create(candidate)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Could not open session for owner {owner_key.as_string()}: {e}")
            raise StoreUnavailableError("Unable to open the response session right now") from e

        return session

    def open_session(self, participant_assessment_id: str, respondent: RespondentRef) -> SessionView:
        """
        Load (or start) a respondent's session with everything needed to render it.

        The resume position is computed here, once per load. Participant
        loads also repair a drifted assessment status.
        """
        catalog = self.catalog_service.resolve_for_participant_assessment(participant_assessment_id)
        session = self.get_or_create_session(participant_assessment_id, respondent, catalog)

        try:
            rows = self.response_repo.load_all(session.id)
        except SQLAlchemyError as e:
            raise StoreUnavailableError("Unable to load saved answers right now") from e

        answers = {row.question_id: row.answer_text for row in rows if row.is_answered}
        answered_ids = set(answers.keys())
        progress = calculate_progress(catalog, answered_ids)

        assessment = self._get_assessment(participant_assessment_id)
        if session.respondent_type == RespondentType.PARTICIPANT.value:
            assessment = self._repair_status(assessment, session, answered_ids)

        resume = resolve_resume_position(session.status, session.last_question_id, catalog, answered_ids)

        return SessionView(
            session=session,
            catalog=catalog,
            answers=answers,
            resume=resume,
            progress=progress,
            assessment_status=assessment.status,
        )

    def advance(
        self,
        session_id: str,
        question_id: str,
        answer_text: Optional[str],
        background_tasks: Optional[BackgroundTasks] = None,
    ) -> AdvanceResult:
        """
        Store an answer (blank clears it) and move past the question.

        Answering the last question of the flat ordering completes the session.

        Raises:
            ResponseWriteError: the answer or snapshot was not stored; do not advance
        """
        session = self._get_session(session_id)
        if session.status == SessionStatus.COMPLETED.value:
            raise SessionStateError("Session is already completed; retake the assessment to answer again")

        catalog = self.catalog_service.load_definition(session.assessment_definition_id)
        question_index = catalog.index_of(question_id)
        if question_index < 0:
            raise NotFoundError(f"Question {question_id} is not part of this question set")

        try:
            self.response_repo.upsert(session.id, question_id, answer_text)
            progress = calculate_progress(catalog, self.response_repo.answered_question_ids(session.id))
            session = self.session_repo.save_snapshot(
                session,
                completion_percent=progress.percentage,
                last_question_id=question_id,
                last_step_id=catalog.step_id_for_question(question_id),
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Answer write failed for session {session_id}, question {question_id}: {e}")
            raise ResponseWriteError("Your answer could not be saved. Please try again.") from e

        if progress.answered > 0:
            self._mark_started(session)

        last_index = len(catalog.flat_questions) - 1
        if question_index >= last_index:
            session = self._finish(session, catalog, question_id, background_tasks)
            return AdvanceResult(
                session=session,
                progress=Progress(answered=progress.answered, total=progress.total, percentage=100),
                next_position=None,
                completed=True,
            )

        next_index = question_index + 1
        return AdvanceResult(
            session=session,
            progress=progress,
            next_position=ResumePosition(
                question_index=next_index,
                step_index=catalog.step_index_for(next_index),
            ),
            completed=False,
        )

    def complete(
        self,
        session_id: str,
        question_id: Optional[str] = None,
        answer_text: Optional[str] = None,
        background_tasks: Optional[BackgroundTasks] = None,
    ) -> ResponseSession:
        """
        Complete a session, optionally storing a final answer first.

        Unanswered questions (required or not) do not block completion.
        Completing an already completed session is a no-op.
        """
        session = self._get_session(session_id)
        if session.status == SessionStatus.COMPLETED.value:
            return session

        catalog = self.catalog_service.load_definition(session.assessment_definition_id)
        if question_id:
            if catalog.index_of(question_id) < 0:
                raise NotFoundError(f"Question {question_id} is not part of this question set")
            try:
                self.response_repo.upsert(session.id, question_id, answer_text)
            except SQLAlchemyError as e:
                self.db.rollback()
                raise ResponseWriteError("Your answer could not be saved. Please try again.") from e

        return self._finish(session, catalog, question_id or session.last_question_id, background_tasks)

    def retake(self, participant_assessment_id: str) -> ResponseSession:
        """
        Reopen a completed assessment for the participant.

        Responses are deleted and the existing session is reset in place, so
        the session id survives and no second session is created.

        Raises:
            SessionStateError: the assessment is not completed or has no participant session
        """
        assessment = self._get_assessment(participant_assessment_id)
        if assessment.status != AssessmentStatus.COMPLETED.value:
            raise SessionStateError("Only a completed assessment can be retaken")

        try:
            sessions = self.session_repo.list_for_participant_assessment(
                participant_assessment_id, respondent_type=RespondentType.PARTICIPANT.value
            )
        except SQLAlchemyError as e:
            raise StoreUnavailableError("Unable to load the response session right now") from e
        if not sessions:
            raise SessionStateError("No participant session exists for this assessment")
        session = sessions[-1]

        try:
            deleted = self.response_repo.delete_for_session(session.id)
            session = self.session_repo.reset(session)
            self.assessment_repo.set_status(assessment, AssessmentStatus.NOT_STARTED.value, submitted_at=None)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Retake failed for participant assessment {participant_assessment_id}: {e}")
            raise ResponseWriteError("The assessment could not be reset. Please try again.") from e

        logger.info(f"Retake of {participant_assessment_id}: session {session.id} reset, {deleted} responses removed")
        return session

    # ============ QUERIES ============

    def get_session(self, session_id: str) -> ResponseSession:
        return self._get_session(session_id)

    def get_progress(self, session_id: str) -> Progress:
        """Progress recomputed from stored answers, never from the cached snapshot."""
        session = self._get_session(session_id)
        catalog = self.catalog_service.load_definition(session.assessment_definition_id)
        return calculate_progress(catalog, self._answered_ids(session.id))

    def get_resume_position(self, session_id: str) -> ResumePosition:
        session = self._get_session(session_id)
        catalog = self.catalog_service.load_definition(session.assessment_definition_id)
        return resolve_resume_position(
            session.status, session.last_question_id, catalog, self._answered_ids(session.id)
        )

    # ============ HELPERS ============

    def _get_session(self, session_id: str) -> ResponseSession:
        try:
            session = self.session_repo.get_by_id(session_id)
        except SQLAlchemyError as e:
            raise StoreUnavailableError("Unable to load the response session right now") from e
        if not session:
            raise NotFoundError(f"Response session {session_id} not found")
        return session

    def _get_assessment(self, participant_assessment_id: str) -> ParticipantAssessment:
        try:
            assessment = self.assessment_repo.get_by_id(participant_assessment_id)
        except SQLAlchemyError as e:
            raise StoreUnavailableError("Unable to load the participant assessment right now") from e
        if not assessment:
            raise NotFoundError(f"Participant assessment {participant_assessment_id} not found")
        return assessment

    def _answered_ids(self, session_id: str) -> Set[str]:
        try:
            return self.response_repo.answered_question_ids(session_id)
        except SQLAlchemyError as e:
            raise StoreUnavailableError("Unable to load saved answers right now") from e

    def _resolve_owner(
        self,
        assessment: ParticipantAssessment,
        respondent: RespondentRef,
        catalog: Catalog,
    ) -> Tuple[OwnerKey, Optional[ReviewerNomination]]:
        """Validate the respondent and build its owner key."""
        if isinstance(respondent, ParticipantRespondent):
            owner_key = OwnerKey(
                participant_assessment_id=assessment.id,
                question_set_id=catalog.question_set_id,
                respondent_type=RespondentType.PARTICIPANT.value,
            )
            return owner_key, None

        if not isinstance(respondent, ReviewerRespondent):
            raise InvalidRespondentError(f"Unsupported respondent: {respondent!r}")

        try:
            nomination = self.nomination_repo.get_by_id(respondent.nomination_id)
        except SQLAlchemyError as e:
            raise StoreUnavailableError("Unable to load the nomination right now") from e
        if not nomination:
            raise NotFoundError(f"Nomination {respondent.nomination_id} not found")
        if nomination.participant_assessment_id != assessment.id:
            raise InvalidRespondentError("Nomination does not belong to this assessment")
        if nomination.request_status != NominationRequestStatus.ACCEPTED.value:
            raise InvalidRespondentError("The nomination has not been accepted")
        if not nomination.is_external and respondent.reviewer_id and respondent.reviewer_id != nomination.reviewer_id:
            raise InvalidRespondentError("This nomination was addressed to a different reviewer")

        owner_key = OwnerKey(
            participant_assessment_id=assessment.id,
            question_set_id=catalog.question_set_id,
            respondent_type=RespondentType.REVIEWER.value,
            nomination_id=nomination.id,
        )
        return owner_key, nomination

    def _repair_status(
        self,
        assessment: ParticipantAssessment,
        session: ResponseSession,
        answered_ids: Set[str],
    ) -> ParticipantAssessment:
        derived = derive_status(session, len(answered_ids))
        try:
            return reconcile_status(self.assessment_repo, assessment, derived, submitted_at=session.submitted_at)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning(f"Status repair of {assessment.id} deferred to the next load: {e}")
            return assessment

    def _mark_started(self, session: ResponseSession) -> None:
        """Move the owner from not started to in progress after its first answer."""
        try:
            if session.respondent_type == RespondentType.PARTICIPANT.value:
                assessment = self.assessment_repo.get_by_id(session.participant_assessment_id)
                if assessment and assessment.status == AssessmentStatus.NOT_STARTED.value:
                    self.assessment_repo.set_status(assessment, AssessmentStatus.IN_PROGRESS.value)
            else:
                self._set_review_status(session, ReviewStatus.IN_PROGRESS, only_if_not_started=True)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning(f"Could not mark session {session.id} as started: {e}")

    def _finish(
        self,
        session: ResponseSession,
        catalog: Catalog,
        last_question_id: Optional[str],
        background_tasks: Optional[BackgroundTasks],
    ) -> ResponseSession:
        if last_question_id:
            session.last_question_id = last_question_id
            session.last_step_id = catalog.step_id_for_question(last_question_id)
        try:
            session = self.session_repo.mark_completed(session)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Completion failed for session {session.id}: {e}")
            raise ResponseWriteError("The assessment could not be submitted. Please try again.") from e

        participant_assessment_id = session.participant_assessment_id
        if session.respondent_type == RespondentType.PARTICIPANT.value:
            try:
                assessment = self.assessment_repo.get_by_id(participant_assessment_id)
                if assessment:
                    self.assessment_repo.set_status(
                        assessment, AssessmentStatus.COMPLETED.value, submitted_at=session.submitted_at
                    )
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.warning(f"Assessment status of {participant_assessment_id} left stale: {e}")

            if catalog.is_step_grouped:
                self.report_regenerator.schedule(
                    participant_assessment_id, background_tasks, trigger=ReportTrigger.PARTICIPANT_SUBMITTED
                )
        else:
            try:
                self._set_review_status(session, ReviewStatus.COMPLETED, submitted_at=session.submitted_at)
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.warning(f"Review status of session {session.id} left stale: {e}")

            if self.report_regenerator.report_exists(participant_assessment_id):
                self.report_regenerator.schedule(
                    participant_assessment_id, background_tasks, trigger=ReportTrigger.REVIEW_SUBMITTED
                )

        logger.info(f"Session {session.id} completed ({session.respondent_type})")
        return session

    def _set_review_status(
        self,
        session: ResponseSession,
        review_status: ReviewStatus,
        submitted_at: Optional[datetime] = None,
        only_if_not_started: bool = False,
    ) -> None:
        """External reviews track status on the ExternalReviewer row, internal ones on the nomination."""
        nomination = self.nomination_repo.get_by_id(session.reviewer_nomination_id)
        if not nomination:
            return

        if nomination.is_external:
            reviewer = self.external_reviewer_repo.get_by_id(nomination.external_reviewer_id)
            if reviewer and not (only_if_not_started and reviewer.review_status != ReviewStatus.NOT_STARTED.value):
                self.external_reviewer_repo.set_review_status(reviewer, review_status.value)
            if submitted_at:
                self.nomination_repo.set_review_status(nomination, nomination.review_status, submitted_at)
            return

        if only_if_not_started and nomination.review_status != ReviewStatus.NOT_STARTED.value:
            return
        self.nomination_repo.set_review_status(nomination, review_status.value, submitted_at)
