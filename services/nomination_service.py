"""
Nomination Service - Business Logic Layer.

Owns the reviewer nomination lifecycle:
- Quota sizing and whole-batch quota enforcement
- Batch creation for internal reviewers and external emails, with dedup
  against active (pending or accepted) nominations
- pending -> accepted | rejected transitions, and deletion while pending
- Read models that unify where review status is kept
"""
import logging
import re
from typing import Dict, List, Optional, Tuple

from fastapi import BackgroundTasks
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from config.settings import settings
from models.client import Client
from models.enums import NominationRequestStatus, ReviewStatus
from models.external_reviewer import ExternalReviewer
from models.participant_assessment import ParticipantAssessment
from models.reviewer_nomination import ReviewerNomination
from repositories import (
    CohortAssessmentRepository,
    ExternalReviewerRepository,
    ParticipantAssessmentRepository,
    ReviewerNominationRepository,
)
from repositories.external_reviewer_repository import normalize_email
from services.catalog_service import CatalogService
from services.errors import (
    NominationPermissionError,
    NominationStateError,
    NothingToNominateError,
    NotFoundError,
    QuotaExceededError,
    StoreUnavailableError,
)
from services.side_effects import InvitationSender
from services.types import (
    Catalog,
    ExternalNominee,
    InternalNominee,
    NominationBatchResult,
    NominationSummary,
    NominationView,
)

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _unique(values: List[str]) -> List[str]:
    seen = set()
    ordered = []
    for value in values:
        if value and value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


class NominationService:
    """Application service for reviewer nominations."""

    def __init__(self, db_session: Session, invitation_sender: Optional[InvitationSender] = None):
        self.db = db_session

        # Repositories
        self.nomination_repo = ReviewerNominationRepository(db_session)
        self.external_reviewer_repo = ExternalReviewerRepository(db_session)
        self.assessment_repo = ParticipantAssessmentRepository(db_session)
        self.cohort_assessment_repo = CohortAssessmentRepository(db_session)

        self.catalog_service = CatalogService(db_session)
        self.invitation_sender = invitation_sender or InvitationSender()

    # ============ QUOTA ============

    def active_quota(self, catalog: Catalog) -> int:
        """
        Maximum number of active nominations for assessments using `catalog`.

        An explicit quota on the question set wins; otherwise customized
        step-grouped question sets get the reduced quota.
        """
        if catalog.nomination_quota is not None:
            return catalog.nomination_quota
        if not catalog.is_system and catalog.is_step_grouped:
            return settings.CUSTOM_PULSE_NOMINATION_QUOTA
        return settings.DEFAULT_NOMINATION_QUOTA

    # ============ PARTICIPANT ASSESSMENTS ============

    def ensure_participant_assessment(self, participant_id: str, cohort_assessment_id: str) -> ParticipantAssessment:
        """Return the participant's record for a cohort assessment, creating it on first interaction."""
        try:
            if not self.cohort_assessment_repo.exists(cohort_assessment_id):
                raise NotFoundError(f"Cohort assessment {cohort_assessment_id} not found")
            return self.assessment_repo.get_or_create(participant_id, cohort_assessment_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailableError("Unable to load the participant assessment right now") from e

    # ============ CREATION ============

    def create_nominations(
        self,
        participant_assessment_id: str,
        nominated_by_id: str,
        reviewer_ids: Optional[List[str]] = None,
        external_emails: Optional[List[str]] = None,
        external_names: Optional[Dict[str, str]] = None,
        background_tasks: Optional[BackgroundTasks] = None,
    ) -> NominationBatchResult:
        """
        Nominate a batch of internal reviewers and external emails.

        The quota is checked against the nominations that would actually be
        created, after duplicates and invalid emails are dropped, not against
        the raw size of the request. A batch that does not fit is rejected
        whole. Already-active reviewers are skipped, and per-email failures
        are reported without aborting the rest of the batch.

        Args:
            participant_assessment_id: Assessment being reviewed
            nominated_by_id: Participant making the nominations
            reviewer_ids: Internal reviewer (client user) ids
            external_emails: External reviewer email addresses
            external_names: Optional display names keyed by email
            background_tasks: When given, invitations are sent after the response

        Returns:
            NominationBatchResult

        Raises:
            QuotaExceededError: the batch would exceed the active quota
            NothingToNominateError: every requested reviewer was skipped or failed
        """
        assessment = self._get_assessment(participant_assessment_id)
        if not assessment.allow_reviewer_nominations:
            raise NominationPermissionError("Reviewer nominations are disabled for this assessment")
        if nominated_by_id != assessment.participant_id:
            raise NominationPermissionError("Only the participant can nominate reviewers")

        catalog = self.catalog_service.resolve(assessment.cohort_assessment_id)
        quota = self.active_quota(catalog)
        names = {normalize_email(k): v for k, v in (external_names or {}).items()}

        result = NominationBatchResult()
        try:
            active = self.nomination_repo.list_active(participant_assessment_id)
            internal_ids, external_plan = self._plan_batch(
                assessment, nominated_by_id, reviewer_ids or [], external_emails or [], active, result
            )
        except SQLAlchemyError as e:
            raise StoreUnavailableError("Unable to load existing nominations right now") from e

        requested = len(internal_ids) + len(external_plan)
        if len(active) + requested > quota:
            remaining = max(quota - len(active), 0)
            raise QuotaExceededError(
                f"You can nominate {remaining} more reviewer(s) (quota {quota}); {requested} requested",
                remaining=remaining,
                quota=quota,
            )

        if requested == 0:
            self._raise_nothing_to_do(result)

        nominations = [
            ReviewerNomination(
                participant_assessment_id=participant_assessment_id,
                reviewer_id=reviewer_id,
                is_external=False,
                nominated_by_id=nominated_by_id,
            )
            for reviewer_id in internal_ids
        ]

        invitations = []
        client = external_plan[0][2] if external_plan else None
        for email, existing, _ in external_plan:
            try:
                reviewer = existing or self.external_reviewer_repo.get_or_create(
                    client_id=client.id,
                    email=email,
                    name=names.get(email),
                    invited_by=nominated_by_id,
                )
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.warning(f"Could not register external reviewer {email}: {e}")
                result.errors[email] = "Could not register this external reviewer"
                continue

            nominations.append(ReviewerNomination(
                participant_assessment_id=participant_assessment_id,
                external_reviewer_id=reviewer.id,
                is_external=True,
                nominated_by_id=nominated_by_id,
            ))
            if existing is None:
                invitations.append(
                    (email, self.invitation_sender.build_payload(reviewer, participant_assessment_id, nominated_by_id))
                )

        if not nominations:
            self._raise_nothing_to_do(result)

        try:
            nominations = self.nomination_repo.add_many(nominations)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Nomination insert failed for {participant_assessment_id}: {e}")
            raise StoreUnavailableError("Nominations could not be saved. Please try again.") from e

        for email, payload in invitations:
            if background_tasks is not None:
                background_tasks.add_task(self.invitation_sender.send, payload)
            elif not self.invitation_sender.send(payload):
                result.errors[email] = "Nominated, but the invitation could not be delivered"

        result.created = [nomination.id for nomination in nominations]
        result.remaining_capacity = max(quota - len(active) - len(nominations), 0)
        logger.info(
            f"Created {len(nominations)} nomination(s) for {participant_assessment_id}; "
            f"{len(result.skipped_duplicates)} skipped, {len(result.errors)} error(s)"
        )
        return result

    # ============ TRANSITIONS ============

    def accept(self, nomination_id: str, actor_id: str) -> ReviewerNomination:
        return self._transition(nomination_id, actor_id, NominationRequestStatus.ACCEPTED)

    def reject(self, nomination_id: str, actor_id: str) -> ReviewerNomination:
        return self._transition(nomination_id, actor_id, NominationRequestStatus.REJECTED)

    def delete(self, nomination_id: str, nominated_by_id: str) -> bool:
        """Withdraw a nomination; only its nominator may, and only while pending."""
        nomination = self.get_nomination(nomination_id)
        if nomination.nominated_by_id != nominated_by_id:
            raise NominationPermissionError("Only the nominator can withdraw this nomination")
        if nomination.request_status != NominationRequestStatus.PENDING.value:
            raise NominationStateError(
                f"Nomination is already {nomination.request_status} and can no longer be withdrawn"
            )
        try:
            return self.nomination_repo.delete(nomination)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailableError("The nomination could not be withdrawn. Please try again.") from e

    # ============ QUERIES ============

    def list_nominations(self, participant_assessment_id: str, include_rejected: bool = True) -> List[NominationView]:
        self._get_assessment(participant_assessment_id)
        try:
            nominations = self.nomination_repo.list_for_participant_assessment(
                participant_assessment_id, include_rejected=include_rejected
            )
            return [self._to_view(nomination) for nomination in nominations]
        except SQLAlchemyError as e:
            raise StoreUnavailableError("Unable to load nominations right now") from e

    def list_for_reviewer(self, reviewer_id: str) -> List[NominationView]:
        """Nominations addressed to an internal reviewer (their inbox)."""
        try:
            return [self._to_view(n) for n in self.nomination_repo.list_for_reviewer(reviewer_id)]
        except SQLAlchemyError as e:
            raise StoreUnavailableError("Unable to load nominations right now") from e

    def summary(self, participant_assessment_id: str) -> NominationSummary:
        assessment = self._get_assessment(participant_assessment_id)
        catalog = self.catalog_service.resolve(assessment.cohort_assessment_id)
        views = self.list_nominations(participant_assessment_id, include_rejected=False)

        accepted = [v for v in views if v.request_status == NominationRequestStatus.ACCEPTED.value]
        return NominationSummary(
            active=len(views),
            accepted=len(accepted),
            reviews_completed=len([v for v in accepted if v.review_status == ReviewStatus.COMPLETED.value]),
            quota=self.active_quota(catalog),
        )

    # ============ HELPERS ============

    def _plan_batch(
        self,
        assessment: ParticipantAssessment,
        nominated_by_id: str,
        reviewer_ids: List[str],
        external_emails: List[str],
        active: List[ReviewerNomination],
        result: NominationBatchResult,
    ) -> Tuple[List[str], List[Tuple[str, Optional[ExternalReviewer], Client]]]:
        """Split the request into what will be created, skipped, or reported as an error."""
        active_internal = {n.reviewer_id for n in active if not n.is_external}
        active_external = {n.external_reviewer_id for n in active if n.is_external}

        internal_ids = []
        for reviewer_id in _unique([r.strip() for r in reviewer_ids if r]):
            if reviewer_id in (assessment.participant_id, nominated_by_id):
                result.errors[reviewer_id] = "Participants cannot nominate themselves"
            elif reviewer_id in active_internal:
                result.skipped_duplicates.append(reviewer_id)
            else:
                internal_ids.append(reviewer_id)

        emails = _unique([normalize_email(e) for e in external_emails])
        if not emails:
            return internal_ids, []

        _, client = self.cohort_assessment_repo.get_client_for(assessment.cohort_assessment_id)
        external_plan = []
        for email in emails:
            error = self._validate_email(email, client)
            if error:
                result.errors[email] = error
                continue
            existing = self.external_reviewer_repo.get_by_client_and_email(client.id, email)
            if existing and existing.id in active_external:
                result.skipped_duplicates.append(email)
                continue
            external_plan.append((email, existing, client))
        return internal_ids, external_plan

    def _validate_email(self, email: str, client: Optional[Client]) -> Optional[str]:
        if client is None:
            return "No client is configured for this assessment"
        if not EMAIL_PATTERN.match(email):
            return "Invalid email address"
        if settings.EXTERNAL_REVIEWER_DOMAIN_CHECK and client.subdomain:
            required = f"{client.subdomain.lower()}.{settings.EXTERNAL_REVIEWER_DOMAIN_SUFFIX}"
            if not email.split("@", 1)[1].endswith(required):
                return f"Email must belong to the {required} domain"
        return None

    def _raise_nothing_to_do(self, result: NominationBatchResult) -> None:
        reason = (
            NothingToNominateError.ALL_FAILED
            if result.errors
            else NothingToNominateError.ALL_DUPLICATES
        )
        raise NothingToNominateError(reason, errors=result.errors)

    def _transition(
        self,
        nomination_id: str,
        actor_id: str,
        status: NominationRequestStatus,
    ) -> ReviewerNomination:
        nomination = self.get_nomination(nomination_id)
        nominee_id = nomination.external_reviewer_id if nomination.is_external else nomination.reviewer_id
        if actor_id != nominee_id:
            raise NominationPermissionError("Only the nominated reviewer can respond to this nomination")
        if nomination.request_status != NominationRequestStatus.PENDING.value:
            raise NominationStateError(f"Nomination is already {nomination.request_status}")

        try:
            nomination = self.nomination_repo.set_request_status(nomination, status.value)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailableError("The nomination could not be updated. Please try again.") from e

        logger.info(f"Nomination {nomination_id} {status.value}")
        return nomination

    def _to_view(self, nomination: ReviewerNomination) -> NominationView:
        if nomination.is_external:
            reviewer = self.external_reviewer_repo.get_by_id(nomination.external_reviewer_id)
            nominee = ExternalNominee(
                external_reviewer_id=nomination.external_reviewer_id,
                email=reviewer.email if reviewer else None,
            )
            review_status = reviewer.review_status if reviewer else None
        else:
            nominee = InternalNominee(reviewer_id=nomination.reviewer_id)
            review_status = nomination.review_status

        return NominationView(
            id=nomination.id,
            participant_assessment_id=nomination.participant_assessment_id,
            nominee=nominee,
            nominated_by_id=nomination.nominated_by_id,
            request_status=nomination.request_status,
            review_status=review_status,
            created_at=nomination.created_at,
        )

    def _get_assessment(self, participant_assessment_id: str) -> ParticipantAssessment:
        try:
            assessment = self.assessment_repo.get_by_id(participant_assessment_id)
        except SQLAlchemyError as e:
            raise StoreUnavailableError("Unable to load the participant assessment right now") from e
        if not assessment:
            raise NotFoundError(f"Participant assessment {participant_assessment_id} not found")
        return assessment

    def get_nomination(self, nomination_id: str) -> ReviewerNomination:
        try:
            nomination = self.nomination_repo.get_by_id(nomination_id)
        except SQLAlchemyError as e:
            raise StoreUnavailableError("Unable to load the nomination right now") from e
        if not nomination:
            raise NotFoundError(f"Nomination {nomination_id} not found")
        return nomination
