"""
Unit tests for NominationService.

Covers quota enforcement, dedup, external reviewer reuse, partial failures
and the pending -> accepted | rejected lifecycle.
Run: pytest tests/unit/test_nomination_service.py -v
"""

import sys
from pathlib import Path

# Add project root to Python path (for direct invocation)
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import pytest
from sqlmodel import select

from config.settings import settings
from models import AssessmentDefinition, AssessmentType, ExternalReviewer, ReviewerNomination
from models.enums import NominationRequestStatus, ReviewStatus
from services import InvitationSender, NominationService
from services.catalog_service import build_catalog
from services.errors import (
    NominationPermissionError,
    NominationStateError,
    NothingToNominateError,
    NotFoundError,
    QuotaExceededError,
)

PARTICIPANT_ID = "participant-1"


class FailingSender(InvitationSender):
    def __init__(self):
        super().__init__(webhook_url="")
        self.sent = []

    def send(self, payload):
        self.sent.append(payload)
        return False


def nominations_for(db, seeded):
    return db.exec(
        select(ReviewerNomination).where(ReviewerNomination.participant_assessment_id == seeded.assessment.id)
    ).all()


# ---------------------------------------------------------------------------
# Quota
# ---------------------------------------------------------------------------

class TestActiveQuota:

    def _catalog(self, is_system, step_grouped, quota=None):
        definition = AssessmentDefinition(
            id="def", assessment_type_id="type", name="Form", is_system=is_system, nomination_quota=quota
        )
        assessment_type = AssessmentType(id="type", name="Form", is_step_grouped=step_grouped)
        return build_catalog(definition, assessment_type, [], [])

    def test_customized_step_grouped_gets_reduced_quota(self, nomination_service):
        assert nomination_service.active_quota(self._catalog(is_system=False, step_grouped=True)) == 3

    def test_system_definition_gets_default_quota(self, nomination_service):
        assert nomination_service.active_quota(self._catalog(is_system=True, step_grouped=True)) == 10
        assert nomination_service.active_quota(self._catalog(is_system=False, step_grouped=False)) == 10

    def test_explicit_quota_wins(self, nomination_service):
        assert nomination_service.active_quota(self._catalog(is_system=True, step_grouped=False, quota=5)) == 5


class TestQuotaEnforcement:

    def test_batch_over_quota_is_rejected_whole(self, db, nomination_service, make_assessment):
        seeded = make_assessment(step_sizes=None, nomination_quota=3)
        nomination_service.create_nominations(seeded.assessment.id, PARTICIPANT_ID, reviewer_ids=["r1", "r2"])

        with pytest.raises(QuotaExceededError) as exc_info:
            nomination_service.create_nominations(seeded.assessment.id, PARTICIPANT_ID, reviewer_ids=["r3", "r4"])

        assert exc_info.value.remaining == 1
        assert exc_info.value.quota == 3
        assert len(nominations_for(db, seeded)) == 2

    def test_batch_within_quota_succeeds(self, db, nomination_service, make_assessment):
        seeded = make_assessment(step_sizes=None, nomination_quota=3)
        nomination_service.create_nominations(seeded.assessment.id, PARTICIPANT_ID, reviewer_ids=["r1", "r2"])

        result = nomination_service.create_nominations(seeded.assessment.id, PARTICIPANT_ID, reviewer_ids=["r3"])

        assert len(result.created) == 1
        assert result.remaining_capacity == 0
        assert len(nominations_for(db, seeded)) == 3

    def test_rejected_nominations_free_quota(self, nomination_service, make_assessment):
        seeded = make_assessment(step_sizes=None, nomination_quota=1)
        first = nomination_service.create_nominations(seeded.assessment.id, PARTICIPANT_ID, reviewer_ids=["r1"])
        nomination_service.reject(first.created[0], "r1")

        result = nomination_service.create_nominations(seeded.assessment.id, PARTICIPANT_ID, reviewer_ids=["r2"])

        assert len(result.created) == 1

    def test_duplicates_do_not_count_against_quota(self, nomination_service, make_assessment):
        seeded = make_assessment(step_sizes=None, nomination_quota=2)
        nomination_service.create_nominations(seeded.assessment.id, PARTICIPANT_ID, reviewer_ids=["r1"])

        result = nomination_service.create_nominations(seeded.assessment.id, PARTICIPANT_ID, reviewer_ids=["r1", "r2"])

        assert result.skipped_duplicates == ["r1"]
        assert len(result.created) == 1

    def test_quota_counts_only_nominations_to_create(self, nomination_service, make_assessment):
        seeded = make_assessment(step_sizes=None, nomination_quota=3)
        nomination_service.create_nominations(seeded.assessment.id, PARTICIPANT_ID, reviewer_ids=["r1", "r2"])

        # Two ids requested with one slot left; r1 is already active
        result = nomination_service.create_nominations(seeded.assessment.id, PARTICIPANT_ID, reviewer_ids=["r1", "r3"])

        assert result.skipped_duplicates == ["r1"]
        assert len(result.created) == 1
        assert result.remaining_capacity == 0


# ---------------------------------------------------------------------------
# Batch creation
# ---------------------------------------------------------------------------

class TestCreateNominations:

    def test_active_reviewer_is_not_duplicated(self, db, nomination_service, flat):
        nomination_service.create_nominations(flat.assessment.id, PARTICIPANT_ID, reviewer_ids=["r1"])

        with pytest.raises(NothingToNominateError) as exc_info:
            nomination_service.create_nominations(flat.assessment.id, PARTICIPANT_ID, reviewer_ids=["r1"])

        assert exc_info.value.reason == NothingToNominateError.ALL_DUPLICATES
        assert len(nominations_for(db, flat)) == 1

    def test_rejected_reviewer_gets_fresh_pending_row(self, db, nomination_service, flat):
        first = nomination_service.create_nominations(flat.assessment.id, PARTICIPANT_ID, reviewer_ids=["r1"])
        nomination_service.reject(first.created[0], "r1")

        second = nomination_service.create_nominations(flat.assessment.id, PARTICIPANT_ID, reviewer_ids=["r1"])

        rows = nominations_for(db, flat)
        assert len(rows) == 2
        assert second.created[0] != first.created[0]
        statuses = sorted(row.request_status for row in rows)
        assert statuses == [NominationRequestStatus.PENDING.value, NominationRequestStatus.REJECTED.value]

    def test_duplicate_ids_in_request_collapse(self, nomination_service, flat):
        result = nomination_service.create_nominations(flat.assessment.id, PARTICIPANT_ID, reviewer_ids=["r1", "r1"])
        assert len(result.created) == 1

    def test_self_nomination_is_an_error(self, nomination_service, flat):
        with pytest.raises(NothingToNominateError) as exc_info:
            nomination_service.create_nominations(flat.assessment.id, PARTICIPANT_ID, reviewer_ids=[PARTICIPANT_ID])

        assert exc_info.value.reason == NothingToNominateError.ALL_FAILED
        assert PARTICIPANT_ID in exc_info.value.errors

    def test_only_participant_may_nominate(self, nomination_service, flat):
        with pytest.raises(NominationPermissionError):
            nomination_service.create_nominations(flat.assessment.id, "someone-else", reviewer_ids=["r1"])

    def test_nominations_disabled(self, db, nomination_service, flat):
        flat.assessment.allow_reviewer_nominations = False
        db.add(flat.assessment)
        db.commit()

        with pytest.raises(NominationPermissionError):
            nomination_service.create_nominations(flat.assessment.id, PARTICIPANT_ID, reviewer_ids=["r1"])

    def test_unknown_assessment(self, nomination_service):
        with pytest.raises(NotFoundError):
            nomination_service.create_nominations("missing", PARTICIPANT_ID, reviewer_ids=["r1"])


class TestExternalReviewers:

    def test_same_email_reuses_reviewer(self, db, nomination_service, flat):
        first = nomination_service.create_nominations(
            flat.assessment.id, PARTICIPANT_ID, external_emails=["Ext@Example.com"]
        )
        first_nomination = db.get(ReviewerNomination, first.created[0])
        nomination_service.reject(first.created[0], first_nomination.external_reviewer_id)

        second = nomination_service.create_nominations(
            flat.assessment.id, PARTICIPANT_ID, external_emails=["ext@example.com "]
        )

        second_nomination = db.get(ReviewerNomination, second.created[0])
        reviewers = db.exec(select(ExternalReviewer)).all()
        assert len(reviewers) == 1
        assert reviewers[0].email == "ext@example.com"
        assert second_nomination.external_reviewer_id == first_nomination.external_reviewer_id
        assert second_nomination.is_external

    def test_active_external_is_skipped(self, nomination_service, flat):
        nomination_service.create_nominations(flat.assessment.id, PARTICIPANT_ID, external_emails=["ext@example.com"])

        result = nomination_service.create_nominations(
            flat.assessment.id, PARTICIPANT_ID, reviewer_ids=["r1"], external_emails=["EXT@example.com"]
        )

        assert result.skipped_duplicates == ["ext@example.com"]
        assert len(result.created) == 1

    def test_partial_failure_keeps_successful_subset(self, db, nomination_service, flat):
        result = nomination_service.create_nominations(
            flat.assessment.id, PARTICIPANT_ID, external_emails=["good@example.com", "not-an-email"]
        )

        assert len(result.created) == 1
        assert result.errors == {"not-an-email": "Invalid email address"}
        assert result.partial_failure
        assert len(nominations_for(db, flat)) == 1

    def test_names_are_stored(self, db, nomination_service, flat):
        nomination_service.create_nominations(
            flat.assessment.id, PARTICIPANT_ID,
            external_emails=["Pat@Example.com"], external_names={"Pat@Example.com": "Pat"},
        )
        reviewer = db.exec(select(ExternalReviewer)).one()
        assert reviewer.name == "Pat"
        assert reviewer.invited_by == PARTICIPANT_ID

    def test_domain_check(self, nomination_service, flat, monkeypatch):
        monkeypatch.setattr(settings, "EXTERNAL_REVIEWER_DOMAIN_CHECK", True)

        result = nomination_service.create_nominations(
            flat.assessment.id, PARTICIPANT_ID, external_emails=["in@acme.com", "out@other.org"]
        )

        assert len(result.created) == 1
        assert "out@other.org" in result.errors

    def test_failed_invitation_is_reported(self, db, flat):
        sender = FailingSender()
        service = NominationService(db, invitation_sender=sender)

        result = service.create_nominations(flat.assessment.id, PARTICIPANT_ID, external_emails=["ext@example.com"])

        assert len(result.created) == 1
        assert "invitation" in result.errors["ext@example.com"]
        assert sender.sent[0]["email"] == "ext@example.com"

    def test_invitation_deferred_to_background_tasks(self, db, flat):
        from fastapi import BackgroundTasks

        sender = FailingSender()
        service = NominationService(db, invitation_sender=sender)
        background_tasks = BackgroundTasks()

        result = service.create_nominations(
            flat.assessment.id, PARTICIPANT_ID, external_emails=["ext@example.com"],
            background_tasks=background_tasks,
        )

        assert result.errors == {}
        assert sender.sent == []
        assert len(background_tasks.tasks) == 1

    def test_reused_reviewer_is_not_invited_again(self, db, flat):
        sender = FailingSender()
        service = NominationService(db, invitation_sender=sender)
        first = service.create_nominations(flat.assessment.id, PARTICIPANT_ID, external_emails=["ext@example.com"])
        nomination = db.get(ReviewerNomination, first.created[0])
        service.reject(nomination.id, nomination.external_reviewer_id)

        service.create_nominations(flat.assessment.id, PARTICIPANT_ID, external_emails=["ext@example.com"])

        assert len(sender.sent) == 1


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

class TestTransitions:

    def _nominate(self, service, seeded, reviewer_id="r1"):
        return service.create_nominations(seeded.assessment.id, PARTICIPANT_ID, reviewer_ids=[reviewer_id]).created[0]

    def test_accept(self, nomination_service, flat):
        nomination_id = self._nominate(nomination_service, flat)
        nomination = nomination_service.accept(nomination_id, "r1")
        assert nomination.request_status == NominationRequestStatus.ACCEPTED.value

    def test_only_nominee_may_respond(self, nomination_service, flat):
        nomination_id = self._nominate(nomination_service, flat)
        with pytest.raises(NominationPermissionError):
            nomination_service.accept(nomination_id, "r2")

    def test_non_pending_cannot_transition(self, nomination_service, flat):
        nomination_id = self._nominate(nomination_service, flat)
        nomination_service.reject(nomination_id, "r1")

        with pytest.raises(NominationStateError):
            nomination_service.accept(nomination_id, "r1")
        with pytest.raises(NominationStateError):
            nomination_service.reject(nomination_id, "r1")

    def test_delete_by_nominator_while_pending(self, db, nomination_service, flat):
        nomination_id = self._nominate(nomination_service, flat)
        assert nomination_service.delete(nomination_id, PARTICIPANT_ID)
        assert nominations_for(db, flat) == []

    def test_delete_by_someone_else(self, nomination_service, flat):
        nomination_id = self._nominate(nomination_service, flat)
        with pytest.raises(NominationPermissionError):
            nomination_service.delete(nomination_id, "r1")

    def test_delete_after_accept(self, nomination_service, flat):
        nomination_id = self._nominate(nomination_service, flat)
        nomination_service.accept(nomination_id, "r1")
        with pytest.raises(NominationStateError):
            nomination_service.delete(nomination_id, PARTICIPANT_ID)

    def test_unknown_nomination(self, nomination_service):
        with pytest.raises(NotFoundError):
            nomination_service.accept("missing", "r1")


class TestQueries:

    def test_list_and_summary(self, db, nomination_service, flat):
        batch = nomination_service.create_nominations(
            flat.assessment.id, PARTICIPANT_ID, reviewer_ids=["r1", "r2", "r3"]
        )
        r1, r2, r3 = batch.created
        nomination_service.accept(r1, "r1")
        nomination_service.accept(r2, "r2")
        nomination_service.reject(r3, "r3")
        accepted = db.get(ReviewerNomination, r1)
        accepted.review_status = ReviewStatus.COMPLETED.value
        db.add(accepted)
        db.commit()

        everything = nomination_service.list_nominations(flat.assessment.id)
        active = nomination_service.list_nominations(flat.assessment.id, include_rejected=False)
        summary = nomination_service.summary(flat.assessment.id)

        assert len(everything) == 3
        assert len(active) == 2
        assert summary.active == 2
        assert summary.accepted == 2
        assert summary.reviews_completed == 1
        assert summary.quota == 10
        assert summary.remaining == 8

    def test_external_view_carries_email(self, nomination_service, flat):
        nomination_service.create_nominations(flat.assessment.id, PARTICIPANT_ID, external_emails=["ext@example.com"])

        view = nomination_service.list_nominations(flat.assessment.id)[0]

        assert view.nominee.is_external
        assert view.nominee.email == "ext@example.com"
        assert view.review_status == ReviewStatus.NOT_STARTED.value

    def test_reviewer_inbox(self, nomination_service, flat):
        nomination_service.create_nominations(flat.assessment.id, PARTICIPANT_ID, reviewer_ids=["r1", "r2"])

        inbox = nomination_service.list_for_reviewer("r1")

        assert len(inbox) == 1
        assert inbox[0].nominee.reviewer_id == "r1"

    def test_ensure_participant_assessment(self, nomination_service, flat):
        existing = nomination_service.ensure_participant_assessment(PARTICIPANT_ID, flat.cohort_assessment.id)
        created = nomination_service.ensure_participant_assessment("participant-2", flat.cohort_assessment.id)

        assert existing.id == flat.assessment.id
        assert created.id != flat.assessment.id
        assert created.status == "Not started"

    def test_ensure_participant_assessment_unknown_cohort_assessment(self, nomination_service):
        with pytest.raises(NotFoundError):
            nomination_service.ensure_participant_assessment(PARTICIPANT_ID, "missing")

    def test_external_review_status_is_shared_across_assessments(self, db, nomination_service, make_assessment):
        first = make_assessment(step_sizes=None, participant_id="participant-a")
        second = make_assessment(step_sizes=None, participant_id="participant-b")
        done = nomination_service.create_nominations(
            first.assessment.id, "participant-a", external_emails=["ext@example.com"]
        )
        reviewer = db.get(ExternalReviewer, db.get(ReviewerNomination, done.created[0]).external_reviewer_id)
        reviewer.review_status = ReviewStatus.COMPLETED.value
        db.add(reviewer)
        db.commit()

        fresh = nomination_service.create_nominations(
            second.assessment.id, "participant-b", external_emails=["ext@example.com"]
        )
        views = nomination_service.list_nominations(second.assessment.id)

        assert [view.id for view in views] == fresh.created
        assert views[0].review_status == ReviewStatus.COMPLETED.value
        assert nomination_service.summary(second.assessment.id).reviews_completed == 0

        nomination_service.accept(fresh.created[0], reviewer.id)
        assert nomination_service.summary(second.assessment.id).reviews_completed == 1
