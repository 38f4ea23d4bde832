"""
Repositories module - Data Access Layer.

Provides repository classes for database operations following the Repository pattern.
Each repository handles persistence for one workflow entity.

Usage:
    from repositories import (
        ResponseSessionRepository,
        AssessmentResponseRepository,
    )

    session_repo = ResponseSessionRepository(db_session)
    response_repo = AssessmentResponseRepository(db_session)

    session = session_repo.get_by_owner_key(owner_key)
    response_repo.upsert(session.id, question_id, "answer")
"""

from repositories.base_repository import BaseRepository
from repositories.api_key_repository import APIKeyRepository
from repositories.background_task_repository import BackgroundTaskRepository
from repositories.assessment_definition_repository import AssessmentDefinitionRepository
from repositories.cohort_assessment_repository import CohortAssessmentRepository
from repositories.participant_assessment_repository import ParticipantAssessmentRepository
from repositories.response_session_repository import ResponseSessionRepository
from repositories.assessment_response_repository import AssessmentResponseRepository, ResponseRow
from repositories.reviewer_nomination_repository import ReviewerNominationRepository
from repositories.external_reviewer_repository import ExternalReviewerRepository
from repositories.assessment_report_repository import AssessmentReportRepository

__all__ = [
    "BaseRepository",
    "APIKeyRepository",
    "BackgroundTaskRepository",
    "AssessmentDefinitionRepository",
    "CohortAssessmentRepository",
    "ParticipantAssessmentRepository",
    "ResponseSessionRepository",
    "AssessmentResponseRepository",
    "ResponseRow",
    "ReviewerNominationRepository",
    "ExternalReviewerRepository",
    "AssessmentReportRepository",
]
