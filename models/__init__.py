from models.enums import (
    AssessmentStatus,
    SessionStatus,
    RespondentType,
    NominationRequestStatus,
    ReviewStatus,
    TaskStatus,
    ReportTrigger,
)
from models.client import Client
from models.api_key import APIKey
from models.plan import Plan
from models.cohort import Cohort
from models.assessment_type import AssessmentType
from models.cohort_assessment import CohortAssessment
from models.assessment_definition import AssessmentDefinition
from models.assessment_step import AssessmentStep
from models.assessment_question import AssessmentQuestion
from models.participant_assessment import ParticipantAssessment
from models.external_reviewer import ExternalReviewer
from models.reviewer_nomination import ReviewerNomination
from models.response_session import ResponseSession
from models.assessment_response import AssessmentResponse
from models.assessment_report import AssessmentReport
from models.background_task import BackgroundTask

__all__ = [
    "AssessmentStatus",
    "SessionStatus",
    "RespondentType",
    "NominationRequestStatus",
    "ReviewStatus",
    "TaskStatus",
    "ReportTrigger",
    "Client",
    "APIKey",
    "Plan",
    "Cohort",
    "AssessmentType",
    "CohortAssessment",
    "AssessmentDefinition",
    "AssessmentStep",
    "AssessmentQuestion",
    "ParticipantAssessment",
    "ExternalReviewer",
    "ReviewerNomination",
    "ResponseSession",
    "AssessmentResponse",
    "AssessmentReport",
    "BackgroundTask",
]
