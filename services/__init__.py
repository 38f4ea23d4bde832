"""
Services module - Business Logic Layer.

Contains application services that orchestrate the assessment workflow,
sitting between the API layer (routes) and the data layer (repositories).

Services handle:
- Business rule validation
- Orchestrating multiple repository operations
- Deriving progress, resume position and assessment status
- Fire-and-forget side effects (invitations, report regeneration)

Usage:
    from services import ResponseSessionService, ParticipantRespondent

    service = ResponseSessionService(db_session)
    view = service.open_session(participant_assessment_id, ParticipantRespondent())
"""

from services.catalog_service import CatalogService, build_catalog
from services.response_session_service import ResponseSessionService
from services.nomination_service import NominationService
from services.side_effects import InvitationSender, ReportRegenerator
from services.types import (
    ParticipantRespondent,
    ReviewerRespondent,
    InternalNominee,
    ExternalNominee,
)

__all__ = [
    "CatalogService",
    "build_catalog",
    "ResponseSessionService",
    "NominationService",
    "InvitationSender",
    "ReportRegenerator",
    "ParticipantRespondent",
    "ReviewerRespondent",
    "InternalNominee",
    "ExternalNominee",
]
