"""
Catalog Service - question set resolution.

Resolves which question set (assessment definition) a cohort assessment uses
and loads it as an ordered, optionally step-grouped catalog:

- Plan override: a plan may map an assessment type to a customized definition
- Fallback: the type's system definition
- Grouping: one group per step in step order, then an ungrouped tail
"""
import logging
from typing import Dict, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from models.assessment_definition import AssessmentDefinition
from models.assessment_question import AssessmentQuestion
from models.assessment_step import AssessmentStep
from models.assessment_type import AssessmentType
from models.cohort_assessment import CohortAssessment
from repositories import (
    AssessmentDefinitionRepository,
    CohortAssessmentRepository,
    ParticipantAssessmentRepository,
)
from services.errors import CatalogResolutionError, NotFoundError, StoreUnavailableError
from services.types import Catalog, QuestionGroup
from utils.plan_metadata import resolve_override_mapping

logger = logging.getLogger(__name__)


def build_catalog(
    definition: AssessmentDefinition,
    assessment_type: AssessmentType,
    questions: Sequence[AssessmentQuestion],
    steps: Sequence[AssessmentStep],
) -> Catalog:
    """
    Assemble a Catalog from loaded rows.

    Steps without questions produce no group. Questions with no step, or with
    a step outside `steps`, are collected in a final ungrouped group.
    """
    ordered_questions = sorted(questions, key=lambda q: q.question_order)
    ordered_steps = sorted(steps, key=lambda s: s.step_order)

    if not ordered_steps:
        groups = (QuestionGroup(step=None, questions=tuple(ordered_questions)),)
    else:
        by_step: Dict[str, List[AssessmentQuestion]] = {step.id: [] for step in ordered_steps}
        ungrouped: List[AssessmentQuestion] = []
        for question in ordered_questions:
            if question.step_id in by_step:
                by_step[question.step_id].append(question)
            else:
                ungrouped.append(question)

        grouped = [
            QuestionGroup(step=step, questions=tuple(by_step[step.id]))
            for step in ordered_steps
            if by_step[step.id]
        ]
        if ungrouped:
            grouped.append(QuestionGroup(step=None, questions=tuple(ungrouped)))
        groups = tuple(grouped)

    return Catalog(
        question_set_id=definition.id,
        assessment_type_id=assessment_type.id,
        is_system=definition.is_system,
        is_step_grouped=assessment_type.is_step_grouped,
        nomination_quota=definition.nomination_quota,
        questions=tuple(ordered_questions),
        steps=tuple(ordered_steps),
        groups=groups,
    )


class CatalogService:
    """Resolves and loads question catalogs."""

    def __init__(self, db_session: Session):
        self.db = db_session
        self.definition_repo = AssessmentDefinitionRepository(db_session)
        self.cohort_assessment_repo = CohortAssessmentRepository(db_session)
        self.participant_assessment_repo = ParticipantAssessmentRepository(db_session)

    def resolve(self, cohort_assessment_id: str) -> Catalog:
        """
        Resolve the catalog answered for a cohort assessment.

        Raises:
            NotFoundError: cohort assessment missing
            CatalogResolutionError: no definition resolvable for its type
            StoreUnavailableError: the store could not be read
        """
        try:
            cohort_assessment = self.cohort_assessment_repo.get_by_id(cohort_assessment_id)
            if not cohort_assessment:
                raise NotFoundError(f"Cohort assessment {cohort_assessment_id} not found")

            assessment_type = self.definition_repo.get_type(cohort_assessment.assessment_type_id)
            if not assessment_type:
                raise CatalogResolutionError(
                    f"Assessment type {cohort_assessment.assessment_type_id} not found"
                )

            definition = self._resolve_definition(cohort_assessment, assessment_type)
            return self._load(definition, assessment_type)
        except SQLAlchemyError as e:
            logger.error(f"Catalog lookup failed for cohort assessment {cohort_assessment_id}: {e}")
            raise StoreUnavailableError("Unable to load the question set right now") from e

    def resolve_for_participant_assessment(self, participant_assessment_id: str) -> Catalog:
        try:
            assessment = self.participant_assessment_repo.get_by_id(participant_assessment_id)
        except SQLAlchemyError as e:
            raise StoreUnavailableError("Unable to load the participant assessment right now") from e
        if not assessment:
            raise NotFoundError(f"Participant assessment {participant_assessment_id} not found")
        return self.resolve(assessment.cohort_assessment_id)

    def load_definition(self, definition_id: str) -> Catalog:
        """Load the catalog of a known definition (the one a session was opened with)."""
        try:
            definition = self.definition_repo.get_by_id(definition_id)
            if not definition:
                raise CatalogResolutionError(f"Assessment definition {definition_id} not found")
            assessment_type = self.definition_repo.get_type(definition.assessment_type_id)
            if not assessment_type:
                raise CatalogResolutionError(
                    f"Assessment type {definition.assessment_type_id} not found"
                )
            return self._load(definition, assessment_type)
        except SQLAlchemyError as e:
            logger.error(f"Catalog lookup failed for definition {definition_id}: {e}")
            raise StoreUnavailableError("Unable to load the question set right now") from e

    def owning_client_id(self, participant_assessment_id: str) -> Optional[int]:
        """Client a participant assessment belongs to, None when unknown."""
        try:
            assessment = self.participant_assessment_repo.get_by_id(participant_assessment_id)
            if not assessment:
                return None
        except SQLAlchemyError as e:
            raise StoreUnavailableError("Unable to load the participant assessment right now") from e
        return self.cohort_assessment_client_id(assessment.cohort_assessment_id)

    def cohort_assessment_client_id(self, cohort_assessment_id: str) -> Optional[int]:
        try:
            _, client = self.cohort_assessment_repo.get_client_for(cohort_assessment_id)
        except SQLAlchemyError as e:
            raise StoreUnavailableError("Unable to load the cohort assessment right now") from e
        return client.id if client else None

    # ============ HELPERS ============

    def _resolve_definition(
        self,
        cohort_assessment: CohortAssessment,
        assessment_type: AssessmentType,
    ) -> AssessmentDefinition:
        override = self._plan_override(cohort_assessment, assessment_type)
        if override:
            return override

        definition = self.definition_repo.get_system_for_type(assessment_type.id)
        if not definition:
            raise CatalogResolutionError(
                f"No question set configured for assessment type {assessment_type.name!r}"
            )
        return definition

    def _plan_override(
        self,
        cohort_assessment: CohortAssessment,
        assessment_type: AssessmentType,
    ) -> Optional[AssessmentDefinition]:
        plan = self.cohort_assessment_repo.get_plan_for(cohort_assessment)
        if not plan:
            return None

        mapping = resolve_override_mapping(plan.assessment_definitions, plan.description)
        definition_id = mapping.get(assessment_type.id)
        if not definition_id:
            return None

        definition = self.definition_repo.get_by_id(definition_id)
        if not definition or definition.assessment_type_id != assessment_type.id:
            logger.warning(
                f"Plan {plan.id} maps type {assessment_type.id} to unusable definition "
                f"{definition_id}; using the system definition"
            )
            return None
        return definition

    def _load(self, definition: AssessmentDefinition, assessment_type: AssessmentType) -> Catalog:
        steps = self.definition_repo.get_steps(definition.id) if assessment_type.is_step_grouped else []
        questions = self.definition_repo.get_questions(definition.id)
        return build_catalog(definition, assessment_type, questions, steps)
