"""
Repository for AssessmentDefinition entities and their steps and questions.
"""
from typing import List, Optional
from sqlmodel import Session, select

from models.assessment_definition import AssessmentDefinition
from models.assessment_question import AssessmentQuestion
from models.assessment_step import AssessmentStep
from models.assessment_type import AssessmentType
from repositories.base_repository import BaseRepository


class AssessmentDefinitionRepository(BaseRepository[AssessmentDefinition]):
    """Question-set lookups used by catalog resolution."""

    def __init__(self, db_session: Session):
        super().__init__(db_session, AssessmentDefinition)

    def get_system_for_type(self, assessment_type_id: str) -> Optional[AssessmentDefinition]:
        """The default (is_system) definition of an assessment type."""
        statement = (
            select(AssessmentDefinition)
            .where(AssessmentDefinition.assessment_type_id == assessment_type_id)
            .where(AssessmentDefinition.is_system == True)  # noqa: E712
            .order_by(AssessmentDefinition.created_at)
        )
        return self.db.exec(statement).first()

    def get_type(self, assessment_type_id: str) -> Optional[AssessmentType]:
        return self.db.get(AssessmentType, assessment_type_id)

    def get_questions(self, definition_id: str) -> List[AssessmentQuestion]:
        statement = (
            select(AssessmentQuestion)
            .where(AssessmentQuestion.assessment_definition_id == definition_id)
            .order_by(AssessmentQuestion.question_order)
        )
        return list(self.db.exec(statement).all())

    def get_steps(self, definition_id: str) -> List[AssessmentStep]:
        statement = (
            select(AssessmentStep)
            .where(AssessmentStep.assessment_definition_id == definition_id)
            .order_by(AssessmentStep.step_order)
        )
        return list(self.db.exec(statement).all())
