"""
Repository for CohortAssessment entities.

Besides plain lookups it loads the cohort, client and plan a cohort
assessment hangs off, which catalog resolution and nomination checks need.
"""
from typing import Optional, Tuple
from sqlmodel import Session

from models.client import Client
from models.cohort import Cohort
from models.cohort_assessment import CohortAssessment
from models.plan import Plan
from repositories.base_repository import BaseRepository


class CohortAssessmentRepository(BaseRepository[CohortAssessment]):

    def __init__(self, db_session: Session):
        super().__init__(db_session, CohortAssessment)

    def get_cohort(self, cohort_assessment: CohortAssessment) -> Optional[Cohort]:
        return self.db.get(Cohort, cohort_assessment.cohort_id)

    def get_plan_for(self, cohort_assessment: CohortAssessment) -> Optional[Plan]:
        """Plan linked to the cohort, None when the cohort has no plan."""
        cohort = self.get_cohort(cohort_assessment)
        if not cohort or not cohort.plan_id:
            return None
        return self.db.get(Plan, cohort.plan_id)

    def get_client_for(self, cohort_assessment_id: str) -> Tuple[Optional[CohortAssessment], Optional[Client]]:
        """
        Resolve the owning client of a cohort assessment.

        Returns:
            (cohort_assessment, client); either may be None when rows are missing
        """
        cohort_assessment = self.get_by_id(cohort_assessment_id)
        if not cohort_assessment:
            return None, None
        cohort = self.get_cohort(cohort_assessment)
        if not cohort:
            return cohort_assessment, None
        return cohort_assessment, self.db.get(Client, cohort.client_id)
