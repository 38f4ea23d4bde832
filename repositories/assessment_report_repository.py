"""
Repository for generated assessment reports.
"""
from datetime import datetime
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from models.assessment_report import AssessmentReport
from repositories.base_repository import BaseRepository


class AssessmentReportRepository(BaseRepository[AssessmentReport]):

    def __init__(self, db_session: Session):
        super().__init__(db_session, AssessmentReport)

    def get_for(self, participant_assessment_id: str, report_type: str) -> Optional[AssessmentReport]:
        statement = (
            select(AssessmentReport)
            .where(AssessmentReport.participant_assessment_id == participant_assessment_id)
            .where(AssessmentReport.report_type == report_type)
        )
        return self.db.exec(statement).first()

    def upsert(
        self,
        participant_assessment_id: str,
        report_type: str,
        storage_path: str,
        source_updated_at: datetime,
    ) -> AssessmentReport:
        """Create or refresh the single report of a type for a participant assessment."""
        now = datetime.utcnow()
        report = self.get_for(participant_assessment_id, report_type)
        if report is None:
            report = AssessmentReport(
                participant_assessment_id=participant_assessment_id,
                report_type=report_type,
                storage_path=storage_path,
                source_updated_at=source_updated_at,
                updated_at=now,
            )
            try:
                return self.create(report)
            except IntegrityError:
                self.db.rollback()
                report = self.get_for(participant_assessment_id, report_type)
                if report is None:
                    raise

        report.storage_path = storage_path
        report.source_updated_at = source_updated_at
        report.updated_at = now
        return self.update(report)
