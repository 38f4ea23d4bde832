"""
Shared pytest fixtures.

Every test gets a fresh in-memory SQLite database (one shared connection via
StaticPool, so side effects that open their own Session see the same data)
and factories for seeded assessment catalogs.
"""

import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Optional, Sequence

# Add project root to Python path (for direct invocation)
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import models  # noqa: F401  (registers every table on SQLModel.metadata)
from models import (
    AssessmentDefinition,
    AssessmentQuestion,
    AssessmentStep,
    AssessmentType,
    Client,
    Cohort,
    CohortAssessment,
    ParticipantAssessment,
    Plan,
)
from services import InvitationSender, NominationService, ResponseSessionService

PARTICIPANT_ID = "participant-1"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client_row(db):
    client = Client(name="acme", subdomain="acme")
    db.add(client)
    db.commit()
    db.refresh(client)
    return client


@pytest.fixture
def make_assessment(db, client_row):
    """
    Factory seeding a type, definition, questions, cohort assessment and participant assessment.

    step_sizes=(3, 2) builds a step-grouped form with two steps of 3 and 2
    questions; step_sizes=None builds a flat form of `question_count` questions.
    """
    counter = {"n": 0}

    def _make(
        step_sizes: Optional[Sequence[int]] = (3, 2),
        question_count: int = 4,
        is_system: bool = True,
        nomination_quota: Optional[int] = None,
        participant_id: str = PARTICIPANT_ID,
        plan: Optional[Plan] = None,
    ) -> SimpleNamespace:
        counter["n"] += 1
        prefix = f"a{counter['n']}"
        step_grouped = step_sizes is not None

        assessment_type = AssessmentType(
            id=f"{prefix}-type",
            name="Pulse" if step_grouped else "360",
            is_step_grouped=step_grouped,
        )
        definition = AssessmentDefinition(
            id=f"{prefix}-def",
            assessment_type_id=assessment_type.id,
            name=f"{assessment_type.name} definition",
            is_system=is_system,
            nomination_quota=nomination_quota,
        )
        db.add(assessment_type)
        db.add(definition)
        db.commit()

        steps = []
        questions = []
        if step_grouped:
            order = 0
            for step_order, size in enumerate(step_sizes, start=1):
                step = AssessmentStep(
                    id=f"{prefix}-s{step_order}",
                    assessment_definition_id=definition.id,
                    step_order=step_order,
                    title=f"Step {step_order}",
                )
                db.add(step)
                steps.append(step)
                for _ in range(size):
                    order += 1
                    questions.append(AssessmentQuestion(
                        id=f"{prefix}-q{order}",
                        assessment_definition_id=definition.id,
                        step_id=step.id,
                        question_text=f"Question {order}",
                        question_order=order,
                        required=True,
                    ))
        else:
            for order in range(1, question_count + 1):
                questions.append(AssessmentQuestion(
                    id=f"{prefix}-q{order}",
                    assessment_definition_id=definition.id,
                    question_text=f"Question {order}",
                    question_order=order,
                ))
        for question in questions:
            db.add(question)
        db.commit()

        cohort = Cohort(
            id=f"{prefix}-cohort",
            client_id=client_row.id,
            plan_id=plan.id if plan else None,
            name="Cohort",
        )
        db.add(cohort)
        db.commit()
        cohort_assessment = CohortAssessment(
            id=f"{prefix}-ca",
            cohort_id=cohort.id,
            assessment_type_id=assessment_type.id,
        )
        db.add(cohort_assessment)
        db.commit()
        assessment = ParticipantAssessment(
            id=f"{prefix}-pa",
            participant_id=participant_id,
            cohort_assessment_id=cohort_assessment.id,
        )
        db.add(assessment)
        db.commit()

        return SimpleNamespace(
            client=client_row,
            type=assessment_type,
            definition=definition,
            steps=steps,
            questions=questions,
            question_ids=[q.id for q in questions],
            cohort=cohort,
            cohort_assessment=cohort_assessment,
            assessment=assessment,
        )

    return _make


@pytest.fixture
def pulse(make_assessment):
    """Step-grouped form: two steps with 3 and 2 questions."""
    return make_assessment(step_sizes=(3, 2))


@pytest.fixture
def flat(make_assessment):
    """Flat 360 form with 4 questions."""
    return make_assessment(step_sizes=None, question_count=4)


@pytest.fixture
def response_service(db):
    return ResponseSessionService(db)


@pytest.fixture
def nomination_service(db):
    # Empty webhook URL: invitations are logged, never posted
    return NominationService(db, invitation_sender=InvitationSender(webhook_url=""))
