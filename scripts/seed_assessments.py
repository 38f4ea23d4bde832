"""Seed script creating a small, deterministic assessment catalog.

Creates for one client:
- a "Pulse" assessment type (step-grouped) with a system definition of 2 steps
- a "360" assessment type (flat) with a system definition of 4 questions
- a plan, a cohort and one cohort assessment per type

Ids are fixed so the simulation script can target them.

Usage:
  python scripts/seed_assessments.py
  python scripts/seed_assessments.py --client acme --reset
  python scripts/seed_assessments.py --dry-run
"""
import sys
from pathlib import Path

project_root = Path(__file__).resolve().parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import argparse

from sqlmodel import Session, SQLModel, select
from sqlalchemy import delete

from config.settings import settings
from models import (
    AssessmentDefinition,
    AssessmentQuestion,
    AssessmentStep,
    AssessmentType,
    Client,
    Cohort,
    CohortAssessment,
    Plan,
)
from utils.database import build_engine

PULSE_TYPE_ID = "seed-type-pulse"
FLAT_TYPE_ID = "seed-type-360"
PULSE_DEFINITION_ID = "seed-def-pulse"
FLAT_DEFINITION_ID = "seed-def-360"
PLAN_ID = "seed-plan"
COHORT_ID = "seed-cohort"
PULSE_COHORT_ASSESSMENT_ID = "seed-ca-pulse"
FLAT_COHORT_ASSESSMENT_ID = "seed-ca-360"

PULSE_STEPS = [
    ("Energy", [
        "How energised did you feel at work this month?",
        "What drained your energy the most?",
        "What gave you energy?",
    ]),
    ("Focus", [
        "Which priority got most of your attention?",
        "What would you like to focus on next month?",
    ]),
]

FLAT_QUESTIONS = [
    "What should this person keep doing?",
    "What should this person start doing?",
    "What should this person stop doing?",
    "Any other feedback?",
]


def perform_reset(db: Session) -> None:
    """Delete seeded catalog rows, children first."""
    definition_ids = [PULSE_DEFINITION_ID, FLAT_DEFINITION_ID]
    db.exec(delete(AssessmentQuestion).where(AssessmentQuestion.assessment_definition_id.in_(definition_ids)))
    db.exec(delete(AssessmentStep).where(AssessmentStep.assessment_definition_id.in_(definition_ids)))
    db.exec(delete(CohortAssessment).where(
        CohortAssessment.id.in_([PULSE_COHORT_ASSESSMENT_ID, FLAT_COHORT_ASSESSMENT_ID])
    ))
    db.exec(delete(AssessmentDefinition).where(AssessmentDefinition.id.in_(definition_ids)))
    db.exec(delete(Cohort).where(Cohort.id == COHORT_ID))
    db.exec(delete(Plan).where(Plan.id == PLAN_ID))
    db.exec(delete(AssessmentType).where(AssessmentType.id.in_([PULSE_TYPE_ID, FLAT_TYPE_ID])))
    db.commit()


def seed_catalog(db: Session, client: Client) -> None:
    db.add(AssessmentType(id=PULSE_TYPE_ID, name="Pulse", is_step_grouped=True))
    db.add(AssessmentType(id=FLAT_TYPE_ID, name="360", is_step_grouped=False))
    db.add(AssessmentDefinition(
        id=PULSE_DEFINITION_ID, assessment_type_id=PULSE_TYPE_ID, name="Pulse (system)", is_system=True
    ))
    db.add(AssessmentDefinition(
        id=FLAT_DEFINITION_ID, assessment_type_id=FLAT_TYPE_ID, name="360 (system)", is_system=True
    ))
    db.commit()

    order = 0
    for step_order, (title, questions) in enumerate(PULSE_STEPS, start=1):
        step = AssessmentStep(
            id=f"{PULSE_DEFINITION_ID}-step-{step_order}",
            assessment_definition_id=PULSE_DEFINITION_ID,
            step_order=step_order,
            title=title,
        )
        db.add(step)
        for text in questions:
            order += 1
            db.add(AssessmentQuestion(
                id=f"{PULSE_DEFINITION_ID}-q{order}",
                assessment_definition_id=PULSE_DEFINITION_ID,
                step_id=step.id,
                question_text=text,
                question_order=order,
            ))

    for order, text in enumerate(FLAT_QUESTIONS, start=1):
        db.add(AssessmentQuestion(
            id=f"{FLAT_DEFINITION_ID}-q{order}",
            assessment_definition_id=FLAT_DEFINITION_ID,
            question_text=text,
            question_order=order,
        ))

    db.add(Plan(id=PLAN_ID, name="Leadership Plan"))
    db.commit()
    db.add(Cohort(id=COHORT_ID, client_id=client.id, plan_id=PLAN_ID, name="Spring cohort"))
    db.commit()
    db.add(CohortAssessment(
        id=PULSE_COHORT_ASSESSMENT_ID, cohort_id=COHORT_ID, assessment_type_id=PULSE_TYPE_ID, name="Monthly pulse"
    ))
    db.add(CohortAssessment(
        id=FLAT_COHORT_ASSESSMENT_ID, cohort_id=COHORT_ID, assessment_type_id=FLAT_TYPE_ID, name="360 review"
    ))
    db.commit()


def seed(client_name: str, dry_run: bool = False, reset_flag: bool = False) -> bool:
    if dry_run:
        print("Dry run: would seed")
        print(f"  Pulse definition {PULSE_DEFINITION_ID}: {sum(len(q) for _, q in PULSE_STEPS)} questions "
              f"in {len(PULSE_STEPS)} steps")
        print(f"  360 definition {FLAT_DEFINITION_ID}: {len(FLAT_QUESTIONS)} questions")
        print(f"  Cohort assessments: {PULSE_COHORT_ASSESSMENT_ID}, {FLAT_COHORT_ASSESSMENT_ID}")
        return True

    db_url = settings.DATABASE_URL
    if not db_url:
        print("ERROR: DATABASE_URL not set in environment/.env", file=sys.stderr)
        return False

    engine = build_engine(db_url)
    if db_url.startswith("sqlite"):
        SQLModel.metadata.create_all(engine)

    try:
        with Session(engine) as db:
            client = db.exec(select(Client).where(Client.name == client_name)).first()
            if not client:
                print(f"ERROR: client '{client_name}' not found, run scripts/seed_api_key.py first", file=sys.stderr)
                return False

            if reset_flag:
                perform_reset(db)
                print("Reset: removed previously seeded catalog")

            if db.get(AssessmentDefinition, PULSE_DEFINITION_ID):
                print("Catalog already seeded (use --reset to recreate)")
                return True

            seed_catalog(db, client)
            print("✅ Catalog seeded:")
            print(f"  Pulse cohort assessment: {PULSE_COHORT_ASSESSMENT_ID}")
            print(f"  360 cohort assessment:   {FLAT_COHORT_ASSESSMENT_ID}")
            return True
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return False


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed a demo assessment catalog")
    parser.add_argument("--client", default="acme", help="Client name owning the cohort (default: acme)")
    parser.add_argument("--dry-run", action="store_true", help="Print what would be seeded")
    parser.add_argument("--reset", action="store_true", help="Delete seeded rows before inserting")
    args = parser.parse_args()

    ok = seed(args.client, dry_run=args.dry_run, reset_flag=args.reset)
    sys.exit(0 if ok else 1)
