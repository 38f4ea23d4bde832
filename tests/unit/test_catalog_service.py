"""
Unit tests for question set resolution and catalog grouping.

Run: pytest tests/unit/test_catalog_service.py -v
"""

import sys
from pathlib import Path

# Add project root to Python path (for direct invocation)
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import pytest

from models import AssessmentDefinition, AssessmentQuestion, AssessmentStep, AssessmentType, Plan
from services.catalog_service import CatalogService, build_catalog
from services.errors import CatalogResolutionError, NotFoundError


def _question(id, order, step_id=None):
    return AssessmentQuestion(
        id=id, assessment_definition_id="def", step_id=step_id, question_text=id, question_order=order
    )


# ---------------------------------------------------------------------------
# build_catalog
# ---------------------------------------------------------------------------

class TestBuildCatalog:
    """Grouping of loaded rows into an ordered catalog."""

    def setup_method(self):
        self.definition = AssessmentDefinition(id="def", assessment_type_id="type", name="Pulse", is_system=True)
        self.pulse_type = AssessmentType(id="type", name="Pulse", is_step_grouped=True)
        self.flat_type = AssessmentType(id="type", name="360", is_step_grouped=False)

    def test_flat_form_is_one_ungrouped_group(self):
        questions = [_question("q2", 2), _question("q1", 1), _question("q3", 3)]
        catalog = build_catalog(self.definition, self.flat_type, questions, [])

        assert not catalog.has_steps
        assert len(catalog.groups) == 1
        assert catalog.groups[0].step is None
        assert [q.id for q in catalog.flat_questions] == ["q1", "q2", "q3"]
        assert catalog.step_index_for(1) is None

    def test_questions_grouped_by_step_order(self):
        steps = [
            AssessmentStep(id="s2", assessment_definition_id="def", step_order=2),
            AssessmentStep(id="s1", assessment_definition_id="def", step_order=1),
        ]
        questions = [
            _question("q1", 1, "s2"),
            _question("q2", 2, "s1"),
            _question("q3", 3, "s1"),
        ]
        catalog = build_catalog(self.definition, self.pulse_type, questions, steps)

        assert [g.step_id for g in catalog.groups] == ["s1", "s2"]
        assert [q.id for q in catalog.flat_questions] == ["q2", "q3", "q1"]
        assert catalog.step_index_for(2) == 1

    def test_empty_steps_produce_no_group(self):
        steps = [
            AssessmentStep(id="s1", assessment_definition_id="def", step_order=1),
            AssessmentStep(id="s2", assessment_definition_id="def", step_order=2),
        ]
        catalog = build_catalog(self.definition, self.pulse_type, [_question("q1", 1, "s2")], steps)

        assert [g.step_id for g in catalog.groups] == ["s2"]

    def test_unknown_or_missing_step_goes_to_ungrouped_tail(self):
        steps = [AssessmentStep(id="s1", assessment_definition_id="def", step_order=1)]
        questions = [
            _question("q1", 1, None),
            _question("q2", 2, "s1"),
            _question("q3", 3, "gone"),
        ]
        catalog = build_catalog(self.definition, self.pulse_type, questions, steps)

        assert [g.step_id for g in catalog.groups] == ["s1", None]
        assert [q.id for q in catalog.flat_questions] == ["q2", "q1", "q3"]
        assert catalog.step_id_for_question("q3") is None

    def test_empty_definition_has_zero_questions(self):
        catalog = build_catalog(self.definition, self.flat_type, [], [])
        assert catalog.total_questions == 0
        assert catalog.flat_questions == []


# ---------------------------------------------------------------------------
# CatalogService.resolve
# ---------------------------------------------------------------------------

class TestCatalogResolution:
    """Plan override vs system definition."""

    def _custom_definition(self, db, assessment_type_id, definition_id="custom-def"):
        definition = AssessmentDefinition(
            id=definition_id, assessment_type_id=assessment_type_id, name="Custom", is_system=False
        )
        db.add(definition)
        db.add(AssessmentQuestion(
            id=f"{definition_id}-q1", assessment_definition_id=definition_id, question_text="Custom?", question_order=1
        ))
        db.commit()
        return definition

    def test_system_definition_without_plan(self, db, pulse):
        catalog = CatalogService(db).resolve(pulse.cohort_assessment.id)

        assert catalog.question_set_id == pulse.definition.id
        assert catalog.is_system
        assert catalog.is_step_grouped
        assert catalog.total_questions == 5
        assert [len(g.questions) for g in catalog.groups] == [3, 2]

    def test_structured_plan_override(self, db, make_assessment):
        plan = Plan(id="plan-1", name="Plan")
        db.add(plan)
        db.commit()
        seeded = make_assessment(step_sizes=None, question_count=4, plan=plan)
        self._custom_definition(db, seeded.type.id)
        plan.assessment_definitions = {seeded.type.id: "custom-def"}
        db.add(plan)
        db.commit()

        catalog = CatalogService(db).resolve(seeded.cohort_assessment.id)

        assert catalog.question_set_id == "custom-def"
        assert not catalog.is_system
        assert catalog.total_questions == 1

    def test_description_override_shim(self, db, make_assessment):
        plan = Plan(id="plan-2", name="Plan")
        db.add(plan)
        db.commit()
        seeded = make_assessment(step_sizes=None, plan=plan)
        self._custom_definition(db, seeded.type.id)
        plan.description = f'<!--PLAN_ASSESSMENT_DEFINITIONS:{{"{seeded.type.id}": "custom-def"}}-->'
        db.add(plan)
        db.commit()

        catalog = CatalogService(db).resolve(seeded.cohort_assessment.id)
        assert catalog.question_set_id == "custom-def"

    def test_override_of_another_type_falls_back_to_system(self, db, make_assessment):
        plan = Plan(id="plan-3", name="Plan")
        db.add(plan)
        db.commit()
        seeded = make_assessment(step_sizes=None, plan=plan)
        other = make_assessment(step_sizes=(1,))
        plan.assessment_definitions = {seeded.type.id: other.definition.id}
        db.add(plan)
        db.commit()

        catalog = CatalogService(db).resolve(seeded.cohort_assessment.id)
        assert catalog.question_set_id == seeded.definition.id

    def test_malformed_plan_metadata_falls_back_to_system(self, db, make_assessment):
        plan = Plan(id="plan-4", name="Plan", description="<!--PLAN_ASSESSMENT_DEFINITIONS:{oops-->")
        db.add(plan)
        db.commit()
        seeded = make_assessment(step_sizes=None, plan=plan)

        catalog = CatalogService(db).resolve(seeded.cohort_assessment.id)
        assert catalog.question_set_id == seeded.definition.id

    def test_no_definition_raises(self, db, flat):
        flat.definition.is_system = False
        db.add(flat.definition)
        db.commit()

        with pytest.raises(CatalogResolutionError):
            CatalogService(db).resolve(flat.cohort_assessment.id)

    def test_unknown_cohort_assessment(self, db):
        with pytest.raises(NotFoundError):
            CatalogService(db).resolve("missing")

    def test_resolve_for_participant_assessment(self, db, flat):
        catalog = CatalogService(db).resolve_for_participant_assessment(flat.assessment.id)
        assert catalog.question_set_id == flat.definition.id
        assert not catalog.has_steps

    def test_owning_client(self, db, flat):
        service = CatalogService(db)
        assert service.owning_client_id(flat.assessment.id) == flat.client.id
        assert service.owning_client_id("missing") is None
