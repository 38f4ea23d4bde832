"""
Unit tests for the progress calculator.

Run: pytest tests/unit/test_progress.py -v
"""

import sys
from pathlib import Path

# Add project root to Python path (for direct invocation)
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import pytest

from models import AssessmentDefinition, AssessmentQuestion, AssessmentType
from services.catalog_service import build_catalog
from services.progress import calculate_progress, percentage_of


def flat_catalog(count):
    definition = AssessmentDefinition(id="def", assessment_type_id="type", name="360", is_system=True)
    assessment_type = AssessmentType(id="type", name="360", is_step_grouped=False)
    questions = [
        AssessmentQuestion(id=f"q{i}", assessment_definition_id="def", question_text="?", question_order=i)
        for i in range(1, count + 1)
    ]
    return build_catalog(definition, assessment_type, questions, [])


class TestPercentageOf:

    @pytest.mark.parametrize("answered,total,expected", [
        (0, 4, 0),
        (1, 3, 33),
        (2, 3, 67),
        (1, 8, 13),   # 12.5 rounds half up
        (1, 200, 1),  # 0.5 rounds half up
        (4, 4, 100),
    ])
    def test_rounding(self, answered, total, expected):
        assert percentage_of(answered, total) == expected

    def test_empty_catalog_is_zero(self):
        assert percentage_of(0, 0) == 0


class TestCalculateProgress:

    def test_counts_only_catalog_questions(self):
        catalog = flat_catalog(4)
        progress = calculate_progress(catalog, {"q1", "q3", "removed-question"})

        assert progress.answered == 2
        assert progress.total == 4
        assert progress.percentage == 50

    def test_monotonic_under_sequential_answers(self):
        catalog = flat_catalog(5)
        answered = set()
        previous = calculate_progress(catalog, answered)
        for question in catalog.flat_questions:
            answered.add(question.id)
            current = calculate_progress(catalog, answered)
            assert current.answered == previous.answered + 1
            assert current.percentage > previous.percentage
            previous = current
        assert previous.percentage == 100

    def test_empty_catalog(self):
        progress = calculate_progress(flat_catalog(0), set())
        assert (progress.answered, progress.total, progress.percentage) == (0, 0, 0)
