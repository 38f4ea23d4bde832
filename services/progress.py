"""Completion ratio of a session, always recomputed from stored answers."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from services.types import Catalog, Progress


def percentage_of(answered: int, total: int) -> int:
    """Whole-number percentage, rounding halves up; 0 for an empty catalog."""
    if total <= 0:
        return 0
    ratio = Decimal(answered * 100) / Decimal(total)
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_progress(catalog: Catalog, answered_ids: Iterable[str]) -> Progress:
    """
    Count answered questions of the catalog.

    Answers to questions outside the catalog (e.g. a question removed from the
    set after it was answered) do not count.

    Args:
        catalog: Resolved question set
        answered_ids: Question ids with `is_answered` responses

    Returns:
        Progress(answered, total, percentage)
    """
    question_ids = {question.id for question in catalog.flat_questions}
    answered = len(question_ids.intersection(set(answered_ids)))
    total = catalog.total_questions
    return Progress(answered=answered, total=total, percentage=percentage_of(answered, total))
