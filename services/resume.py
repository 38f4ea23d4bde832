"""
Resume position resolution.

Decides where a respondent lands when a session is (re)loaded. Called once
per session load; navigation after that is tracked by the client.
"""

from typing import Iterable, Optional

from models.enums import SessionStatus
from services.types import Catalog, ResumePosition


def _position(catalog: Catalog, question_index: int) -> ResumePosition:
    return ResumePosition(
        question_index=question_index,
        step_index=catalog.step_index_for(question_index),
    )


def resolve_resume_position(
    status: str,
    last_question_id: Optional[str],
    catalog: Catalog,
    answered_ids: Iterable[str],
) -> ResumePosition:
    """
    Pick the question to show first.

    Rules, first match wins:
        1. session not in progress (completed or fresh): the first question
        2. last touched question still in the catalog: that question, except
           that the final question of a step moves on to the next step's first
           question, because leaving it was a step advance
        3. the first unanswered question in flat order
        4. everything answered: the last question

    Args:
        status: Session status
        last_question_id: Snapshot of the last question the respondent left
        catalog: Resolved question set
        answered_ids: Question ids with stored answers

    Returns:
        ResumePosition; `step_index` is None for flat forms
    """
    questions = catalog.flat_questions
    if not questions or status != SessionStatus.IN_PROGRESS.value:
        return _position(catalog, 0)

    last_index = catalog.index_of(last_question_id)
    if last_index >= 0:
        if catalog.has_steps:
            group_index = catalog.group_index_for(last_index)
            next_group_start = catalog.group_start_index(group_index + 1)
            is_step_end = last_index == next_group_start - 1
            if is_step_end and group_index + 1 < len(catalog.groups):
                return _position(catalog, next_group_start)
        return _position(catalog, last_index)

    answered = set(answered_ids)
    for index, question in enumerate(questions):
        if question.id not in answered:
            return _position(catalog, index)

    return _position(catalog, len(questions) - 1)
