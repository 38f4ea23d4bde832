"""
Domain value types shared by the workflow services.

Row shapes with optional, mutually exclusive columns are collapsed here into
tagged variants (`RespondentRef`, `Nominee`) so callers never thread the
`is_external` / `reviewer_id` / `external_reviewer_id` triple around.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from models.assessment_question import AssessmentQuestion
from models.assessment_step import AssessmentStep
from models.enums import RespondentType
from models.response_session import ResponseSession


# ============ RESPONDENTS ============

@dataclass(frozen=True)
class ParticipantRespondent:
    """The participant answering their own self-assessment."""
    kind: str = field(default=RespondentType.PARTICIPANT.value, init=False)


@dataclass(frozen=True)
class ReviewerRespondent:
    """A nominated reviewer; `reviewer_id` is the acting client user for internal reviews."""
    nomination_id: str
    reviewer_id: Optional[str] = None
    kind: str = field(default=RespondentType.REVIEWER.value, init=False)


RespondentRef = Union[ParticipantRespondent, ReviewerRespondent]


@dataclass(frozen=True)
class OwnerKey:
    """Identity of a response session: at most one session exists per key."""
    participant_assessment_id: str
    question_set_id: str
    respondent_type: str
    nomination_id: Optional[str] = None

    def as_string(self) -> str:
        return ":".join([
            self.participant_assessment_id,
            self.question_set_id,
            self.respondent_type,
            self.nomination_id or "-",
        ])


# ============ NOMINEES ============

@dataclass(frozen=True)
class InternalNominee:
    reviewer_id: str
    is_external: bool = field(default=False, init=False)


@dataclass(frozen=True)
class ExternalNominee:
    external_reviewer_id: str
    email: Optional[str] = None
    is_external: bool = field(default=True, init=False)


Nominee = Union[InternalNominee, ExternalNominee]


# ============ CATALOG ============

@dataclass(frozen=True)
class QuestionGroup:
    """Questions of one step, in order; `step` is None for flat forms and the ungrouped tail."""
    step: Optional[AssessmentStep]
    questions: Tuple[AssessmentQuestion, ...]

    @property
    def step_id(self) -> Optional[str]:
        return self.step.id if self.step else None


@dataclass(frozen=True)
class Catalog:
    """A resolved question set, ready for progress and resume computations."""
    question_set_id: str
    assessment_type_id: str
    is_system: bool
    is_step_grouped: bool
    nomination_quota: Optional[int]
    questions: Tuple[AssessmentQuestion, ...]
    steps: Tuple[AssessmentStep, ...]
    groups: Tuple[QuestionGroup, ...]

    @property
    def has_steps(self) -> bool:
        return len(self.steps) > 0

    @property
    def flat_questions(self) -> List[AssessmentQuestion]:
        """All questions concatenated in group order: the navigation index space."""
        return [q for group in self.groups for q in group.questions]

    @property
    def total_questions(self) -> int:
        return sum(len(group.questions) for group in self.groups)

    def index_of(self, question_id: Optional[str]) -> int:
        if not question_id:
            return -1
        for index, question in enumerate(self.flat_questions):
            if question.id == question_id:
                return index
        return -1

    def group_index_for(self, question_index: int) -> int:
        """Index of the group containing the flat question index (last group if out of range)."""
        start = 0
        for group_index, group in enumerate(self.groups):
            end = start + len(group.questions)
            if start <= question_index < end:
                return group_index
            start = end
        return max(len(self.groups) - 1, 0)

    def step_index_for(self, question_index: int) -> Optional[int]:
        """Step index for step-grouped forms, None for flat forms."""
        if not self.has_steps:
            return None
        return self.group_index_for(question_index)

    def group_start_index(self, group_index: int) -> int:
        return sum(len(group.questions) for group in self.groups[:group_index])

    def step_id_for_question(self, question_id: str) -> Optional[str]:
        """Step recorded as `last_step_id`; always None for flat forms."""
        if not self.has_steps:
            return None
        for group in self.groups:
            for question in group.questions:
                if question.id == question_id:
                    return group.step_id
        return None


# ============ RESULTS ============

@dataclass(frozen=True)
class Progress:
    answered: int
    total: int
    percentage: int


@dataclass(frozen=True)
class ResumePosition:
    question_index: int
    step_index: Optional[int] = None


@dataclass
class SessionView:
    """Everything a respondent-facing client needs after (re)loading a session."""
    session: ResponseSession
    catalog: Catalog
    answers: Dict[str, str]
    resume: ResumePosition
    progress: Progress
    assessment_status: Optional[str] = None


@dataclass
class AdvanceResult:
    session: ResponseSession
    progress: Progress
    next_position: Optional[ResumePosition]
    completed: bool = False


@dataclass
class NominationView:
    id: str
    participant_assessment_id: str
    nominee: Nominee
    nominated_by_id: str
    request_status: str
    review_status: Optional[str]
    created_at: object = None


@dataclass
class NominationSummary:
    active: int
    accepted: int
    reviews_completed: int
    quota: int

    @property
    def remaining(self) -> int:
        return max(self.quota - self.active, 0)


@dataclass
class NominationBatchResult:
    created: List[str] = field(default_factory=list)  # nomination ids
    skipped_duplicates: List[str] = field(default_factory=list)  # reviewer ids / emails
    errors: Dict[str, str] = field(default_factory=dict)  # email or reviewer id -> message
    remaining_capacity: int = 0

    @property
    def partial_failure(self) -> bool:
        return bool(self.errors)
