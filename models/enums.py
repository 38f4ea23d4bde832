from enum import Enum


class AssessmentStatus(str, Enum):
    """Coarse status of a participant assessment, as shown to participants and admins"""
    NOT_STARTED = "Not started"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class SessionStatus(str, Enum):
    """Lifecycle of one respondent's response session"""
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class RespondentType(str, Enum):
    PARTICIPANT = "participant"
    REVIEWER = "reviewer"


class NominationRequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class ReviewStatus(str, Enum):
    """Progress of a nominated reviewer's own review"""
    NOT_STARTED = "Not started"
    IN_PROGRESS = "In progress"
    COMPLETED = "Completed"


ACTIVE_REQUEST_STATUSES = (
    NominationRequestStatus.PENDING.value,
    NominationRequestStatus.ACCEPTED.value,
)


class TaskStatus(str, Enum):
    """Lifecycle of a recorded side effect (report regeneration)"""
    INITIATED = "INITIATED"
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class ReportTrigger(str, Enum):
    """What caused a report regeneration"""
    PARTICIPANT_SUBMITTED = "participant_submitted"
    REVIEW_SUBMITTED = "review_submitted"
