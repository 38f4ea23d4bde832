"""
Workflow exceptions.

Services raise these; the API layer maps each class to one HTTP status.
"""
from typing import Dict, Optional


class WorkflowError(Exception):
    """Base class for expected workflow failures."""


class NotFoundError(WorkflowError):
    """A referenced record does not exist."""


class CatalogResolutionError(WorkflowError):
    """No question set could be resolved for an assessment type."""


class StoreUnavailableError(WorkflowError):
    """The record store could not be read; state cannot be determined right now."""


class ResponseWriteError(WorkflowError):
    """An answer or snapshot write failed; the respondent must not advance."""


class QuotaExceededError(WorkflowError):
    """A nomination batch would exceed the active quota and was rejected whole."""

    def __init__(self, message: str, remaining: int, quota: int):
        super().__init__(message)
        self.remaining = remaining
        self.quota = quota


class NothingToNominateError(WorkflowError):
    """Every requested nominee was a duplicate or failed."""

    ALL_DUPLICATES = "all_duplicates"
    ALL_FAILED = "all_failed"

    def __init__(self, reason: str, errors: Optional[Dict[str, str]] = None):
        message = (
            "All requested reviewers are already nominated"
            if reason == self.ALL_DUPLICATES
            else "No nominations could be created"
        )
        super().__init__(message)
        self.reason = reason
        self.errors = errors or {}


class NominationStateError(WorkflowError):
    """Transition not allowed from the nomination's current request status."""


class NominationPermissionError(WorkflowError):
    """The acting user may not perform this nomination operation."""


class SessionStateError(WorkflowError):
    """Operation not allowed in the session's or assessment's current state."""


class InvalidRespondentError(WorkflowError):
    """The respondent does not match the nomination or assessment it claims."""
