"""Translation of workflow exceptions into HTTP errors."""

from fastapi import HTTPException, status

from services.errors import (
    CatalogResolutionError,
    InvalidRespondentError,
    NominationPermissionError,
    NominationStateError,
    NothingToNominateError,
    NotFoundError,
    QuotaExceededError,
    ResponseWriteError,
    SessionStateError,
    StoreUnavailableError,
    WorkflowError,
)

STATUS_BY_ERROR = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    CatalogResolutionError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    StoreUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
    ResponseWriteError: status.HTTP_503_SERVICE_UNAVAILABLE,
    QuotaExceededError: status.HTTP_409_CONFLICT,
    NothingToNominateError: status.HTTP_409_CONFLICT,
    NominationStateError: status.HTTP_409_CONFLICT,
    SessionStateError: status.HTTP_409_CONFLICT,
    NominationPermissionError: status.HTTP_403_FORBIDDEN,
    InvalidRespondentError: status.HTTP_400_BAD_REQUEST,
}


def to_http_exception(error: WorkflowError) -> HTTPException:
    """Map a workflow error to its HTTP status; structured errors keep their extra fields."""
    status_code = status.HTTP_400_BAD_REQUEST
    for error_class, code in STATUS_BY_ERROR.items():
        if isinstance(error, error_class):
            status_code = code
            break

    if isinstance(error, QuotaExceededError):
        detail = {"message": str(error), "remaining": error.remaining, "quota": error.quota}
    elif isinstance(error, NothingToNominateError):
        detail = {"message": str(error), "reason": error.reason, "errors": error.errors}
    else:
        detail = str(error)

    headers = {"Retry-After": "1"} if status_code == status.HTTP_503_SERVICE_UNAVAILABLE else None
    return HTTPException(status_code=status_code, detail=detail, headers=headers)
