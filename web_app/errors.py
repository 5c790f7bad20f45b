"""Translation of service errors into HTTP errors."""

from fastapi import HTTPException, status

from shortlink.errors import (
    AllocationExhaustedError,
    DuplicateAliasError,
    InvalidAliasError,
    InvalidUrlError,
    LinkNotFoundError,
    ShortenerError,
)

STATUS_BY_ERROR = (
    (InvalidUrlError, status.HTTP_400_BAD_REQUEST),
    (InvalidAliasError, status.HTTP_400_BAD_REQUEST),
    (DuplicateAliasError, status.HTTP_409_CONFLICT),
    (LinkNotFoundError, status.HTTP_404_NOT_FOUND),
    (AllocationExhaustedError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def to_http_exception(error: ShortenerError) -> HTTPException:
    """HTTPException whose detail is ``{"error": <kind>, "message": <text>}``."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, code in STATUS_BY_ERROR:
        if isinstance(error, error_type):
            status_code = code
            break

    headers = None
    if isinstance(error, AllocationExhaustedError):
        headers = {"Retry-After": "1"}

    return HTTPException(
        status_code=status_code,
        detail={"error": error.code, "message": str(error)},
        headers=headers,
    )
