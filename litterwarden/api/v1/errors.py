from fastapi import HTTPException, status

from litterwarden.services.errors import (
    InvalidArgument,
    NoEvidenceError,
    NotFoundError,
    PayloadTooLargeError,
    ReportError,
)

_STATUS_CODES: tuple[tuple[type[ReportError], int], ...] = (
    (InvalidArgument, status.HTTP_400_BAD_REQUEST),
    (NoEvidenceError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (PayloadTooLargeError, 413),
)


def http_error(exc: ReportError) -> HTTPException:
    for error_cls, status_code in _STATUS_CODES:
        if isinstance(exc, error_cls):
            return HTTPException(status_code=status_code, detail=exc.message)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.message)
