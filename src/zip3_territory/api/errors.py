"""Translate domain errors into HTTP responses."""

from __future__ import annotations

from fastapi import HTTPException, status

from ..errors import (
    CatalogLoadError,
    DuplicateRepError,
    NotFoundError,
    PublishFailedError,
    ReassignmentRequiredError,
    TerritoryError,
    ValidationError,
)

_STATUS_BY_ERROR: tuple[tuple[type[TerritoryError], int], ...] = (
    (ReassignmentRequiredError, status.HTTP_400_BAD_REQUEST),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (DuplicateRepError, status.HTTP_409_CONFLICT),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (PublishFailedError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (CatalogLoadError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def to_http_exception(exc: TerritoryError) -> HTTPException:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            break
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    if isinstance(exc, ReassignmentRequiredError):
        detail: object = {"message": str(exc), "rep": exc.name, "region_ids": list(exc.region_ids)}
    elif isinstance(exc, PublishFailedError):
        detail = {"message": str(exc), "draft_id": exc.draft_id, "assignments_written": exc.assignments_written}
    else:
        detail = str(exc)
    return HTTPException(status_code=status_code, detail=detail)
