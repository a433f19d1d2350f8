"""Mapping of domain errors to HTTP errors."""

from fastapi import HTTPException

from ...errors import NotFoundError, UnsupportedOperationError, ValidationError


def to_http_exception(e: Exception) -> HTTPException:
    if isinstance(e, HTTPException):
        return e
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, (ValidationError, UnsupportedOperationError)):
        return HTTPException(status_code=400, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))
