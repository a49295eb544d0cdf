"""Centralized error transformation for API routes.

Maps Tessera errors (domain and infrastructure) to HTTPException responses.
"""

from typing import Any

from fastapi import HTTPException

from tessera.domain.shared.error import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    InfrastructureError,
    InvalidStateError,
    NotFoundError,
    RateLimitedError,
    TesseraError,
    ValidationError,
)

DOMAIN_ERROR_STATUS_MAP: dict[type[DomainError], int] = {
    NotFoundError: 404,
    ValidationError: 422,
    InvalidStateError: 409,
    ConflictError: 409,
    AuthorizationError: 403,
    AuthenticationError: 401,
    RateLimitedError: 429,
}


def map_tessera_error(error: TesseraError) -> HTTPException:
    """Map a Tessera error to an HTTPException.

    Args:
        error: The Tessera error to map.

    Returns:
        HTTPException with appropriate status code, detail and headers.
    """
    detail: dict[str, Any] = {
        "code": error.code,
        "message": error.message,
    }

    if isinstance(error, InfrastructureError):
        # Infrastructure errors → 503 Service Unavailable
        return HTTPException(status_code=503, detail=detail)

    if isinstance(error, DomainError):
        status_code = DOMAIN_ERROR_STATUS_MAP.get(type(error), 400)
        if isinstance(error, ValidationError) and error.field is not None:
            detail["field"] = error.field
        if isinstance(error, RateLimitedError):
            return HTTPException(
                status_code=429,
                detail=detail,
                headers={"Retry-After": str(error.retry_after)},
            )
        # Distinguish 401 (no session) from 403 (session, but not allowed)
        if isinstance(error, AuthorizationError) and error.code == "missing_session":
            return HTTPException(
                status_code=401,
                detail=detail,
                headers={"WWW-Authenticate": "Cookie"},
            )
        return HTTPException(status_code=status_code, detail=detail)

    # Fallback for unknown TesseraError subclasses
    return HTTPException(status_code=500, detail=detail)
