"""Error hierarchy for Tessera.

Error layers:
- TesseraError: Base class for all Tessera errors
- DomainError: Business rule violations, validation failures (4xx responses)
- InfrastructureError: System-level failures like storage/network issues (503 responses)

These errors are mapped to HTTP responses by the global exception handler in app.py.
"""


class TesseraError(Exception):
    """Base class for all Tessera errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors (business logic violations - typically 4xx)
# =============================================================================


class DomainError(TesseraError):
    """Base class for domain/business errors."""


class NotFoundError(DomainError):
    """Resource not found."""


class ValidationError(DomainError):
    """Input validation failed."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="validation_error")
        self.field = field


class InvalidStateError(DomainError):
    """Operation not allowed in current state."""


class ConflictError(DomainError):
    """Resource already exists or version conflict."""


class AuthorizationError(DomainError):
    """Caller not allowed to perform this operation."""


class AuthenticationError(DomainError):
    """Presented credential (link, token, cookie) was rejected.

    The message never says why: a bad signature, a wrong purpose and an
    expired token all look the same to the caller.
    """

    def __init__(self, message: str = "Invalid or expired link") -> None:
        super().__init__(message, code="invalid_or_expired")


class RateLimitedError(DomainError):
    """Too many requests for the same key within the window."""

    def __init__(self, message: str, retry_after: int) -> None:
        super().__init__(message, code="rate_limited")
        self.retry_after = retry_after


# =============================================================================
# Infrastructure Errors (system-level failures - typically 503)
# =============================================================================


class InfrastructureError(TesseraError):
    """Base class for infrastructure/system errors."""


class StorageUnavailableError(InfrastructureError):
    """Storage backend (database) is unavailable."""


class ExternalServiceError(InfrastructureError):
    """External service (mail relay) is unavailable or failed."""


class ConfigurationError(InfrastructureError):
    """System misconfiguration detected."""
