"""Tests for mapping Tessera errors to HTTP responses."""

import pytest

from tessera.application.api.v1.errors import map_tessera_error
from tessera.domain.shared.error import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    RateLimitedError,
    TesseraError,
    ValidationError,
)


class TestMapTesseraError:
    @pytest.mark.parametrize(
        ("error", "status"),
        [
            (NotFoundError("missing"), 404),
            (ConflictError("taken"), 409),
            (AuthenticationError(), 401),
            (AuthorizationError("nope", code="forbidden"), 403),
            (ExternalServiceError("relay down"), 503),
            (TesseraError("odd"), 500),
        ],
    )
    def test_status_codes(self, error: TesseraError, status: int):
        assert map_tessera_error(error).status_code == status

    def test_missing_session_is_401_with_challenge(self):
        exc = map_tessera_error(AuthorizationError("Authentication required", code="missing_session"))

        assert exc.status_code == 401
        assert exc.headers == {"WWW-Authenticate": "Cookie"}

    def test_rate_limited_carries_retry_after(self):
        exc = map_tessera_error(RateLimitedError("slow down", retry_after=900))

        assert exc.status_code == 429
        assert exc.headers == {"Retry-After": "900"}

    def test_validation_error_names_the_field(self):
        exc = map_tessera_error(ValidationError("bad", field="email"))

        assert exc.status_code == 422
        assert exc.detail == {"code": "validation_error", "message": "bad", "field": "email"}

    def test_authentication_error_does_not_say_why(self):
        exc = map_tessera_error(AuthenticationError())

        assert exc.detail == {"code": "invalid_or_expired", "message": "Invalid or expired link"}
