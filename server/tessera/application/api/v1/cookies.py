"""Session cookie helpers."""

from fastapi import Response

from tessera.config import SessionConfig


def set_session_cookie(response: Response, config: SessionConfig, value: str, path: str) -> None:
    """Attach the signed session cookie, scoped to `path`.

    Account-scoped sessions use the account path (``/1234567``), so the
    browser never sends them to another account's URLs.
    """
    response.set_cookie(
        key=config.cookie_name,
        value=value,
        max_age=config.max_age_days * 24 * 60 * 60,
        path=path,
        secure=config.secure,
        httponly=True,
        samesite="lax",
    )


def clear_session_cookie(response: Response, config: SessionConfig, path: str) -> None:
    """Expire the session cookie at `path` (must match the path it was set with)."""
    response.delete_cookie(
        key=config.cookie_name,
        path=path,
        secure=config.secure,
        httponly=True,
        samesite="lax",
    )
