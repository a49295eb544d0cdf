"""FastAPI glue for conditional GET."""

from typing import Any

from fastapi import Request, Response

from tessera.domain.freshness.service.conditional import ConditionalGet, NotModified

# Responses depend on the session cookie; shared caches must not reuse them
# and browsers must revalidate.
PRIVATE_CACHE_HEADERS = {"Cache-Control": "private, no-cache", "Vary": "Cookie"}


def not_modified(headers: dict[str, str]) -> Response:
    """Bodyless 304 carrying the current validators."""
    return Response(status_code=304, headers={**headers, **PRIVATE_CACHE_HEADERS})


def fresh_when(
    request: Request,
    *objects: Any,
    embeds_form_token: bool = False,
) -> Response | dict[str, str]:
    """Evaluate the request's validators against `objects`.

    Returns a ready 304 response when the client's copy is current, otherwise
    the headers to attach to the full response.
    """
    decision = ConditionalGet.evaluate(
        request.headers.get("if-none-match"),
        request.headers.get("if-modified-since"),
        *objects,
        embeds_form_token=embeds_form_token,
    )
    if isinstance(decision, NotModified):
        return not_modified(decision.headers)
    return {**decision.headers, **PRIVATE_CACHE_HEADERS}
