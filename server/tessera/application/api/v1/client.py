"""Client metadata extracted from incoming requests."""

from dataclasses import dataclass

from fastapi import Request

# Column widths in the sessions table
_USER_AGENT_MAX = 512


@dataclass(frozen=True)
class ClientDetails:
    user_agent: str | None
    ip_address: str | None


def client_details(request: Request) -> ClientDetails:
    """User agent and peer address of the caller.

    Behind a proxy, run uvicorn with --proxy-headers so `request.client`
    reflects X-Forwarded-For.
    """
    user_agent = request.headers.get("user-agent")
    return ClientDetails(
        user_agent=user_agent[:_USER_AGENT_MAX] if user_agent else None,
        ip_address=request.client.host if request.client else None,
    )
