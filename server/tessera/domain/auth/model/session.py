"""Session entity: one signed-in browser."""

from datetime import UTC, datetime, timedelta

from tessera.domain.auth.model.identity import Identity
from tessera.domain.auth.model.user import User
from tessera.domain.auth.model.value import ClientInfo, IdentityId, SessionId, UserId
from tessera.domain.shared.error import ValidationError
from tessera.domain.shared.model.entity import Entity


class Session(Entity):
    """An authenticated browser session, created once per magic-link redemption.

    Invariants:
    - references exactly one Identity
    - if `user_id` is set, that user belongs to the same identity
    - sessions are never reused: every sign-in creates a new row
    """

    id: SessionId
    identity_id: IdentityId
    user_id: UserId | None = None
    user_agent: str | None = None
    ip_address: str | None = None
    created_at: datetime

    @property
    def cache_key(self) -> str:
        """Sessions never change after creation, so the id alone versions them."""
        return f"session/{self.id}"

    @classmethod
    def create(
        cls,
        identity: Identity,
        client: ClientInfo,
        user: User | None = None,
        now: datetime | None = None,
    ) -> "Session":
        if user is not None and user.identity_id != identity.id:
            raise ValidationError(
                "Active user must belong to the session's identity", field="user_id"
            )
        return cls(
            id=SessionId.generate(),
            identity_id=identity.id,
            user_id=user.id if user else None,
            user_agent=client.user_agent,
            ip_address=client.ip_address,
            created_at=now or datetime.now(UTC),
        )

    def is_expired(self, max_age: timedelta, now: datetime | None = None) -> bool:
        now = now or datetime.now(UTC)
        return self.created_at + max_age <= now
