"""Identity aggregate: a person, independent of any account."""

from datetime import UTC, datetime

from tessera.domain.auth.model.value import Email, IdentityId
from tessera.domain.shared.model.aggregate import Aggregate


class Identity(Aggregate):
    """A person who can sign in, keyed by a unique normalized email.

    An identity may be a member (User) of any number of accounts.

    Invariants:
    - `email` is unique and normalized
    - `id` and `created_at` are immutable after creation
    - identities are never deleted in normal flow
    """

    id: IdentityId
    email: Email
    email_verified_at: datetime | None = None

    @property
    def email_verified(self) -> bool:
        return self.email_verified_at is not None

    @classmethod
    def create(cls, email: Email) -> "Identity":
        """Create a new, unverified identity."""
        now = datetime.now(UTC)
        return cls(
            id=IdentityId.generate(),
            email=email,
            email_verified_at=None,
            created_at=now,
            updated_at=now,
        )

    def verify_email(self, at: datetime | None = None) -> None:
        """Record that the owner proved control of the email address. Idempotent."""
        if self.email_verified_at is None:
            at = at or datetime.now(UTC)
            self.email_verified_at = at
            self.touch(at)
