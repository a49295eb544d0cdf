"""User entity: an identity's membership in one account."""

from datetime import UTC, datetime

from tessera.domain.auth.model.value import AccountId, IdentityId, UserId
from tessera.domain.shared.error import ValidationError
from tessera.domain.shared.model.aggregate import Aggregate


class User(Aggregate):
    """Membership of an Identity in an Account.

    A user belongs to its account with touch semantics: persisting a user
    also bumps the account's `updated_at` (see the user repository), so anything
    keyed on the account sees member changes without listing every member.
    """

    id: UserId
    account_id: AccountId
    identity_id: IdentityId
    name: str

    @classmethod
    def create(cls, account_id: AccountId, identity_id: IdentityId, name: str) -> "User":
        if not name.strip():
            raise ValidationError("Name must not be blank", field="name")
        now = datetime.now(UTC)
        return cls(
            id=UserId.generate(),
            account_id=account_id,
            identity_id=identity_id,
            name=name.strip(),
            created_at=now,
            updated_at=now,
        )

    def rename(self, name: str) -> None:
        if not name.strip():
            raise ValidationError("Name must not be blank", field="name")
        self.name = name.strip()
        self.touch()

    def can_be_renamed_by(self, actor: "User | None") -> bool:
        """Members may rename only themselves."""
        return actor is not None and actor.id == self.id
