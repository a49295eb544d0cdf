"""Account aggregate: a tenant, addressed by a numeric path segment."""

import secrets
from datetime import UTC, datetime

from tessera.domain.auth.model.value import AccountId
from tessera.domain.shared.model.aggregate import Aggregate

EXTERNAL_ID_MIN = 1_000_000
EXTERNAL_ID_MAX = 9_999_999


def generate_external_id() -> int:
    """Random seven-digit account number."""
    return EXTERNAL_ID_MIN + secrets.randbelow(EXTERNAL_ID_MAX - EXTERNAL_ID_MIN + 1)


class Account(Aggregate):
    """A tenant. Every URL belonging to the account lives under `path`.

    Invariants:
    - `external_id` is a unique seven-digit number
    - `updated_at` moves whenever a member User is saved (touch propagation)
    """

    id: AccountId
    external_id: int
    name: str

    @property
    def path(self) -> str:
        """URL path prefix for this account, e.g. ``/1234567``."""
        return f"/{self.external_id}"

    @classmethod
    def create(cls, name: str, external_id: int | None = None) -> "Account":
        now = datetime.now(UTC)
        return cls(
            id=AccountId.generate(),
            external_id=external_id if external_id is not None else generate_external_id(),
            name=name,
            created_at=now,
            updated_at=now,
        )

    def rename(self, name: str) -> None:
        self.name = name
        self.touch()
