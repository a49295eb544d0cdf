"""Value objects for the auth domain."""

from dataclasses import dataclass
from uuid import UUID, uuid4

from pydantic import RootModel, field_validator


class IdentityId(RootModel[UUID]):
    """Unique identifier for an Identity."""

    @classmethod
    def generate(cls) -> "IdentityId":
        return cls(uuid4())

    def __str__(self) -> str:
        return str(self.root)

    def __hash__(self) -> int:
        return hash(self.root)


class AccountId(RootModel[UUID]):
    """Unique identifier for an Account."""

    @classmethod
    def generate(cls) -> "AccountId":
        return cls(uuid4())

    def __str__(self) -> str:
        return str(self.root)

    def __hash__(self) -> int:
        return hash(self.root)


class UserId(RootModel[UUID]):
    """Unique identifier for a User (an identity's membership in an account)."""

    @classmethod
    def generate(cls) -> "UserId":
        return cls(uuid4())

    def __str__(self) -> str:
        return str(self.root)

    def __hash__(self) -> int:
        return hash(self.root)


class SessionId(RootModel[UUID]):
    """Unique identifier for a Session."""

    @classmethod
    def generate(cls) -> "SessionId":
        return cls(uuid4())

    def __str__(self) -> str:
        return str(self.root)

    def __hash__(self) -> int:
        return hash(self.root)


class Email(RootModel[str]):
    """A normalized email address.

    Normalization is strip + lowercase. Only the basic shape is checked
    (one "@" with something on both sides); deliverability is the mailer's problem.
    """

    @field_validator("root")
    @classmethod
    def normalize(cls, v: str) -> str:
        v = v.strip().lower()
        local, sep, domain = v.partition("@")
        if not sep or not local or not domain or "@" in domain:
            raise ValueError(f"Invalid email address: {v!r}")
        return v

    def __str__(self) -> str:
        return self.root

    def __hash__(self) -> int:
        return hash(self.root)


@dataclass(frozen=True)
class ClientInfo:
    """Metadata about the client making a request."""

    user_agent: str | None = None
    ip_address: str | None = None
