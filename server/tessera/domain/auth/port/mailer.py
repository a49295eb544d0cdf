"""Mail delivery port."""

from dataclasses import dataclass
from typing import Protocol

from tessera.domain.shared.port import Port


@dataclass(frozen=True)
class MailMessage:
    """An outgoing email."""

    to: str
    subject: str
    body: str


class Mailer(Port, Protocol):
    """Hands messages to an out-of-band delivery channel.

    `enqueue` must not block on delivery and must not raise on delivery
    failure: callers return to the requester before the mail is sent.
    """

    def enqueue(self, message: MailMessage) -> None: ...
