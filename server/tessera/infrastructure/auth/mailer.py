"""Out-of-band mail delivery: a bounded in-process queue drained by one task."""

import asyncio
import logging
from typing import Protocol

import httpx
import logfire

from tessera.config import MailConfig
from tessera.domain.auth.port.mailer import MailMessage, Mailer
from tessera.domain.shared.error import ExternalServiceError

logger = logging.getLogger(__name__)


class MailTransport(Protocol):
    async def send(self, sender: str, message: MailMessage) -> None: ...


class LogMailTransport:
    """Writes messages to the log instead of sending them (development)."""

    async def send(self, sender: str, message: MailMessage) -> None:
        logger.info(
            "Mail (log backend) from=%s to=%s subject=%r\n%s",
            sender,
            message.to,
            message.subject,
            message.body,
        )


class HttpMailTransport:
    """POSTs each message as JSON to a mail relay."""

    def __init__(self, url: str, http_client: httpx.AsyncClient) -> None:
        self._url = url
        self._http = http_client

    async def send(self, sender: str, message: MailMessage) -> None:
        try:
            response = await self._http.post(
                self._url,
                json={
                    "from": sender,
                    "to": message.to,
                    "subject": message.subject,
                    "text": message.body,
                },
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Mail relay request failed: {e}") from e


class MailQueue(Mailer):
    """Non-blocking Mailer backed by an asyncio.Queue.

    `enqueue` returns immediately, so a request that mails a link takes the
    same time as one that does not. A background task started by
    `async with` delivers queued messages one by one; delivery failures are
    logged and dropped.
    """

    def __init__(self, config: MailConfig, transport: MailTransport) -> None:
        self._sender = config.sender
        self._transport = transport
        self._queue: asyncio.Queue[MailMessage] = asyncio.Queue(maxsize=config.queue_size)
        self._task: asyncio.Task[None] | None = None

    def enqueue(self, message: MailMessage) -> None:
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull:
            logger.error("Mail queue full, dropping message: subject=%r", message.subject)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    async def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._drain(), name="mail-queue")
            logger.info("Mail queue started")

    async def stop(self, timeout: float = 10.0) -> None:
        """Deliver what is already queued (up to `timeout` seconds), then stop."""
        if self._task is None:
            return

        try:
            await asyncio.wait_for(self._queue.join(), timeout=timeout)
        except TimeoutError:
            logger.warning("Mail queue stopped with %d undelivered message(s)", self.pending)

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Mail queue stopped")

    async def __aenter__(self) -> "MailQueue":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        await self.stop()

    async def _drain(self) -> None:
        while True:
            message = await self._queue.get()
            try:
                with logfire.span("DeliverMail"):
                    await self._transport.send(self._sender, message)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error("Mail delivery failed: subject=%r error=%s", message.subject, e)
            finally:
                self._queue.task_done()
