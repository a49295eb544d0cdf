"""Tests for the out-of-band mail queue and transports."""

import asyncio
from unittest.mock import AsyncMock

import httpx
import pytest

from tessera.config import MailConfig
from tessera.domain.auth.port.mailer import MailMessage
from tessera.domain.shared.error import ExternalServiceError
from tessera.infrastructure.auth.mailer import HttpMailTransport, LogMailTransport, MailQueue

MESSAGE = MailMessage(to="ada@example.com", subject="Your sign-in link", body="https://x")


class RecordingTransport:
    def __init__(self) -> None:
        self.sent: list[MailMessage] = []

    async def send(self, sender: str, message: MailMessage) -> None:
        self.sent.append(message)


class TestMailQueue:
    @pytest.mark.asyncio
    async def test_enqueue_does_not_deliver_inline(self):
        transport = RecordingTransport()
        queue = MailQueue(MailConfig(), transport)

        queue.enqueue(MESSAGE)

        assert transport.sent == []
        assert queue.pending == 1

    @pytest.mark.asyncio
    async def test_background_task_delivers(self):
        transport = RecordingTransport()

        async with MailQueue(MailConfig(), transport) as queue:
            queue.enqueue(MESSAGE)

        assert transport.sent == [MESSAGE]

    @pytest.mark.asyncio
    async def test_full_queue_drops_instead_of_blocking(self):
        queue = MailQueue(MailConfig(queue_size=1), LogMailTransport())

        queue.enqueue(MESSAGE)
        queue.enqueue(MESSAGE)

        assert queue.pending == 1

    @pytest.mark.asyncio
    async def test_delivery_failure_does_not_stop_the_queue(self):
        transport = AsyncMock()
        transport.send.side_effect = [ExternalServiceError("relay down"), None]

        async with MailQueue(MailConfig(), transport) as queue:
            queue.enqueue(MESSAGE)
            queue.enqueue(MESSAGE)

        assert transport.send.await_count == 2

    @pytest.mark.asyncio
    async def test_stop_gives_up_after_timeout(self):
        async def slow_send(sender: str, message: MailMessage) -> None:
            await asyncio.sleep(10)

        transport = AsyncMock()
        transport.send.side_effect = slow_send
        queue = MailQueue(MailConfig(), transport)
        await queue.start()
        queue.enqueue(MESSAGE)

        await queue.stop(timeout=0.05)

        transport.send.assert_awaited_once()


class TestHttpMailTransport:
    @pytest.mark.asyncio
    async def test_posts_json(self):
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(202)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            transport = HttpMailTransport("https://relay.example/send", client)
            await transport.send("noreply@tessera.example", MESSAGE)

        assert captured[0].url == "https://relay.example/send"
        assert b'"to":"ada@example.com"' in captured[0].content.replace(b" ", b"")

    @pytest.mark.asyncio
    async def test_relay_error_is_an_external_service_error(self):
        async with httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(500))
        ) as client:
            transport = HttpMailTransport("https://relay.example/send", client)

            with pytest.raises(ExternalServiceError):
                await transport.send("noreply@tessera.example", MESSAGE)


class TestLogMailTransport:
    @pytest.mark.asyncio
    async def test_logs_without_keeping_messages(self, caplog: pytest.LogCaptureFixture):
        transport = LogMailTransport()

        with caplog.at_level("INFO", logger="tessera.infrastructure.auth.mailer"):
            await transport.send("noreply@tessera.example", MESSAGE)

        assert "ada@example.com" in caplog.text
        assert vars(transport) == {}
