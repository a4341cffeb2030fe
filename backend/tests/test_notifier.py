"""
DocTrack Backend — Notifier Unit Tests (Mocked SMTP)
======================================================

What:  Tests for Notifier with aiosmtplib.send patched out.
How:   AsyncMock replaces the SMTP call; side effects simulate relay errors.

What we test:
    ✅ Successful send returns a truthy SENT result
    ✅ Auth, address and transport failures are categorised, never raised
    ✅ Message headers and templates
    ❌ Real SMTP delivery (needs a relay)
"""

import asyncio
from unittest.mock import AsyncMock, patch

import aiosmtplib
import pytest

from app.config import Settings
from app.models.student import RequestType
from app.services.notifier import (
    DeliveryStatus,
    Notifier,
    ready_email,
    received_email,
)


def make_notifier(**overrides):
    options = {
        "hostname": "smtp.example.edu",
        "port": 587,
        "username": "registrar@example.edu",
        "password": "secret",
    }
    options.update(overrides)
    return Notifier(**options)


class TestNotifierSend:

    @pytest.mark.asyncio
    async def test_send_success(self):
        notifier = make_notifier()
        with patch("app.services.notifier.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            result = await notifier.send("alice@uni.edu", "Hi", "Body")

        assert result
        assert result.status is DeliveryStatus.SENT
        mock_send.assert_awaited_once()
        message = mock_send.await_args.args[0]
        assert message["To"] == "alice@uni.edu"
        assert message["From"] == "registrar@example.edu"
        assert message["Subject"] == "Hi"
        kwargs = mock_send.await_args.kwargs
        assert kwargs["hostname"] == "smtp.example.edu"
        assert kwargs["port"] == 587
        assert kwargs["username"] == "registrar@example.edu"
        assert kwargs["password"] == "secret"

    @pytest.mark.asyncio
    async def test_no_credentials_skips_login(self):
        notifier = make_notifier(username="", password="", sender="noreply@uni.edu")
        with patch("app.services.notifier.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            await notifier.send("alice@uni.edu", "Hi", "Body")

        kwargs = mock_send.await_args.kwargs
        assert kwargs["username"] is None
        assert kwargs["password"] is None
        assert mock_send.await_args.args[0]["From"] == "noreply@uni.edu"

    @pytest.mark.asyncio
    async def test_auth_failure_categorised(self):
        notifier = make_notifier()
        error = aiosmtplib.SMTPAuthenticationError(535, "Authentication failed")
        with patch("app.services.notifier.aiosmtplib.send", new_callable=AsyncMock, side_effect=error):
            result = await notifier.send("alice@uni.edu", "Hi", "Body")

        assert not result
        assert result.status is DeliveryStatus.AUTH_FAILED

    @pytest.mark.asyncio
    async def test_refused_recipient_categorised(self):
        notifier = make_notifier()
        refused = aiosmtplib.SMTPRecipientRefused(550, "No such user", "ghost@uni.edu")
        error = aiosmtplib.SMTPRecipientsRefused([refused])
        with patch("app.services.notifier.aiosmtplib.send", new_callable=AsyncMock, side_effect=error):
            result = await notifier.send("ghost@uni.edu", "Hi", "Body")

        assert not result
        assert result.status is DeliveryStatus.INVALID_ADDRESS

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            aiosmtplib.SMTPConnectError("Connection refused"),
            aiosmtplib.SMTPServerDisconnected("Server closed connection"),
            ConnectionRefusedError("refused"),
            asyncio.TimeoutError(),
        ],
    )
    async def test_transport_failure_categorised(self, error):
        notifier = make_notifier()
        with patch("app.services.notifier.aiosmtplib.send", new_callable=AsyncMock, side_effect=error):
            result = await notifier.send("alice@uni.edu", "Hi", "Body")

        assert not result
        assert result.status is DeliveryStatus.TRANSPORT_FAILED


class TestNotifierConfiguration:

    def test_from_settings_uses_email_variables(self):
        settings = Settings(
            email_host="mail.uni.edu",
            email_port=2525,
            email_user="office@uni.edu",
            email_pass="pw",
            email_from="",
        )
        notifier = Notifier.from_settings(settings)
        assert notifier.hostname == "mail.uni.edu"
        assert notifier.port == 2525
        assert notifier.sender == "office@uni.edu"

    def test_explicit_sender_overrides_user(self):
        settings = Settings(email_user="office@uni.edu", email_from="noreply@uni.edu")
        assert Notifier.from_settings(settings).sender == "noreply@uni.edu"


class TestTemplates:

    def test_received_email(self):
        subject, body = received_email("Alice", RequestType.TRANSCRIPT)
        assert subject == "Application Received"
        assert body == (
            "Hello Alice,\n\nWe have received your application for a transcript. "
            "You will be notified when it is ready."
        )

    def test_ready_email_uses_readable_label(self):
        subject, body = ready_email("Bob", RequestType.RECOMMENDATION_LETTER)
        assert subject == "Your recommendation letter is Ready"
        assert body.startswith("Hello Bob,")
        assert "recommendation letter is ready" in body
