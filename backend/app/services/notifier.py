"""
DocTrack Backend — Email Notifier
===================================

What:  Sends plain-text emails to students through the configured SMTP relay.
How:   Builds an EmailMessage and hands it to aiosmtplib in a single call.
       STARTTLS is negotiated automatically when the relay offers it.
Who:   Called by StudentService after registration and after MarkReady.

Failure Contract:
    send() never raises for delivery problems. It returns a SendResult
    whose status keeps the failure category:

        SENT              delivered to the relay
        INVALID_ADDRESS   relay refused the sender or a recipient
        AUTH_FAILED       relay rejected EMAIL_USER / EMAIL_PASS
        TRANSPORT_FAILED  connection refused, timeout, any other SMTP error

    SendResult is truthy only for SENT, so callers that only care about
    success can write `if not await notifier.send(...)`.
    There is no retry; one attempt per call.
"""

import asyncio
import enum
import logging
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional, Tuple

import aiosmtplib
from fastapi import Request

from app.config import Settings
from app.models.student import RequestType

logger = logging.getLogger(__name__)


class DeliveryStatus(str, enum.Enum):
    SENT = "sent"
    INVALID_ADDRESS = "invalid_address"
    AUTH_FAILED = "auth_failed"
    TRANSPORT_FAILED = "transport_failed"


@dataclass(frozen=True)
class SendResult:
    status: DeliveryStatus
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is DeliveryStatus.SENT

    def __bool__(self) -> bool:
        return self.ok


# ── Templates ─────────────────────────────────────────────────────────────

def received_email(name: str, request_type: RequestType) -> Tuple[str, str]:
    subject = "Application Received"
    body = (
        f"Hello {name},\n\n"
        f"We have received your application for a {request_type.value}. "
        f"You will be notified when it is ready."
    )
    return subject, body


def ready_email(name: str, request_type: RequestType) -> Tuple[str, str]:
    label = request_type.label
    subject = f"Your {label} is Ready"
    body = (
        f"Hello {name},\n\n"
        f"Your {label} is ready. Please contact the office to collect it."
    )
    return subject, body


class Notifier:
    """
    SMTP client wrapper. One instance per application, created by the
    app factory from Settings and injected into routes.
    """

    def __init__(
        self,
        hostname: str,
        port: int,
        username: str = "",
        password: str = "",
        sender: str = "",
        timeout: float = 30.0,
    ):
        self.hostname = hostname
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender or username
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "Notifier":
        return cls(
            hostname=settings.email_host,
            port=settings.email_port,
            username=settings.email_user,
            password=settings.email_pass,
            sender=settings.sender_address,
            timeout=settings.email_timeout,
        )

    def build_message(self, to: str, subject: str, body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(body)
        return msg

    async def send(self, to: str, subject: str, body: str) -> SendResult:
        """
        Deliver one email to the relay.

        Returns:
            SendResult tagged with the outcome; never raises for SMTP,
            network or timeout errors.
        """
        message = self.build_message(to, subject, body)
        try:
            await aiosmtplib.send(
                message,
                hostname=self.hostname,
                port=self.port,
                username=self.username or None,
                password=self.password or None,
                timeout=self.timeout,
            )
        except aiosmtplib.SMTPAuthenticationError as e:
            return self._failed(to, DeliveryStatus.AUTH_FAILED, e)
        except (
            aiosmtplib.SMTPRecipientsRefused,
            aiosmtplib.SMTPRecipientRefused,
            aiosmtplib.SMTPSenderRefused,
        ) as e:
            return self._failed(to, DeliveryStatus.INVALID_ADDRESS, e)
        except (aiosmtplib.SMTPException, OSError, asyncio.TimeoutError) as e:
            return self._failed(to, DeliveryStatus.TRANSPORT_FAILED, e)

        logger.info("Email sent to %s (%s)", to, subject)
        return SendResult(status=DeliveryStatus.SENT)

    @staticmethod
    def _failed(to: str, status: DeliveryStatus, exc: Exception) -> SendResult:
        logger.error(
            "Email send to %s failed [%s]: %s: %s",
            to,
            status.value,
            type(exc).__name__,
            str(exc),
        )
        return SendResult(status=status, detail=str(exc))


# ── Dependency ────────────────────────────────────────────────────────────
def get_notifier(request: Request) -> Notifier:
    """FastAPI dependency returning the notifier created by the app factory."""
    return request.app.state.notifier
