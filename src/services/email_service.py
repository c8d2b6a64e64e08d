"""Outbound email for password reset links."""
import asyncio
import logging
import smtplib
from email.message import EmailMessage
from typing import Protocol
from urllib.parse import urlencode

from core.config import Settings

logger = logging.getLogger(__name__)

RESET_SUBJECT = "Reset your password"


def build_reset_link(base_url: str, token: str) -> str:
    """Frontend URL the user follows to choose a new password."""
    return f"{base_url.rstrip('/')}/reset-password?{urlencode({'token': token})}"


def build_reset_message(sender: str, recipient: str, token: str, base_url: str) -> EmailMessage:
    """Compose the password reset email."""
    link = build_reset_link(base_url, token)
    message = EmailMessage()
    message["Subject"] = RESET_SUBJECT
    message["From"] = sender
    message["To"] = recipient
    message.set_content(
        "We received a request to reset your password.\n\n"
        f"Open this link to choose a new one:\n{link}\n\n"
        "The link can be used once and expires shortly. "
        "If you did not ask for a reset, ignore this email.\n",
    )
    return message


class EmailSender(Protocol):
    """Capability to deliver a reset token to an address."""

    async def send_password_reset(self, recipient: str, token: str, base_url: str) -> bool:
        """Send the reset link. Returns True if the mail server accepted it."""
        ...


class SmtpEmailSender:
    """Deliver mail through an SMTP relay (STARTTLS when enabled)."""

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._username = username
        self._password = password
        self._use_tls = use_tls
        self._timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmtpEmailSender":
        """Build a sender from application settings."""
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            sender=settings.smtp_sender,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            timeout=settings.smtp_timeout_seconds,
        )

    def _send(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as smtp:
            if self._use_tls:
                smtp.starttls()
            if self._username:
                smtp.login(self._username, self._password)
            smtp.send_message(message)

    async def send_password_reset(self, recipient: str, token: str, base_url: str) -> bool:
        """Send the reset email without blocking the event loop."""
        message = build_reset_message(self._sender, recipient, token, base_url)
        try:
            await asyncio.to_thread(self._send, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.warning("password_reset_email_failed: %s", e)
            return False
        logger.info("password_reset_email_sent")
        return True
