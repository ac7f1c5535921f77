import asyncio
import smtplib
from abc import ABC, abstractmethod
from email.message import EmailMessage
from email.utils import formataddr
from typing import Dict, Optional

from app.config.settings import settings
from app.templates.email_templates import (
    render_eligibility_status_update,
    render_login_credentials,
    render_password_reset_otp,
)
from app.utils.logging import get_logger

logger = get_logger()


class EmailNotifier(ABC):
    """
    Transactional email capability.

    Every send method reports delivery as a boolean and never raises, so callers
    can treat email as a best-effort side effect.
    """

    @abstractmethod
    async def send_login_credentials(
        self,
        to: str,
        student_name: str,
        login_id: str,
        temporary_password: str,
        app_url: str,
    ) -> bool:
        pass

    @abstractmethod
    async def send_eligibility_status_update(
        self,
        to: str,
        student_name: str,
        status: str,
        reason: Optional[str] = None,
    ) -> bool:
        pass

    @abstractmethod
    async def send_password_reset_otp(
        self, to: str, otp: str, expiry_minutes: int
    ) -> bool:
        pass


class SmtpEmailNotifier(EmailNotifier):
    """EmailNotifier that delivers through an SMTP relay."""

    def __init__(
        self,
        host: str = settings.SMTP_HOST,
        port: int = settings.SMTP_PORT,
        username: str = settings.SMTP_USERNAME,
        password: str = settings.SMTP_PASSWORD,
        use_tls: bool = settings.SMTP_USE_TLS,
        timeout: int = settings.SMTP_TIMEOUT,
        from_name: str = settings.EMAIL_FROM_NAME,
        from_address: str = settings.EMAIL_FROM_ADDRESS,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout
        self.sender = formataddr((from_name, from_address))

    async def send_login_credentials(
        self,
        to: str,
        student_name: str,
        login_id: str,
        temporary_password: str,
        app_url: str,
    ) -> bool:
        content = render_login_credentials(
            student_name, login_id, temporary_password, f"{app_url.rstrip('/')}/login"
        )
        return await self._send(to, content, "login credentials")

    async def send_eligibility_status_update(
        self,
        to: str,
        student_name: str,
        status: str,
        reason: Optional[str] = None,
    ) -> bool:
        content = render_eligibility_status_update(student_name, status, reason)
        return await self._send(to, content, "eligibility status")

    async def send_password_reset_otp(
        self, to: str, otp: str, expiry_minutes: int
    ) -> bool:
        content = render_password_reset_otp(otp, expiry_minutes)
        return await self._send(to, content, "password reset OTP")

    async def verify_connection(self) -> bool:
        """Open and authenticate an SMTP session without sending anything."""
        try:
            await asyncio.to_thread(self._check_connection)
            logger.info("Email service is ready")
            return True
        except Exception as e:
            logger.error(f"Email service verification failed: {e}")
            return False

    async def _send(self, to: str, content: Dict[str, str], kind: str) -> bool:
        try:
            message = self._build_message(to, content)
            await asyncio.to_thread(self._deliver, message)
        except Exception as e:
            logger.error(f"Failed to send {kind} email to {to!r}: {e}")
            return False

        logger.info(f"{kind.capitalize()} email sent to {to}")
        return True

    def _build_message(self, to: str, content: Dict[str, str]) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = content["subject"]
        message.set_content(content["text"])
        message.add_alternative(content["html"], subtype="html")
        return message

    def _login(self, connection: smtplib.SMTP) -> None:
        if self.use_tls:
            connection.starttls()
        if self.username:
            connection.login(self.username, self.password)

    def _check_connection(self) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as connection:
            self._login(connection)

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as connection:
            self._login(connection)
            connection.send_message(message)


def get_email_notifier() -> EmailNotifier:
    return SmtpEmailNotifier()
