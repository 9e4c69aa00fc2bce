"""
Outbound mail for reset links.

SmtpMailer sends via aiosmtplib. LogMailer is used when no mail credentials
are configured and writes the message to the log instead.
"""
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
import logging

import aiosmtplib

from .config import Settings

logger = logging.getLogger(__name__)


class MailDeliveryError(Exception):
    """Raised when a message could not be handed to the mail server."""


class SmtpMailer:
    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        from_name: str = "Studio Perennis",
        use_tls: bool = True,
        timeout: int = 10,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_name = from_name
        self.use_tls = use_tls
        self.timeout = timeout

    def build_message(self, to: str, subject: str, html: str) -> MIMEMultipart:
        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = f'"{self.from_name}" <{self.username}>'
        message["To"] = to
        message.attach(MIMEText(html, "html"))
        return message

    async def send(self, to: str, subject: str, html: str) -> None:
        """
        Send one HTML email. Attempted exactly once.

        Raises:
            MailDeliveryError: if connecting, authenticating or sending fails.
        """
        message = self.build_message(to, subject, html)
        try:
            async with aiosmtplib.SMTP(
                hostname=self.host,
                port=self.port,
                start_tls=self.use_tls,
                timeout=self.timeout,
            ) as smtp:
                await smtp.login(self.username, self.password)
                await smtp.send_message(message)
        except (aiosmtplib.SMTPException, OSError) as exc:
            raise MailDeliveryError(f"Failed to send email via {self.host}: {exc}") from exc
        logger.info("Email sent to %s", to)


class LogMailer:
    """Development mailer: logs the message instead of sending it."""

    async def send(self, to: str, subject: str, html: str) -> None:
        logger.info("[DEV] Email to %s subject=%r body=%s", to, subject, html)


def build_mailer(settings: Settings):
    if not settings.mail_enabled:
        logger.warning("EMAIL_USER/EMAIL_PASS not set; reset emails will be logged, not sent")
        return LogMailer()
    return SmtpMailer(
        host=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.EMAIL_USER,
        password=settings.EMAIL_PASS,
        from_name=settings.EMAIL_FROM_NAME,
        use_tls=settings.SMTP_USE_TLS,
        timeout=settings.SMTP_TIMEOUT,
    )
