"""
SMTP email client for merchant notifications.

Sends through an authenticated STARTTLS SMTP relay (Gmail by default) using
EMAIL_USER/EMAIL_PASS. Every failure is raised as EmailError; callers that
treat email as best-effort catch it (see core.event_bus).
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

logger = logging.getLogger(__name__)


class EmailError(Exception):
    """Raised when an email could not be handed to the SMTP relay."""


class EmailClient:
    """Send HTML emails via SMTP."""

    def __init__(
        self,
        user: str,
        password: str,
        host: str = "smtp.gmail.com",
        port: int = 587,
        from_name: str = "SabbPe Support",
        timeout: int = 10,
    ):
        """
        Initialize with SMTP credentials.

        Raises:
            ValueError: If user or password is empty
        """
        if not user:
            raise ValueError("user is required")
        if not password:
            raise ValueError("password is required")

        self.user = user
        self.password = password
        self.host = host
        self.port = int(port)
        self.from_name = from_name
        self.timeout = timeout

    def _build_message(self, to: str, subject: str, html: str, text: str | None) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self.from_name} <{self.user}>"
        msg["To"] = to
        if text:
            msg.attach(MIMEText(text, "plain"))
        msg.attach(MIMEText(html, "html"))
        return msg

    def send_email(self, to: str, subject: str, html: str, text: str | None = None) -> None:
        """
        Send one email.

        Args:
            to: Recipient address
            subject: Subject line
            html: HTML body
            text: Optional plain-text alternative

        Raises:
            ValueError: If recipient is empty
            EmailError: On authentication, protocol, or network failure
        """
        if not to:
            raise ValueError("Recipient address is required")

        msg = self._build_message(to, subject, html, text)

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                server.starttls()
                server.login(self.user, self.password)
                server.sendmail(self.user, [to], msg.as_string())
        except smtplib.SMTPAuthenticationError as e:
            logger.error("SMTP authentication failed. Check EMAIL_USER/EMAIL_PASS.")
            raise EmailError(f"Authentication failed: {e}")
        except smtplib.SMTPException as e:
            logger.error(f"SMTP error sending to {to}: {e}")
            raise EmailError(f"SMTP error: {e}")
        except OSError as e:
            # socket errors and timeouts
            logger.error(f"Network error sending email to {to}: {e}")
            raise EmailError(f"Connection failed: {e}")

        logger.info(f"Email sent to {to}: {subject}")
