# app/notifications/email.py
import logging
import smtplib
from abc import ABC, abstractmethod
from email.mime.text import MIMEText

from app.core.exceptions import UpstreamError

logger = logging.getLogger(__name__)


class EmailSender(ABC):
    @abstractmethod
    def send(self, to: str, subject: str, body: str) -> None:
        """Send a plain-text email. Raises UpstreamError on failure."""


class SmtpEmailSender(EmailSender):
    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        timeout: int = 30,
    ):
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    def send(self, to: str, subject: str, body: str) -> None:
        msg = MIMEText(body, "plain", "utf-8")
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                if self.username:
                    server.login(self.username, self.password or "")
                server.sendmail(self.sender, [to], msg.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            raise UpstreamError("Could not send email", str(exc)) from exc

        logger.info("Email sent to %s: %s", to, subject)


class LoggingEmailSender(EmailSender):
    """Used when no SMTP server is configured; only writes the email to the log."""

    def send(self, to: str, subject: str, body: str) -> None:
        logger.info("Email to %s (not sent, SMTP disabled): %s\n%s", to, subject, body)
