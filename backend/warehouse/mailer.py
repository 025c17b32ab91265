# Overview: SMTP mail client registered as a Flask extension.

import logging
import smtplib
from contextlib import contextmanager
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import List, Optional

logger = logging.getLogger(__name__)


class MailDeliveryError(Exception):
    """Raised when a message could not be handed to the SMTP server."""


@dataclass
class OutgoingMessage:
    sender: str
    recipients: List[str]
    subject: str
    text_body: str
    html_body: Optional[str] = None


class Mailer:
    """
    Thin SMTP client configured from the Flask app.

    With MAIL_SUPPRESS_SEND (or TESTING) enabled nothing leaves the process:
    messages are logged and appended to ``outbox`` so tests and local runs can
    inspect them. Only the newest ``outbox_limit`` messages are kept.
    """

    def __init__(self, app=None):
        self.outbox: List[OutgoingMessage] = []
        self.smtp_host = "localhost"
        self.smtp_port = 587
        self.username = ""
        self.password = ""
        self.use_ssl = False
        self.sender = "no-reply@warehouse.local"
        self.suppress = True
        self.outbox_limit = 100
        if app is not None:
            self.init_app(app)

    def init_app(self, app) -> None:
        self.smtp_host = app.config.get("MAIL_HOST", self.smtp_host)
        self.smtp_port = int(app.config.get("MAIL_PORT", self.smtp_port))
        self.username = app.config.get("MAIL_USERNAME", "")
        self.password = app.config.get("MAIL_PASSWORD", "")
        self.use_ssl = bool(app.config.get("MAIL_USE_SSL", False))
        self.sender = app.config.get("MAIL_SENDER", self.sender)
        self.suppress = bool(app.config.get("MAIL_SUPPRESS_SEND") or app.config.get("TESTING"))
        self.outbox_limit = int(app.config.get("MAIL_OUTBOX_LIMIT", self.outbox_limit))
        app.extensions["mailer"] = self

    @contextmanager
    def _connection(self):
        """Context-managed SMTP connection."""
        server = None
        try:
            if self.use_ssl:
                server = smtplib.SMTP_SSL(self.smtp_host, self.smtp_port)
            else:
                server = smtplib.SMTP(self.smtp_host, self.smtp_port)
                server.starttls()
            if self.username:
                server.login(self.username, self.password)
            yield server
        finally:
            if server:
                try:
                    server.quit()
                except smtplib.SMTPException as e:
                    logger.warning("Error closing SMTP connection: %s", e)

    def _build_message(self, message: OutgoingMessage) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["From"] = message.sender
        msg["To"] = ", ".join(message.recipients)
        msg["Subject"] = message.subject

        msg.attach(MIMEText(message.text_body or "", "plain"))
        if message.html_body:
            msg.attach(MIMEText(message.html_body, "html"))
        return msg

    def send(
        self,
        recipients: List[str],
        subject: str,
        text_body: str,
        html_body: Optional[str] = None,
    ) -> OutgoingMessage:
        """
        Send one message. Single attempt; raises MailDeliveryError on failure.
        """
        message = OutgoingMessage(
            sender=self.sender,
            recipients=list(recipients),
            subject=subject,
            text_body=text_body,
            html_body=html_body,
        )

        if self.suppress:
            self.outbox.append(message)
            if len(self.outbox) > self.outbox_limit:
                del self.outbox[:-self.outbox_limit]
            logger.info("Mail suppressed: %r to %s", subject, ", ".join(message.recipients))
            return message

        mime = self._build_message(message)
        try:
            with self._connection() as server:
                server.sendmail(message.sender, message.recipients, mime.as_string())
        except smtplib.SMTPAuthenticationError as e:
            raise MailDeliveryError("SMTP authentication failed") from e
        except (smtplib.SMTPException, OSError) as e:
            raise MailDeliveryError(f"Could not deliver mail: {e}") from e

        logger.info("Mail sent: %r to %s", subject, ", ".join(message.recipients))
        return message
