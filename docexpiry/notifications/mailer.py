from __future__ import annotations

import logging
import smtplib
import ssl
from email.message import EmailMessage

from .reporting import FormattedOutput, render_html, render_text

logger = logging.getLogger(__name__)


class DeliveryError(RuntimeError):
    """Raised when the report email could not be handed to the SMTP server."""


class EmailNotifier:
    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: str = "",
        password: str = "",
        starttls: bool = True,
        timeout: int = 30,
    ) -> None:
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.starttls = starttls
        self.timeout = timeout

    def build_message(self, recipient: str, subject: str, body: FormattedOutput) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = recipient
        msg["Subject"] = subject
        msg.set_content(render_text(body))
        msg.add_alternative(render_html(body), subtype="html")
        return msg

    def send(self, recipient: str, subject: str, body: FormattedOutput) -> None:
        msg = self.build_message(recipient, subject, body)
        logger.info("Sending '%s' to %s via %s:%d", subject, recipient, self.host, self.port)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                if self.starttls:
                    smtp.starttls(context=ssl.create_default_context())
                if self.username:
                    smtp.login(self.username, self.password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise DeliveryError(f"Could not deliver report to {recipient}: {exc}") from exc
        logger.info("Report delivered to %s", recipient)
