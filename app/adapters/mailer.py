"""SMTP mail delivery adapter for the weekly report."""

from __future__ import annotations

import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Sequence

from .error_classifier import adapter_classify_error
from .errors import MailDeliveryError
from .interfaces import MailerPort

logger = logging.getLogger(__name__)


def adapter_build_email_message(
    to: Sequence[str],
    sender: str,
    subject: str,
    text_body: str,
    html_body: str,
) -> EmailMessage:
    """Build one multipart/alternative message.

    Args:
        to: Recipient addresses.
        sender: Sender address.
        subject: Subject line.
        text_body: Plain-text body.
        html_body: HTML body.

    Returns:
        EmailMessage: Message with plain-text and HTML alternatives.

    Raises:
        ValueError: Raised when no recipients are given.
    """

    recipients = [address.strip() for address in to if address.strip()]
    if not recipients:
        raise ValueError("at least one recipient is required")

    message = EmailMessage()
    message["Subject"] = subject
    message["From"] = sender
    message["To"] = ", ".join(recipients)
    message.set_content(text_body)
    message.add_alternative(html_body, subtype="html")
    return message


class SmtpMailer(MailerPort):
    """Deliver mail through an implicit-TLS SMTP server with login."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        timeout_seconds: float = 30.0,
    ):
        """Initialize SMTP mailer.

        Args:
            host: SMTP server host.
            port: SMTP server implicit-TLS port.
            username: Login user, usually the sender address.
            password: Login password.
            timeout_seconds: Socket timeout in seconds.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when config values are invalid.
        """

        if not host.strip():
            raise ValueError("host must not be blank")
        if not 1 <= port <= 65535:
            raise ValueError("port must be within [1, 65535]")
        if not username.strip():
            raise ValueError("username must not be blank")
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")

        self._host = host.strip()
        self._port = port
        self._username = username.strip()
        self._password = password
        self._timeout_seconds = timeout_seconds

    def adapter_send_mail(
        self,
        to: Sequence[str],
        sender: str,
        subject: str,
        text_body: str,
        html_body: str,
    ) -> None:
        """Deliver one email.

        Args:
            to: Recipient addresses.
            sender: Sender address.
            subject: Subject line.
            text_body: Plain-text body.
            html_body: HTML body.

        Returns:
            None: Delivery has no return payload.

        Raises:
            MailDeliveryError: Raised on connection, authentication or delivery failure.
            ValueError: Raised when no recipients are given.
        """

        message = adapter_build_email_message(
            to=to,
            sender=sender,
            subject=subject,
            text_body=text_body,
            html_body=html_body,
        )
        target = f"smtp://{self._host}:{self._port}"
        try:
            with smtplib.SMTP_SSL(
                self._host,
                self._port,
                timeout=self._timeout_seconds,
                context=ssl.create_default_context(),
            ) as smtp_connection:
                smtp_connection.login(self._username, self._password)
                smtp_connection.send_message(message)
        except (smtplib.SMTPException, OSError) as error:
            classified = adapter_classify_error(error, target=target)
            raise MailDeliveryError(classified.message, classified) from error

        logger.info("Mail delivered to %d recipients via %s", len(message["To"].split(",")), target)
