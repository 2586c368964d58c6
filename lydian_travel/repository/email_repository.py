"""SMTP delivery of rendered booking and account emails."""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr

from lydian_travel.core.config import Settings, settings
from lydian_travel.models.email import EmailContent

logger = logging.getLogger(__name__)

_PLAIN_TEXT_FALLBACK = "Bu e-posta HTML destekleyen bir e-posta istemcisi gerektirir."


class EmailRepository:
    def __init__(self, config: Settings | None = None):
        self._settings = config or settings

    def _sender(self) -> str:
        from_email = self._settings.SMTP_FROM_EMAIL
        if not from_email:
            raise RuntimeError("SMTP_FROM_EMAIL must be configured to send emails")
        if self._settings.SMTP_FROM_NAME:
            return formataddr((self._settings.SMTP_FROM_NAME, from_email))
        return from_email

    def build_message(self, email: EmailContent) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = email.subject
        message["From"] = self._sender()
        message["To"] = ", ".join(email.recipients)
        if email.reply_to:
            message["Reply-To"] = email.reply_to

        message.set_content(email.text_body or _PLAIN_TEXT_FALLBACK)
        message.add_alternative(email.html_body, subtype="html")

        for attachment in email.attachments:
            maintype, subtype = attachment.content_type.split("/", 1)
            message.add_attachment(
                attachment.data,
                maintype=maintype,
                subtype=subtype,
                filename=attachment.filename,
            )
        return message

    def _connect(self) -> smtplib.SMTP:
        host = self._settings.SMTP_HOST
        port = self._settings.SMTP_PORT
        timeout = self._settings.SMTP_TIMEOUT
        if self._settings.SMTP_USE_SSL:
            return smtplib.SMTP_SSL(host, port, timeout=timeout)

        client = smtplib.SMTP(host, port, timeout=timeout)
        if self._settings.SMTP_USE_TLS:
            client.starttls()
        return client

    def send_email(self, email: EmailContent) -> None:
        if not self._settings.SMTP_HOST:
            raise RuntimeError("SMTP_HOST must be configured to send emails")

        message = self.build_message(email)
        try:
            with self._connect() as client:
                if self._settings.SMTP_USERNAME and self._settings.SMTP_PASSWORD:
                    client.login(self._settings.SMTP_USERNAME, self._settings.SMTP_PASSWORD)
                client.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:  # pragma: no cover - network dependent
            raise RuntimeError(f"Failed to deliver email to {email.primary_recipient()}") from exc

        logger.debug("Delivered '%s' to %s", email.subject, email.primary_recipient())


__all__ = ["EmailRepository"]
