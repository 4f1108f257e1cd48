"""E-mail channel delivering through SMTP.

``smtplib`` is blocking, so each delivery runs in a worker thread via
``asyncio.to_thread``. SMTP failures are classified for the retry layer:

* Connection drops, socket errors and 4xx replies are retryable.
* 5xx replies (authentication, rejected recipients) are not.
"""

from __future__ import annotations

import asyncio
import logging
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formatdate, make_msgid

from status_notifier.config.models.providers import EmailProviderConfig
from status_notifier.plugins.formatting import event_title, format_message, footer
from status_notifier.types.models import (
    ErrorCode,
    NotificationContext,
    NotificationResult,
    failure,
    success,
)
from status_notifier.utils.sanitization import sanitize_exception

__all__ = ["EmailChannel", "create_provider"]


class EmailChannel:
    """Channel sending plain-text e-mails to a fixed recipient list."""

    def __init__(self, config: EmailProviderConfig, *, logger: logging.Logger) -> None:
        self.config: EmailProviderConfig = config
        self._logger: logging.Logger = logger

    @property
    def recipients(self) -> list[str]:
        """Every envelope recipient, including blind copies."""
        return [*self.config.to, *self.config.cc, *self.config.bcc]

    def build_message(self, context: NotificationContext) -> EmailMessage:
        """Render ``context`` as an e-mail message."""
        message = EmailMessage()
        message["Subject"] = f"{self.config.subject_prefix} {event_title(context.event)}".strip()
        message["From"] = self.config.from_address
        message["To"] = ", ".join(self.config.to)
        if self.config.cc:
            message["Cc"] = ", ".join(self.config.cc)
        message["Date"] = formatdate(localtime=False)
        message["Message-ID"] = make_msgid(domain=self.config.from_address.rpartition("@")[2])

        body = format_message(context)
        footer_text = footer(context)
        if footer_text:
            body = f"{body}\n\n--\n{footer_text}"
        message.set_content(body)
        return message

    def _connect(self) -> smtplib.SMTP:
        smtp = self.config.smtp
        timeout = self.config.timeout_ms / 1000.0
        if smtp.secure:
            return smtplib.SMTP_SSL(
                smtp.host, smtp.port, timeout=timeout, context=ssl.create_default_context()
            )
        return smtplib.SMTP(smtp.host, smtp.port, timeout=timeout)

    def _open_session(self, server: smtplib.SMTP) -> None:
        smtp = self.config.smtp
        if smtp.starttls:
            _ = server.starttls(context=ssl.create_default_context())
        if smtp.auth is not None:
            _ = server.login(smtp.auth.user, smtp.auth.password)

    def _deliver(self, message: EmailMessage) -> None:
        with self._connect() as server:
            self._open_session(server)
            _ = server.send_message(message, to_addrs=self.recipients)

    def _probe(self) -> None:
        with self._connect() as server:
            self._open_session(server)
            _ = server.noop()

    def _classify(self, exc: OSError) -> NotificationResult[object]:
        provider_id = self.config.id
        match exc:
            case TimeoutError():
                return failure(
                    ErrorCode.TIMEOUT,
                    f"SMTP server {self.config.smtp.host} timed out",
                    provider_id,
                    retryable=True,
                    cause=exc,
                )
            case smtplib.SMTPServerDisconnected() | smtplib.SMTPConnectError():
                return failure(
                    ErrorCode.NETWORK_ERROR,
                    f"SMTP connection failed: {sanitize_exception(exc)}",
                    provider_id,
                    retryable=True,
                    cause=exc,
                )
            case smtplib.SMTPRecipientsRefused():
                return failure(
                    ErrorCode.CHANNEL_ERROR,
                    f"Recipients refused: {', '.join(sorted(exc.recipients))}",
                    provider_id,
                    cause=exc,
                )
            case smtplib.SMTPResponseException():
                return failure(
                    ErrorCode.CHANNEL_ERROR,
                    f"SMTP error {exc.smtp_code}: {sanitize_exception(exc)}",
                    provider_id,
                    retryable=400 <= exc.smtp_code < 500,
                    cause=exc,
                )
            case smtplib.SMTPException():
                return failure(
                    ErrorCode.CHANNEL_ERROR,
                    f"SMTP error: {sanitize_exception(exc)}",
                    provider_id,
                    cause=exc,
                )
            case OSError():
                return failure(
                    ErrorCode.NETWORK_ERROR,
                    f"Cannot reach SMTP server {self.config.smtp.host}: {sanitize_exception(exc)}",
                    provider_id,
                    retryable=True,
                    cause=exc,
                )

    async def send_notification(self, context: NotificationContext) -> NotificationResult[object]:
        """Deliver one e-mail."""
        message = self.build_message(context)
        try:
            await asyncio.to_thread(self._deliver, message)
        except OSError as exc:
            result = self._classify(exc)
            self._logger.warning("E-mail delivery failed: %s", sanitize_exception(exc))
            return result
        self._logger.debug("E-mail sent to %d recipient(s)", len(self.recipients))
        return success({"recipients": len(self.recipients)})

    async def validate_provider_config(self) -> NotificationResult[None]:
        """Optionally open an SMTP session to check host and credentials."""
        if not self.config.probe_on_validate:
            return success(None)
        try:
            await asyncio.to_thread(self._probe)
        except OSError as exc:
            return failure(
                ErrorCode.VALIDATION_ERROR,
                f"SMTP probe failed: {sanitize_exception(exc)}",
                self.config.id,
                cause=exc,
            )
        return success(None)


def create_provider(*, config: EmailProviderConfig, logger: logging.Logger) -> EmailChannel:
    """Factory function for creating EmailChannel instances."""
    if not isinstance(config, EmailProviderConfig):  # pyright: ignore[reportUnnecessaryIsInstance]
        msg = f"Expected EmailProviderConfig, got {type(config).__name__}"
        raise TypeError(msg)
    return EmailChannel(config, logger=logger)
