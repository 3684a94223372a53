"""Outbound HTML mail over an SMTP relay or an HTTP mail API."""

from __future__ import annotations

import logging
import re
import smtplib
from email.message import EmailMessage

import httpx

logger = logging.getLogger(__name__)

_TAG = re.compile(r"<[^>]+>")


def plain_text(html_body: str) -> str:
    return _TAG.sub("", html_body.replace("<br>", "\n"))


class SmtpNotifier:
    """Sends HTML mail through an SMTP relay, raising ``smtplib.SMTPException`` or ``OSError`` on failure."""

    def __init__(
        self,
        host: str,
        port: int,
        *,
        sender: str,
        username: str = "",
        password: str = "",
        starttls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._username = username
        self._password = password
        self._starttls = starttls
        self._timeout = timeout

    def build_message(self, to_address: str, subject: str, html_body: str) -> EmailMessage:
        """Return a multipart message with a plain-text fallback derived from the HTML."""
        message = EmailMessage()
        message["From"] = self._sender
        message["To"] = to_address
        message["Subject"] = subject
        message.set_content(plain_text(html_body))
        message.add_alternative(html_body, subtype="html")
        return message

    def send_html_email(self, to_address: str, subject: str, html_body: str) -> None:
        message = self.build_message(to_address, subject, html_body)
        with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as client:
            if self._starttls:
                client.starttls()
            if self._username:
                client.login(self._username, self._password)
            client.send_message(message)
        logger.info("mail '%s' handed to %s:%s", subject, self._host, self._port)


class HttpMailNotifier:
    """Posts HTML mail to a Resend-style ``/emails`` endpoint.

    Non-2xx responses raise ``httpx.HTTPStatusError`` and transport problems
    raise ``httpx.TransportError``, so callers see delivery failures the same
    way they do from :class:`SmtpNotifier`.
    """

    def __init__(
        self,
        api_url: str,
        api_key: str,
        *,
        sender: str,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._url = api_url.rstrip("/") + "/emails"
        self._sender = sender
        self._client = client or httpx.Client(timeout=timeout)
        self._headers = {"Authorization": f"Bearer {api_key}"}

    def send_html_email(self, to_address: str, subject: str, html_body: str) -> None:
        payload = {
            "from": self._sender,
            "to": [to_address],
            "subject": subject,
            "html": html_body,
            "text": plain_text(html_body),
        }
        response = self._client.post(self._url, json=payload, headers=self._headers)
        if response.status_code >= 400:
            logger.warning(
                "mail '%s' rejected by %s with status %s", subject, self._url, response.status_code
            )
        response.raise_for_status()
        logger.info("mail '%s' accepted by %s", subject, self._url)


def build_notifier(settings) -> SmtpNotifier | HttpMailNotifier:
    """Select the mail transport named by ``settings.mail_backend``."""
    if settings.mail_backend == "http":
        if not settings.mail_api_key:
            raise ValueError("MAIL_API_KEY is required when MAIL_BACKEND=http")
        return HttpMailNotifier(
            settings.mail_api_url,
            settings.mail_api_key,
            sender=settings.smtp_sender,
            timeout=settings.smtp_timeout_seconds,
        )
    if settings.mail_backend != "smtp":
        raise ValueError(f"unknown mail backend: {settings.mail_backend}")
    return SmtpNotifier(
        settings.smtp_host,
        settings.smtp_port,
        sender=settings.smtp_sender,
        username=settings.smtp_username,
        password=settings.smtp_password,
        starttls=settings.smtp_starttls,
        timeout=settings.smtp_timeout_seconds,
    )
