"""Sending HTML e-mail through an SMTP relay secured with STARTTLS."""

from __future__ import annotations

import asyncio
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formataddr, parseaddr
from typing import Any, Callable


def _mailbox(text: str) -> str:
    """Validate a mailbox such as ``Name <user@host>`` and return it normalised."""
    name, address = parseaddr(text)
    local, at, domain = address.rpartition("@")
    if not at or not local or not domain or any(ch.isspace() for ch in address):
        raise ValueError(f"invalid mailbox: {text!r}")
    return formataddr((name, address)) if name else address


class EmailManager:
    """Sends e-mail from a default sender through one SMTP relay."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        default_from: str,
        smtp_factory: Callable[[str, int], Any] = smtplib.SMTP,
    ) -> None:
        if not host:
            raise ValueError("an SMTP host is required")
        self.host = host
        self.port = port
        self.username = username
        self._password = password
        self.default_from = default_from
        self._smtp_factory = smtp_factory

    def _build_message(self, to: str, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = _mailbox(self.default_from)
        message["To"] = _mailbox(to)
        message["Subject"] = subject
        message.set_content(body, subtype="html")
        return message

    def _deliver(self, message: EmailMessage) -> None:
        with self._smtp_factory(self.host, self.port) as smtp:
            smtp.starttls(context=ssl.create_default_context())
            smtp.login(self.username, self._password)
            smtp.send_message(message)

    async def send_email(self, to: str, subject: str, body: str) -> None:
        """Send an HTML message to ``to``; invalid addresses raise ValueError."""
        message = self._build_message(to, subject, body)
        await asyncio.to_thread(self._deliver, message)