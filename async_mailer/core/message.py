"""Prepared mail messages handed to mailers.

A ``Message`` is the SMTP envelope plus the rendered MIME bytes. Compose mail
with the standard library ``email`` package and convert it with
``into_message``:

    >>> from email.message import EmailMessage
    >>> from async_mailer import into_message
    >>>
    >>> msg = EmailMessage()
    >>> msg["From"] = "From Name <from@example.com>"
    >>> msg["To"] = "to@example.com"
    >>> msg["Subject"] = "Subject"
    >>> msg.set_content("Mail body")
    >>> message = into_message(msg)
"""

import copy
from dataclasses import dataclass
from email.message import Message as EmailMessage
from email.utils import getaddresses
from typing import Iterable, List, Tuple

from async_mailer.utils.errors import MissingMailFromError, MissingRcptToError


@dataclass(frozen=True)
class Address:
    """A single envelope address with an optional display name."""

    email: str
    name: str = ""

    def __str__(self) -> str:
        return self.email


@dataclass(frozen=True)
class Message:
    """Envelope sender, envelope recipients and raw MIME body."""

    mail_from: Address
    rcpt_to: Tuple[Address, ...]
    body: bytes

    @classmethod
    def from_email_message(cls, email_message: EmailMessage) -> "Message":
        """Build a message from a composed ``email.message.Message``."""
        return into_message(email_message)

    @property
    def recipient_emails(self) -> List[str]:
        """Envelope recipient addresses, in message order."""
        return [address.email for address in self.rcpt_to]


def _parse_addresses(values: Iterable[str]) -> List[Address]:
    return [
        Address(email=email, name=name)
        for name, email in getaddresses([str(value) for value in values])
        if email
    ]


def into_message(email_message: EmailMessage) -> Message:
    """Convert a composed standard library message into a ``Message``.

    The sender is taken from ``Sender`` or else ``From``; recipients are
    collected from ``To``, ``Cc`` and ``Bcc`` in that order. ``Bcc`` is
    stripped from the rendered body.

    Raises:
        MissingMailFromError: If the message has no sender address
        MissingRcptToError: If the message has no recipient addresses
    """
    senders = _parse_addresses(email_message.get_all("Sender", []))
    if not senders:
        senders = _parse_addresses(email_message.get_all("From", []))
    if not senders:
        raise MissingMailFromError()

    recipients: List[Address] = []
    for header in ("To", "Cc", "Bcc"):
        recipients.extend(_parse_addresses(email_message.get_all(header, [])))
    if not recipients:
        raise MissingRcptToError()

    rendered = email_message
    if email_message.get_all("Bcc"):
        rendered = copy.copy(email_message)
        del rendered["Bcc"]

    return Message(
        mail_from=senders[0],
        rcpt_to=tuple(recipients),
        body=rendered.as_bytes(policy=rendered.policy.clone(linesep="\r\n")),
    )
