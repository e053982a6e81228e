"""Core mailer interfaces, message type and helpers."""

from .mailer import ArcMailer, BoxMailer, DynMailer, DynMailerAdapter, Mailer
from .message import Address, Message, into_message
from .util import format_recipient_addresses

__all__ = [
    # Interfaces
    "Mailer",
    "DynMailer",
    "DynMailerAdapter",
    "BoxMailer",
    "ArcMailer",
    # Message
    "Address",
    "Message",
    "into_message",
    # Helpers
    "format_recipient_addresses",
]
