"""Helpers shared by mailer implementations."""

from .message import Message


def format_recipient_addresses(message: Message) -> str:
    """Extract recipient addresses for log output."""
    return ", ".join(address.email for address in message.rcpt_to)
