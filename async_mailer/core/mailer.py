"""Mailer interfaces.

Two forms of the same capability are provided:

- ``Mailer``: statically typed, generic over the error it raises. Use it in
  ``M = TypeVar("M", bound=Mailer)`` bounds or when the concrete mailer is
  known, and catch ``mailer.error_type``.
- ``DynMailer``: dynamically typed, always raising ``DynMailerError``. Use it
  when the mailer is chosen from configuration at runtime, stored in shared
  server state or mixed with other mailers in one collection.

``DynMailerAdapter`` is the bridge between the two. Mailer implementations
only implement ``Mailer.send_mail``; the dynamic form delegates to it.
"""

from abc import ABC, abstractmethod
from typing import ClassVar, Generic, Type, TypeVar

from async_mailer.utils.errors import DynMailerError, MailerError

from .message import Message

E = TypeVar("E", bound=MailerError)


## Mailer


class Mailer(ABC, Generic[E]):
    """Statically typed mailer.

    Implementations must be safe to share between concurrent tasks: sending
    may not mutate mailer state. ``repr()`` must identify the mailer without
    revealing secrets.
    """

    error_type: ClassVar[Type[MailerError]] = MailerError

    @abstractmethod
    async def send_mail(self, message: Message) -> None:
        """Send a prepared ``Message``.

        Raises:
            error_type: If sending the mail fails. Concrete errors vary by
                implementation.
        """

    def new_dyn(self) -> "DynMailer":
        """Wrap this mailer for use as a type-erased ``DynMailer``."""
        return DynMailerAdapter(self)

    async def aclose(self) -> None:
        """Release resources held by the mailer. No-op by default."""


## DynMailer


class DynMailer(ABC):
    """Dynamically typed mailer raising the type-erased ``DynMailerError``."""

    @abstractmethod
    async def send_mail(self, message: Message) -> None:
        """Send a prepared ``Message``.

        Raises:
            DynMailerError: If sending the mail fails. The concrete error is
                available as ``__cause__``.
        """

    async def aclose(self) -> None:
        """Release resources held by the mailer. No-op by default."""


class DynMailerAdapter(DynMailer):
    """``DynMailer`` delegating to a statically typed ``Mailer``."""

    def __init__(self, mailer: Mailer):
        self._mailer = mailer

    @property
    def inner(self) -> Mailer:
        """The wrapped mailer."""
        return self._mailer

    async def send_mail(self, message: Message) -> None:
        try:
            await self._mailer.send_mail(message)
        except self._mailer.error_type as e:
            raise DynMailerError.from_error(e) from e

    async def aclose(self) -> None:
        await self._mailer.aclose()

    def __repr__(self) -> str:
        return f"DynMailer({self._mailer!r})"


# Exclusively-owned and shared dynamic mailer handles. Python references are
# always shared, so both name the same interface.
BoxMailer = DynMailer
ArcMailer = DynMailer
