"""async-mailer: asynchronous ``Mailer`` and ``DynMailer`` interfaces with
runtime-pluggable Outlook (Microsoft Graph) and SMTP implementations.

Using the statically typed ``Mailer``:

    >>> from async_mailer import OutlookMailer, Secret, SmtpInvalidCertsPolicy, SmtpMailer
    >>>
    >>> mailer = await OutlookMailer.new(
    ...     "<Microsoft Identity service tenant>",
    ...     "<OAuth2 app GUID>",
    ...     Secret("<OAuth2 app secret>"),
    ... )
    >>> # Alternative:
    >>> mailer = SmtpMailer(
    ...     "smtp.example.com", 465, SmtpInvalidCertsPolicy.DENY,
    ...     "<username>", Secret("<password>"),
    ... )
    >>> await mailer.send_mail(into_message(email_message))

Using the dynamically typed ``DynMailer`` (``new_box`` / ``new_arc``, or
``new_mailer`` from configuration) all failures surface as
``DynMailerError``:

    >>> mailer: BoxMailer = await OutlookMailer.new_box(tenant, app_guid, secret)
    >>> await mailer.send_mail(message)

Roadmap: access token refresh for ``OutlookMailer``; DKIM signing for
``SmtpMailer``.
"""

from pydantic import SecretStr as Secret

from .core import (
    Address,
    ArcMailer,
    BoxMailer,
    DynMailer,
    DynMailerAdapter,
    Mailer,
    Message,
    format_recipient_addresses,
    into_message,
)
from .factory import (
    MailerConfig,
    OutlookConfig,
    ResolvedMailerConfig,
    ResolvedOutlookConfig,
    ResolvedSmtpConfig,
    SmtpConfig,
    load_mailer_config,
    new_mailer,
    resolve_credentials,
)
from .outlook import OutlookMailer
from .smtp import SmtpInvalidCertsPolicy, SmtpMailer
from .utils.errors import DynMailerError, MailerError, OutlookMailerError, SmtpMailerError
from .utils.logging import init_logging

__all__ = [
    "Secret",
    # Mailer
    "Mailer",
    "MailerError",
    # DynMailer
    "DynMailer",
    "DynMailerAdapter",
    "DynMailerError",
    "BoxMailer",
    "ArcMailer",
    # Message
    "Address",
    "Message",
    "into_message",
    "format_recipient_addresses",
    # Implementations
    "OutlookMailer",
    "OutlookMailerError",
    "SmtpMailer",
    "SmtpMailerError",
    "SmtpInvalidCertsPolicy",
    # Configuration
    "MailerConfig",
    "OutlookConfig",
    "SmtpConfig",
    "ResolvedMailerConfig",
    "ResolvedOutlookConfig",
    "ResolvedSmtpConfig",
    "load_mailer_config",
    "resolve_credentials",
    "new_mailer",
    # Logging
    "init_logging",
]

__version__ = "0.4.2"
