"""SMTP mailer sending prepared messages over an authenticated connection.

A new connection is opened for every send and closed afterwards.

Example:
    >>> mailer = SmtpMailer(
    ...     "smtp.example.com",
    ...     465,
    ...     SmtpInvalidCertsPolicy.DENY,
    ...     "<username>",
    ...     Secret("<password>"),
    ... )
    >>> await mailer.send_mail(message)
"""

from enum import Enum

import aiosmtplib
from pydantic import SecretStr

from async_mailer.core.mailer import ArcMailer, BoxMailer, Mailer
from async_mailer.core.message import Message
from async_mailer.core.util import format_recipient_addresses
from async_mailer.utils.errors import SmtpConnectError, SmtpMailerError, SmtpSendError
from async_mailer.utils.logging import get_logger

from .constants import SMTPPorts, Timeouts

logger = get_logger(__name__)


class SmtpInvalidCertsPolicy(str, Enum):
    """Allow or deny invalid (e.g. self-signed) SMTP server certificates.

    ``ALLOW`` exists for development servers such as MailHog or Mailpit.
    Never use it in production.
    """

    ALLOW = "allow"
    DENY = "deny"

    def __str__(self) -> str:
        return self.value


class SmtpMailer(Mailer[SmtpMailerError]):
    """Mailer sending via SMTP.

    Certificate validation can be relaxed to send through a development
    server while production uses another mailer.
    """

    error_type = SmtpMailerError

    def __init__(
        self,
        host: str,
        port: int,
        invalid_certs: SmtpInvalidCertsPolicy,
        user: str,
        password: SecretStr,
    ):
        """Store connection settings. No network I/O happens here."""
        self.host = host
        self.port = port
        self.invalid_certs = SmtpInvalidCertsPolicy(invalid_certs)
        self.user = user
        self._password = password
        self.timeout = Timeouts.SMTP_OPERATION

    @classmethod
    def new_box(
        cls,
        host: str,
        port: int,
        invalid_certs: SmtpInvalidCertsPolicy,
        user: str,
        password: SecretStr,
    ) -> BoxMailer:
        """Create a new SMTP mailer as dynamic ``BoxMailer``."""
        return cls(host, port, invalid_certs, user, password).new_dyn()

    @classmethod
    def new_arc(
        cls,
        host: str,
        port: int,
        invalid_certs: SmtpInvalidCertsPolicy,
        user: str,
        password: SecretStr,
    ) -> ArcMailer:
        """Create a new SMTP mailer as dynamic ``ArcMailer``."""
        return cls(host, port, invalid_certs, user, password).new_dyn()

    def _build_client(self) -> aiosmtplib.SMTP:
        implicit_tls = SMTPPorts.is_implicit_ssl(self.port)

        return aiosmtplib.SMTP(
            hostname=self.host,
            port=self.port,
            username=self.user,
            password=self._password.get_secret_value(),
            timeout=self.timeout,
            use_tls=implicit_tls,
            start_tls=not implicit_tls,
            validate_certs=self.invalid_certs is SmtpInvalidCertsPolicy.DENY,
        )

    async def send_mail(self, message: Message) -> None:
        """Send the prepared MIME message via an SMTP connection.

        Raises:
            SmtpConnectError: If connecting or authenticating fails
            SmtpSendError: If the SMTP transaction fails or the host refuses
                any recipient
        """
        recipient_addresses = format_recipient_addresses(message)

        logger.info(f"Sending SMTP mail to {recipient_addresses}...")

        client = self._build_client()

        try:
            # Connects, negotiates TLS and logs in.
            await client.connect()
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(
                f"Failed to connect to SMTP host for mail to {recipient_addresses}",
                extra={"server": self.host, "port": self.port, "error": str(e)},
            )
            client.close()
            raise SmtpConnectError(
                details={"server": self.host, "port": self.port}
            ) from e

        try:
            refused, _ = await client.sendmail(
                message.mail_from.email,
                message.recipient_emails,
                message.body,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(
                f"Failed to send SMTP mail to {recipient_addresses}",
                extra={"server": self.host, "error": str(e)},
            )
            raise SmtpSendError(details={"server": self.host}) from e
        finally:
            client.close()

        # aiosmtplib raises only when every recipient is refused; a partial
        # refusal comes back in the result and still fails the send.
        if refused:
            refused_details = {
                recipient: f"{response[0]} {response[1]}"
                for recipient, response in refused.items()
            }
            logger.error(
                f"SMTP host refused recipients of mail to {recipient_addresses}",
                extra={"server": self.host, "refused": refused_details},
            )
            raise SmtpSendError(
                f"{SmtpSendError.user_message}: recipients refused: "
                f"{', '.join(refused_details)}",
                details={"server": self.host, "refused": refused_details},
            )

        logger.info(f"Sent SMTP mail to {recipient_addresses}")

    def __repr__(self) -> str:
        return (
            f"SmtpMailer(host={self.host!r}, port={self.port}, "
            f"invalid_certs={self.invalid_certs.value!r}, user={self.user!r}, "
            f"password={self._password!r})"
        )
