"""SMTP connection settings shared by every ``SmtpMailer``."""


class Timeouts:
    """SMTP timeouts (in seconds)."""

    # One value bounds connect, TLS negotiation, login and each command.
    SMTP_OPERATION = 30.0


class SMTPPorts:
    """Well-known submission ports and the TLS mode they imply."""

    SUBMISSION = 587  # STARTTLS upgrade
    SUBMISSION_SSL = 465  # TLS from the first byte
    SMTP = 25  # relay, STARTTLS upgrade

    @classmethod
    def is_implicit_ssl(cls, port: int) -> bool:
        """True for the implicit TLS port; every other port must STARTTLS."""
        return port == cls.SUBMISSION_SSL
