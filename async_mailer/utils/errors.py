"""Centralised error definitions for async-mailer."""

from enum import Enum
from typing import Any, Dict, Optional


## Error Categories


class ErrorCategory(Enum):
    """Categories of errors for better handling."""

    NETWORK = "network"
    AUTHENTICATION = "authentication"
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    UNKNOWN = "unknown"


## Base Exception


class MailerError(Exception):
    """Base exception for all async-mailer errors."""

    category = ErrorCategory.UNKNOWN
    user_message = "A mailer error occurred"

    def __init__(
        self, message: str | None = None, details: Dict[str, Any] | None = None
    ):
        """Initialise MailerError with optional message and details."""
        self.message = message or self.user_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error details to a dictionary."""
        return {
            "error_type": self.__class__.__name__,
            "category": self.category.value,
            "message": self.message,
            "details": self.details,
        }


class DynMailerError(MailerError):
    """Type-erased error raised by dynamic mailers.

    The concrete error is kept as ``__cause__``; its text becomes the message.
    """

    user_message = "Failed to send mail"

    @classmethod
    def from_error(cls, error: Exception) -> "DynMailerError":
        """Erase a concrete mailer error, preserving its text and details."""
        details = dict(getattr(error, "details", {}) or {})
        details.setdefault("error_type", error.__class__.__name__)
        erased = cls(str(error), details=details)
        erased.__cause__ = error
        return erased

    @property
    def source(self) -> Optional[BaseException]:
        """The concrete error this one was erased from."""
        return self.__cause__


## Outlook Errors


class OutlookMailerError(MailerError):
    """Base exception for Microsoft Graph mailer errors."""

    category = ErrorCategory.NETWORK
    user_message = "Failed to send Outlook mail through Microsoft Graph API"


class AccessTokenError(OutlookMailerError):
    """Failed to retrieve a Microsoft Graph API access token."""

    category = ErrorCategory.AUTHENTICATION
    user_message = "Failed to retrieve Microsoft Graph API access token"


class AccessTokenRequestError(AccessTokenError):
    """The token request could not be sent to the identity service."""

    user_message = (
        "Failed sending OAuth2 client credentials grant access token request "
        "to Microsoft Identity service"
    )


class AccessTokenResponseError(AccessTokenError):
    """The token response could not be received in full."""

    user_message = (
        "Failed receiving OAuth2 client credentials grant access token response "
        "from Microsoft Identity service"
    )


class AccessTokenParseError(AccessTokenError):
    """The token response did not contain a usable access token."""

    user_message = (
        "Failed to parse OAuth2 client credentials grant access token response "
        "from Microsoft Identity service"
    )


class SendMailRequestError(OutlookMailerError):
    """The sendMail request could not be transmitted."""

    user_message = (
        "Failed request attempting to send Outlook MIME mail through "
        "Microsoft Graph API"
    )


class SendMailRejectedError(OutlookMailerError):
    """The Graph API answered the sendMail request with a non-success status."""

    user_message = "Failed sending Outlook MIME mail through Microsoft Graph API"

    def __init__(
        self,
        message: str | None = None,
        details: Dict[str, Any] | None = None,
        status_code: Optional[int] = None,
        response_text: Optional[str] = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code
        self.response_text = response_text


class SendMailResponseBodyError(OutlookMailerError):
    """The sendMail response body could not be retrieved."""

    user_message = "Failed retrieving response body from Microsoft Graph API"


## SMTP Errors


class SmtpMailerError(MailerError):
    """Base exception for SMTP mailer errors."""

    category = ErrorCategory.NETWORK
    user_message = "SMTP mailer error"


class SmtpConnectError(SmtpMailerError):
    """Connecting or authenticating to the SMTP host failed."""

    user_message = "Could not connect to SMTP host"


class SmtpSendError(SmtpMailerError):
    """The SMTP transaction did not complete."""

    user_message = "Could not send SMTP mail"


## Message Errors


class InvalidMessageError(MailerError):
    """Base exception for messages that cannot be sent."""

    category = ErrorCategory.VALIDATION
    user_message = "Invalid message"


class MissingMailFromError(InvalidMessageError):
    """The message has no sender address."""

    user_message = "Message has no sender address"


class MissingRcptToError(InvalidMessageError):
    """The message has no recipient addresses."""

    user_message = "Message has no recipient addresses"


## Configuration Errors


class ConfigurationError(MailerError):
    """Base exception for configuration-related errors."""

    category = ErrorCategory.CONFIGURATION
    user_message = "A configuration error occurred"


class MissingConfigError(ConfigurationError):
    """Exception for missing configuration settings."""

    user_message = "Missing configuration settings"


class InvalidConfigError(ConfigurationError):
    """Exception for invalid configuration settings."""

    user_message = "Invalid configuration settings"


## Credential Errors


class KeyStoreError(MailerError):
    """Base exception for key store-related errors."""

    category = ErrorCategory.AUTHENTICATION
    user_message = "A key store error occurred"


class MissingCredentialsError(KeyStoreError):
    """Exception for missing mailer credentials."""

    user_message = "Mailer credentials not configured"


## Utility Functions


def format_error_message(error: Exception) -> str:
    """Format an error message for display."""
    if isinstance(error, MailerError):
        return error.message
    else:
        return "An unexpected error occurred - check logs for details."
