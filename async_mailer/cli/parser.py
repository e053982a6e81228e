"""Argument parser configuration for the async-mailer CLI"""

import argparse
from pathlib import Path

from async_mailer.smtp import SmtpInvalidCertsPolicy
from async_mailer.utils.paths import CONFIG_PATH, LOG_FILE_PATH


## Argument Adding Utilities

def add_invalid_certs_argument(
    parser: argparse.ArgumentParser,
    default: SmtpInvalidCertsPolicy | None = SmtpInvalidCertsPolicy.DENY,
) -> None:
    """Add ``--invalid-certs <allow|deny>`` parsed into ``SmtpInvalidCertsPolicy``."""

    parser.add_argument(
        "--invalid-certs",
        type=SmtpInvalidCertsPolicy,
        choices=list(SmtpInvalidCertsPolicy),
        default=default,
        metavar="{allow,deny}",
        help="Allow or deny invalid SMTP certificates; never allow in production"
        + (f" (default: {default})" if default is not None else ""),
    )


def add_config_argument(parser: argparse.ArgumentParser) -> None:
    """Add the mailer configuration file argument."""

    parser.add_argument(
        "--config",
        type=Path,
        default=CONFIG_PATH,
        help=f"Mailer configuration JSON file (default: {CONFIG_PATH})"
    )


## Command Setup Functions

def setup_send_command(subparsers) -> None:
    """Setup the send command."""

    send_parser = subparsers.add_parser(
        "send",
        help="Send an RFC 5322 message file",
        description="Send a composed message file through the configured mailer"
    )
    send_parser.add_argument(
        "message_file",
        type=Path,
        help="Path to the message file (.eml)"
    )
    add_config_argument(send_parser)
    # No default: only override the configured policy when given.
    add_invalid_certs_argument(send_parser, default=None)


def setup_argument_parser() -> argparse.ArgumentParser:
    """Setup the main argument parser with all commands."""

    parser = argparse.ArgumentParser(
        prog="async-mailer",
        description="Send mail through Microsoft Graph or SMTP",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Console log level (default: WARNING)"
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        nargs="?",
        const=LOG_FILE_PATH,
        default=None,
        help=f"Also write JSON logs to this file (default when given without a value: {LOG_FILE_PATH})"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    setup_send_command(subparsers)

    return parser
