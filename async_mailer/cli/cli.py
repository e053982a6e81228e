"""Command line entry point: send a message file through the configured mailer."""

import asyncio
import sys
from email import policy
from email.parser import BytesParser
from pathlib import Path
from typing import Optional, Sequence

from async_mailer.core.message import Message, into_message
from async_mailer.factory import SmtpConfig, load_mailer_config, new_mailer, resolve_credentials
from async_mailer.utils.console import (
    print_error,
    print_status,
    print_success,
    print_warning,
)
from async_mailer.utils.errors import ConfigurationError, MailerError, format_error_message
from async_mailer.utils.logging import get_logger, init_logging

from .parser import setup_argument_parser

logger = get_logger(__name__)


def read_message_file(path: Path) -> Message:
    """Parse an RFC 5322 message file into a ``Message``."""
    try:
        with open(path, "rb") as f:
            email_message = BytesParser(policy=policy.default).parse(f)
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read message file: {str(e)}", details={"path": str(path)}
        ) from e

    return into_message(email_message)


async def handle_send(args) -> None:
    """Load configuration, build the mailer and send the message."""
    config = load_mailer_config(args.config)

    if args.invalid_certs is not None:
        if isinstance(config, SmtpConfig):
            config = config.model_copy(update={"invalid_certs": args.invalid_certs})
        else:
            logger.warning(f"--invalid-certs ignored for {config.transport} transport")
            print_warning(
                f"--invalid-certs only applies to SMTP; ignored for {config.transport}"
            )

    config = await resolve_credentials(config)
    message = read_message_file(args.message_file)

    print_status(f"Sending mail via {config.transport}...")
    mailer = await new_mailer(config)
    try:
        await mailer.send_mail(message)
    finally:
        await mailer.aclose()
    print_success(f"Sent mail to {len(message.rcpt_to)} recipient(s)")


async def dispatch_command(args) -> None:
    """Dispatch the parsed command to its handler."""
    if args.command == "send":
        await handle_send(args)
    else:
        raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the CLI and return the process exit code."""
    parser = setup_argument_parser()
    args = parser.parse_args(argv)

    try:
        init_logging(args.log_level, args.log_file)
        asyncio.run(dispatch_command(args))
    except MailerError as e:
        logger.debug("Command failed", exc_info=True)
        cause = f" ({e.__cause__})" if e.__cause__ else ""
        print_error(f"{format_error_message(e)}{cause}")
        return 1
    except KeyboardInterrupt:
        print_error("Interrupted")
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
