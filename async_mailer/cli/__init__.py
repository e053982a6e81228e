"""Command line interface for async-mailer."""

from .cli import main
from .parser import add_invalid_certs_argument, setup_argument_parser

__all__ = ["main", "add_invalid_certs_argument", "setup_argument_parser"]
