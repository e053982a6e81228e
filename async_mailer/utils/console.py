"""Shared rich console for command line output"""

from typing import Optional

from rich.console import Console
from rich.markup import escape

_console: Optional[Console] = None


def get_console() -> Console:
    """Get the shared Console instance"""
    global _console

    if _console is None:
        _console = Console()

    return _console


def reset_console() -> None:
    """Drop the shared Console so the next call builds a fresh one"""
    global _console
    _console = None


## Styled Output

def _print_styled(style: str, message: str, console: Optional[Console]) -> None:
    # Error text may contain brackets (e.g. "[Errno 111]"), never treat it as markup.
    (console or get_console()).print(f"[{style}]{escape(message)}[/]")


def print_success(message: str, console: Optional[Console] = None) -> None:
    """Report a delivered message"""
    _print_styled("green", message, console)


def print_error(message: str, console: Optional[Console] = None) -> None:
    """Report a failed command"""
    _print_styled("red", message, console)


def print_status(message: str, console: Optional[Console] = None) -> None:
    """Report progress"""
    _print_styled("cyan", message, console)


def print_warning(message: str, console: Optional[Console] = None) -> None:
    """Report an ignored or questionable option"""
    _print_styled("yellow", message, console)
