"""Logging for async-mailer.

Library modules log through ``get_logger(__name__)`` into the ``async_mailer``
namespace, which carries only a ``NullHandler``: nothing is printed until an
application calls ``init_logging()`` or attaches its own handlers.

Credentials travel through the transports as ``SecretStr`` and should never
reach a log call; ``SensitiveDataFilter`` additionally scrubs form fields,
bearer tokens and sensitive ``extra`` keys on every installed handler.
"""

import json
import logging
import re
import time
from datetime import datetime, timezone
from functools import wraps
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, MutableMapping, Optional

from rich.logging import RichHandler

ROOT_LOGGER_NAME = "async_mailer"

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())

# Attributes every LogRecord has; anything else arrived through ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
}


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS}


## Credential Masking

REDACTED = "[REDACTED]"


class SensitiveDataMasker:
    """Redacts credentials from log text and structured values.

    Args:
        keep: Leading and trailing characters left visible; 0 hides everything.
    """

    # key=value, key: value and "key": "value" forms, as found in OAuth2 form
    # bodies, JSON token responses and SMTP debug output.
    ASSIGNMENT = re.compile(
        r"((?:client_secret|access_token|refresh_token|password|passwd|secret"
        r"|token|api[_-]?key)[\"']?\s*[:=]\s*[\"']?)([^\"'&}\s,]+)",
        re.IGNORECASE,
    )
    BEARER = re.compile(r"(bearer\s+)([A-Za-z0-9\-._~+/]+=*)", re.IGNORECASE)

    SENSITIVE_KEYS = frozenset(
        {
            "password",
            "passwd",
            "secret",
            "client_secret",
            "token",
            "access_token",
            "refresh_token",
            "authorization",
            "api_key",
            "credential",
        }
    )

    def __init__(self, keep: int = 0):
        self.keep = keep

    def redact(self, value: str) -> str:
        if self.keep and len(value) > 2 * self.keep:
            hidden = len(value) - 2 * self.keep
            return value[: self.keep] + "*" * hidden + value[-self.keep :]
        return REDACTED

    def mask_string(self, text: str) -> str:
        if not isinstance(text, str) or not text:
            return text

        for pattern in (self.ASSIGNMENT, self.BEARER):
            text = pattern.sub(lambda m: m.group(1) + self.redact(m.group(2)), text)
        return text

    def mask_value(self, key: Optional[str], value: Any) -> Any:
        """Mask ``value`` found under ``key`` (None for positional values)."""
        if key is not None and str(key).lower() in self.SENSITIVE_KEYS:
            return self.redact(str(value))
        if isinstance(value, dict):
            return {k: self.mask_value(k, v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return type(value)(self.mask_value(None, v) for v in value)
        if isinstance(value, str):
            return self.mask_string(value)
        return value

    def mask_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.mask_value(None, data)


class SensitiveDataFilter(logging.Filter):
    """Masks the message, its arguments and ``extra`` fields of each record."""

    def __init__(self, keep: int = 0):
        super().__init__()
        self.masker = SensitiveDataMasker(keep)

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = self.masker.mask_string(record.msg)
        if record.args:
            record.args = self.masker.mask_value(None, record.args)

        for key, value in _extra_fields(record).items():
            setattr(record, key, self.masker.mask_value(key, value))

        return True


## Formatting


class JSONFormatter(logging.Formatter):
    """One JSON object per line; ``extra`` fields are grouped under ``context``."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = _extra_fields(record)
        if context:
            entry["context"] = context
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class ContextAdapter(logging.LoggerAdapter):
    """Adds fixed context to every call; per-call ``extra`` wins on conflicts."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


## Handler Setup


def _to_level(level: str) -> int:
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Invalid logging level: {level}")
    return value


class LogManager:
    """Owns the handlers installed on the ``async_mailer`` logger.

    The console handler follows ``log_level``; the optional JSON file
    handler always records DEBUG.
    """

    FILE_MAX_BYTES = 5 * 1024 * 1024
    FILE_BACKUPS = 5

    def __init__(self, log_level: str = "INFO", log_file: Optional[Path] = None):
        self.log_level = _to_level(log_level)
        self.log_file = log_file
        self.logger = logging.getLogger(ROOT_LOGGER_NAME)

        mask = SensitiveDataFilter()
        self.console_handler = self._console_handler(mask)
        handlers: list[logging.Handler] = [self.console_handler]
        if log_file is not None:
            handlers.append(self._file_handler(log_file, mask))

        # Replaces the NullHandler.
        self.logger.handlers[:] = handlers
        self.logger.setLevel(logging.DEBUG)

    def _console_handler(self, mask: logging.Filter) -> RichHandler:
        handler = RichHandler(
            show_time=True,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
        handler.setLevel(self.log_level)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        handler.addFilter(mask)
        return handler

    def _file_handler(self, log_file: Path, mask: logging.Filter) -> RotatingFileHandler:
        from .errors import ConfigurationError

        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handler = RotatingFileHandler(
                log_file,
                maxBytes=self.FILE_MAX_BYTES,
                backupCount=self.FILE_BACKUPS,
                encoding="utf-8",
            )
        except OSError as e:
            raise ConfigurationError(
                f"Cannot open log file: {e}", details={"log_file": str(log_file)}
            ) from e

        handler.setLevel(logging.DEBUG)
        handler.setFormatter(JSONFormatter())
        handler.addFilter(mask)
        return handler

    def set_level(self, level: str) -> None:
        """Change the console level at runtime."""
        self.log_level = _to_level(level)
        self.console_handler.setLevel(self.log_level)


_log_manager: Optional[LogManager] = None


def init_logging(log_level: str = "INFO", log_file: Optional[Path] = None) -> LogManager:
    """Print package logs to the console (and ``log_file``, if given).

    Later calls only change the console level.
    """
    global _log_manager

    if _log_manager is None:
        _log_manager = LogManager(log_level, log_file)
    else:
        _log_manager.set_level(log_level)

    return _log_manager


def get_logger(name: Optional[str] = None, **context) -> logging.Logger | ContextAdapter:
    """Get a logger inside the ``async_mailer`` namespace, with optional context."""
    if not name:
        name = ROOT_LOGGER_NAME
    elif name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    logger = logging.getLogger(name)
    return ContextAdapter(logger, context) if context else logger


## Decorators


def async_log_call(func):
    """Log entry, exit and duration of a coroutine function at DEBUG."""
    logger = get_logger(func.__module__)
    name = func.__qualname__

    @wraps(func)
    async def wrapper(*args, **kwargs):
        start = time.perf_counter()
        logger.debug(f"-> {name}")

        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            elapsed = time.perf_counter() - start
            logger.debug(f"<- {name} raised {type(e).__name__} after {elapsed:.3f}s")
            raise

        logger.debug(f"<- {name} ({time.perf_counter() - start:.3f}s)")
        return result

    return wrapper
