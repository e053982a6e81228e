"""Runtime mailer selection from configuration.

    >>> config = load_mailer_config(Path("mailer.json"))
    >>> mailer = await new_mailer(await resolve_credentials(config))
    >>> await mailer.send_mail(message)

``mailer.json`` holds one of:

    {"transport": "outlook", "tenant": "...", "app_guid": "...", "secret": "..."}
    {"transport": "smtp", "host": "...", "port": 465, "invalid_certs": "deny",
     "user": "...", "password": "..."}

Secrets may be omitted and supplied by a ``KeyStore`` instead.
"""

import json
from pathlib import Path
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, SecretStr, TypeAdapter, ValidationError

from async_mailer.core.mailer import ArcMailer
from async_mailer.outlook import OutlookMailer
from async_mailer.security import KeyStore
from async_mailer.smtp import SmtpInvalidCertsPolicy, SmtpMailer
from async_mailer.utils.errors import (
    ConfigurationError,
    InvalidConfigError,
    MissingConfigError,
    MissingCredentialsError,
)
from async_mailer.utils.logging import async_log_call, get_logger

logger = get_logger(__name__)


class OutlookConfig(BaseModel):
    """Parameters for an ``OutlookMailer``."""

    transport: Literal["outlook"] = "outlook"
    tenant: str
    app_guid: str
    secret: Optional[SecretStr] = None


class SmtpConfig(BaseModel):
    """Parameters for an ``SmtpMailer``."""

    transport: Literal["smtp"] = "smtp"
    host: str
    port: int = Field(default=465, ge=1, le=65535)
    invalid_certs: SmtpInvalidCertsPolicy = SmtpInvalidCertsPolicy.DENY
    user: str
    password: Optional[SecretStr] = None


MailerConfig = Annotated[Union[OutlookConfig, SmtpConfig], Field(discriminator="transport")]


class ResolvedOutlookConfig(OutlookConfig):
    """``OutlookConfig`` whose secret is known."""

    secret: SecretStr


class ResolvedSmtpConfig(SmtpConfig):
    """``SmtpConfig`` whose password is known."""

    password: SecretStr


ResolvedMailerConfig = Union[ResolvedOutlookConfig, ResolvedSmtpConfig]

_config_adapter: TypeAdapter = TypeAdapter(MailerConfig)


def parse_mailer_config(data: dict) -> Union[OutlookConfig, SmtpConfig]:
    """Validate a configuration mapping into a mailer config."""
    try:
        return _config_adapter.validate_python(data)
    except ValidationError as e:
        raise InvalidConfigError(
            f"Mailer configuration does not match expected schema: {str(e)}"
        ) from e


def load_mailer_config(path: Path) -> Union[OutlookConfig, SmtpConfig]:
    """Load a mailer configuration from a JSON file."""
    if not path.exists():
        raise MissingConfigError(
            f"Mailer configuration file not found: {path}",
            details={"path": str(path)},
        )

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse config file: {e}")
        raise InvalidConfigError(
            f"Configuration file is not valid JSON: {str(e)}",
            details={"path": str(path)},
        ) from e
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read configuration file: {str(e)}",
            details={"path": str(path)},
        ) from e

    if not isinstance(data, dict):
        raise InvalidConfigError(
            "Configuration file must contain a JSON object",
            details={"path": str(path)},
        )

    config = parse_mailer_config(data)
    logger.debug(f"Mailer configuration loaded from {path}")
    return config


async def resolve_credentials(
    config: Union[OutlookConfig, SmtpConfig],
    keystore: Optional[KeyStore] = None,
) -> ResolvedMailerConfig:
    """Return ``config`` with its secret filled in, ready for ``new_mailer``.

    A secret missing from the configuration is looked up in the key store:
    Outlook secrets by app GUID, SMTP passwords by user name.

    Raises:
        MissingCredentialsError: If no secret is configured or stored
    """
    if isinstance(config, OutlookConfig):
        resolved_type, field_name, key = ResolvedOutlookConfig, "secret", config.app_guid
    else:
        resolved_type, field_name, key = ResolvedSmtpConfig, "password", config.user

    secret = getattr(config, field_name)
    if secret is None:
        keystore = keystore or KeyStore()
        secret = await keystore.retrieve(key)

    if secret is None:
        raise MissingCredentialsError(
            f"No {field_name} configured or stored for '{key}'",
            details={"transport": config.transport, "key": key},
        )

    return resolved_type.model_validate({**dict(config), field_name: secret})


@async_log_call
async def new_mailer(config: ResolvedMailerConfig) -> ArcMailer:
    """Build the mailer selected by ``config`` as a shared ``DynMailer``.

    Only Outlook construction can fail; an SMTP mailer does no I/O until
    its first send.

    Raises:
        AccessTokenError: If the Outlook access token cannot be retrieved
    """
    if isinstance(config, ResolvedOutlookConfig):
        logger.debug(f"Creating Outlook mailer for tenant {config.tenant}")
        return await OutlookMailer.new_arc(config.tenant, config.app_guid, config.secret)

    if isinstance(config, ResolvedSmtpConfig):
        logger.debug(f"Creating SMTP mailer for {config.host}:{config.port}")
        return SmtpMailer.new_arc(
            config.host,
            config.port,
            config.invalid_certs,
            config.user,
            config.password,
        )

    raise TypeError(
        f"new_mailer() needs a resolved configuration, got {type(config).__name__}; "
        "pass it through resolve_credentials() first"
    )
