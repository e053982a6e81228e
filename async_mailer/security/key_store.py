"""Credential lookup for mailer secrets missing from configuration."""

from typing import List, Optional, Sequence

from pydantic import SecretStr

from async_mailer.utils.logging import get_logger

from .backends.base import CredentialBackend
from .backends.environment import EnvironmentBackend
from .backends.keyring import KeyringBackend

logger = get_logger(__name__)


class KeyStore:
    """
    Read-only key store with pluggable backends.

    Backends are consulted in priority order; the first value found wins.
    """

    # Available backends in priority order
    AVAILABLE_BACKENDS = [
        EnvironmentBackend,
        KeyringBackend,
    ]

    def __init__(
        self,
        service_name: str = "async-mailer",
        backends: Optional[Sequence[CredentialBackend]] = None,
    ):
        self.service_name = service_name
        self._configured_backends = backends
        self.backends: List[CredentialBackend] = []
        self._initialised = False

    async def initialise(self) -> None:
        """Initialise key store with all available backends."""
        if self._initialised:
            return

        candidates = self._configured_backends or [
            backend_class() for backend_class in self.AVAILABLE_BACKENDS
        ]

        for backend in sorted(candidates, key=lambda b: b.priority):
            if await backend.is_available():
                self.backends.append(backend)
            else:
                logger.debug(f"Credential backend unavailable: {backend.name}")

        self._initialised = True
        logger.debug(
            "KeyStore initialised",
            extra={"backends": [backend.name for backend in self.backends]},
        )

    async def retrieve(self, key: str) -> Optional[SecretStr]:
        """Retrieve a secret by key.

        Args:
            key (str): The credential key (app GUID or SMTP user).

        Returns:
            Optional[SecretStr]: The secret, or None if no backend has it.
        """
        await self.initialise()

        for backend in self.backends:
            value = await backend.retrieve(self.service_name, key)
            if value:
                logger.debug(f"Credential '{key}' found in {backend.name}")
                return SecretStr(value)

        return None
