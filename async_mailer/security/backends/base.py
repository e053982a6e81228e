"""Interface shared by mailer credential sources."""

from abc import ABC, abstractmethod
from typing import Optional


class CredentialBackend(ABC):
    """A read-only source of mailer secrets.

    Secrets are addressed by ``(service, key)``: the service is the key store
    name, the key is the OAuth2 app GUID or the SMTP user name.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human readable source name, used in debug logs."""

    @property
    @abstractmethod
    def priority(self) -> int:
        """Lookup order within a ``KeyStore``; lower values are asked first."""

    @abstractmethod
    async def is_available(self) -> bool:
        """Whether the source can be queried on this system."""

    @abstractmethod
    async def retrieve(self, service: str, key: str) -> Optional[str]:
        """Look up the secret for ``key``.

        Args:
            service (str): Key store service name.
            key (str): App GUID or SMTP user name.

        Returns:
            Optional[str]: The secret, or None if this source does not hold it.
        """
