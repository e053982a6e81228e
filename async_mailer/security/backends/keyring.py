"""Secrets held by the operating system keyring"""

import asyncio
from typing import Optional

import keyring
from keyring.errors import KeyringError

from async_mailer.utils.logging import get_logger

from .base import CredentialBackend

logger = get_logger(__name__)


class KeyringBackend(CredentialBackend):
    """Looks secrets up with ``keyring.get_password(service, key)``.

    Store them beforehand, e.g. ``keyring set async-mailer <smtp user>``.
    Keyring calls may block on a desktop unlock prompt, so they run in a
    worker thread.
    """

    @property
    def name(self) -> str:
        return "System Keyring"

    @property
    def priority(self) -> int:
        return 2

    async def is_available(self) -> bool:
        try:
            await asyncio.to_thread(keyring.get_keyring)
        except KeyringError as e:
            logger.debug(f"No usable keyring backend: {e}")
            return False
        return True

    async def retrieve(self, service: str, key: str) -> Optional[str]:
        try:
            return await asyncio.to_thread(keyring.get_password, service, key)
        except KeyringError as e:
            logger.error(
                f"Keyring lookup failed for '{key}'",
                extra={"service": service, "error": str(e)},
            )
            return None
