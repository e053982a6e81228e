"""Environment variable backend"""

import os
import re
from typing import Optional

from .base import CredentialBackend


class EnvironmentBackend(CredentialBackend):
    """Reads credentials from ``<SERVICE>_<KEY>`` environment variables.

    Both parts are upper-cased and non-alphanumerics become underscores, so
    service ``async-mailer`` and key ``smtp.example.com`` map to
    ``ASYNC_MAILER_SMTP_EXAMPLE_COM``.
    """

    @property
    def name(self) -> str:
        return "Environment"

    @property
    def priority(self) -> int:
        return 1

    @staticmethod
    def variable_name(service: str, key: str) -> str:
        return re.sub(r"[^A-Za-z0-9]+", "_", f"{service}_{key}").upper()

    async def is_available(self) -> bool:
        return True

    async def retrieve(self, service: str, key: str) -> Optional[str]:
        return os.environ.get(self.variable_name(service, key)) or None
