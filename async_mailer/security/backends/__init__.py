from .base import CredentialBackend
from .environment import EnvironmentBackend
from .keyring import KeyringBackend

__all__ = ["CredentialBackend", "EnvironmentBackend", "KeyringBackend"]
