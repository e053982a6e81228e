"""Credential lookup from the environment and the system keyring."""

from .key_store import KeyStore

__all__ = ["KeyStore"]
