"""Credential vault exceptions."""

from __future__ import annotations

from datetime import datetime


class CredentialError(Exception):
    """Base class for every credential vault failure."""


class EmptyKeyOrValueError(CredentialError):
    pass


class CredentialNotFoundError(CredentialError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"credential '{key}' not found")


class CredentialExpiredError(CredentialError):
    def __init__(self, key: str, expires_at: datetime):
        self.key = key
        self.expires_at = expires_at
        super().__init__(f"credential '{key}' expired at {expires_at.isoformat()}")


class BackendUnsupportedOperationError(CredentialError):
    def __init__(self, backend: str, operation: str):
        self.backend = backend
        self.operation = operation
        super().__init__(f"{backend} storage does not support {operation}")


class EncryptionError(CredentialError):
    pass


class DecryptionError(CredentialError):
    pass


class CredentialFormatError(CredentialError):
    pass


class StorageIOError(CredentialError):
    pass


class ExpiredCredentialsError(CredentialError):
    def __init__(self, keys: list[str]):
        self.keys = keys
        super().__init__(f"found {len(keys)} expired credentials: {', '.join(keys)}")
