"""
keystash vault — credential storage with AES-256-GCM files or the OS keyring.

Public API:
    create_manager(config)        → CredentialManager for the configured backend
    manager.store(type, key, value, metadata)
    manager.retrieve(key)         → Credential (raises CredentialExpiredError when stale)
    manager.update(key, value, metadata)
    manager.delete(key) / list() / clear()
    manager.is_expired(key) / refresh(key, extend_by)
    manager.cleanup_expired_credentials() / validate_credentials()
"""

from __future__ import annotations

from keystash.vault.backends import CredentialBackend, FileBackend, KeyringBackend
from keystash.vault.errors import (
    BackendUnsupportedOperationError,
    CredentialError,
    CredentialExpiredError,
    CredentialFormatError,
    CredentialNotFoundError,
    DecryptionError,
    EmptyKeyOrValueError,
    EncryptionError,
    ExpiredCredentialsError,
    StorageIOError,
)
from keystash.vault.manager import CredentialManager, create_backend, create_manager
from keystash.vault.models import Credential, CredentialStatus, CredentialType

__all__ = [
    "BackendUnsupportedOperationError",
    "Credential",
    "CredentialBackend",
    "CredentialError",
    "CredentialExpiredError",
    "CredentialFormatError",
    "CredentialManager",
    "CredentialNotFoundError",
    "CredentialStatus",
    "CredentialType",
    "DecryptionError",
    "EmptyKeyOrValueError",
    "EncryptionError",
    "ExpiredCredentialsError",
    "FileBackend",
    "KeyringBackend",
    "StorageIOError",
    "create_backend",
    "create_manager",
]
