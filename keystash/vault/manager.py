"""
Credential manager — lifecycle operations over one storage backend.

The manager is the only component that understands credential semantics
(type, expiry, metadata merging). It keeps no cache: every call is a fresh
round trip to the backend. It holds no lock either; callers sharing one
manager across threads must serialize access themselves.

Usage:
    from keystash.config import get_config
    from keystash.vault.manager import create_manager

    manager = create_manager(get_config())
    manager.store(CredentialType.API, "github.api_key", "ghp_abc123")
    manager.retrieve_value("github.api_key")
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from keystash.vault.backends import CredentialBackend, FileBackend, KeyringBackend
from keystash.vault.crypto import load_master_key
from keystash.vault.durations import parse_duration
from keystash.vault.errors import (
    CredentialError,
    CredentialExpiredError,
    CredentialFormatError,
    DecryptionError,
    EmptyKeyOrValueError,
    EncryptionError,
    ExpiredCredentialsError,
    StorageIOError,
)
from keystash.vault.models import Credential, CredentialStatus, CredentialType, describe

if TYPE_CHECKING:
    from keystash.config import Config

logger = logging.getLogger(__name__)

EXPIRES_IN = "expires_in"


def _utcnow() -> datetime:
    return datetime.now(UTC)


_CONTEXT_WRAPPED = (StorageIOError, EncryptionError, DecryptionError, CredentialFormatError)


@contextmanager
def _backend_call(operation: str, key: str | None = None) -> Iterator[None]:
    """Prefix backend failures with the operation and key they belong to."""
    try:
        yield
    except _CONTEXT_WRAPPED as e:
        target = f" credential '{key}'" if key else " credentials"
        raise type(e)(f"failed to {operation}{target}: {e}") from e


class CredentialManager:
    """Stores, retrieves and expires credentials for one service scope."""

    def __init__(
        self,
        service_name: str,
        backend: CredentialBackend,
        *,
        encryption: bool = False,
        token_ttl: timedelta | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.service_name = service_name
        self.backend = backend
        self.encryption = encryption
        self.token_ttl = token_ttl
        self._now = clock or _utcnow

    # ── Lifecycle ──

    def store(
        self,
        cred_type: CredentialType | str,
        key: str,
        value: str,
        metadata: dict[str, str] | None = None,
    ) -> Credential:
        """Create (or overwrite) a credential. Returns the stored record."""
        if not key or not value:
            raise EmptyKeyOrValueError("credential key and value cannot be empty")
        cred_type = CredentialType(cred_type)
        metadata = dict(metadata or {})
        now = self._now()

        credential = Credential(
            type=cred_type,
            value=value,
            metadata=metadata,
            created_at=now,
            updated_at=now,
            expires_at=self._initial_expiry(cred_type, key, metadata, now),
            encrypted=self.encryption,
            description=describe(cred_type, key),
        )
        with _backend_call("store", key):
            self.backend.store(key, credential)
        logger.info("Stored %s credential %s (%s backend)", cred_type.value, key, self.backend.name)
        return credential

    def _initial_expiry(
        self,
        cred_type: CredentialType,
        key: str,
        metadata: dict[str, str],
        now: datetime,
    ) -> datetime | None:
        hint = metadata.get(EXPIRES_IN)
        if hint:
            try:
                ttl = parse_duration(hint)
            except ValueError:
                logger.warning("Ignoring unparseable expires_in %r for %s", hint, key)
            else:
                if ttl > timedelta(0):
                    return now + ttl
                logger.warning("Ignoring non-positive expires_in %r for %s", hint, key)
        if cred_type is CredentialType.AUTH and self.token_ttl is not None and self.token_ttl > timedelta(0):
            return now + self.token_ttl
        return None

    def retrieve(self, key: str) -> Credential:
        """Fetch a live credential. Expired records raise but are left in place."""
        if not key:
            raise EmptyKeyOrValueError("credential key cannot be empty")
        with _backend_call("retrieve", key):
            credential = self.backend.retrieve(key)
        if credential.is_expired(self._now()):
            raise CredentialExpiredError(key, credential.expires_at)
        return credential

    def retrieve_value(self, key: str) -> str:
        return self.retrieve(key).value

    def update(self, key: str, value: str, metadata: dict[str, str] | None = None) -> Credential:
        """Replace the value of an existing credential and merge in new metadata."""
        if not key or not value:
            raise EmptyKeyOrValueError("credential key and value cannot be empty")
        with _backend_call("update", key):
            credential = self.backend.retrieve(key)
            credential.value = value
            credential.metadata = {**credential.metadata, **(metadata or {})}
            credential.updated_at = max(self._now(), credential.created_at)
            self.backend.store(key, credential)
        logger.info("Updated credential %s", key)
        return credential

    def delete(self, key: str) -> None:
        with _backend_call("delete", key):
            self.backend.delete(key)
        logger.info("Deleted credential %s", key)

    def list(self) -> list[str]:
        with _backend_call("list"):
            return self.backend.list()

    def clear(self) -> None:
        with _backend_call("clear"):
            self.backend.clear()
        logger.info("Cleared all credentials for %s", self.service_name)

    # ── Expiry ──

    def is_expired(self, key: str) -> bool:
        if not key:
            raise EmptyKeyOrValueError("credential key cannot be empty")
        with _backend_call("check", key):
            credential = self.backend.retrieve(key)
        return credential.is_expired(self._now())

    def refresh(self, key: str, extend_by: timedelta | str) -> Credential:
        """Move expiry to now + extend_by."""
        if not key:
            raise EmptyKeyOrValueError("credential key cannot be empty")
        if isinstance(extend_by, str):
            extend_by = parse_duration(extend_by)
        if extend_by <= timedelta(0):
            raise ValueError(f"refresh duration must be positive, got {extend_by}")
        with _backend_call("refresh", key):
            credential = self.backend.retrieve(key)
            now = max(self._now(), credential.created_at)
            credential.expires_at = now + extend_by
            credential.updated_at = now
            self.backend.store(key, credential)
        logger.info("Refreshed credential %s until %s", key, credential.expires_at.isoformat())
        return credential

    def _expired_keys(self) -> list[str]:
        expired = []
        for key in self.list():
            try:
                if self.is_expired(key):
                    expired.append(key)
            except CredentialError as e:
                logger.warning("Skipping credential %s: %s", key, e)
        return expired

    def cleanup_expired_credentials(self) -> int:
        """Delete every expired credential. Returns how many were removed."""
        cleaned = 0
        for key in self._expired_keys():
            try:
                self.backend.delete(key)
            except CredentialError as e:
                logger.warning("Failed to delete expired credential %s: %s", key, e)
                continue
            cleaned += 1
        if cleaned:
            logger.info("Cleaned up %d expired credentials", cleaned)
        return cleaned

    def validate_credentials(self) -> None:
        """Raise ExpiredCredentialsError naming every expired credential."""
        expired = self._expired_keys()
        if expired:
            raise ExpiredCredentialsError(expired)

    def get_credential_status(self) -> CredentialStatus:
        """Count stored credentials by type and expiry state."""
        keys = self.list()
        status = CredentialStatus(total_credentials=len(keys))
        now = self._now()
        for key in keys:
            try:
                credential = self.backend.retrieve(key)
            except CredentialError as e:
                logger.warning("Skipping unreadable credential %s: %s", key, e)
                continue
            type_name = credential.type.value
            status.by_type[type_name] = status.by_type.get(type_name, 0) + 1
            if credential.is_expired(now):
                status.expired += 1
            else:
                status.valid += 1
        return status


def create_backend(config: Config) -> CredentialBackend:
    """Build the storage backend named by config.backend."""
    if config.backend == "keyring":
        return KeyringBackend(config.service_name)
    if config.backend == "file":
        master_key = load_master_key(config.master_key_path) if config.master_key_path else None
        return FileBackend(
            config.service_name,
            config.credentials_dir,
            encryption=config.encrypt,
            master_key=master_key,
        )
    raise ValueError(f"Unknown credential backend: {config.backend}")


def create_manager(config: Config, *, clock: Callable[[], datetime] | None = None) -> CredentialManager:
    """Build the process-wide manager. Call once at startup and pass it around."""
    backend = create_backend(config)
    # The keyring holds the JSON form as-is; only the file backend seals it
    encryption = config.encrypt and config.backend == "file"
    return CredentialManager(
        config.service_name,
        backend,
        encryption=encryption,
        token_ttl=config.token_ttl,
        clock=clock,
    )
