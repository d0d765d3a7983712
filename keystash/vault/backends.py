"""
Credential storage backends.

Backends only round-trip Credential records by key. They never interpret
expiry or credential type; that belongs to CredentialManager.

    KeyringBackend  — OS secure store via the keyring library (no enumeration)
    FileBackend     — one JSON file per key, optionally AES-GCM sealed
"""

from __future__ import annotations

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from keystash.vault.crypto import derive_key, open_sealed, seal
from keystash.vault.errors import (
    BackendUnsupportedOperationError,
    CredentialNotFoundError,
    StorageIOError,
)
from keystash.vault.models import Credential

logger = logging.getLogger(__name__)

CREDENTIAL_SUFFIX = ".cred"
_UNSAFE_CHARS = ("/", "\\", ":")


class CredentialBackend(ABC):
    """Abstract base class for credential storage backends."""

    name: str = "abstract"

    @abstractmethod
    def store(self, key: str, credential: Credential) -> None:
        """Persist a credential under key, replacing any previous record."""

    @abstractmethod
    def retrieve(self, key: str) -> Credential:
        """Load the credential for key. Raises CredentialNotFoundError if absent."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the credential for key."""

    @abstractmethod
    def list(self) -> list[str]:
        """Return every stored key."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every stored credential."""


class KeyringBackend(CredentialBackend):
    """Credential backend using the platform secure store.

    Entries are addressed by (service_name, key) and hold the credential's
    JSON form as an opaque string. The store has no enumeration primitive,
    so list() and clear() always fail.
    """

    name = "keyring"

    def __init__(self, service_name: str):
        self.service_name = service_name

    def store(self, key: str, credential: Credential) -> None:
        try:
            keyring.set_password(self.service_name, key, credential.to_json())
        except KeyringError as e:
            raise StorageIOError(f"failed to store credential in keyring: {e}") from e

    def retrieve(self, key: str) -> Credential:
        try:
            data = keyring.get_password(self.service_name, key)
        except KeyringError as e:
            raise StorageIOError(f"failed to read credential from keyring: {e}") from e
        if data is None:
            raise CredentialNotFoundError(key)
        return Credential.from_json(data)

    def delete(self, key: str) -> None:
        try:
            keyring.delete_password(self.service_name, key)
        except PasswordDeleteError as e:
            raise CredentialNotFoundError(key) from e
        except KeyringError as e:
            raise StorageIOError(f"failed to delete credential from keyring: {e}") from e

    def list(self) -> list[str]:
        raise BackendUnsupportedOperationError(self.name, "listing credentials")

    def clear(self) -> None:
        raise BackendUnsupportedOperationError(self.name, "clearing all credentials")


def credential_filename(key: str) -> str:
    """Map a credential key to its on-disk filename."""
    safe = key
    for ch in _UNSAFE_CHARS:
        safe = safe.replace(ch, "_")
    return safe + CREDENTIAL_SUFFIX


class FileBackend(CredentialBackend):
    """Credential backend storing one file per key in a private directory."""

    name = "file"

    def __init__(
        self,
        service_name: str,
        base_path: Path | str,
        *,
        encryption: bool = True,
        master_key: bytes | None = None,
    ):
        self.service_name = service_name
        self.base_path = Path(base_path)
        self.encryption = encryption
        self._master_key = master_key

    def _path(self, key: str) -> Path:
        return self.base_path / credential_filename(key)

    def _cipher_key(self, key: str) -> bytes:
        # Derived from the filename stem so keys returned by list() decrypt too
        stem = credential_filename(key)[: -len(CREDENTIAL_SUFFIX)]
        return derive_key(self.service_name, stem, self._master_key)

    def _ensure_dir(self) -> None:
        try:
            self.base_path.mkdir(parents=True, exist_ok=True, mode=0o700)
            self.base_path.chmod(0o700)
        except OSError as e:
            raise StorageIOError(f"failed to create credentials directory {self.base_path}: {e}") from e

    def store(self, key: str, credential: Credential) -> None:
        self._ensure_dir()
        data = credential.to_json().encode("utf-8")
        if self.encryption:
            data = seal(data, self._cipher_key(key))

        path = self._path(key)
        try:
            fd, tmp = tempfile.mkstemp(dir=self.base_path, prefix=".cred-", suffix=".tmp")
        except OSError as e:
            raise StorageIOError(f"failed to create temporary file in {self.base_path}: {e}") from e
        try:
            # mkstemp creates the file 600
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp, path)
        except OSError as e:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise StorageIOError(f"failed to write credential file {path.name}: {e}") from e
        logger.debug("Wrote credential file %s", path)

    def retrieve(self, key: str) -> Credential:
        path = self._path(key)
        try:
            data = path.read_bytes()
        except FileNotFoundError as e:
            raise CredentialNotFoundError(key) from e
        except OSError as e:
            raise StorageIOError(f"failed to read credential file {path.name}: {e}") from e

        if self.encryption:
            data = open_sealed(data, self._cipher_key(key))
        return Credential.from_json(data)

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.debug("Credential file %s already absent", path)
        except OSError as e:
            raise StorageIOError(f"failed to delete credential file {path.name}: {e}") from e

    def _credential_files(self) -> list[Path]:
        try:
            entries = sorted(self.base_path.iterdir())
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageIOError(f"failed to read credentials directory {self.base_path}: {e}") from e
        return [p for p in entries if p.is_file() and p.name.endswith(CREDENTIAL_SUFFIX)]

    def list(self) -> list[str]:
        return [p.name[: -len(CREDENTIAL_SUFFIX)] for p in self._credential_files()]

    def clear(self) -> None:
        for path in self._credential_files():
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as e:
                raise StorageIOError(f"failed to remove credential file {path.name}: {e}") from e
