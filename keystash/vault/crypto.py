"""
AES-256-GCM encryption for credential files.

Each credential gets its own 32-byte key derived from "<service>:<key>".
Without a master key the derivation is a plain SHA-256 of that string, which
keeps files readable by any installation using the same service name. With a
master key (32 random bytes at a chmod-600 path) the derivation is
HMAC-SHA256 keyed by the master key.

Sealed blobs are base64(nonce (12 bytes) + ciphertext + tag (16 bytes)).
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import secrets
import stat
from pathlib import Path

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from keystash.vault.errors import DecryptionError, EncryptionError

NONCE_SIZE = 12
TAG_SIZE = 16
KEY_SIZE = 32


def derive_key(service_name: str, key: str, master_key: bytes | None = None) -> bytes:
    """Derive the per-credential AES key for (service_name, key)."""
    material = f"{service_name}:{key}".encode("utf-8")
    if master_key is None:
        return hashlib.sha256(material).digest()
    return hmac.new(master_key, material, hashlib.sha256).digest()


def seal(plaintext: bytes, key: bytes) -> bytes:
    """Encrypt with AES-256-GCM. Returns base64(nonce + ciphertext + tag)."""
    try:
        nonce = secrets.token_bytes(NONCE_SIZE)
        ciphertext = AESGCM(key).encrypt(nonce, plaintext, None)
    except (ValueError, TypeError) as e:
        raise EncryptionError(f"encryption failed: {e}") from e
    return base64.b64encode(nonce + ciphertext)


def open_sealed(blob: bytes, key: bytes) -> bytes:
    """Reverse of seal(). Any malformed or tampered input raises DecryptionError."""
    try:
        data = base64.b64decode(blob.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecryptionError("encrypted data is not valid base64") from e

    if len(data) < NONCE_SIZE + TAG_SIZE:
        raise DecryptionError("encrypted data too short")

    nonce, ciphertext = data[:NONCE_SIZE], data[NONCE_SIZE:]
    try:
        return AESGCM(key).decrypt(nonce, ciphertext, None)
    except InvalidTag as e:
        raise DecryptionError("integrity check failed (wrong key or tampered data)") from e
    except ValueError as e:
        raise DecryptionError(f"decryption failed: {e}") from e


def init_master_key(path: Path | str) -> Path:
    """Write 32 random bytes to path (mode 600) unless a key is already there."""
    key_path = Path(path)
    if key_path.exists():
        return key_path
    key_path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)
    key_path.write_bytes(secrets.token_bytes(KEY_SIZE))
    key_path.chmod(stat.S_IRUSR | stat.S_IWUSR)  # 600
    return key_path


def load_master_key(path: Path | str) -> bytes:
    """Read and validate the master key file."""
    key_path = Path(path)
    if not key_path.exists():
        raise FileNotFoundError(
            f"Master key not found at {key_path}. Run 'keystash init-key' to generate one."
        )
    key = key_path.read_bytes()
    if len(key) != KEY_SIZE:
        raise ValueError(f"Master key must be {KEY_SIZE} bytes, got {len(key)}")
    return key
