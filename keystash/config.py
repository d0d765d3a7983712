"""
Centralized configuration for keystash.

All configuration is loaded from environment variables with sensible defaults.

Usage:
    from keystash.config import get_config
    cfg = get_config()
    print(cfg.service_name)      # "keystash-cli"
    print(cfg.credentials_dir)   # "/home/user/.keystash/credentials" or $KEYSTASH_CREDENTIALS_DIR
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path

from keystash.vault.durations import parse_duration

BACKENDS = ("keyring", "file")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Config:
    """Top-level keystash configuration."""

    # Scope for every credential this process touches
    service_name: str = "keystash-cli"

    # Storage
    backend: str = "keyring"
    encrypt: bool = True
    credentials_dir: Path = field(
        default_factory=lambda: Path.home() / ".keystash" / "credentials"
    )
    master_key_path: Path | None = None

    # Applied to auth credentials stored without an expires_in hint
    token_ttl: timedelta | None = None

    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if self.backend not in BACKENDS:
            raise ValueError(
                f"Unknown credential backend {self.backend!r} (expected one of {', '.join(BACKENDS)})"
            )
        if self.token_ttl is not None and self.token_ttl <= timedelta(0):
            raise ValueError(f"Token TTL must be positive, got {self.token_ttl}")


# Singleton
_config: Config | None = None


def get_config() -> Config:
    """Get or create the singleton config from environment variables."""
    global _config
    if _config is not None:
        return _config
    _config = _load_from_env()
    return _config


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def _load_from_env() -> Config:
    """Load configuration from environment variables."""
    credentials_dir = Path(
        os.environ.get(
            "KEYSTASH_CREDENTIALS_DIR",
            Path.home() / ".keystash" / "credentials",
        )
    )
    master_key = os.environ.get("KEYSTASH_MASTER_KEY")
    token_ttl = os.environ.get("KEYSTASH_TOKEN_TTL")

    return Config(
        service_name=os.environ.get("KEYSTASH_SERVICE_NAME", "keystash-cli"),
        backend=os.environ.get("KEYSTASH_BACKEND", "keyring").strip().lower(),
        encrypt=_env_bool("KEYSTASH_ENCRYPT", True),
        credentials_dir=credentials_dir.expanduser(),
        master_key_path=Path(master_key).expanduser() if master_key else None,
        token_ttl=parse_duration(token_ttl) if token_ttl else None,
        log_level=os.environ.get("KEYSTASH_LOG_LEVEL", "WARNING").upper(),
    )


def reset_config() -> None:
    """Reset the singleton config (for testing)."""
    global _config
    _config = None
