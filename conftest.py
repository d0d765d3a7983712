"""
Root-level shared test fixtures.

Inherited by the vault suites under keystash/ and by tests/.
"""

from __future__ import annotations

import pytest

from keystash.config import reset_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove KEYSTASH_* env vars and the cached config so tests never touch the real store."""
    for key in [
        "KEYSTASH_SERVICE_NAME",
        "KEYSTASH_BACKEND",
        "KEYSTASH_ENCRYPT",
        "KEYSTASH_CREDENTIALS_DIR",
        "KEYSTASH_MASTER_KEY",
        "KEYSTASH_TOKEN_TTL",
        "KEYSTASH_LOG_LEVEL",
    ]:
        monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()
