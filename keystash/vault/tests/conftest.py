"""Shared fixtures for vault tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from keystash.vault.backends import FileBackend
from keystash.vault.manager import CredentialManager

SERVICE = "keystash-test"


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 3, 1, 12, 0, tzinfo=UTC))


@pytest.fixture
def cred_dir(tmp_path: Path) -> Path:
    return tmp_path / "credentials"


@pytest.fixture
def file_backend(cred_dir: Path) -> FileBackend:
    return FileBackend(SERVICE, cred_dir, encryption=True)


@pytest.fixture
def manager(file_backend: FileBackend, clock: FakeClock) -> CredentialManager:
    return CredentialManager(SERVICE, file_backend, encryption=True, clock=clock)
