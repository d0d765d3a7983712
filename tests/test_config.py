"""Tests for keystash.config — centralized configuration."""

from datetime import timedelta
from pathlib import Path

import pytest

from keystash.config import Config, get_config, reset_config


@pytest.fixture(autouse=True)
def clean_config():
    """Reset config singleton between tests."""
    reset_config()
    yield
    reset_config()


class TestConfig:
    def test_defaults(self):
        c = Config()
        assert c.service_name == "keystash-cli"
        assert c.backend == "keyring"
        assert c.encrypt is True
        assert c.credentials_dir == Path.home() / ".keystash" / "credentials"
        assert c.master_key_path is None
        assert c.token_ttl is None

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown credential backend"):
            Config(backend="s3")

    @pytest.mark.parametrize("ttl", [timedelta(0), timedelta(hours=-1)])
    def test_non_positive_token_ttl(self, ttl):
        with pytest.raises(ValueError, match="Token TTL must be positive"):
            Config(token_ttl=ttl)

    def test_frozen(self):
        c = Config()
        with pytest.raises(AttributeError):
            c.backend = "file"  # type: ignore[misc]


class TestGetConfig:
    def test_returns_config(self):
        assert isinstance(get_config(), Config)

    def test_singleton(self):
        assert get_config() is get_config()

    def test_env_override_storage(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("KEYSTASH_BACKEND", "File")
        monkeypatch.setenv("KEYSTASH_CREDENTIALS_DIR", str(tmp_path))
        monkeypatch.setenv("KEYSTASH_ENCRYPT", "no")
        cfg = get_config()
        assert cfg.backend == "file"
        assert cfg.credentials_dir == tmp_path
        assert cfg.encrypt is False

    def test_env_override_service(self, monkeypatch):
        monkeypatch.setenv("KEYSTASH_SERVICE_NAME", "my-cli")
        assert get_config().service_name == "my-cli"

    def test_env_master_key_and_ttl(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("KEYSTASH_MASTER_KEY", str(tmp_path / "master.key"))
        monkeypatch.setenv("KEYSTASH_TOKEN_TTL", "12h")
        cfg = get_config()
        assert cfg.master_key_path == tmp_path / "master.key"
        assert cfg.token_ttl == timedelta(hours=12)

    def test_env_log_level(self, monkeypatch):
        monkeypatch.setenv("KEYSTASH_LOG_LEVEL", "debug")
        assert get_config().log_level == "DEBUG"

    def test_bad_bool(self, monkeypatch):
        monkeypatch.setenv("KEYSTASH_ENCRYPT", "maybe")
        with pytest.raises(ValueError, match="KEYSTASH_ENCRYPT"):
            get_config()

    def test_bad_ttl(self, monkeypatch):
        monkeypatch.setenv("KEYSTASH_TOKEN_TTL", "forever")
        with pytest.raises(ValueError):
            get_config()

    @pytest.mark.parametrize("ttl", ["-1h", "0s"])
    def test_non_positive_ttl_env(self, monkeypatch, ttl):
        monkeypatch.setenv("KEYSTASH_TOKEN_TTL", ttl)
        with pytest.raises(ValueError, match="Token TTL must be positive"):
            get_config()

    def test_reset(self, monkeypatch):
        first = get_config()
        monkeypatch.setenv("KEYSTASH_SERVICE_NAME", "other")
        assert get_config().service_name == first.service_name
        reset_config()
        assert get_config().service_name == "other"
