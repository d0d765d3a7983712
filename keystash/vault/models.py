"""Vault data models."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field, ValidationError, field_validator

from keystash.vault.errors import CredentialFormatError


class CredentialType(str, Enum):
    API = "api"
    MCP = "mcp"
    GITHUB = "github"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    AUTH = "auth"


class Credential(BaseModel):
    """A stored secret plus its metadata and optional expiry."""

    type: CredentialType
    value: str
    metadata: dict[str, str] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime
    expires_at: datetime | None = None
    encrypted: bool = False
    description: str = ""

    @field_validator("created_at", "updated_at", "expires_at")
    @classmethod
    def _assume_utc(cls, v: datetime | None) -> datetime | None:
        # Records written without an offset are read as UTC
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    def is_expired(self, now: datetime) -> bool:
        """True only when an expiry is set and already in the past."""
        return self.expires_at is not None and now > self.expires_at

    def masked_value(self) -> str:
        if len(self.value) <= 4:
            return "***"
        return f"{self.value[:4]}***"

    def to_json(self) -> str:
        return self.model_dump_json()

    @classmethod
    def from_json(cls, data: str | bytes) -> Credential:
        try:
            return cls.model_validate_json(data)
        except ValidationError as e:
            raise CredentialFormatError(f"invalid credential record: {e}") from e


def describe(cred_type: CredentialType, key: str) -> str:
    """Human-readable label, e.g. 'api credential for github.api_key'."""
    return f"{cred_type.value} credential for {key}"


class CredentialStatus(BaseModel):
    """Aggregate view over every credential a backend can enumerate."""

    total_credentials: int = 0
    by_type: dict[str, int] = Field(default_factory=dict)
    expired: int = 0
    valid: int = 0
