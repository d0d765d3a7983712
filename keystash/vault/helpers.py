"""Service-specific shortcuts over a CredentialManager."""

from __future__ import annotations

from datetime import timedelta

from keystash.vault.durations import format_duration
from keystash.vault.manager import CredentialManager
from keystash.vault.models import Credential, CredentialType


def api_key_name(service: str) -> str:
    return f"{service}.api_key"


def token_name(service: str) -> str:
    return f"{service}.token"


def mcp_credentials_name(server: str) -> str:
    return f"{server}.credentials"


def store_api_key(manager: CredentialManager, service: str, api_key: str) -> Credential:
    """Store an API key for a service."""
    return manager.store(
        CredentialType.API,
        api_key_name(service),
        api_key,
        {"service": service, "type": "api_key"},
    )


def get_api_key(manager: CredentialManager, service: str) -> str:
    return manager.retrieve_value(api_key_name(service))


def store_token(
    manager: CredentialManager,
    service: str,
    token: str,
    expires_in: timedelta | None = None,
) -> Credential:
    """Store an auth token, expiring after expires_in when given."""
    metadata = {"service": service, "type": "token"}
    if expires_in is not None and expires_in > timedelta(0):
        metadata["expires_in"] = format_duration(expires_in)
    return manager.store(CredentialType.AUTH, token_name(service), token, metadata)


def get_token(manager: CredentialManager, service: str) -> str:
    return manager.retrieve_value(token_name(service))


def store_mcp_credentials(
    manager: CredentialManager,
    server: str,
    endpoint: str,
    api_key: str,
) -> Credential:
    """Store the API key and endpoint for an MCP server."""
    return manager.store(
        CredentialType.MCP,
        mcp_credentials_name(server),
        api_key,
        {"server": server, "endpoint": endpoint, "type": "mcp_credentials"},
    )


def get_mcp_credentials(manager: CredentialManager, server: str) -> str:
    return manager.retrieve_value(mcp_credentials_name(server))
