"""Caller identification for the protocol gateway.

An API key may be presented as ``X-API-Key: <key>`` or
``Authorization: Bearer <key>``. A recognised key makes the caller metered
(charged against the credit ledger). Without a key the caller is anonymous
and unmetered, unless the gateway is configured to require one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Protocol

from toolmesh_ai.core.errors import ToolMeshError


class AuthenticationError(ToolMeshError):
    pass


@dataclass(frozen=True)
class CallerContext:
    user_id: Optional[str] = None

    @property
    def metered(self) -> bool:
        return self.user_id is not None


ANONYMOUS = CallerContext()


class ApiKeyResolver(Protocol):
    def resolve(self, api_key: str) -> Optional[str]:
        """Return the user id owning ``api_key``, or ``None`` if the key is unknown."""
        ...


class StaticApiKeyResolver:
    """Resolve keys from a fixed ``key -> user id`` mapping."""

    def __init__(self, keys: Mapping[str, str]) -> None:
        self._keys = dict(keys)

    def resolve(self, api_key: str) -> Optional[str]:
        return self._keys.get(api_key)


def extract_api_key(headers: Mapping[str, str]) -> Optional[str]:
    key = headers.get("x-api-key")
    if key:
        return key.strip() or None
    authorization = headers.get("authorization") or ""
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return None


def authenticate(headers: Mapping[str, str], resolver: ApiKeyResolver, *, require_key: bool = False) -> CallerContext:
    """
    Identify the caller behind a request.

    Args:
        headers: Request headers; lookups must be case-insensitive.
        resolver: Maps API keys to user ids.
        require_key: Reject requests that carry no key.

    Returns:
        CallerContext: Metered when a valid key was presented, anonymous otherwise.

    Raises:
        AuthenticationError: An unknown key was presented, or no key while one is required.
    """
    api_key = extract_api_key(headers)
    if api_key is None:
        if require_key:
            raise AuthenticationError("API key required")
        return ANONYMOUS
    user_id = resolver.resolve(api_key)
    if user_id is None:
        raise AuthenticationError("Invalid API key")
    return CallerContext(user_id=user_id)
