"""Contracts and shared types for the Xapo authentication adapter."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from .models import AuthBaseModel, XapoProfile


class ProviderError(Exception):
    """Standardized provider error with HTTP-style status information."""

    def __init__(self, error: str, description: str | None = None, status_code: int = 400):
        super().__init__(description or error)
        self.error = error
        self.description = description
        self.status_code = status_code


class ConfigError(ProviderError):
    """Adapter configuration is missing or invalid."""

    def __init__(self, description: str, status_code: int = 500):
        super().__init__("invalid_config", description, status_code=status_code)


class TransportError(ProviderError):
    """The HTTP exchange with the provider failed (network or non-2xx)."""

    def __init__(
        self,
        description: str,
        status_code: int = 503,
        *,
        error: str = "temporarily_unavailable",
        body: str | None = None,
    ):
        super().__init__(error, description, status_code=status_code)
        self.body = body


class ParseError(ProviderError):
    """The provider answered with a payload that could not be understood."""

    def __init__(self, description: str, status_code: int = 502):
        super().__init__("invalid_response", description, status_code=status_code)


class GrantResult(AuthBaseModel):
    """Result of exchanging or refreshing a grant with Xapo."""

    access_token: str
    refresh_token: str | None = None
    expires_at: float | None = None
    provider_scopes_granted: list[str] | None = None
    token_type: str = "Bearer"
    raw: dict[str, Any] | None = None


class UserInfo(AuthBaseModel):
    """Cross-provider user information derived from a normalized profile."""

    provider: str
    user_id: str
    username: str
    email: str | None = None
    name: str | None = None
    avatar_url: str | None = None
    raw_profile: dict[str, Any] | None = None


@runtime_checkable
class OAuth2Client(Protocol):
    """Generic, provider-agnostic OAuth 2.0 client the adapter delegates to."""

    custom_headers: dict[str, str]

    def use_authorization_header_for_get(self, enabled: bool) -> None:
        """Send the access token as a bearer header (True) or query parameter."""

    def build_authorize_url(
        self,
        *,
        redirect_uri: str,
        state: str | None,
        scopes: Sequence[str],
        code_challenge: str | None = None,
        code_challenge_method: str | None = None,
        extra_params: Mapping[str, str] | None = None,
    ) -> str:
        """Construct the provider authorize URL."""

    async def exchange_code(
        self,
        *,
        code: str,
        redirect_uri: str,
        code_verifier: str | None = None,
    ) -> GrantResult:
        """Exchange an authorization code for provider tokens."""

    async def refresh_token(
        self, *, refresh_token: str, scopes: Sequence[str] | None = None
    ) -> GrantResult:
        """Refresh provider tokens."""

    async def get(self, url: str, access_token: str) -> str:
        """Issue an authenticated GET and return the response body."""


VerifyCallback = Callable[[str, str | None, XapoProfile | None], Any]
"""`verify(access_token, refresh_token, profile)` -> user or falsy; may return an awaitable."""


__all__ = [
    "ConfigError",
    "GrantResult",
    "OAuth2Client",
    "ParseError",
    "ProviderError",
    "TransportError",
    "UserInfo",
    "VerifyCallback",
]
