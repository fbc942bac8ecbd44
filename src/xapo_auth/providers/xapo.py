"""Xapo OAuth provider adapter.

The adapter resolves Xapo endpoint configuration and normalizes the `/users`
response. Authorization and token exchange are delegated unchanged to an
`OAuth2Client` (by default `HttpOAuth2Client`).

Example:
    >>> adapter = XapoProviderAdapter.create(
    ...     client_id="123456789",
    ...     client_secret="shhh-its-a-secret",
    ...     callback_url="https://www.example.net/auth/xapo/callback",
    ... )
    >>> async def verify(access_token, refresh_token, profile):
    ...     return await users.find_or_create(xapo_id=profile.id)
    >>> user = await adapter.authenticate(code=request_code, verify=verify)
"""

from __future__ import annotations

import base64
import copy
import inspect
import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ConfigDict, ValidationError, field_validator

from ..contracts import ConfigError, GrantResult, OAuth2Client, ParseError, VerifyCallback
from ..models import AuthBaseModel, ProfileName, ProfileValue, XapoAuthConfigModel, XapoProfile
from ..oauth2 import HttpOAuth2Client

logger = logging.getLogger(__name__)


class _XapoUserRecord(AuthBaseModel):
    """User record as returned by the `/users` endpoint."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    middle_name: str | None = None
    gender: str | None = None
    primary_email: str | None = None
    avatar: str | None = None

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_field(cls, value: Any) -> Any:
        # Scalars are rendered as strings; objects and lists are dropped.
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, bool):
            return str(value).lower()
        if isinstance(value, int):
            return str(value)
        if isinstance(value, float):
            return str(int(value)) if value.is_integer() else str(value)
        return None


def _basic_auth_header(client_id: str | None, client_secret: str | None) -> str:
    credentials = f"{client_id}:{client_secret}".encode()
    return f"Basic {base64.b64encode(credentials).decode()}"


class XapoProviderAdapter:
    """Xapo OAuth adapter composed over a generic OAuth2 client.

    A client passed in is shallow-copied before the adapter installs its Basic
    auth header, so one client instance can back several adapters.
    """

    provider_name = "xapo"

    def __init__(self, xapo_config: XapoAuthConfigModel, client: OAuth2Client | None = None):
        if not xapo_config.callback_url:
            raise ConfigError("XapoProviderAdapter requires a callback_url option")

        if not xapo_config.client_id or not xapo_config.client_secret:
            logger.warning(
                "Xapo client credentials are incomplete; Basic auth header will be malformed",
                extra={"provider": self.provider_name},
            )

        self.config = xapo_config
        self.callback_url = xapo_config.callback_url
        self.authorization_url = xapo_config.resolved_authorization_url
        self.token_url = xapo_config.resolved_token_url
        self.profile_url = xapo_config.resolved_profile_url
        self.scope = xapo_config.scope
        self.skip_user_profile = xapo_config.skip_user_profile

        options = xapo_config.client_options
        if client is None:
            custom_headers = options.pop("custom_headers", None)
            if custom_headers is not None and not isinstance(custom_headers, Mapping):
                logger.warning(
                    "Ignoring custom_headers option that is not a mapping",
                    extra={"provider": self.provider_name},
                )
                custom_headers = None
            client = HttpOAuth2Client(
                client_id=xapo_config.client_id,
                client_secret=xapo_config.client_secret,
                authorization_url=self.authorization_url,
                token_url=self.token_url,
                custom_headers=custom_headers,
                provider_name=self.provider_name,
            )
        else:
            # The Basic header below is per adapter; keep the caller's instance untouched.
            client = copy.copy(client)
        if options:
            logger.debug(
                "Ignoring OAuth2 client options not used by this client",
                extra={"provider": self.provider_name, "options": sorted(options)},
            )
        client.custom_headers = {
            **client.custom_headers,
            "Authorization": _basic_auth_header(xapo_config.client_id, xapo_config.client_secret),
        }
        client.use_authorization_header_for_get(True)
        self._oauth2 = client

    @classmethod
    def create(cls, client: OAuth2Client | None = None, **options: Any) -> XapoProviderAdapter:
        """Build an adapter from keyword options (see `XapoAuthConfigModel`)."""
        try:
            config = XapoAuthConfigModel(**options)
        except ValidationError as exc:
            raise ConfigError(f"Invalid Xapo configuration: {exc}") from exc
        return cls(config, client=client)

    @property
    def oauth2(self) -> OAuth2Client:
        return self._oauth2

    # ── delegated OAuth2 flow ────────────────────────────────────────────────
    def build_authorize_url(
        self,
        *,
        state: str | None = None,
        scopes: Sequence[str] = (),
        redirect_uri: str | None = None,
        code_challenge: str | None = None,
        code_challenge_method: str | None = None,
        extra_params: Mapping[str, str] | None = None,
    ) -> str:
        if not scopes and self.scope:
            scopes = self.scope.split()
        return self._oauth2.build_authorize_url(
            redirect_uri=redirect_uri or self.callback_url,
            state=state,
            scopes=list(scopes),
            code_challenge=code_challenge,
            code_challenge_method=code_challenge_method,
            extra_params=extra_params,
        )

    async def exchange_code(
        self,
        *,
        code: str,
        redirect_uri: str | None = None,
        code_verifier: str | None = None,
    ) -> GrantResult:
        return await self._oauth2.exchange_code(
            code=code,
            redirect_uri=redirect_uri or self.callback_url,
            code_verifier=code_verifier,
        )

    async def refresh_token(
        self, *, refresh_token: str, scopes: Sequence[str] | None = None
    ) -> GrantResult:
        return await self._oauth2.refresh_token(refresh_token=refresh_token, scopes=scopes)

    async def authenticate(
        self,
        *,
        code: str,
        verify: VerifyCallback,
        redirect_uri: str | None = None,
        code_verifier: str | None = None,
    ) -> Any:
        """Exchange `code`, load the profile and hand both to `verify`.

        Returns whatever `verify` returns (awaited if needed): the application
        user, or a falsy value when the credentials are rejected.
        """
        grant = await self.exchange_code(
            code=code, redirect_uri=redirect_uri, code_verifier=code_verifier
        )
        profile = None
        if not self.skip_user_profile:
            profile = await self.fetch_profile(grant.access_token)

        result = verify(grant.access_token, grant.refresh_token, profile)
        if inspect.isawaitable(result):
            result = await result
        return result

    # ── profile ──────────────────────────────────────────────────────────────
    async def fetch_profile(self, access_token: str) -> XapoProfile:
        """Retrieve the user record from Xapo and normalize it.

        Raises:
            TransportError: the GET failed (network or non-2xx)
            ParseError: the body is not JSON or not a list holding a user record
        """
        body = await self._oauth2.get(self.profile_url, access_token)
        return self._parse_profile(body)

    def _parse_profile(self, body: str) -> XapoProfile:
        try:
            payload = json.loads(body)
        except ValueError as exc:
            logger.warning(
                "Xapo users endpoint returned invalid JSON",
                extra={"provider": self.provider_name, "endpoint": "users"},
            )
            raise ParseError("Xapo profile response was not valid JSON") from exc

        if not isinstance(payload, list) or not payload or not isinstance(payload[0], dict):
            logger.warning(
                "Xapo users endpoint returned unexpected JSON",
                extra={
                    "provider": self.provider_name,
                    "endpoint": "users",
                    "payload_type": type(payload).__name__,
                },
            )
            raise ParseError("Xapo profile response did not contain a user record")

        raw_json: dict[str, Any] = payload[0]
        record = _XapoUserRecord.model_validate(raw_json)

        first_name = record.first_name or ""
        last_name = record.last_name or ""
        return XapoProfile(
            provider=self.provider_name,
            id=record.id,
            display_name=f"{first_name} {last_name}" or "",
            name=ProfileName(
                family_name=last_name,
                given_name=first_name,
                middle_name=record.middle_name or "",
            ),
            gender=record.gender or "",
            emails=[ProfileValue(value=record.primary_email or "")],
            photos=[ProfileValue(value=record.avatar or "")],
            raw_body=body,
            raw_json=raw_json,
        )
