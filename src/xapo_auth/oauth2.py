"""Generic OAuth 2.0 client used by the Xapo adapter.

Covers the authorization-code flow pieces the adapter delegates: building the
authorize URL, exchanging codes, refreshing tokens and authenticated GETs.
Headers in `custom_headers` are sent with every request; per-request headers
override them.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping, Sequence
from typing import Any
from urllib.parse import urlencode

import httpx
from pydantic import ConfigDict, ValidationError

from .contracts import GrantResult, ParseError, ProviderError, TransportError
from .http import create_http_client
from .models import AuthBaseModel

logger = logging.getLogger(__name__)


class _TokenResponse(AuthBaseModel):
    """Minimal token endpoint response (successful or error)."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    access_token: str | None = None
    refresh_token: str | None = None
    expires_in: float | None = None
    scope: str | None = None
    token_type: str | None = None

    error: str | None = None
    error_description: str | None = None


class HttpOAuth2Client:
    """OAuth 2.0 client backed by httpx."""

    def __init__(
        self,
        *,
        client_id: str | None,
        client_secret: str | None,
        authorization_url: str,
        token_url: str,
        custom_headers: Mapping[str, str] | None = None,
        provider_name: str = "oauth2",
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.authorization_url = authorization_url
        self.token_url = token_url
        self.custom_headers: dict[str, str] = dict(custom_headers or {})
        self.provider_name = provider_name
        self._use_authorization_header_for_get = False

    def use_authorization_header_for_get(self, enabled: bool) -> None:
        self._use_authorization_header_for_get = enabled

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
        params: list[tuple[str, str]] = [
            ("response_type", "code"),
            ("redirect_uri", redirect_uri),
        ]
        if scopes:
            params.append(("scope", " ".join(scopes)))
        if state:
            params.append(("state", state))
        if code_challenge:
            params.append(("code_challenge", code_challenge))
        if code_challenge_method:
            params.append(("code_challenge_method", code_challenge_method))
        if extra_params:
            params.extend(extra_params.items())
        params.append(("client_id", self.client_id or ""))
        separator = "&" if "?" in self.authorization_url else "?"
        return f"{self.authorization_url}{separator}{urlencode(params, doseq=True)}"

    async def exchange_code(
        self,
        *,
        code: str,
        redirect_uri: str,
        code_verifier: str | None = None,
    ) -> GrantResult:
        payload: dict[str, str] = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri,
        }
        if code_verifier:
            payload["code_verifier"] = code_verifier

        token = await self._request_token(payload=payload, context="exchange_code")
        if not token.access_token:
            raise ProviderError("invalid_grant", "No access_token in response", status_code=400)
        return self._grant_from_token(token, fallback_refresh_token=None)

    async def refresh_token(
        self, *, refresh_token: str, scopes: Sequence[str] | None = None
    ) -> GrantResult:
        payload: dict[str, str] = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        }
        if scopes:
            payload["scope"] = " ".join(scopes)

        token = await self._request_token(payload=payload, context="refresh_token")
        if not token.access_token:
            raise ProviderError("invalid_grant", "No access_token in refresh response", 400)
        grant = self._grant_from_token(token, fallback_refresh_token=refresh_token)
        if not grant.provider_scopes_granted and scopes:
            return grant.model_copy(update={"provider_scopes_granted": list(scopes)})
        return grant

    async def get(self, url: str, access_token: str) -> str:
        headers = self._headers()
        params: dict[str, str] = {}
        if self._use_authorization_header_for_get:
            headers["Authorization"] = f"Bearer {access_token}"
        else:
            params["access_token"] = access_token

        async with create_http_client() as client:
            try:
                resp = await client.get(url, headers=headers, params=params or None)
            except httpx.RequestError as exc:
                logger.warning(
                    "GET request failed",
                    extra={
                        "provider": self.provider_name,
                        "endpoint": "get",
                        "error_type": exc.__class__.__name__,
                    },
                )
                raise TransportError("Failed to fetch resource") from exc

        if not 200 <= resp.status_code < 300:
            logger.warning(
                "GET returned non-2xx",
                extra={
                    "provider": self.provider_name,
                    "endpoint": "get",
                    "status_code": resp.status_code,
                },
            )
            raise TransportError(
                f"Request failed with status {resp.status_code}",
                status_code=resp.status_code,
                error="upstream_error",
                body=resp.text,
            )
        return resp.text

    # ── helpers ──────────────────────────────────────────────────────────────
    def _headers(self, extra: Mapping[str, str] | None = None) -> dict[str, str]:
        headers = dict(self.custom_headers)
        if extra:
            headers.update(extra)
        return headers

    def _grant_from_token(
        self, token: _TokenResponse, *, fallback_refresh_token: str | None
    ) -> GrantResult:
        assert token.access_token is not None
        expires_at = time.time() + float(token.expires_in) if token.expires_in else None
        return GrantResult(
            access_token=token.access_token,
            refresh_token=(
                token.refresh_token if token.refresh_token is not None else fallback_refresh_token
            ),
            expires_at=expires_at,
            provider_scopes_granted=token.scope.split() if token.scope else [],
            token_type=token.token_type if token.token_type is not None else "Bearer",
            raw=token.model_dump(exclude_none=True),
        )

    async def _request_token(
        self,
        *,
        payload: Mapping[str, str],
        context: str,
    ) -> _TokenResponse:
        data = {
            **payload,
            "client_id": self.client_id or "",
            "client_secret": self.client_secret or "",
        }
        headers = self._headers(
            {
                "Content-Type": "application/x-www-form-urlencoded",
                "Accept": "application/json",
            }
        )
        async with create_http_client() as client:
            try:
                resp = await client.post(self.token_url, data=data, headers=headers)
            except httpx.RequestError as exc:
                logger.warning(
                    "Token endpoint request failed",
                    extra={
                        "provider": self.provider_name,
                        "endpoint": "token",
                        "context": context,
                        "error_type": exc.__class__.__name__,
                    },
                )
                raise TransportError("Token request failed") from exc
        return self._parse_token_response(resp, context=context)

    def _parse_token_response(self, resp: Any, *, context: str) -> _TokenResponse:
        if resp.status_code != 200:
            error_code = self._try_extract_oauth_error_code(resp)
            logger.warning(
                "Token endpoint returned non-200",
                extra={
                    "provider": self.provider_name,
                    "endpoint": "token",
                    "context": context,
                    "status_code": resp.status_code,
                    "provider_error": error_code,
                },
            )
            if error_code:
                raise ProviderError(
                    error_code, "Token request was rejected", status_code=resp.status_code
                )
            raise TransportError(
                "Token request failed",
                status_code=resp.status_code,
                error="upstream_error",
                body=resp.text,
            )

        try:
            data = resp.json()
        except Exception as exc:
            logger.warning(
                "Token endpoint returned invalid JSON",
                extra={
                    "provider": self.provider_name,
                    "endpoint": "token",
                    "context": context,
                    "status_code": resp.status_code,
                },
            )
            raise ParseError("Invalid token response payload", status_code=resp.status_code) from exc

        if not isinstance(data, dict):
            raise ParseError("Invalid token response payload", status_code=resp.status_code)

        try:
            token = _TokenResponse.model_validate(data)
        except ValidationError as exc:
            raise ParseError("Invalid token response payload", status_code=resp.status_code) from exc

        if token.error is not None:
            logger.warning(
                "Token endpoint returned OAuth error",
                extra={
                    "provider": self.provider_name,
                    "endpoint": "token",
                    "context": context,
                    "status_code": resp.status_code,
                    "provider_error": token.error,
                },
            )
            raise ProviderError(
                token.error,
                token.error_description or "Token request was rejected",
                status_code=400,
            )

        return token

    def _try_extract_oauth_error_code(self, resp: Any) -> str | None:
        """Best-effort extraction of OAuth `error` code from a response."""
        try:
            payload = resp.json()
        except Exception:
            return None
        if not isinstance(payload, dict):
            return None
        error = payload.get("error")
        return error if isinstance(error, str) and error else None
