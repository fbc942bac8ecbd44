"""Test utilities for Xapo adapter and OAuth2 client tests.

Provides a minimal async HTTP client fake matching the shape used through
`create_http_client()`, and an in-process `OAuth2Client` fake for exercising
the adapter without HTTP.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from xapo_auth.contracts import GrantResult, TransportError


@dataclass(frozen=True)
class FakeResponse:
    status_code: int
    payload: Any
    text: str = ""

    def json(self) -> Any:
        return self.payload


@dataclass(frozen=True)
class FakeResponseJsonError(FakeResponse):
    def json(self) -> Any:
        raise ValueError("invalid json")


def json_response(status_code: int, payload: Any) -> FakeResponse:
    return FakeResponse(status_code, payload, text=json.dumps(payload))


@dataclass
class RecordedCall:
    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    params: dict[str, str] | None = None
    data: dict[str, str] | None = None


class FakeAsyncHttpClient:
    """Minimal async context manager standing in for `httpx.AsyncClient`.

    - `post()` returns `post_response` (or raises `post_exception`)
    - `get()` returns `get_response` (or raises `get_exception`)
    - every call is recorded in `calls`
    """

    def __init__(
        self,
        *,
        post_response: FakeResponse | None = None,
        get_response: FakeResponse | None = None,
        post_exception: Exception | None = None,
        get_exception: Exception | None = None,
    ) -> None:
        self._post_response = post_response or json_response(200, {})
        self._get_response = get_response or json_response(200, [{}])
        self._post_exception = post_exception
        self._get_exception = get_exception
        self.calls: list[RecordedCall] = []

    async def __aenter__(self) -> "FakeAsyncHttpClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: Any,
    ) -> bool:
        return False

    async def post(self, url: Any, **kwargs: Any) -> FakeResponse:
        self.calls.append(
            RecordedCall(
                method="POST",
                url=str(url),
                headers=dict(kwargs.get("headers") or {}),
                data=dict(kwargs.get("data") or {}),
            )
        )
        if self._post_exception is not None:
            raise self._post_exception
        return self._post_response

    async def get(self, url: Any, **kwargs: Any) -> FakeResponse:
        self.calls.append(
            RecordedCall(
                method="GET",
                url=str(url),
                headers=dict(kwargs.get("headers") or {}),
                params=kwargs.get("params"),
            )
        )
        if self._get_exception is not None:
            raise self._get_exception
        return self._get_response


def patch_http_client(monkeypatch: Any, fake_client: Any) -> None:
    """Patch the OAuth2 client module's `create_http_client`."""

    monkeypatch.setattr("xapo_auth.oauth2.create_http_client", lambda: fake_client)


class FakeOAuth2Client:
    """In-process OAuth2 client; GET bodies are looked up per access token."""

    def __init__(
        self,
        *,
        bodies: Mapping[str, str] | None = None,
        grant: GrantResult | None = None,
        get_error: Exception | None = None,
    ) -> None:
        self.custom_headers: dict[str, str] = {}
        self.authorization_header_for_get = False
        self._bodies = dict(bodies or {})
        self._grant = grant or GrantResult(access_token="at", refresh_token="rt")
        self._get_error = get_error
        self.get_calls: list[tuple[str, str]] = []
        self.exchange_calls: list[dict[str, Any]] = []

    def use_authorization_header_for_get(self, enabled: bool) -> None:
        self.authorization_header_for_get = enabled

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
        return f"https://fake.provider/authorize?redirect_uri={redirect_uri}&state={state}"

    async def exchange_code(
        self,
        *,
        code: str,
        redirect_uri: str,
        code_verifier: str | None = None,
    ) -> GrantResult:
        self.exchange_calls.append(
            {"code": code, "redirect_uri": redirect_uri, "code_verifier": code_verifier}
        )
        return self._grant

    async def refresh_token(
        self, *, refresh_token: str, scopes: Sequence[str] | None = None
    ) -> GrantResult:
        return self._grant

    async def get(self, url: str, access_token: str) -> str:
        self.get_calls.append((url, access_token))
        # Yield so concurrent callers interleave.
        await asyncio.sleep(0)
        if self._get_error is not None:
            raise TransportError("Failed to fetch resource") from self._get_error
        return self._bodies.get(access_token, "[{}]")
