"""Pydantic models for the Xapo auth adapter.

These types cover adapter configuration and the normalized profile shape.

## Security-relevant configuration fields

- `callback_url`: the redirect URI registered with Xapo; controls where the
  authorization code is delivered.
- `client_id` / `client_secret`: rendered into the Basic auth header sent with
  every token-endpoint request.
- `scope`: what is requested at the provider's authorization endpoint.

Example:
    >>> from xapo_auth.models import XapoAuthConfigModel
    >>> config = XapoAuthConfigModel(
    ...     client_id="123456789",
    ...     client_secret="shhh-its-a-secret",
    ...     callback_url="https://www.example.net/auth/xapo/callback",
    ... )
    >>> config.resolved_profile_url
    'https://v2.api.xapo.com/users'
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from .contracts import UserInfo

XAPO_API_HOST = "api.xapo.com"
DEFAULT_API_VERSION = "v2"


class AuthBaseModel(BaseModel):
    """Base model for all xapo_auth Pydantic models.

    - extra="forbid": Rejects any fields not defined in the model
    - frozen=True: Makes instances immutable so adapters can be shared
      across concurrent requests
    """

    model_config = ConfigDict(extra="forbid", frozen=True)


class XapoAuthConfigModel(AuthBaseModel):
    """Xapo OAuth provider configuration.

    Endpoint URLs are derived from `api_version` unless set explicitly.
    `callback_url` is optional here so that partial configurations can be
    loaded and inspected; the adapter rejects a config without one.

    Keys the model does not define are kept as options for the OAuth2 client
    (see `client_options`).
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    client_id: str | None = None
    client_secret: str | None = None
    api_version: str = DEFAULT_API_VERSION
    authorization_url: str | None = None
    token_url: str | None = None
    profile_url: str | None = None
    callback_url: str | None = None
    scope: str | None = None
    skip_user_profile: bool = False

    @field_validator("client_id", "client_secret", "api_version", mode="before")
    @classmethod
    def _stringify_scalars(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def client_options(self) -> dict[str, Any]:
        return dict(self.model_extra or {})

    @property
    def api_base_url(self) -> str:
        return f"https://{self.api_version or DEFAULT_API_VERSION}.{XAPO_API_HOST}"

    @property
    def resolved_authorization_url(self) -> str:
        return self.authorization_url or f"{self.api_base_url}/oauth2/authorization"

    @property
    def resolved_token_url(self) -> str:
        return self.token_url or f"{self.api_base_url}/oauth2/token"

    @property
    def resolved_profile_url(self) -> str:
        return self.profile_url or f"{self.api_base_url}/users"


class ProfileName(AuthBaseModel):
    """Structured name of a normalized profile."""

    family_name: str = ""
    given_name: str = ""
    middle_name: str = ""


class ProfileValue(AuthBaseModel):
    """Single entry of the `emails` / `photos` sequences."""

    value: str = ""


class XapoProfile(AuthBaseModel):
    """Normalized profile built from a Xapo `/users` record.

    - `provider`     always set to `xapo`
    - `id`           the user's Xapo ID (None when the record has none)
    - `display_name` "<first_name> <last_name>"
    - `name`         family/given/middle name, empty strings when absent
    - `gender`       the user's gender
    - `emails`       one entry holding the primary email
    - `photos`       one entry holding the avatar url
    - `raw_body`     response body as received
    - `raw_json`     the user record (first element of the response array)
    """

    provider: str = "xapo"
    id: str | None = None
    display_name: str = ""
    name: ProfileName = Field(default_factory=ProfileName)
    gender: str = ""
    emails: list[ProfileValue] = Field(default_factory=lambda: [ProfileValue()])
    photos: list[ProfileValue] = Field(default_factory=lambda: [ProfileValue()])
    raw_body: str = ""
    raw_json: dict[str, Any] = Field(default_factory=dict)

    def to_user_info(self) -> UserInfo:
        """Project the profile onto the cross-provider `UserInfo` shape."""
        from .contracts import UserInfo

        user_id = self.id or ""
        email = self.emails[0].value if self.emails else ""
        avatar = self.photos[0].value if self.photos else ""
        return UserInfo(
            provider=self.provider,
            user_id=user_id,
            username=(email.split("@")[0] if email else user_id) or user_id,
            email=email or None,
            name=self.display_name.strip() or None,
            avatar_url=avatar or None,
            raw_profile=self.raw_json,
        )
