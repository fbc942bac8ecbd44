"""Xapo OAuth 2.0 authentication adapter.

This package provides:
- `XapoProviderAdapter`: Xapo endpoint configuration, code exchange delegation
  and profile normalization
- `HttpOAuth2Client`: the generic OAuth2 client the adapter delegates to
- `load_xapo_config()`: YAML configuration with ${ENV_VAR} interpolation

## Quick Example

```python
from xapo_auth import XapoProviderAdapter

adapter = XapoProviderAdapter.create(
    client_id="123456789",
    client_secret="shhh-its-a-secret",
    callback_url="https://www.example.net/auth/xapo/callback",
)
redirect_to = adapter.build_authorize_url(state="xyz")

# ... later, in the callback handler
profile = await adapter.fetch_profile(access_token)
print(profile.display_name, profile.emails[0].value)
```
"""

from .config import load_xapo_config
from .contracts import (
    ConfigError,
    GrantResult,
    OAuth2Client,
    ParseError,
    ProviderError,
    TransportError,
    UserInfo,
    VerifyCallback,
)
from .models import ProfileName, ProfileValue, XapoAuthConfigModel, XapoProfile
from .oauth2 import HttpOAuth2Client
from .providers import XapoProviderAdapter

__all__ = [
    # Config
    "XapoAuthConfigModel",
    "load_xapo_config",
    # Adapter
    "XapoProviderAdapter",
    "HttpOAuth2Client",
    "OAuth2Client",
    "VerifyCallback",
    # Data
    "GrantResult",
    "ProfileName",
    "ProfileValue",
    "UserInfo",
    "XapoProfile",
    # Errors
    "ConfigError",
    "ParseError",
    "ProviderError",
    "TransportError",
]
