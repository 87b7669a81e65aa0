"""feishu_socialite -- OAuth2 login and directory client for the Feishu open platform.

This package exchanges authorization codes for user tokens, fetches the
signed-in user's profile, and reads the tenant directory using app- and
tenant-level access tokens obtained through the platform's credential
exchange.

Typical usage::

    from feishu_socialite import create_default_registry

    registry = create_default_registry({
        "feishu": {"client_id": "env:FEISHU_CLIENT_ID",
                   "client_secret": "env:FEISHU_CLIENT_SECRET",
                   "app_mode": "internal"},
    })
    feishu = registry.create("feishu")
    login_url = feishu.redirect("https://example.com/callback")
    user = feishu.user_from_code(code)

Modules:
    providers: The provider protocol and the Feishu implementation.
    registry: Name-to-provider resolution with per-name caching.
    credential_store: In-memory credentials and derived tokens.
    models: Pydantic models for configuration, tokens and users.
    config: Configuration loading and credential-source resolution.
    exceptions: Exception hierarchy with structured error kinds.
    transport: HTTP helpers shared by providers.
"""

from feishu_socialite.credential_store import CredentialStore
from feishu_socialite.exceptions import (
    AuthorizeFailedError,
    BadRequestError,
    ConfigError,
    ErrorKind,
    InvalidArgumentError,
    InvalidTicketError,
    InvalidTokenError,
    SocialiteError,
)
from feishu_socialite.models import (
    ProviderConfig,
    SocialiteConfig,
    TokenResponse,
    User,
    normalize_token_response,
)
from feishu_socialite.providers import FeishuProvider, Provider
from feishu_socialite.registry import ProviderRegistry, create_default_registry

__version__ = "0.1.0"

__all__ = [
    "AuthorizeFailedError",
    "BadRequestError",
    "ConfigError",
    "CredentialStore",
    "ErrorKind",
    "FeishuProvider",
    "InvalidArgumentError",
    "InvalidTicketError",
    "InvalidTokenError",
    "Provider",
    "ProviderConfig",
    "ProviderRegistry",
    "SocialiteConfig",
    "SocialiteError",
    "TokenResponse",
    "User",
    "create_default_registry",
    "normalize_token_response",
]
