"""Canonical Pydantic models shared across feishu_socialite.

**Configuration models** -- built from user-supplied mappings:
    :class:`ProviderConfig` (one provider's settings) and
    :class:`SocialiteConfig` (the per-name map handed to the registry).

**Result models** -- produced by providers:
    :class:`TokenResponse` (a normalized token exchange result) and
    :class:`User` (an immutable profile record).

Also exports :func:`normalize_token_response`, the pure mapping from a raw
platform token payload into a :class:`TokenResponse`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_BASE_URL = "https://open.feishu.cn/open-apis"
INTERNAL_MODE = "internal"


# --- Configuration ---


class ProviderConfig(BaseModel):
    """Settings for a single provider instance.

    ``client_id`` and ``client_secret`` are the application's ``app_id`` and
    ``app_secret`` on the open platform. ``app_mode`` (or its alias
    ``mode``) set to ``"internal"`` selects the self-built ("internal") app
    credential endpoints; anything else selects the marketplace ("default")
    endpoints, which additionally require an ``app_ticket``.

    Unknown keys are preserved in ``model_extra`` so that custom providers
    can carry their own settings.

    Example::

        ProviderConfig(client_id="cli_a1", client_secret="s3cr3t", app_mode="internal")
    """

    model_config = ConfigDict(extra="allow")

    client_id: str = Field(min_length=1, description="Application app_id")
    client_secret: str = Field(min_length=1, description="Application app_secret")
    redirect_url: Optional[str] = Field(
        default=None, description="Default redirect_uri for the authorize URL"
    )
    app_ticket: Optional[str] = Field(
        default=None, description="Ticket pushed by the platform, required in default mode"
    )
    app_mode: Optional[str] = None
    mode: Optional[str] = None
    provider: Optional[str] = Field(
        default=None,
        description="Built-in provider name or dotted path to a provider class",
    )
    base_url: str = DEFAULT_BASE_URL
    timeout: float = Field(default=30.0, gt=0)

    @property
    def is_internal_mode(self) -> bool:
        """Whether the configured mode selects internal-app endpoints."""
        mode = self.app_mode if self.app_mode is not None else self.mode
        return mode == INTERNAL_MODE


class SocialiteConfig(BaseModel):
    """Raw per-provider configuration handed to the registry.

    Keys are provider names (matched case-insensitively); values are the
    mappings each provider is built from.
    """

    providers: dict[str, dict[str, Any]] = Field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Mapping[str, Any]]) -> SocialiteConfig:
        return cls(providers={name.lower(): dict(value) for name, value in data.items()})

    def for_provider(self, name: str) -> dict[str, Any]:
        """Return a copy of the config mapping for *name*, or an empty dict."""
        return dict(self.providers.get(name.lower(), {}))


# --- Results ---


class TokenResponse(BaseModel):
    """A token exchange result in a provider-independent shape.

    Attributes:
        access_token: The access token value.
        refresh_token: Refresh token, when the platform issued one.
        expires_in: Seconds until expiry, read from the provider-specific
            expiry field.
        token_type: Token type (usually ``"Bearer"``).
        raw: The raw payload this record was normalized from.
    """

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_in: int = 0
    token_type: Optional[str] = None
    raw: dict[str, Any] = Field(default_factory=dict)


def _to_int(value: Any) -> int:
    if value is None:
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _to_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def normalize_token_response(
    raw: Mapping[str, Any],
    expires_in_key: str = "refresh_expires_in",
) -> TokenResponse:
    """Map a raw token payload into a :class:`TokenResponse`.

    Pure function: no I/O, no validation beyond the input being a mapping.
    A missing or non-numeric expiry field yields ``expires_in == 0``;
    non-string token values are converted with ``str()``.

    Args:
        raw: The ``data`` object of a token response.
        expires_in_key: Name of the field holding seconds-until-expiry.

    Returns:
        The normalized record.

    Raises:
        TypeError: If *raw* is not a mapping.
    """
    if not isinstance(raw, Mapping):
        raise TypeError(
            f"Token response must be a mapping, got {type(raw).__name__}"
        )
    return TokenResponse(
        access_token=_to_str(raw.get("access_token")),
        refresh_token=_to_str(raw.get("refresh_token")),
        expires_in=_to_int(raw.get(expires_in_key)),
        token_type=_to_str(raw.get("token_type")),
        raw=dict(raw),
    )


class User(BaseModel):
    """Immutable user profile returned by a provider.

    The five profile fields are mapped from the raw platform payload. The
    remaining fields record where the user came from and which tokens were
    used; the authorization-code flow fills the token fields in via
    :meth:`with_token_response`.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    name: Optional[str] = None
    nickname: Optional[str] = None
    avatar: Optional[str] = None
    email: Optional[str] = None

    provider: Optional[str] = None
    raw: dict[str, Any] = Field(default_factory=dict)
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    token_response: Optional[TokenResponse] = None

    def with_token_response(self, token: TokenResponse) -> User:
        """Return a copy carrying *token*'s refresh token and expiry."""
        return self.model_copy(
            update={
                "refresh_token": token.refresh_token,
                "expires_in": token.expires_in,
                "token_response": token,
            }
        )
