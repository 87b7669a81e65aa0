"""The provider capability interface.

A provider is any object that can build an authorize URL and turn either an
authorization code or a user access token into a
:class:`~feishu_socialite.models.User`. There is no shared base class:
concrete providers hold their own
:class:`~feishu_socialite.credential_store.CredentialStore` and HTTP client
and reuse the free functions in :mod:`feishu_socialite.transport`.

The protocol is runtime-checkable so that
:class:`~feishu_socialite.registry.ProviderRegistry` can verify classes
loaded from a dotted import path.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from feishu_socialite.models import User


@runtime_checkable
class Provider(Protocol):
    """Capability set every provider implements."""

    def redirect(self, redirect_url: Optional[str] = None) -> str:
        """Return the URL to send the user to for authorization."""
        ...

    def user_from_code(self, code: str) -> User:
        """Exchange an authorization code and return the authenticated user."""
        ...

    def user_from_token(self, token: str) -> User:
        """Return the user a user access token belongs to."""
        ...


PROVIDER_METHODS = ("redirect", "user_from_code", "user_from_token")


def implements_provider(cls: type) -> bool:
    """Return True if *cls* defines every :class:`Provider` method."""
    return all(callable(getattr(cls, name, None)) for name in PROVIDER_METHODS)
