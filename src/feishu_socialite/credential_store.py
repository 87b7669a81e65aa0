"""In-memory credential store scoped to one provider instance.

Holds the application credentials a provider was built with plus the
tokens it derives at runtime:

* ``client_id`` / ``client_secret`` -- immutable inputs, set at construction.
* ``app_ticket`` -- pushed by the platform; required before any app or
  tenant token exchange in default mode.
* ``app_access_token`` / ``tenant_access_token`` -- ``None`` until the first
  successful exchange, overwritten by each later one.

Nothing is persisted: tokens live exactly as long as the provider.

The store carries a :class:`threading.Lock` that providers hold around
each exchange-and-store step. This keeps two concurrent exchanges on the
same provider from interleaving, but the last successful writer still
wins; confine a provider to one request or session when that matters.

See Also:
    :class:`~feishu_socialite.providers.feishu.FeishuProvider` -- the
    token exchange engine that mutates this store.
"""

from __future__ import annotations

import threading
from typing import Optional

from feishu_socialite.exceptions import InvalidArgumentError
from feishu_socialite.models import ProviderConfig

_IMMUTABLE_KEYS = frozenset({"client_id", "client_secret"})
_MUTABLE_KEYS = frozenset({"app_ticket", "app_access_token", "tenant_access_token"})


class CredentialStore:
    """Typed holder for application credentials and derived tokens.

    Fields are plain attributes for typed access. :meth:`get`, :meth:`set`
    and :meth:`has` offer keyed access over the same fields for code that
    works with key names.

    Args:
        client_id: The application's ``app_id``.
        client_secret: The application's ``app_secret``.
        app_ticket: Optional ticket for default-mode exchanges.

    Example::

        store = CredentialStore("cli_a1", "s3cr3t")
        store.has("app_access_token")   # False
        store.app_access_token = "t-123"
        store.get("app_access_token")   # "t-123"
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        app_ticket: Optional[str] = None,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self.app_ticket: Optional[str] = app_ticket
        self.app_access_token: Optional[str] = None
        self.tenant_access_token: Optional[str] = None
        self.lock = threading.Lock()

    @classmethod
    def from_config(cls, config: ProviderConfig) -> CredentialStore:
        """Create a store seeded from a provider config."""
        return cls(config.client_id, config.client_secret, config.app_ticket)

    @property
    def client_id(self) -> str:
        return self._client_id

    @property
    def client_secret(self) -> str:
        return self._client_secret

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Return the value stored under *key*, or *default* when unset.

        Raises:
            InvalidArgumentError: If *key* is not a known credential field.
        """
        self._check_key(key)
        value = getattr(self, key)
        return default if value is None else value

    def set(self, key: str, value: Optional[str]) -> None:
        """Store *value* under *key*.

        Raises:
            InvalidArgumentError: If *key* is unknown or one of the
                immutable construction inputs.
        """
        if key in _IMMUTABLE_KEYS:
            raise InvalidArgumentError(f"Credential '{key}' is read-only")
        self._check_key(key)
        setattr(self, key, value)

    def has(self, key: str) -> bool:
        """Return True if *key* holds a value."""
        return self.get(key) is not None

    @staticmethod
    def _check_key(key: str) -> None:
        if key not in _IMMUTABLE_KEYS and key not in _MUTABLE_KEYS:
            raise InvalidArgumentError(f"Unknown credential key '{key}'")

    def __repr__(self) -> str:
        return (
            f"CredentialStore(client_id={self._client_id!r}, "
            f"app_ticket={'set' if self.app_ticket else 'unset'}, "
            f"app_access_token={'set' if self.app_access_token else 'unset'}, "
            f"tenant_access_token={'set' if self.tenant_access_token else 'unset'})"
        )
