"""Configuration loading and credential-source resolution.

Provider settings arrive as plain mappings (from application settings, a
JSON file, or the environment). This module turns them into validated
:class:`~feishu_socialite.models.ProviderConfig` instances:

* **Credential resolution** -- :func:`resolve_credential` reads secret
  values from ``env:VAR`` or ``file:/path`` source descriptors, so that
  secrets need not be embedded in configuration.
* **Validation** -- :func:`load_provider_config` resolves sources and
  validates the result, converting Pydantic errors into
  :class:`~feishu_socialite.exceptions.ConfigError`.
* **Environment** -- :func:`provider_config_from_env` builds a config from
  ``<PREFIX>_CLIENT_ID``-style variables.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from feishu_socialite.exceptions import ConfigError
from feishu_socialite.models import ProviderConfig

logger = logging.getLogger(__name__)

_SOURCE_FIELDS = ("client_id", "client_secret", "app_ticket")

_ENV_FIELDS = {
    "client_id": "CLIENT_ID",
    "client_secret": "CLIENT_SECRET",
    "app_ticket": "APP_TICKET",
    "app_mode": "APP_MODE",
    "redirect_url": "REDIRECT_URL",
}


def is_credential_source(value: Any) -> bool:
    """Return True if *value* is an ``env:`` or ``file:`` source descriptor."""
    return isinstance(value, str) and value.startswith(("env:", "file:"))


def resolve_credential(source: str) -> str:
    """Read a provider secret from where its descriptor points.

    ``env:FEISHU_SECRET`` looks the value up in the process environment;
    ``file:~/.feishu/secret`` reads a file and drops surrounding whitespace.

    Raises:
        ConfigError: If the variable is unset, the file is missing or
            unreadable, or the descriptor has neither prefix.
    """
    scheme, _, target = source.partition(":")

    if scheme == "env":
        value = os.environ.get(target)
        if value is None:
            raise ConfigError(
                f"Feishu credential {source!r} refers to unset variable {target}"
            )
        return value

    if scheme == "file":
        path = Path(target).expanduser()
        if not path.is_file():
            raise ConfigError(f"Feishu credential {source!r}: no such file {path}")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Feishu credential {source!r} could not be read: {exc}") from exc

    raise ConfigError(
        f"Feishu credential {source!r} must start with 'env:' or 'file:'"
    )


def load_provider_config(data: Mapping[str, Any] | ProviderConfig) -> ProviderConfig:
    """Validate a provider config mapping, resolving credential sources.

    ``client_id``, ``client_secret`` and ``app_ticket`` may be given either
    literally or as a source descriptor understood by
    :func:`resolve_credential`.

    Args:
        data: A raw mapping, or an already-built config (returned as is).

    Returns:
        The validated :class:`~feishu_socialite.models.ProviderConfig`.

    Raises:
        ConfigError: If a source cannot be resolved or validation fails.
    """
    if isinstance(data, ProviderConfig):
        return data

    values = dict(data)
    for key in _SOURCE_FIELDS:
        if is_credential_source(values.get(key)):
            logger.debug("Resolving '%s' from %s", key, values[key].split(":", 1)[0])
            values[key] = resolve_credential(values[key])

    try:
        return ProviderConfig.model_validate(values)
    except ValidationError as exc:
        fields = ", ".join(
            ".".join(str(part) for part in err["loc"]) for err in exc.errors()
        )
        raise ConfigError(f"Invalid provider configuration ({fields}): {exc}") from exc


def provider_config_from_env(prefix: str = "FEISHU") -> ProviderConfig:
    """Build a provider config from environment variables.

    Reads ``<PREFIX>_CLIENT_ID``, ``<PREFIX>_CLIENT_SECRET``,
    ``<PREFIX>_APP_TICKET``, ``<PREFIX>_APP_MODE`` and
    ``<PREFIX>_REDIRECT_URL``. Unset variables are left out.

    Raises:
        ConfigError: If the required variables are missing.
    """
    values: dict[str, Any] = {}
    for key, suffix in _ENV_FIELDS.items():
        value = os.environ.get(f"{prefix}_{suffix}")
        if value:
            values[key] = value
    return load_provider_config(values)
