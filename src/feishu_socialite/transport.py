"""HTTP helpers shared by providers.

Providers talk to the platform through an :class:`httpx.Client`. These
free functions cover the small pieces every endpoint call needs: building
the client, bearer headers, query filtering and lenient JSON decoding.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from feishu_socialite.models import ProviderConfig


def create_http_client(config: ProviderConfig) -> httpx.Client:
    """Build the default HTTP client for a provider."""
    return httpx.Client(
        timeout=config.timeout,
        headers={"Accept": "application/json"},
        follow_redirects=True,
    )


def bearer_headers(token: str | None) -> dict[str, str]:
    """Headers for an authenticated JSON request."""
    return {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {token}",
    }


def filter_query(params: Mapping[str, Any] | None) -> dict[str, Any]:
    """Drop query parameters whose value is empty (``None``, ``""``, ``[]``, ``0``)."""
    return {key: value for key, value in (params or {}).items() if value}


def decode_json(response: httpx.Response) -> dict[str, Any]:
    """Return the response body as a dict.

    A body that is not valid JSON, or whose top level is not an object,
    decodes to an empty dict so that callers can apply their own
    presence checks.
    """
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
