"""Shared test fixtures for feishu_socialite.

Providers are exercised against an :class:`httpx.MockTransport` driven by a
:class:`FakePlatform`, which answers each request from a per-path table and
records every request it sees so tests can assert on endpoints, headers and
payloads without any network access.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any, Union

import httpx
import pytest

from feishu_socialite.providers.feishu import FeishuProvider

BASE_URL = "https://open.feishu.cn/open-apis"

Route = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


def json_response(data: Any, status_code: int = 200) -> httpx.Response:
    """Build an httpx.Response with a JSON body."""
    return httpx.Response(
        status_code=status_code,
        headers={"content-type": "application/json"},
        json=data,
    )


class FakePlatform:
    """Path-routed fake of the open platform API."""

    def __init__(self) -> None:
        self.routes: dict[str, Route] = {}
        self.requests: list[httpx.Request] = []

    def route(self, path: str, response: Route) -> None:
        self.routes[path] = response

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/open-apis")
        route = self.routes.get(path)
        if route is None:
            return json_response({"code": 404, "msg": f"no route for {path}"}, 404)
        if callable(route):
            return route(request)
        return route

    @property
    def paths(self) -> list[str]:
        return [r.url.path.removeprefix("/open-apis") for r in self.requests]

    def json_body(self, index: int) -> dict[str, Any]:
        return json.loads(self.requests[index].content)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def platform() -> FakePlatform:
    """A fresh fake platform with no routes."""
    return FakePlatform()


@pytest.fixture
def make_provider(platform: FakePlatform) -> Callable[..., FeishuProvider]:
    """Factory for FeishuProvider instances wired to the fake platform.

    Keyword arguments override the default config (internal mode, fixed
    client id and secret).
    """

    def _make(**overrides: Any) -> FeishuProvider:
        config: dict[str, Any] = {
            "client_id": "cli_test",
            "client_secret": "secret_test",
            "app_mode": "internal",
        }
        config.update(overrides)
        config = {k: v for k, v in config.items() if v is not None}
        return FeishuProvider(config, http_client=platform.client())

    return _make
