"""Tests for the provider registry."""

from __future__ import annotations

from typing import Any

import pytest

from feishu_socialite.exceptions import ConfigError, InvalidArgumentError
from feishu_socialite.models import SocialiteConfig, User
from feishu_socialite.providers.base import Provider
from feishu_socialite.providers.feishu import FeishuProvider
from feishu_socialite.registry import ProviderRegistry, create_default_registry

FEISHU_CONFIG = {"client_id": "cli_a", "client_secret": "secret_a", "app_mode": "internal"}


class _StubProvider:
    def __init__(self, config: dict[str, Any]) -> None:
        self.config = config

    def redirect(self, redirect_url: str | None = None) -> str:
        return "https://stub.example.com/authorize"

    def user_from_code(self, code: str) -> User:
        return User(id=code)

    def user_from_token(self, token: str) -> User:
        return User(id=token)


class TestCreate:
    def test_builds_builtin_provider(self) -> None:
        registry = create_default_registry({"feishu": FEISHU_CONFIG})

        provider = registry.create("feishu")

        assert isinstance(provider, FeishuProvider)
        assert isinstance(provider, Provider)
        assert provider.credentials.client_id == "cli_a"

    def test_memoizes_instances(self) -> None:
        registry = create_default_registry({"feishu": FEISHU_CONFIG})
        assert registry.create("feishu") is registry.create("feishu")

    def test_name_is_case_insensitive(self) -> None:
        registry = create_default_registry({"feishu": FEISHU_CONFIG})
        assert registry.create("Feishu") is registry.create("feishu")
        assert registry.resolve("FEISHU") is registry.create("feishu")

    def test_config_keys_are_case_insensitive(self) -> None:
        registry = create_default_registry({"Feishu": FEISHU_CONFIG})
        assert isinstance(registry.create("feishu"), FeishuProvider)

    def test_accepts_socialite_config(self) -> None:
        registry = ProviderRegistry(SocialiteConfig.from_mapping({"feishu": FEISHU_CONFIG}))
        assert isinstance(registry.create("feishu"), FeishuProvider)

    def test_provider_key_aliases_builtin(self) -> None:
        registry = create_default_registry(
            {"corp": {**FEISHU_CONFIG, "provider": "feishu"}}
        )
        provider = registry.create("corp")
        assert isinstance(provider, FeishuProvider)
        assert registry.get_resolved_providers() == {"corp": provider}

    def test_unknown_provider(self) -> None:
        registry = create_default_registry({})
        with pytest.raises(InvalidArgumentError, match=r"Provider \[github\] not supported."):
            registry.create("github")

    def test_missing_config_for_builtin(self) -> None:
        registry = create_default_registry({})
        with pytest.raises(ConfigError):
            registry.create("feishu")

    def test_failed_create_is_not_cached(self) -> None:
        registry = create_default_registry({})
        with pytest.raises(InvalidArgumentError):
            registry.create("github")
        assert registry.get_resolved_providers() == {}


class TestDottedPath:
    def test_resolves_class_path(self) -> None:
        registry = ProviderRegistry(
            {"lark": {**FEISHU_CONFIG, "provider": "feishu_socialite.providers.feishu:FeishuProvider"}},
            providers={},
        )
        assert isinstance(registry.create("lark"), FeishuProvider)

    def test_resolves_dotted_class_path(self) -> None:
        registry = ProviderRegistry(
            {"lark": {**FEISHU_CONFIG, "provider": "feishu_socialite.providers.feishu.FeishuProvider"}},
            providers={},
        )
        assert isinstance(registry.create("lark"), FeishuProvider)

    def test_rejects_non_provider_class(self) -> None:
        registry = ProviderRegistry({"x": {"provider": "feishu_socialite.models:User"}})
        with pytest.raises(InvalidArgumentError, match="not supported"):
            registry.create("x")

    def test_rejects_unimportable_module(self) -> None:
        registry = ProviderRegistry({"x": {"provider": "no_such_pkg.mod:Thing"}})
        with pytest.raises(InvalidArgumentError, match="not supported"):
            registry.create("x")


class TestCustomCreators:
    def test_extend_wins(self) -> None:
        seen: list[dict[str, Any]] = []

        def creator(config: dict[str, Any]) -> _StubProvider:
            seen.append(config)
            return _StubProvider(config)

        registry = create_default_registry({"stub": {"token": "abc"}})
        registry.extend("Stub", creator)

        provider = registry.create("stub")

        assert isinstance(provider, _StubProvider)
        assert seen == [{"token": "abc"}]
        assert registry.create("STUB") is provider

    def test_extend_overrides_builtin(self) -> None:
        registry = create_default_registry({"feishu": FEISHU_CONFIG})
        registry.extend("feishu", _StubProvider)
        assert isinstance(registry.create("feishu"), _StubProvider)


class TestConfigReplacement:
    def test_new_config_applies_to_new_resolutions(self) -> None:
        registry = create_default_registry({"feishu": FEISHU_CONFIG})
        first = registry.create("feishu")

        registry.config({"feishu": {**FEISHU_CONFIG, "client_id": "cli_b"}})

        assert registry.create("feishu") is first
        registry_b = create_default_registry().config({"feishu": {**FEISHU_CONFIG, "client_id": "cli_b"}})
        assert registry_b.create("feishu").credentials.client_id == "cli_b"

    def test_build_provider(self) -> None:
        registry = create_default_registry()
        provider = registry.build_provider(_StubProvider, {"a": 1})
        assert isinstance(provider, _StubProvider)
        assert provider.config == {"a": 1}
