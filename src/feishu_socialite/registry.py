"""Provider registry -- name resolution and instance caching.

The :class:`ProviderRegistry` maps provider names (``"feishu"``, ...) to
configured provider instances. It resolves a name in this order:

1. A custom creator registered with :meth:`~ProviderRegistry.extend`.
2. The built-in class map (:data:`BUILTIN_PROVIDERS`).
3. A dotted import path (``"pkg.module:Class"`` or ``"pkg.module.Class"``)
   to a class implementing :class:`~feishu_socialite.providers.base.Provider`.

The name looked up is the ``provider`` key of the name's config section,
falling back to the name itself. Names are case-insensitive and each
resolved instance is cached for the life of the registry.

Registries are plain objects: build one at startup with
:func:`create_default_registry` and pass it to the code that needs it.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Callable, Mapping
from typing import Any

from feishu_socialite.exceptions import InvalidArgumentError
from feishu_socialite.models import SocialiteConfig
from feishu_socialite.providers.base import Provider, implements_provider
from feishu_socialite.providers.feishu import FeishuProvider

logger = logging.getLogger(__name__)

ProviderCreator = Callable[[dict[str, Any]], Provider]

BUILTIN_PROVIDERS: dict[str, type] = {
    FeishuProvider.NAME: FeishuProvider,
}


class ProviderRegistry:
    """Resolve provider names to cached, configured provider instances.

    Args:
        config: Per-provider configuration, either a mapping of provider
            name to settings or a :class:`~feishu_socialite.models.SocialiteConfig`.
        providers: Optional built-in class map. Defaults to
            :data:`BUILTIN_PROVIDERS`.

    Example::

        registry = ProviderRegistry({"feishu": {"client_id": "cli_a1",
                                                "client_secret": "s3cr3t"}})
        provider = registry.create("Feishu")
        assert provider is registry.create("feishu")
    """

    def __init__(
        self,
        config: Mapping[str, Mapping[str, Any]] | SocialiteConfig | None = None,
        providers: Mapping[str, type] | None = None,
    ) -> None:
        self._config = _coerce_config(config)
        self._providers: dict[str, type] = dict(
            BUILTIN_PROVIDERS if providers is None else providers
        )
        self._custom_creators: dict[str, ProviderCreator] = {}
        self._resolved: dict[str, Provider] = {}

    def config(
        self, config: Mapping[str, Mapping[str, Any]] | SocialiteConfig
    ) -> ProviderRegistry:
        """Replace the configuration used for providers resolved from now on."""
        self._config = _coerce_config(config)
        return self

    def extend(self, name: str, creator: ProviderCreator) -> ProviderRegistry:
        """Register a factory called with the config mapping for *name*."""
        self._custom_creators[name.lower()] = creator
        return self

    def create(self, name: str) -> Provider:
        """Return the provider for *name*, building and caching it on first use.

        Raises:
            InvalidArgumentError: If the name resolves to no known provider.
        """
        key = name.lower()
        if key not in self._resolved:
            self._resolved[key] = self._create_provider(key)
        return self._resolved[key]

    resolve = create

    def get_resolved_providers(self) -> dict[str, Provider]:
        return dict(self._resolved)

    def build_provider(self, provider_cls: type, config: dict[str, Any]) -> Provider:
        return provider_cls(config)

    def _create_provider(self, name: str) -> Provider:
        config = self._config.for_provider(name)
        provider = str(config.get("provider") or name)
        lookup = provider.lower()

        if lookup in self._custom_creators:
            logger.debug("Building provider '%s' from custom creator", name)
            return self._custom_creators[lookup](config)

        provider_cls = self._providers.get(lookup) or _import_provider_class(provider)
        if provider_cls is None:
            raise InvalidArgumentError(f"Provider [{provider}] not supported.")

        logger.debug("Building provider '%s' as %s", name, provider_cls.__name__)
        return self.build_provider(provider_cls, config)


def _coerce_config(
    config: Mapping[str, Mapping[str, Any]] | SocialiteConfig | None,
) -> SocialiteConfig:
    if config is None:
        return SocialiteConfig()
    if isinstance(config, SocialiteConfig):
        return config
    return SocialiteConfig.from_mapping(config)


def _import_provider_class(path: str) -> type | None:
    """Import a provider class from ``pkg.mod:Class`` or ``pkg.mod.Class``.

    Returns ``None`` when the path cannot be imported or the target is not a
    class implementing every provider method.
    """
    if ":" in path:
        module_name, _, attr = path.partition(":")
    else:
        module_name, _, attr = path.rpartition(".")
    if not module_name or not attr:
        return None

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        logger.debug("Cannot import provider module '%s': %s", module_name, exc)
        return None

    target = getattr(module, attr, None)
    if isinstance(target, type) and implements_provider(target):
        return target
    return None


def create_default_registry(
    config: Mapping[str, Mapping[str, Any]] | SocialiteConfig | None = None,
) -> ProviderRegistry:
    """Create a :class:`ProviderRegistry` pre-loaded with the built-in providers.

    The following providers are registered:

    - ``feishu`` -- :class:`~feishu_socialite.providers.feishu.FeishuProvider`.
    """
    return ProviderRegistry(config)
