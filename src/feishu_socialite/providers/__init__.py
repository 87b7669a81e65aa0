"""Provider implementations.

- :class:`Provider` -- the capability protocol every provider satisfies.
- :class:`FeishuProvider` -- the Feishu open-platform client.
"""

from feishu_socialite.providers.base import Provider
from feishu_socialite.providers.feishu import FeishuProvider

__all__ = ["FeishuProvider", "Provider"]
