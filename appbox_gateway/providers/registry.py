"""
Provider 注册表

注册通常只在启动时发生，而每个管理端请求都要解析一次 provider。
写入时复制一份新字典并整体替换为只读映射，读取方直接使用当前快照，无需加锁。
"""

import threading
from types import MappingProxyType
from typing import List, Mapping, Optional

from appbox_gateway.config import Settings
from appbox_gateway.errors import ProviderNotFoundError
from appbox_gateway.logging_config import get_logger
from appbox_gateway.providers.base import AdminProvider
from appbox_gateway.providers.http_provider import HTTPUpstreamProvider

logger = get_logger(__name__)


class ProviderRegistry:
    """按名称查找 provider，空名称解析为默认 provider"""

    def __init__(self, default_key: str = ""):
        self._default_key = default_key.strip()
        self._lock = threading.Lock()
        self._providers: Mapping[str, AdminProvider] = MappingProxyType({})

    @property
    def default_key(self) -> str:
        return self._default_key

    def register(self, name: str, provider: AdminProvider) -> None:
        """注册 provider，同名时覆盖"""
        key = name.strip()
        with self._lock:
            providers = dict(self._providers)
            providers[key] = provider
            self._providers = MappingProxyType(providers)
        logger.info(f"Provider registered: {key}")

    def list(self) -> List[str]:
        """已注册的 provider 名称"""
        return list(self._providers.keys())

    def resolve(self, provider_key: Optional[str] = None) -> AdminProvider:
        """
        解析 provider

        Args:
            provider_key: 调用方提供的名称，为空时使用默认名称

        Returns:
            provider 实例

        Raises:
            ProviderNotFoundError: 名称未注册
        """
        key = (provider_key or "").strip()
        if not key:
            key = self._default_key

        provider = self._providers.get(key)
        if provider is None:
            raise ProviderNotFoundError(key)
        return provider

    async def aclose(self) -> None:
        """关闭所有 provider"""
        for name, provider in self._providers.items():
            try:
                await provider.aclose()
            except Exception as e:
                logger.error(f"Failed to close provider {name}: {e}")


def build_registry(config: Settings) -> ProviderRegistry:
    """根据配置构建注册表"""
    registry = ProviderRegistry(config.DEFAULT_APP_PROVIDER)

    if config.STELLAR_ENABLED:
        registry.register(
            config.STELLAR_PROVIDER_NAME,
            HTTPUpstreamProvider(
                name=config.STELLAR_PROVIDER_NAME,
                base_url=config.STELLAR_API_BASE_URL,
                gateway_key=config.STELLAR_GATEWAY_KEY,
                gateway_header=config.STELLAR_GATEWAY_HEADER,
                timeout=config.STELLAR_TIMEOUT,
            )
        )
    else:
        logger.warning("Stellar provider disabled, no upstream provider registered")

    return registry
