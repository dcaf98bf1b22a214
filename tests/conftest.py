"""
测试公共配置
"""

import os

# 必须在导入应用之前设置
os.environ.setdefault("STELLAR_GATEWAY_KEY", "test-gateway-key")
os.environ.setdefault("ENABLE_FILE_LOGGING", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from unittest.mock import AsyncMock

import httpx
import pytest

from appbox_gateway.providers.base import AdminProvider
from appbox_gateway.providers.http_provider import HTTPUpstreamProvider

BASE_URL = "http://upstream.test/api/v1"
GATEWAY_KEY = "test-gateway-key"


@pytest.fixture
def mock_provider():
    """所有契约方法都是 AsyncMock 的 provider"""
    provider = AsyncMock(spec=AdminProvider)
    provider.name = "stellar"
    return provider


@pytest.fixture
def make_http_provider():
    """用 httpx.MockTransport 模拟上游的 provider 工厂"""
    def _make(handler, timeout: float = 5.0) -> HTTPUpstreamProvider:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return HTTPUpstreamProvider(
            name="stellar",
            base_url=BASE_URL + "/",
            gateway_key=GATEWAY_KEY,
            timeout=timeout,
            http_client=client,
        )
    return _make
