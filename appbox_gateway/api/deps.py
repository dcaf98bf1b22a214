"""
API 公共依赖
"""

from typing import Optional

from fastapi import Depends, Header, Query, Request

from appbox_gateway.auth.auth_service import AdminAuthService
from appbox_gateway.providers.base import AdminProvider
from appbox_gateway.providers.registry import ProviderRegistry


def get_registry(request: Request) -> ProviderRegistry:
    """获取应用级 provider 注册表"""
    return request.app.state.registry


def get_auth_service(request: Request) -> AdminAuthService:
    """获取管理员认证服务"""
    return request.app.state.auth_service


def get_provider(
    x_app_key: Optional[str] = Header(None, alias="X-App-Key", description="provider 名称"),
    app: Optional[str] = Query(None, description="provider 名称（请求头缺省时使用）"),
    registry: ProviderRegistry = Depends(get_registry)
) -> AdminProvider:
    """
    解析本次请求使用的 provider

    优先级：X-App-Key 请求头 > app 查询参数 > 默认 provider
    """
    provider_key = (x_app_key or "").strip()
    if not provider_key:
        provider_key = (app or "").strip()
    return registry.resolve(provider_key)


def get_client_ip(request: Request) -> Optional[str]:
    """获取客户端IP"""
    if "x-forwarded-for" in request.headers:
        return request.headers["x-forwarded-for"].split(",")[0].strip()
    return request.client.host if request.client else None
