"""
管理端 provider 代理端点

路由层只负责解析参数并调用解析出的 provider，错误由全局异常处理器统一渲染。
"""

from typing import Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from appbox_gateway.api.deps import get_provider, get_registry
from appbox_gateway.config import settings
from appbox_gateway.providers.base import AdminProvider
from appbox_gateway.providers.registry import ProviderRegistry
from appbox_gateway.schemas.admin import AdminUserUpdateRequest, AppConfigUpsertRequest
from appbox_gateway.schemas.common import ResponseModel
from appbox_gateway.utils.pagination import normalize_pagination

router = APIRouter()


def _paginate(page: int, page_size: Optional[int], page_size_legacy: Optional[int]) -> Tuple[int, int]:
    """按配置的默认值与上下限规范化分页参数"""
    if page_size is None:
        page_size = page_size_legacy if page_size_legacy is not None else 0
    return normalize_pagination(
        page,
        page_size,
        default_size=settings.PAGE_SIZE_DEFAULT,
        min_size=settings.PAGE_SIZE_MIN,
        max_size=settings.PAGE_SIZE_MAX,
    )


def _config_key(key: str) -> str:
    key = key.strip()
    if not key:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Config key is required"
        )
    return key


@router.get("/providers", response_model=ResponseModel)
async def list_providers(registry: ProviderRegistry = Depends(get_registry)):
    """已注册的 provider 名称"""
    return ResponseModel(data=registry.list())


@router.get("/users", response_model=ResponseModel)
async def list_users(
    page: int = Query(1, description="页码"),
    page_size: Optional[int] = Query(None, alias="pageSize", description="每页数量"),
    page_size_legacy: Optional[int] = Query(None, alias="page_size", include_in_schema=False),
    keyword: str = Query("", description="关键词（用户名/手机号）"),
    provider: AdminProvider = Depends(get_provider)
):
    """
    分页查询用户

    - **page**: 页码
    - **pageSize**: 每页数量
    - **keyword**: 关键词
    """
    page, size = _paginate(page, page_size, page_size_legacy)
    result = await provider.list_users(page, size, keyword.strip())
    return ResponseModel(data=result)


@router.get("/users/{user_id}/planets", response_model=ResponseModel)
async def list_user_planets(
    user_id: int = Path(..., ge=0, description="用户ID"),
    page: int = Query(1, description="页码"),
    page_size: Optional[int] = Query(None, alias="pageSize", description="每页数量"),
    page_size_legacy: Optional[int] = Query(None, alias="page_size", include_in_schema=False),
    provider: AdminProvider = Depends(get_provider)
):
    """分页查询用户的星球"""
    page, size = _paginate(page, page_size, page_size_legacy)
    result = await provider.list_user_planets(user_id, page, size)
    return ResponseModel(data=result)


@router.put("/users/{user_id}", response_model=ResponseModel)
async def update_user(
    payload: AdminUserUpdateRequest,
    user_id: int = Path(..., ge=0, description="用户ID"),
    provider: AdminProvider = Depends(get_provider)
):
    """
    更新用户

    仅更新请求体中出现的字段
    """
    result = await provider.update_user(user_id, payload)
    return ResponseModel(data=result)


@router.delete("/users/{user_id}", response_model=ResponseModel)
async def delete_user(
    user_id: int = Path(..., ge=0, description="用户ID"),
    provider: AdminProvider = Depends(get_provider)
):
    """删除用户"""
    await provider.delete_user(user_id)
    return ResponseModel(msg="User deleted successfully")


@router.get("/configs", response_model=ResponseModel)
async def list_configs(provider: AdminProvider = Depends(get_provider)):
    """查询全部配置项"""
    result = await provider.list_configs()
    return ResponseModel(data=result)


@router.put("/configs/{key}", response_model=ResponseModel)
async def upsert_config(
    payload: AppConfigUpsertRequest,
    key: str = Path(..., description="配置键"),
    provider: AdminProvider = Depends(get_provider)
):
    """创建或替换配置项"""
    result = await provider.upsert_config(_config_key(key), payload)
    return ResponseModel(data=result)


@router.delete("/configs/{key}", response_model=ResponseModel)
async def delete_config(
    key: str = Path(..., description="配置键"),
    provider: AdminProvider = Depends(get_provider)
):
    """删除配置项"""
    await provider.delete_config(_config_key(key))
    return ResponseModel(msg="Config deleted successfully")
