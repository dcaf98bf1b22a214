"""
认证相关API端点
"""

from fastapi import APIRouter, Depends, Request

from appbox_gateway.api.deps import get_auth_service, get_client_ip
from appbox_gateway.auth.auth_service import AdminAuthService
from appbox_gateway.auth.dependencies import require_admin
from appbox_gateway.schemas.auth import (
    AdminClaims,
    AdminLoginRequest,
    AdminProfileResponse,
    RefreshTokenRequest,
)
from appbox_gateway.schemas.common import ResponseModel

router = APIRouter()


@router.post("/auth/admin/login", response_model=ResponseModel)
async def login(
    login_data: AdminLoginRequest,
    request: Request,
    auth_service: AdminAuthService = Depends(get_auth_service)
):
    """
    管理员登录

    - **password**: 管理员密码

    返回访问令牌和刷新令牌
    """
    result = auth_service.login(login_data.password, client_ip=get_client_ip(request))
    return ResponseModel(data=result)


@router.post("/auth/admin/refresh", response_model=ResponseModel)
async def refresh_token(
    refresh_data: RefreshTokenRequest,
    request: Request,
    auth_service: AdminAuthService = Depends(get_auth_service)
):
    """
    刷新访问令牌

    - **refreshToken**: 刷新令牌

    返回新的访问令牌和刷新令牌
    """
    result = auth_service.refresh(refresh_data.refresh_token, client_ip=get_client_ip(request))
    return ResponseModel(data=result)


@router.get("/admin/auth/me", response_model=ResponseModel)
async def get_me(claims: AdminClaims = Depends(require_admin)):
    """
    获取当前管理员信息

    需要有效的管理员令牌
    """
    return ResponseModel(
        data=AdminProfileResponse(
            user_id=claims.user_id,
            username=claims.username,
            email=claims.email,
            role=claims.role,
        )
    )
