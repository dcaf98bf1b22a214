"""
FastAPI依赖注入
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from appbox_gateway.auth.auth_service import ADMIN_ROLE
from appbox_gateway.auth.jwt_handler import verify_access_token
from appbox_gateway.schemas.auth import AdminClaims

# HTTP Bearer认证方案，缺少令牌时由下方依赖返回统一的 401
security = HTTPBearer(auto_error=False)


async def get_current_claims(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> AdminClaims:
    """
    获取当前令牌中的身份信息

    Args:
        request: 请求对象
        credentials: HTTP认证凭据

    Returns:
        令牌身份信息

    Raises:
        HTTPException: 认证失败时抛出
    """
    if not request.headers.get("Authorization", "").strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token not provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # 非 Bearer 方案时 HTTPBearer 返回 None
    if credentials is None or not credentials.credentials.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = verify_access_token(credentials.credentials.strip())

    try:
        claims = AdminClaims.model_validate(payload)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # 供请求日志中间件记录
    request.state.user_id = claims.user_id
    return claims


async def require_admin(
    claims: AdminClaims = Depends(get_current_claims)
) -> AdminClaims:
    """
    要求管理员角色

    Raises:
        HTTPException: 角色不符时返回 403
    """
    if claims.role != ADMIN_ROLE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden"
        )
    return claims
