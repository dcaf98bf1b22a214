"""
JWT Token处理
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from fastapi import HTTPException, status

from appbox_gateway.config import settings

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def _encode(claims: Dict[str, Any], expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    to_encode = claims.copy()
    to_encode.update({
        "exp": now + expires_delta,
        "iat": now,
        "nbf": now,
        "iss": settings.JWT_ISSUER,
    })

    return jwt.encode(
        to_encode,
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM
    )


def create_access_token(
    user_id: int,
    username: str,
    email: str,
    role: str,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    创建访问令牌

    Args:
        user_id: 用户ID
        username: 用户名
        email: 邮箱
        role: 角色
        expires_delta: 过期时间增量

    Returns:
        JWT访问令牌
    """
    if expires_delta is None:
        expires_delta = timedelta(hours=settings.JWT_EXPIRATION_HOURS)

    claims = {
        "sub": str(user_id),
        "user_id": user_id,
        "username": username,
        "email": email,
        "role": role,
        "type": ACCESS_TOKEN_TYPE,
    }
    return _encode(claims, expires_delta)


def create_refresh_token(user_id: int) -> str:
    """
    创建刷新令牌

    Args:
        user_id: 用户ID

    Returns:
        刷新令牌
    """
    claims = {
        "sub": str(user_id),
        "type": REFRESH_TOKEN_TYPE,
    }
    return _encode(claims, timedelta(hours=settings.JWT_REFRESH_EXPIRATION_HOURS))


def verify_token(token: str) -> Dict[str, Any]:
    """
    验证JWT令牌

    Args:
        token: JWT令牌

    Returns:
        解码后的数据

    Raises:
        HTTPException: 令牌无效时抛出
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            issuer=settings.JWT_ISSUER,
        )
        return payload

    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


def verify_access_token(token: str) -> Dict[str, Any]:
    """
    验证访问令牌，拒绝刷新令牌

    Raises:
        HTTPException: 令牌无效或类型不符时抛出
    """
    payload = verify_token(token)

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return payload


def verify_refresh_token(token: str) -> int:
    """
    验证刷新令牌

    Args:
        token: 刷新令牌

    Returns:
        用户ID

    Raises:
        HTTPException: 令牌无效时抛出
    """
    payload = verify_token(token)

    if payload.get("type") != REFRESH_TOKEN_TYPE:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user ID in token",
            headers={"WWW-Authenticate": "Bearer"},
        )
