"""
管理员认证服务

单管理员部署：只有一个由配置提供的管理员身份，没有用户库。
"""

import secrets
from typing import Optional

from fastapi import HTTPException

from appbox_gateway.auth.jwt_handler import (
    create_access_token,
    create_refresh_token,
    verify_refresh_token,
)
from appbox_gateway.config import Settings
from appbox_gateway.errors import InvalidCredentialsError, TokenIssueError
from appbox_gateway.logging_config import get_logger
from appbox_gateway.schemas.auth import AdminLoginResponse
from appbox_gateway.utils.logger import log_auth_event

logger = get_logger(__name__)

ADMIN_USER_ID = 1000001
ADMIN_ROLE = "admin"


class AdminAuthService:
    """管理员认证服务"""

    def __init__(self, username: str, email: str, password: str):
        self.username = username
        self.email = email
        self._password = password

    @classmethod
    def from_settings(cls, config: Settings) -> "AdminAuthService":
        return cls(
            username=config.ADMIN_USERNAME,
            email=config.ADMIN_EMAIL,
            password=config.ADMIN_PASSWORD,
        )

    def login(self, password: str, client_ip: Optional[str] = None) -> AdminLoginResponse:
        """
        管理员登录

        Args:
            password: 密码
            client_ip: 客户端IP（审计用）

        Returns:
            登录响应（包含访问令牌和刷新令牌）

        Raises:
            InvalidCredentialsError: 密码错误
            TokenIssueError: 令牌签发失败
        """
        if not secrets.compare_digest(password.encode("utf-8"), self._password.encode("utf-8")):
            log_auth_event(
                event_type="login",
                username=self.username,
                success=False,
                ip=client_ip,
                reason="Incorrect password"
            )
            logger.warning(f"Admin login failed: incorrect password (IP: {client_ip})")
            raise InvalidCredentialsError()

        response = self._issue_tokens("login", client_ip)
        logger.info(f"Admin logged in successfully: username={self.username}")
        return response

    def refresh(self, refresh_token: str, client_ip: Optional[str] = None) -> AdminLoginResponse:
        """
        使用刷新令牌换取新的令牌对

        Raises:
            InvalidCredentialsError: 刷新令牌无效或不属于管理员
            TokenIssueError: 令牌签发失败
        """
        try:
            user_id = verify_refresh_token(refresh_token)
        except HTTPException as e:
            log_auth_event(
                event_type="token_refresh",
                success=False,
                ip=client_ip,
                reason=str(e.detail)
            )
            raise InvalidCredentialsError("invalid refresh token") from e

        if user_id != ADMIN_USER_ID:
            log_auth_event(
                event_type="token_refresh",
                user_id=user_id,
                success=False,
                ip=client_ip,
                reason="Unknown subject"
            )
            raise InvalidCredentialsError("invalid refresh token")

        return self._issue_tokens("token_refresh", client_ip)

    def _issue_tokens(self, event_type: str, client_ip: Optional[str]) -> AdminLoginResponse:
        try:
            access_token = create_access_token(
                user_id=ADMIN_USER_ID,
                username=self.username,
                email=self.email,
                role=ADMIN_ROLE
            )
            refresh_token = create_refresh_token(ADMIN_USER_ID)
        except Exception as e:
            logger.error(f"Failed to generate token: {e}", exc_info=True)
            log_auth_event(
                event_type=event_type,
                user_id=ADMIN_USER_ID,
                username=self.username,
                success=False,
                ip=client_ip,
                reason=f"Internal error: {e}"
            )
            raise TokenIssueError("failed to generate token") from e

        log_auth_event(
            event_type=event_type,
            user_id=ADMIN_USER_ID,
            username=self.username,
            success=True,
            ip=client_ip
        )

        return AdminLoginResponse(
            user_id=ADMIN_USER_ID,
            username=self.username,
            email=self.email,
            role=ADMIN_ROLE,
            access_token=access_token,
            refresh_token=refresh_token,
            token=access_token,
        )
