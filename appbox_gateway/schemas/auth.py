"""
认证相关的Pydantic模式
"""

from pydantic import BaseModel, field_validator

from appbox_gateway.schemas.common import CamelModel


class AdminLoginRequest(CamelModel):
    """管理员登录请求模式"""
    password: str

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        if len(v) > 128:
            raise ValueError('Password must be less than 128 characters')
        return v


class AdminLoginResponse(CamelModel):
    """管理员登录响应模式"""
    user_id: int
    username: str
    email: str
    role: str
    access_token: str
    refresh_token: str
    token: str  # 兼容旧前端，与 access_token 相同


class AdminProfileResponse(CamelModel):
    """当前管理员信息"""
    user_id: int
    username: str
    email: str
    role: str


class RefreshTokenRequest(CamelModel):
    """刷新令牌请求模式"""
    refresh_token: str


class AdminClaims(BaseModel):
    """访问令牌中携带的身份信息"""
    user_id: int
    username: str = ""
    email: str = ""
    role: str = ""
