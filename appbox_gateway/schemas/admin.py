"""
管理端相关的 Pydantic 模型

字段名与前端、上游保持一致（camelCase）。
"""

from typing import Any, Dict, List, Optional
from pydantic import Field

from appbox_gateway.schemas.common import CamelModel, PaginatedResponse, UpstreamModel


class User(UpstreamModel):
    """用户"""
    id: int = Field(0, description="用户ID")
    username: str = Field("", description="用户名")
    phone: str = Field("", description="手机号")
    avatar: str = Field("", description="头像")
    role: str = Field("", description="角色")
    status: str = Field("", description="状态")
    is_subscriber: bool = Field(False, description="是否订阅用户")
    subscription_expires_at: Optional[str] = Field(None, description="订阅到期时间")
    created_at: str = Field("", description="创建时间")


class PlanetItem(UpstreamModel):
    """用户星球"""
    id: str = Field("", description="星球ID")
    name: str = Field("", description="名称")
    user_id: int = Field(0, description="所属用户ID")
    image_url: str = Field("", description="图片地址")
    date_key: str = Field("", description="日期键")
    planet_no: str = Field("", description="星球编号")
    keywords: List[str] = Field(default_factory=list, description="关键词")
    created_at: str = Field("", description="创建时间")
    updated_at: str = Field("", description="更新时间")


class AppConfig(UpstreamModel):
    """应用配置项"""
    id: int = Field(0, description="配置ID")
    config_key: str = Field("", description="配置键（唯一）")
    alias: str = Field("", description="别名")
    config_value: str = Field("", description="配置值")
    value_type: str = Field("", description="值类型")
    description: str = Field("", description="描述")
    created_at: str = Field("", description="创建时间")
    updated_at: str = Field("", description="更新时间")


class AdminUsersPage(PaginatedResponse[User]):
    """管理端用户分页，附带订阅用户总数"""
    subscriber_total: int = Field(0, ge=0, description="订阅用户总数")


class AdminUserUpdateRequest(CamelModel):
    """
    管理端更新用户

    所有字段可选，只有请求中出现的字段会被转发给上游。
    """
    username: Optional[str] = None
    avatar: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None
    is_subscriber: Optional[bool] = None
    subscription_expires_at: Optional[str] = None

    def to_patch(self) -> Dict[str, Any]:
        """仅包含调用方显式提供的字段"""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class AppConfigUpsertRequest(CamelModel):
    """创建或替换配置项（configKey 通过路径传递）"""
    alias: str = ""
    config_value: str = ""
    value_type: str = ""
    description: str = ""
