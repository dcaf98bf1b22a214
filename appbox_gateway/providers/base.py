"""
Provider 基类

每个后端实现都必须完整实现管理端契约，网关除按名称解析外不区分具体 provider。
所有操作都是协程：调用方任务被取消时，进行中的上游请求随之中止。
"""

from abc import ABC, abstractmethod
from typing import List, Optional
import logging

from appbox_gateway.schemas.admin import (
    AdminUsersPage,
    AdminUserUpdateRequest,
    AppConfig,
    AppConfigUpsertRequest,
    PlanetItem,
    User,
)
from appbox_gateway.schemas.common import PaginatedResponse


class AdminProvider(ABC):
    """管理端 provider 契约"""

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(f"{__name__}.{name}")

    @abstractmethod
    async def list_users(
        self,
        page: int,
        page_size: int,
        keyword: str = ""
    ) -> AdminUsersPage:
        """
        分页查询用户

        Args:
            page: 页码
            page_size: 每页数量
            keyword: 关键词，去除空白后非空时按后端规则过滤（如用户名、手机号）

        Returns:
            用户分页结果（含订阅用户总数）

        Raises:
            UpstreamError: 上游拒绝或失败
        """
        pass

    @abstractmethod
    async def list_user_planets(
        self,
        user_id: int,
        page: int,
        page_size: int
    ) -> PaginatedResponse[PlanetItem]:
        """
        分页查询用户的星球

        用户不存在时抛出 UpstreamError，状态码由后端决定。
        """
        pass

    @abstractmethod
    async def update_user(self, user_id: int, payload: AdminUserUpdateRequest) -> Optional[User]:
        """按字段部分更新用户，未提供的字段保持不变"""
        pass

    @abstractmethod
    async def delete_user(self, user_id: int) -> None:
        """删除用户"""
        pass

    @abstractmethod
    async def list_configs(self) -> List[AppConfig]:
        """查询全部配置项，没有配置时返回空列表"""
        pass

    @abstractmethod
    async def upsert_config(self, key: str, payload: AppConfigUpsertRequest) -> Optional[AppConfig]:
        """key 不存在时创建，否则替换"""
        pass

    @abstractmethod
    async def delete_config(self, key: str) -> None:
        """删除配置项"""
        pass

    async def aclose(self) -> None:
        """释放 provider 持有的资源"""
        return None
