"""
通用的 Pydantic 模型
"""

import math
import time
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_serializer, model_validator
from pydantic.alias_generators import to_camel

DataT = TypeVar('DataT')
ItemT = TypeVar('ItemT')

SUCCESS_CODE = 200


def now_millis() -> int:
    """当前时间戳（毫秒）"""
    return int(time.time() * 1000)


class CamelModel(BaseModel):
    """对外 JSON 使用 camelCase，Python 属性使用 snake_case"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def drop_null_fields(data: Any) -> Any:
    """去掉值为 null 的键，使字段回落到默认值"""
    if isinstance(data, dict):
        return {key: value for key, value in data.items() if value is not None}
    return data


class UpstreamModel(CamelModel):
    """
    上游返回的对象

    上游可能用 null 表示未填写的字段，此时按字段默认值处理，而不是校验失败。
    请求模型不继承此类：请求中显式的 null 需要原样转发。
    """

    @model_validator(mode="before")
    @classmethod
    def _null_as_default(cls, data: Any) -> Any:
        return drop_null_fields(data)


class ResponseModel(BaseModel, Generic[DataT]):
    """
    统一的 API 响应模型

    所有接口返回统一的 JSON 格式：
    {
        "code": 200,
        "timestamp": 1700000000000,
        "msg": "success",
        "data": { ... }
    }

    data 为空时整个字段省略，而不是输出 null。
    """
    code: int = Field(SUCCESS_CODE, description="状态码")
    timestamp: int = Field(default_factory=now_millis, description="毫秒时间戳")
    msg: str = Field("success", description="响应消息")
    data: Optional[DataT] = Field(None, description="响应数据")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "code": 200,
                "timestamp": 1700000000000,
                "msg": "success",
                "data": {}
            }
        }
    )

    @model_serializer(mode="wrap")
    def _omit_empty_data(self, handler):
        payload = handler(self)
        if payload.get("data") is None:
            payload.pop("data", None)
        return payload


def error_body(code: int, msg: str) -> dict:
    """构造错误响应体"""
    return ResponseModel(code=code, msg=msg).model_dump(by_alias=True)


class PaginatedResponse(UpstreamModel, Generic[ItemT]):
    """分页模型"""
    total: int = Field(0, ge=0, description="总数")
    page: int = Field(1, description="当前页码")
    page_size: int = Field(0, description="每页数量")
    total_pages: int = Field(0, ge=0, description="总页数")
    has_next: bool = Field(False, description="是否有下一页")
    has_previous: bool = Field(False, description="是否有上一页")
    data: List[ItemT] = Field(default_factory=list, description="当前页数据")

    @classmethod
    def build(cls, items: List[Any], total: int, page: int, page_size: int, **extra: Any):
        """
        根据总数和分页参数计算派生字段

        Args:
            items: 当前页数据
            total: 总数
            page: 当前页码
            page_size: 每页数量
            **extra: 子类的额外字段

        Returns:
            分页结果
        """
        total_pages = math.ceil(total / page_size) if page_size > 0 else 0
        return cls(
            total=total,
            page=page,
            page_size=page_size,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_previous=page > 1,
            data=list(items),
            **extra
        )
