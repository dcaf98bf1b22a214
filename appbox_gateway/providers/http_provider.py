"""
HTTP 上游 Provider

把每个契约操作转换为一次对上游的 HTTP 请求，解析上游的统一信封
{code, timestamp, msg, data}，并把失败归类为 UpstreamError（上游语义失败）
或传输/协议错误（本地或网络问题）。
"""

import asyncio
import time
from functools import lru_cache
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError, model_validator

from appbox_gateway.config import DEFAULT_GATEWAY_HEADER
from appbox_gateway.errors import (
    BAD_GATEWAY,
    UpstreamError,
    UpstreamProtocolError,
    UpstreamTransportError,
)
from appbox_gateway.providers.base import AdminProvider
from appbox_gateway.schemas.admin import (
    AdminUsersPage,
    AdminUserUpdateRequest,
    AppConfig,
    AppConfigUpsertRequest,
    PlanetItem,
    User,
)
from appbox_gateway.schemas.common import SUCCESS_CODE, PaginatedResponse, drop_null_fields
from appbox_gateway.utils.logger import log_upstream_call


class UpstreamEnvelope(BaseModel):
    """上游响应信封，data 保持未解析状态，直到确定目标类型；null 字段按默认值处理"""
    code: int = 0
    timestamp: int = 0
    msg: str = ""
    data: Any = None

    @model_validator(mode="before")
    @classmethod
    def _null_as_default(cls, data: Any) -> Any:
        return drop_null_fields(data)


@lru_cache(maxsize=None)
def _adapter(result_type: Any) -> TypeAdapter:
    return TypeAdapter(result_type)


def _is_error_status(status_code: int) -> bool:
    return 400 <= status_code <= 599


def resolve_error_status(http_status: int, envelope_code: int) -> int:
    """优先使用 HTTP 状态码，其次信封 code，都不可用时返回 502"""
    for candidate in (http_status, envelope_code):
        if _is_error_status(candidate):
            return candidate
    return BAD_GATEWAY


class HTTPUpstreamProvider(AdminProvider):
    """通过 HTTP 代理到远程服务的 provider"""

    def __init__(
        self,
        name: str,
        base_url: str,
        gateway_key: str,
        gateway_header: str = DEFAULT_GATEWAY_HEADER,
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        super().__init__(name)
        self.base_url = base_url.strip().rstrip("/")
        self.gateway_key = gateway_key
        self.gateway_header = gateway_header or DEFAULT_GATEWAY_HEADER
        self.timeout = timeout
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self.logger.info(f"HTTP provider {name} -> {self.base_url} (header: {self.gateway_header})")

    async def list_users(self, page: int, page_size: int, keyword: str = "") -> AdminUsersPage:
        params = {"page": page, "pageSize": page_size}
        keyword = keyword.strip()
        if keyword:
            params["keyword"] = keyword

        result = await self._request("GET", "/admin/users", params=params, result_type=AdminUsersPage)
        return result or AdminUsersPage.build([], total=0, page=page, page_size=page_size)

    async def list_user_planets(
        self,
        user_id: int,
        page: int,
        page_size: int
    ) -> PaginatedResponse[PlanetItem]:
        result = await self._request(
            "GET",
            f"/admin/users/{user_id}/planets",
            params={"page": page, "pageSize": page_size},
            result_type=PaginatedResponse[PlanetItem],
        )
        return result or PaginatedResponse[PlanetItem].build([], total=0, page=page, page_size=page_size)

    async def update_user(self, user_id: int, payload: AdminUserUpdateRequest) -> Optional[User]:
        return await self._request(
            "PUT",
            f"/admin/users/{user_id}",
            body=payload.to_patch(),
            result_type=User,
        )

    async def delete_user(self, user_id: int) -> None:
        await self._request("DELETE", f"/admin/users/{user_id}")

    async def list_configs(self) -> List[AppConfig]:
        result = await self._request("GET", "/admin/configs", result_type=List[AppConfig])
        return result or []

    async def upsert_config(self, key: str, payload: AppConfigUpsertRequest) -> Optional[AppConfig]:
        return await self._request(
            "PUT",
            f"/admin/configs/{quote(key, safe='')}",
            body=payload.model_dump(mode="json", by_alias=True),
            result_type=AppConfig,
        )

    async def delete_config(self, key: str) -> None:
        await self._request("DELETE", f"/admin/configs/{quote(key, safe='')}")

    async def aclose(self) -> None:
        await self._client.aclose()

    def _build_headers(self, with_body: bool) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            self.gateway_header: self.gateway_key,
        }
        if with_body:
            headers["Content-Type"] = "application/json"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
        result_type: Any = None
    ) -> Any:
        """
        发送请求并解析上游信封

        Args:
            method: HTTP方法
            path: 相对 base_url 的路径
            params: 查询参数
            body: JSON 请求体
            result_type: data 的目标类型，为 None 时不解析 data

        Returns:
            解析后的 data，data 为空时返回 None

        Raises:
            UpstreamError: 上游返回非 2xx 或信封 code 不为 200
            UpstreamTransportError: 网络错误或超时
            UpstreamProtocolError: 响应不符合信封约定
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        start_time = time.time()

        try:
            response = await asyncio.wait_for(
                self._client.request(
                    method,
                    url,
                    params=params,
                    json=body,
                    headers=self._build_headers(body is not None),
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            duration = (time.time() - start_time) * 1000
            log_upstream_call(self.name, method, path, None, duration, success=False, error="timeout")
            raise UpstreamTransportError(
                f"request upstream timed out after {self.timeout}s: {method} {path}"
            ) from e
        except httpx.HTTPError as e:
            duration = (time.time() - start_time) * 1000
            log_upstream_call(self.name, method, path, None, duration, success=False, error=str(e))
            raise UpstreamTransportError(f"request upstream failed: {e}") from e

        duration = (time.time() - start_time) * 1000
        log_upstream_call(
            self.name, method, path, response.status_code, duration,
            success=response.is_success
        )

        return self._decode(response, result_type)

    def _decode(self, response: httpx.Response, result_type: Any) -> Any:
        raw = response.content
        envelope = UpstreamEnvelope()

        if raw:
            try:
                envelope = UpstreamEnvelope.model_validate_json(raw)
            except ValidationError:
                if response.is_success:
                    raise UpstreamProtocolError(f"upstream response is not json: {response.text}")
                raise UpstreamError(response.status_code, response.text)

        if not response.is_success or envelope.code != SUCCESS_CODE:
            message = envelope.msg.strip()
            if not message:
                message = f"upstream request failed: status={response.status_code}"
            raise UpstreamError(resolve_error_status(response.status_code, envelope.code), message)

        if result_type is None or envelope.data is None:
            return None

        try:
            return _adapter(result_type).validate_python(envelope.data)
        except ValidationError as e:
            raise UpstreamProtocolError(f"unmarshal upstream data failed: {e}") from e
