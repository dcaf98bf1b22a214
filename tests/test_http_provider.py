"""
HTTP 上游 Provider 测试
"""

import asyncio
import json

import httpx
import pytest

from appbox_gateway.errors import (
    UpstreamError,
    UpstreamProtocolError,
    UpstreamTransportError,
)
from appbox_gateway.providers.http_provider import resolve_error_status
from appbox_gateway.schemas.admin import AdminUserUpdateRequest, AppConfigUpsertRequest


def envelope(data=None, code=200, msg="success"):
    return {"code": code, "timestamp": 1700000000000, "msg": msg, "data": data}


def user_payload(**overrides):
    payload = {
        "id": 7,
        "username": "alice",
        "phone": "13800000000",
        "avatar": "",
        "role": "user",
        "status": "active",
        "isSubscriber": True,
        "subscriptionExpiresAt": "2026-12-31T00:00:00Z",
        "createdAt": "2025-01-01T00:00:00Z",
    }
    payload.update(overrides)
    return payload


class TestRequestConstruction:
    """请求构造测试"""

    @pytest.mark.asyncio
    async def test_list_users_request(self, make_http_provider):
        """测试用户列表请求的路径、参数与请求头"""
        captured = {}

        def handler(request: httpx.Request):
            captured["request"] = request
            return httpx.Response(200, json=envelope({
                "total": 21,
                "page": 2,
                "pageSize": 10,
                "totalPages": 3,
                "hasNext": True,
                "hasPrevious": True,
                "subscriberTotal": 4,
                "data": [user_payload()],
            }))

        provider = make_http_provider(handler)
        result = await provider.list_users(2, 10, "  alice  ")

        request = captured["request"]
        assert request.method == "GET"
        assert request.url.path == "/api/v1/admin/users"
        assert request.url.params["page"] == "2"
        assert request.url.params["pageSize"] == "10"
        assert request.url.params["keyword"] == "alice"
        assert request.headers["X-Gateway-Key"] == "test-gateway-key"
        assert request.headers["Accept"] == "application/json"
        assert "content-type" not in request.headers

        assert result.total == 21
        assert result.subscriber_total == 4
        assert result.has_next is True
        assert result.data[0].username == "alice"
        assert result.data[0].is_subscriber is True

    @pytest.mark.asyncio
    async def test_blank_keyword_omitted(self, make_http_provider):
        """测试空白关键词不会出现在查询参数中"""
        captured = {}

        def handler(request: httpx.Request):
            captured["request"] = request
            return httpx.Response(200, json=envelope({"total": 0, "data": []}))

        provider = make_http_provider(handler)
        await provider.list_users(1, 10, "   ")

        assert "keyword" not in captured["request"].url.params

    @pytest.mark.asyncio
    async def test_update_user_sends_sparse_json(self, make_http_provider):
        """测试部分更新只发送显式提供的字段"""
        captured = {}

        def handler(request: httpx.Request):
            captured["request"] = request
            return httpx.Response(200, json=envelope(user_payload(role="vip")))

        provider = make_http_provider(handler)
        payload = AdminUserUpdateRequest.model_validate({"role": "vip", "isSubscriber": False})
        result = await provider.update_user(7, payload)

        request = captured["request"]
        assert request.method == "PUT"
        assert request.url.path == "/api/v1/admin/users/7"
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content) == {"role": "vip", "isSubscriber": False}
        assert result.role == "vip"

    @pytest.mark.asyncio
    async def test_upsert_config_escapes_key(self, make_http_provider):
        """测试配置键在路径中被转义"""
        captured = {}

        def handler(request: httpx.Request):
            captured["request"] = request
            return httpx.Response(200, json=envelope({
                "id": 3,
                "configKey": "a/b c",
                "alias": "demo",
                "configValue": "1",
                "valueType": "number",
            }))

        provider = make_http_provider(handler)
        payload = AppConfigUpsertRequest(alias="demo", config_value="1", value_type="number")
        result = await provider.upsert_config("a/b c", payload)

        request = captured["request"]
        assert request.method == "PUT"
        assert request.url.raw_path == b"/api/v1/admin/configs/a%2Fb%20c"
        assert json.loads(request.content) == {
            "alias": "demo",
            "configValue": "1",
            "valueType": "number",
            "description": "",
        }
        assert result.config_key == "a/b c"

    @pytest.mark.asyncio
    async def test_delete_user_returns_none(self, make_http_provider):
        """测试删除成功且 data 为 null 时不报错"""
        captured = {}

        def handler(request: httpx.Request):
            captured["request"] = request
            return httpx.Response(200, json=envelope(None, msg="deleted"))

        provider = make_http_provider(handler)
        assert await provider.delete_user(9) is None
        assert captured["request"].method == "DELETE"
        assert captured["request"].url.path == "/api/v1/admin/users/9"

    @pytest.mark.asyncio
    async def test_custom_gateway_header(self):
        """测试自定义网关认证请求头"""
        captured = {}

        def handler(request: httpx.Request):
            captured["request"] = request
            return httpx.Response(200, json=envelope([]))

        from appbox_gateway.providers.http_provider import HTTPUpstreamProvider

        provider = HTTPUpstreamProvider(
            name="other",
            base_url="http://upstream.test",
            gateway_key="secret",
            gateway_header="X-Internal-Key",
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )
        await provider.list_configs()

        assert captured["request"].headers["X-Internal-Key"] == "secret"
        assert "X-Gateway-Key" not in captured["request"].headers


class TestResponseTranslation:
    """响应解析测试"""

    @pytest.mark.asyncio
    async def test_not_found_envelope(self, make_http_provider):
        """测试 404 信封转换为 UpstreamError"""
        def handler(request):
            return httpx.Response(404, json={"code": 404, "msg": "user not found", "data": None})

        provider = make_http_provider(handler)

        with pytest.raises(UpstreamError) as exc_info:
            await provider.update_user(1, AdminUserUpdateRequest(role="vip"))

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "user not found"

    @pytest.mark.asyncio
    async def test_non_json_success_is_protocol_error(self, make_http_provider):
        """测试 200 但非 JSON 时为普通错误而非上游错误"""
        def handler(request):
            return httpx.Response(200, text="<html>gateway</html>")

        provider = make_http_provider(handler)

        with pytest.raises(UpstreamProtocolError) as exc_info:
            await provider.list_configs()

        assert not isinstance(exc_info.value, UpstreamError)
        assert "<html>gateway</html>" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_non_json_failure_uses_body_as_message(self, make_http_provider):
        """测试非 2xx 且非 JSON 时使用原始响应体作为消息"""
        def handler(request):
            return httpx.Response(503, text="service unavailable")

        provider = make_http_provider(handler)

        with pytest.raises(UpstreamError) as exc_info:
            await provider.list_configs()

        assert exc_info.value.status_code == 503
        assert exc_info.value.message == "service unavailable"

    @pytest.mark.asyncio
    async def test_empty_config_list(self, make_http_provider):
        """测试空配置列表返回 []"""
        def handler(request):
            return httpx.Response(200, json={"code": 200, "msg": "ok", "data": []})

        provider = make_http_provider(handler)
        result = await provider.list_configs()

        assert result == []

    @pytest.mark.asyncio
    async def test_null_config_list(self, make_http_provider):
        """测试 data 为 null 时也返回 []"""
        def handler(request):
            return httpx.Response(200, json={"code": 200, "msg": "ok", "data": None})

        provider = make_http_provider(handler)
        assert await provider.list_configs() == []

    @pytest.mark.asyncio
    async def test_envelope_code_failure_with_http_success(self, make_http_provider):
        """测试 HTTP 200 但信封 code 表示失败"""
        def handler(request):
            return httpx.Response(200, json={"code": 409, "msg": "  duplicate key  ", "data": None})

        provider = make_http_provider(handler)

        with pytest.raises(UpstreamError) as exc_info:
            await provider.upsert_config("k", AppConfigUpsertRequest())

        assert exc_info.value.status_code == 409
        assert exc_info.value.message == "duplicate key"

    @pytest.mark.asyncio
    async def test_unusable_status_falls_back_to_bad_gateway(self, make_http_provider):
        """测试状态码都不可用时回退到 502"""
        def handler(request):
            return httpx.Response(200, json={"code": 0, "msg": "", "data": None})

        provider = make_http_provider(handler)

        with pytest.raises(UpstreamError) as exc_info:
            await provider.delete_config("k")

        assert exc_info.value.status_code == 502
        assert exc_info.value.message == "upstream request failed: status=200"

    @pytest.mark.asyncio
    async def test_empty_body_with_error_status(self, make_http_provider):
        """测试错误状态且响应体为空"""
        def handler(request):
            return httpx.Response(500)

        provider = make_http_provider(handler)

        with pytest.raises(UpstreamError) as exc_info:
            await provider.delete_user(1)

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "upstream request failed: status=500"

    @pytest.mark.asyncio
    async def test_data_shape_mismatch(self, make_http_provider):
        """测试 data 与目标类型不符时为协议错误"""
        def handler(request):
            return httpx.Response(200, json=envelope({"id": "not-a-number"}))

        provider = make_http_provider(handler)

        with pytest.raises(UpstreamProtocolError):
            await provider.update_user(1, AdminUserUpdateRequest())

    @pytest.mark.asyncio
    async def test_planets_page(self, make_http_provider):
        """测试星球分页解析"""
        def handler(request):
            assert request.url.path == "/api/v1/admin/users/5/planets"
            return httpx.Response(200, json=envelope({
                "total": 2,
                "page": 1,
                "pageSize": 10,
                "totalPages": 1,
                "hasNext": False,
                "hasPrevious": False,
                "data": [
                    {"id": "p1", "name": "Mars", "userId": 5, "keywords": ["red", "dust"]},
                    {"id": "p2", "name": "Venus", "userId": 5, "keywords": []},
                ],
            }))

        provider = make_http_provider(handler)
        result = await provider.list_user_planets(5, 1, 10)

        assert [item.id for item in result.data] == ["p1", "p2"]
        assert result.data[0].keywords == ["red", "dust"]

    @pytest.mark.asyncio
    async def test_null_msg_on_success(self, make_http_provider):
        """测试成功信封中 msg 为 null 时正常解析"""
        def handler(request):
            return httpx.Response(200, json={"code": 200, "timestamp": 1, "msg": None, "data": []})

        provider = make_http_provider(handler)

        assert await provider.list_configs() == []

    @pytest.mark.asyncio
    async def test_null_msg_on_failure(self, make_http_provider):
        """测试失败信封中 msg 为 null 时使用合成消息"""
        def handler(request):
            return httpx.Response(404, json={"code": 404, "timestamp": None, "msg": None, "data": None})

        provider = make_http_provider(handler)

        with pytest.raises(UpstreamError) as exc_info:
            await provider.delete_user(1)

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "upstream request failed: status=404"

    @pytest.mark.asyncio
    async def test_null_code_is_failure(self, make_http_provider):
        """测试 code 为 null 时按缺省 0 处理，回退到 502"""
        def handler(request):
            return httpx.Response(200, json={"code": None, "msg": "odd", "data": None})

        provider = make_http_provider(handler)

        with pytest.raises(UpstreamError) as exc_info:
            await provider.delete_config("k")

        assert exc_info.value.status_code == 502
        assert exc_info.value.message == "odd"

    @pytest.mark.asyncio
    async def test_null_fields_in_user(self, make_http_provider):
        """测试用户数据中的 null 字段取默认值"""
        def handler(request):
            return httpx.Response(200, json=envelope(user_payload(
                phone=None, avatar=None, isSubscriber=None, subscriptionExpiresAt=None
            )))

        provider = make_http_provider(handler)
        result = await provider.update_user(7, AdminUserUpdateRequest(role="vip"))

        assert result.id == 7
        assert result.phone == ""
        assert result.avatar == ""
        assert result.is_subscriber is False
        assert result.subscription_expires_at is None

    @pytest.mark.asyncio
    async def test_null_fields_in_pages_and_configs(self, make_http_provider):
        """测试分页与配置中的 null 字段取默认值"""
        def handler(request):
            if request.url.path.endswith("/planets"):
                return httpx.Response(200, json=envelope({
                    "total": 1,
                    "page": 1,
                    "pageSize": 10,
                    "totalPages": None,
                    "data": [{"id": "p1", "name": None, "userId": 5, "keywords": None}],
                }))
            return httpx.Response(200, json=envelope([
                {"id": 1, "configKey": "theme", "alias": None, "description": None},
            ]))

        provider = make_http_provider(handler)

        planets = await provider.list_user_planets(5, 1, 10)
        assert planets.total_pages == 0
        assert planets.data[0].name == ""
        assert planets.data[0].keywords == []

        configs = await provider.list_configs()
        assert configs[0].config_key == "theme"
        assert configs[0].alias == ""

    @pytest.mark.asyncio
    async def test_null_page_data_gives_empty_page(self, make_http_provider):
        """测试分页 data 为 null 时返回带派生字段的空页"""
        def handler(request):
            return httpx.Response(200, json=envelope(None))

        provider = make_http_provider(handler)
        result = await provider.list_users(3, 20)

        assert result.page == 3
        assert result.page_size == 20
        assert result.total == 0
        assert result.data == []
        assert result.has_previous is True


class TestTransportFailures:
    """传输层失败测试"""

    @pytest.mark.asyncio
    async def test_connect_error(self, make_http_provider):
        """测试连接失败为传输错误"""
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        provider = make_http_provider(handler)

        with pytest.raises(UpstreamTransportError):
            await provider.list_configs()

    @pytest.mark.asyncio
    async def test_hung_upstream_is_bounded_by_timeout(self, make_http_provider):
        """测试上游无响应时在超时时间内失败"""
        async def handler(request):
            await asyncio.sleep(5)
            return httpx.Response(200, json=envelope([]))

        provider = make_http_provider(handler, timeout=0.05)

        loop = asyncio.get_running_loop()
        started = loop.time()
        with pytest.raises(UpstreamTransportError):
            await provider.list_configs()

        assert loop.time() - started < 2

    @pytest.mark.asyncio
    async def test_caller_cancellation_aborts_call(self, make_http_provider):
        """测试调用方取消时请求立即中止"""
        started = asyncio.Event()

        async def handler(request):
            started.set()
            await asyncio.sleep(5)
            return httpx.Response(200, json=envelope([]))

        provider = make_http_provider(handler)
        task = asyncio.create_task(provider.list_configs())

        await asyncio.wait_for(started.wait(), timeout=1)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await asyncio.wait_for(task, timeout=1)


@pytest.mark.parametrize(
    "http_status, envelope_code, expected",
    [
        (404, 0, 404),
        (200, 500, 500),
        (0, 0, 502),
        (200, 201, 502),
        (302, 403, 403),
    ],
)
def test_resolve_error_status(http_status, envelope_code, expected):
    """测试错误状态码选择顺序"""
    assert resolve_error_status(http_status, envelope_code) == expected
