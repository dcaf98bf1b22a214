"""
简易接口冒烟脚本：
1) 管理员登录
2) 调用健康检查、provider 列表、用户列表、配置列表

用法：
    python -m appbox_gateway.tasks.smoke_api

可选环境变量：
    BASE_URL          默认 http://localhost:8090
    ADMIN_PASSWORD    默认 pass_the_appbox_admin
    APP_KEY           provider 名称，默认使用网关默认 provider
"""

import asyncio
import os
import httpx

BASE_URL = os.getenv("BASE_URL", "http://localhost:8090")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "pass_the_appbox_admin")
APP_KEY = os.getenv("APP_KEY", "")
API_PREFIX = "/api/v1"


async def call_health(client: httpx.AsyncClient):
    r = await client.get(f"{BASE_URL}{API_PREFIX}/health")
    print("Health:", r.status_code, r.text[:200])


async def login(client: httpx.AsyncClient) -> str:
    r = await client.post(f"{BASE_URL}{API_PREFIX}/auth/admin/login", json={
        "password": ADMIN_PASSWORD
    })
    print("Login status:", r.status_code, r.text[:200])
    r.raise_for_status()
    data = r.json().get("data") or {}
    token = data.get("accessToken") or data.get("token")
    if not token:
        raise RuntimeError("No accessToken in login response")
    return token


async def call_providers(client: httpx.AsyncClient, headers: dict):
    r = await client.get(f"{BASE_URL}{API_PREFIX}/admin/providers", headers=headers)
    print("Providers:", r.status_code, r.text[:200])


async def call_users(client: httpx.AsyncClient, headers: dict):
    r = await client.get(
        f"{BASE_URL}{API_PREFIX}/admin/users",
        params={"page": 1, "pageSize": 5},
        headers=headers
    )
    print("Users:", r.status_code, r.text[:200])


async def call_configs(client: httpx.AsyncClient, headers: dict):
    r = await client.get(f"{BASE_URL}{API_PREFIX}/admin/configs", headers=headers)
    print("Configs:", r.status_code, r.text[:200])


async def main():
    async with httpx.AsyncClient(timeout=10) as client:
        await call_health(client)
        token = await login(client)

        headers = {"Authorization": f"Bearer {token}"}
        if APP_KEY:
            headers["X-App-Key"] = APP_KEY

        await call_providers(client, headers)
        await call_users(client, headers)
        await call_configs(client, headers)


if __name__ == "__main__":
    asyncio.run(main())
