"""
API v1 路由汇总
"""

from fastapi import APIRouter, Depends

from appbox_gateway.api.v1.endpoints import admin, auth
from appbox_gateway.auth.dependencies import require_admin
from appbox_gateway.schemas.common import ResponseModel

api_router = APIRouter()


@api_router.get("/health", response_model=ResponseModel, tags=["system"])
async def health():
    """健康检查"""
    return ResponseModel(msg="ok", data={"service": "app-box-server"})


# 登录/刷新公开，/admin/auth/me 在端点内校验管理员身份
api_router.include_router(auth.router, tags=["authentication"])

# 管理端 provider 代理，全部要求管理员角色
api_router.include_router(
    admin.router,
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)]
)
