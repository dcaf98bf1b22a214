"""
AppBox Admin Gateway - 主应用入口
"""

import uuid
import time
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from appbox_gateway.config import settings
from appbox_gateway.api.v1.api import api_router
from appbox_gateway.auth.auth_service import AdminAuthService
from appbox_gateway.errors import (
    GatewayError,
    InvalidCredentialsError,
    ProviderNotFoundError,
    UpstreamError,
)
from appbox_gateway.logging_config import setup_logging, get_logger, mask_sensitive_data
from appbox_gateway.providers.registry import build_registry
from appbox_gateway.schemas.common import error_body
from appbox_gateway.utils.logger import log_request, log_slow_request

# 初始化日志系统
setup_logging(
    log_dir=settings.LOG_DIR,
    log_level=settings.LOG_LEVEL,
    enable_file_logging=settings.ENABLE_FILE_LOGGING,
    enable_console_logging=settings.ENABLE_CONSOLE_LOGGING
)

logger = get_logger(__name__)


def create_application() -> FastAPI:
    """创建FastAPI应用"""

    app = FastAPI(
        title="AppBox Admin Gateway",
        description="管理端网关：管理员认证并代理到上游 provider",
        version="1.0.0",
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    # 应用级服务
    app.state.registry = build_registry(settings)
    app.state.auth_service = AdminAuthService.from_settings(settings)

    # 添加中间件
    setup_middleware(app)

    # 添加路由
    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    # 添加事件处理器
    setup_event_handlers(app)

    # 添加异常处理器
    setup_exception_handlers(app)

    return app


def setup_middleware(app: FastAPI) -> None:
    """设置中间件"""

    # CORS中间件
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 请求日志中间件
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """记录所有HTTP请求"""
        start_time = time.time()
        request_id = getattr(request.state, "request_id", None)

        # 获取客户端IP
        client_ip = request.client.host if request.client else None
        if "x-forwarded-for" in request.headers:
            client_ip = request.headers["x-forwarded-for"].split(",")[0].strip()

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = (time.time() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.url.path} - {str(e)}",
                exc_info=True,
                extra={
                    'method': request.method,
                    'path': str(request.url.path),
                    'duration_ms': process_time,
                    'ip': client_ip,
                    'request_id': request_id
                }
            )
            raise

        process_time = (time.time() - start_time) * 1000  # 转换为毫秒
        response.headers["X-Process-Time"] = f"{process_time:.2f}"

        # 管理员身份由认证依赖写入
        user_id = getattr(request.state, "user_id", None)

        log_request(
            method=request.method,
            path=str(request.url.path),
            status_code=response.status_code,
            duration_ms=process_time,
            user_id=user_id,
            ip=client_ip,
            request_id=request_id,
            query_params=str(request.query_params) if request.query_params else None
        )

        log_slow_request(
            method=request.method,
            path=str(request.url.path),
            duration_ms=process_time,
            threshold=settings.SLOW_REQUEST_THRESHOLD * 1000,
            user_id=user_id,
            request_id=request_id
        )

        return response

    # 请求ID中间件（最后注册，最先执行）
    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        """为每个请求添加唯一ID"""
        request_id = str(uuid.uuid4())[:8]
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


def setup_event_handlers(app: FastAPI) -> None:
    """设置事件处理器"""

    @app.on_event("startup")
    async def startup_event():
        """应用启动事件"""
        logger.info("Starting AppBox Admin Gateway...")
        logger.info(
            "Provider config: %s",
            mask_sensitive_data({
                'default': settings.DEFAULT_APP_PROVIDER,
                'stellar_enabled': settings.STELLAR_ENABLED,
                'stellar_base_url': settings.STELLAR_API_BASE_URL,
                'gateway_key': settings.STELLAR_GATEWAY_KEY,
            })
        )
        logger.info(
            f"Registered providers: {app.state.registry.list()} "
            f"(default: {app.state.registry.default_key})"
        )
        logger.info("AppBox Admin Gateway started successfully!")

    @app.on_event("shutdown")
    async def shutdown_event():
        """应用关闭事件"""
        logger.info("Shutting down AppBox Admin Gateway...")

        # 关闭上游连接
        await app.state.registry.aclose()
        logger.info("Provider clients closed")

        logger.info("AppBox Admin Gateway shutdown complete")


def setup_exception_handlers(app: FastAPI) -> None:
    """设置异常处理器"""

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """请求参数校验失败"""
        logger.info(f"Invalid request {request.method} {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=400, content=error_body(400, "Invalid request parameters"))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """HTTP异常（认证、授权、参数错误等）"""
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.status_code, str(exc.detail)),
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(ProviderNotFoundError)
    async def provider_not_found_handler(request: Request, exc: ProviderNotFoundError):
        """未知的 provider"""
        logger.warning(f"Provider not found: {exc.key}")
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.status_code, exc.message))

    @app.exception_handler(InvalidCredentialsError)
    async def invalid_credentials_handler(request: Request, exc: InvalidCredentialsError):
        """管理员凭据错误"""
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.status_code, exc.message))

    @app.exception_handler(UpstreamError)
    async def upstream_error_handler(request: Request, exc: UpstreamError):
        """上游拒绝或失败，保留其状态码与消息"""
        status_code = exc.response_status
        logger.warning(
            f"Upstream error on {request.method} {request.url.path}: "
            f"status={exc.status_code} message={exc.message}"
        )
        return JSONResponse(status_code=status_code, content=error_body(status_code, str(exc)))

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError):
        """传输、协议等内部错误，不向调用方暴露细节"""
        request_id = getattr(request.state, "request_id", None)
        logger.error(
            f"Gateway error: {type(exc).__name__}: {exc.message}",
            exc_info=exc,
            extra={
                'method': request.method,
                'path': str(request.url.path),
                'request_id': request_id
            }
        )
        return JSONResponse(status_code=500, content=error_body(500, "Internal server error"))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """全局异常处理器"""
        request_id = getattr(request.state, "request_id", None)
        client_ip = request.client.host if request.client else None

        logger.error(
            f"Unhandled exception: {type(exc).__name__}: {str(exc)}",
            exc_info=exc,
            extra={
                'method': request.method,
                'path': str(request.url.path),
                'ip': client_ip,
                'request_id': request_id
            }
        )

        return JSONResponse(status_code=500, content=error_body(500, "Internal server error"))


# 创建应用实例
app = create_application()


# 健康检查端点
@app.get("/health")
async def health_check():
    """健康检查"""
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "version": "1.0.0"
    }


@app.get("/")
async def root():
    """根路径"""
    return {
        "message": "Welcome to AppBox Admin Gateway",
        "docs": "/docs",
        "version": "1.0.0"
    }
