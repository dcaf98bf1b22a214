"""
应用配置管理
"""

from typing import List, Optional
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings


DEFAULT_GATEWAY_HEADER = "X-Gateway-Key"


class Settings(BaseSettings):
    """应用配置"""

    # API配置
    API_V1_PREFIX: str = "/api/v1"
    DEBUG: bool = False
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8090

    # 日志配置
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None  # 日志目录，默认为项目根目录下的 logs
    ENABLE_FILE_LOGGING: bool = True
    ENABLE_CONSOLE_LOGGING: bool = True
    SLOW_REQUEST_THRESHOLD: float = 1.0  # 慢请求阈值（秒）

    # CORS配置（逗号分隔）
    ALLOWED_ORIGINS: str = "*"

    # JWT配置
    JWT_SECRET_KEY: str = "please-change-this-secret"  # 开发环境默认值，生产环境必须修改
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_HOURS: int = 2
    JWT_REFRESH_EXPIRATION_HOURS: int = 168
    JWT_ISSUER: str = "app-box-server"

    # 管理员账号（单管理员部署）
    ADMIN_USERNAME: str = "app_box_admin"
    ADMIN_EMAIL: str = "app_box_admin@local"
    ADMIN_PASSWORD: str = "pass_the_appbox_admin"

    # Provider配置
    DEFAULT_APP_PROVIDER: str = "stellar"
    STELLAR_ENABLED: bool = True
    STELLAR_PROVIDER_NAME: str = "stellar"
    STELLAR_API_BASE_URL: str = "http://127.0.0.1:8080/api/v1"
    STELLAR_GATEWAY_KEY: str = ""
    STELLAR_GATEWAY_HEADER: str = DEFAULT_GATEWAY_HEADER
    STELLAR_TIMEOUT: float = 10.0  # 上游请求超时（秒）

    # 分页配置
    PAGE_SIZE_DEFAULT: int = 10
    PAGE_SIZE_MIN: int = 1
    PAGE_SIZE_MAX: int = 100

    @field_validator(
        "DEFAULT_APP_PROVIDER",
        "STELLAR_PROVIDER_NAME",
        "STELLAR_GATEWAY_KEY",
        "STELLAR_GATEWAY_HEADER",
        mode="before",
    )
    @classmethod
    def strip_whitespace(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("STELLAR_API_BASE_URL", mode="before")
    @classmethod
    def normalize_base_url(cls, v):
        if isinstance(v, str):
            return v.strip().rstrip("/")
        return v

    @model_validator(mode="after")
    def check_provider_settings(self):
        """启用的 provider 必须配置完整"""
        if self.STELLAR_ENABLED:
            if not self.STELLAR_PROVIDER_NAME:
                raise ValueError("STELLAR_PROVIDER_NAME is required when stellar provider is enabled")
            if not self.STELLAR_API_BASE_URL:
                raise ValueError("STELLAR_API_BASE_URL is required when stellar provider is enabled")
            if not self.STELLAR_GATEWAY_KEY:
                raise ValueError("STELLAR_GATEWAY_KEY is required when stellar provider is enabled")
            if not self.STELLAR_GATEWAY_HEADER:
                self.STELLAR_GATEWAY_HEADER = DEFAULT_GATEWAY_HEADER

        if not self.DEFAULT_APP_PROVIDER:
            self.DEFAULT_APP_PROVIDER = self.STELLAR_PROVIDER_NAME

        if self.PAGE_SIZE_MIN > self.PAGE_SIZE_MAX:
            raise ValueError("PAGE_SIZE_MIN must not be greater than PAGE_SIZE_MAX")

        return self

    @property
    def allowed_origins(self) -> List[str]:
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "extra": "ignore",
    }


# 全局配置实例
settings = Settings()
