"""
网关错误类型

每一种错误在 main.py 中都有独立的异常处理器，按类型渲染为统一响应信封。
"""


BAD_GATEWAY = 502


class GatewayError(Exception):
    """网关错误基类，未单独处理的子类按内部错误渲染"""

    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ProviderNotFoundError(GatewayError):
    """按名称找不到 provider"""

    status_code = 400

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"provider not found: {key}")


class InvalidCredentialsError(GatewayError):
    """管理员密码错误"""

    status_code = 401

    def __init__(self, message: str = "invalid password"):
        super().__init__(message)


class TokenIssueError(GatewayError):
    """令牌签发失败（配置正确时不应出现）"""


class UpstreamError(GatewayError):
    """上游服务明确拒绝或失败，保留其状态码与消息"""

    def __init__(self, status_code: int, message: str = ""):
        self.status_code = status_code
        super().__init__(message)

    def __str__(self) -> str:
        if not self.message:
            return f"upstream status={self.status_code}"
        return self.message

    @property
    def response_status(self) -> int:
        """返回给调用方的状态码，限定在 400-599 之间"""
        if 400 <= self.status_code <= 599:
            return self.status_code
        return BAD_GATEWAY


class UpstreamTransportError(GatewayError):
    """网络层失败：连接错误、超时"""


class UpstreamProtocolError(GatewayError):
    """上游返回的内容不符合约定的信封格式"""
