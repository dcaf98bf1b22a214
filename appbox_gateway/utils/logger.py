"""
日志工具类
提供便捷的日志记录方法
"""

from typing import Optional

from appbox_gateway.logging_config import get_logger


def log_request(
    method: str,
    path: str,
    status_code: int,
    duration_ms: float,
    user_id: Optional[int] = None,
    ip: Optional[str] = None,
    request_id: Optional[str] = None,
    **kwargs
):
    """
    记录HTTP请求日志

    Args:
        method: HTTP方法
        path: 请求路径
        status_code: 响应状态码
        duration_ms: 请求耗时（毫秒）
        user_id: 用户ID
        ip: 客户端IP
        request_id: 请求ID
        **kwargs: 其他字段
    """
    logger = get_logger('appbox_gateway.api.request')

    extra = {
        'method': method,
        'path': path,
        'status_code': status_code,
        'duration_ms': duration_ms,
        **kwargs
    }

    if user_id:
        extra['user_id'] = user_id
    if ip:
        extra['ip'] = ip
    if request_id:
        extra['request_id'] = request_id

    if status_code >= 500:
        logger.error(f"{method} {path} - {status_code} - {duration_ms:.2f}ms", extra=extra)
    elif status_code >= 400:
        logger.warning(f"{method} {path} - {status_code} - {duration_ms:.2f}ms", extra=extra)
    else:
        logger.info(f"{method} {path} - {status_code} - {duration_ms:.2f}ms", extra=extra)


def log_slow_request(
    method: str,
    path: str,
    duration_ms: float,
    threshold: float = 1000.0,
    **kwargs
):
    """
    记录慢请求日志

    Args:
        method: HTTP方法
        path: 请求路径
        duration_ms: 请求耗时（毫秒）
        threshold: 慢请求阈值（毫秒）
        **kwargs: 其他字段
    """
    if duration_ms > threshold:
        logger = get_logger('appbox_gateway.api.slow_request')
        logger.warning(
            f"Slow request: {method} {path} took {duration_ms:.2f}ms (threshold: {threshold}ms)",
            extra={'method': method, 'path': path, 'duration_ms': duration_ms, **kwargs}
        )


def log_upstream_call(
    provider: str,
    method: str,
    path: str,
    status_code: Optional[int],
    duration_ms: float,
    success: bool = True,
    error: Optional[str] = None,
    **kwargs
):
    """
    记录上游调用日志

    Args:
        provider: provider 名称
        method: HTTP方法
        path: 上游路径
        status_code: 上游状态码，传输失败时为 None
        duration_ms: 调用耗时（毫秒）
        success: 是否成功
        error: 错误信息
        **kwargs: 其他字段
    """
    logger = get_logger('appbox_gateway.providers.upstream')

    extra = {
        'provider': provider,
        'method': method,
        'path': path,
        'duration_ms': duration_ms,
        'success': success,
        **kwargs
    }

    if status_code is not None:
        extra['status_code'] = status_code

    if success:
        logger.debug(f"Upstream {provider} {method} {path} - {status_code} - {duration_ms:.2f}ms", extra=extra)
    elif status_code is None:
        logger.error(f"Upstream {provider} {method} {path} failed: {error}", extra=extra)
    else:
        logger.warning(f"Upstream {provider} {method} {path} - {status_code} - {duration_ms:.2f}ms", extra=extra)


def log_auth_event(
    event_type: str,
    user_id: Optional[int] = None,
    username: Optional[str] = None,
    success: bool = True,
    ip: Optional[str] = None,
    reason: Optional[str] = None,
    **kwargs
):
    """
    记录认证事件日志（审计日志）

    Args:
        event_type: 事件类型（login, token_refresh等）
        user_id: 用户ID
        username: 用户名
        success: 是否成功
        ip: 客户端IP
        reason: 失败原因
        **kwargs: 其他字段
    """
    logger = get_logger('appbox_gateway.auth.audit')

    extra = {
        'event_type': event_type,
        'success': success,
        **kwargs
    }

    if user_id:
        extra['user_id'] = user_id
    if username:
        extra['username'] = username
    if ip:
        extra['ip'] = ip
    if reason:
        extra['reason'] = reason

    status = "SUCCESS" if success else "FAILED"
    message = f"Auth {event_type} - {status}"
    if reason:
        message += f" - {reason}"

    if success:
        logger.info(message, extra=extra)
    else:
        logger.warning(message, extra=extra)
