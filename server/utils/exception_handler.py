"""
统一异常处理

- 人生K线流水线的业务异常体系（排盘 / 配置 / 模型网关 / 解析 / 批次格式）
- API 端点的错误处理装饰器与兜底中间件
"""

import asyncio
import functools
import logging
import traceback
from typing import Callable, Any, Optional, Type, Tuple

from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from core.exceptions import BusinessError, ConversionError, InvalidDateError  # noqa: F401
from server.config.env_config import is_production

logger = logging.getLogger(__name__)


# ==================== 自定义业务异常 ====================
# BusinessError 基类与排盘异常定义在 core.exceptions

class ConfigurationError(BusinessError):
    """缺少 API Key / Base URL 等模型配置"""
    def __init__(self, message: str):
        super().__init__(message, code=400, error_type="configuration_error")


class GatewayError(BusinessError):
    """模型接口返回非成功状态，或网络传输失败"""
    def __init__(self, message: str, status_code: Optional[int] = None, body_excerpt: str = ""):
        self.status_code = status_code
        self.body_excerpt = body_excerpt
        super().__init__(message, code=502, error_type="gateway_error")


class EmptyResponseError(BusinessError):
    """模型接口成功返回但没有内容"""
    def __init__(self, message: str = "模型未返回内容"):
        super().__init__(message, code=502, error_type="empty_response")


class MalformedPayloadError(BusinessError):
    """模型输出经过修复后仍无法解析为 JSON"""
    def __init__(self, message: str):
        super().__init__(message, code=502, error_type="malformed_payload")


class BatchShapeError(BusinessError):
    """K线批次缺少 chartPoints 数组"""
    def __init__(self, start_age: int, end_age: int):
        self.start_age = start_age
        self.end_age = end_age
        super().__init__(f"批次 {start_age}-{end_age} 返回格式错误", code=502, error_type="batch_shape_error")


class ServiceUnavailableError(BusinessError):
    """服务不可用错误"""
    def __init__(self, message: str = "服务暂时不可用", service: str = None):
        self.service = service
        super().__init__(message, code=503, error_type="service_unavailable")


def business_error_response(e: BusinessError) -> JSONResponse:
    return JSONResponse(
        status_code=e.code,
        content={
            "success": False,
            "error": e.message,
            "error_type": e.error_type
        }
    )


class ExceptionHandlerMiddleware(BaseHTTPMiddleware):
    """异常处理中间件"""

    async def dispatch(self, request: Request, call_next: Callable) -> Any:
        try:
            return await call_next(request)
        except HTTPException:
            raise
        except BusinessError as e:
            logger.warning(f"业务异常: {e.message}")
            return business_error_response(e)
        except Exception as e:
            error_trace = traceback.format_exc()
            logger.error(f"未处理的异常: {str(e)}\n{error_trace}")

            # 生产环境不暴露详细错误信息
            if is_production():
                error_detail = "服务器内部错误，请稍后重试"
            else:
                error_detail = f"错误: {str(e)}"

            return JSONResponse(
                status_code=500,
                content={
                    "success": False,
                    "error": error_detail,
                    "error_type": "internal_error"
                }
            )


# ==================== API 错误处理装饰器 ====================

def api_error_handler(
    func: Callable = None,
    *,
    catch: Tuple[Type[Exception], ...] = (Exception,),
    default_error: str = "服务器内部错误",
    log_errors: bool = True
):
    """
    API 错误处理装饰器

    使用示例：
    ```python
    @router.post("/api/endpoint")
    @api_error_handler
    async def my_endpoint():
        ...
    ```
    """
    def decorator(fn):
        @functools.wraps(fn)
        async def async_wrapper(*args, **kwargs):
            try:
                return await fn(*args, **kwargs)
            except BusinessError as e:
                if log_errors:
                    logger.warning(f"业务异常 [{fn.__name__}]: {e.message}")
                return business_error_response(e)
            except HTTPException:
                raise
            except catch as e:
                if log_errors:
                    logger.error(f"API 错误 [{fn.__name__}]: {e}", exc_info=True)

                error_msg = default_error if is_production() else str(e)
                return JSONResponse(
                    status_code=500,
                    content={
                        "success": False,
                        "error": error_msg,
                        "error_type": "internal_error"
                    }
                )

        @functools.wraps(fn)
        def sync_wrapper(*args, **kwargs):
            try:
                return fn(*args, **kwargs)
            except BusinessError as e:
                if log_errors:
                    logger.warning(f"业务异常 [{fn.__name__}]: {e.message}")
                return business_error_response(e)
            except HTTPException:
                raise
            except catch as e:
                if log_errors:
                    logger.error(f"API 错误 [{fn.__name__}]: {e}", exc_info=True)

                error_msg = default_error if is_production() else str(e)
                return JSONResponse(
                    status_code=500,
                    content={
                        "success": False,
                        "error": error_msg,
                        "error_type": "internal_error"
                    }
                )

        if asyncio.iscoroutinefunction(fn):
            return async_wrapper
        return sync_wrapper

    # 支持 @api_error_handler 和 @api_error_handler(...) 两种用法
    if func is not None:
        return decorator(func)
    return decorator
