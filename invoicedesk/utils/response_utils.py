"""发票台 - 统一响应工具.

提供统一的成功/错误响应结构,避免在业务层散落 JSON 拼装逻辑.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, cast
from uuid import uuid4

from flask import Response, jsonify
from werkzeug.exceptions import HTTPException

from invoicedesk.constants import ErrorMessages, HttpStatus, SuccessMessages
from invoicedesk.errors import AppError, ValidationError, map_exception_to_status
from invoicedesk.utils.logging.context_vars import request_id_var
from invoicedesk.utils.structlog_config import get_logger
from invoicedesk.utils.time_utils import time_utils

if TYPE_CHECKING:
    from collections.abc import Mapping

    from invoicedesk.types import JsonDict, JsonValue


def unified_success_response(
    data: object | None = None,
    message: object | None = None,
    *,
    status: int = HttpStatus.OK,
    meta: Mapping[str, object] | None = None,
) -> tuple[JsonDict, int]:
    """生成统一的成功响应载荷.

    Args:
        data: 响应数据,可选.
        message: 成功消息,可选,默认为"操作成功".
        status: HTTP 状态码,默认为 200.
        meta: 元数据,可选.

    Returns:
        (响应载荷字典, HTTP 状态码).

    """
    payload: JsonDict = {
        "success": True,
        "error": False,
        "message": str(message) if message is not None else SuccessMessages.OPERATION_SUCCESS,
        "timestamp": time_utils.now().isoformat(),
    }
    if data is not None:
        payload["data"] = cast("JsonValue", data)
    if meta:
        payload["meta"] = cast("JsonDict", dict(meta))
    return payload, status


def unified_error_response(
    error: BaseException,
    *,
    status_code: int | None = None,
    extra: Mapping[str, JsonValue] | None = None,
) -> tuple[JsonDict, int]:
    """生成统一的错误响应载荷.

    非 AppError 的异常只暴露通用文案,底层异常信息仅写入日志.

    Args:
        error: 异常对象.
        status_code: HTTP 状态码,可选,默认根据异常类型自动映射.
        extra: 额外的错误信息,可选.

    Returns:
        (错误响应载荷字典, HTTP 状态码).

    """
    safe_error = error if isinstance(error, Exception) else Exception(str(error))
    final_status = status_code or map_exception_to_status(safe_error, default=HttpStatus.INTERNAL_SERVER_ERROR)
    error_id = uuid4().hex

    if isinstance(safe_error, AppError):
        message = safe_error.message
        message_key = safe_error.message_key
    elif isinstance(safe_error, HTTPException):
        message = safe_error.description or ErrorMessages.INVALID_REQUEST
        message_key = "INTERNAL_ERROR" if final_status >= HttpStatus.INTERNAL_SERVER_ERROR else "INVALID_REQUEST"
    else:
        message = ErrorMessages.INTERNAL_ERROR
        message_key = "INTERNAL_ERROR"

    payload: JsonDict = {
        "success": False,
        "error": True,
        "error_id": error_id,
        "message": message,
        "message_key": message_key,
        "request_id": request_id_var.get(),
        "timestamp": time_utils.now().isoformat(),
    }
    if isinstance(safe_error, ValidationError) and safe_error.field_errors:
        payload["errors"] = cast("JsonValue", safe_error.field_errors)
    if extra:
        payload["extra"] = dict(extra)

    logger = get_logger("app")
    log_method = logger.error if final_status >= HttpStatus.INTERNAL_SERVER_ERROR else logger.warning
    log_method(
        "请求处理失败",
        module="http",
        error_id=error_id,
        status_code=final_status,
        error_type=safe_error.__class__.__name__,
        error_message=str(safe_error),
    )
    return payload, final_status


def jsonify_unified_success(*args: object, **kwargs: object) -> tuple[Response, int]:
    """返回 Flask Response 对象的成功响应便捷函数."""
    payload, status = unified_success_response(*args, **kwargs)  # type: ignore[arg-type]
    return jsonify(payload), status


def jsonify_form_state(state: JsonDict, *, status_code: int) -> tuple[Response, int]:
    """返回表单状态(message/errors)的 JSON 响应.

    Args:
        state: 由失败结果生成的表单状态.
        status_code: HTTP 状态码.

    Returns:
        Flask Response 对象和 HTTP 状态码的元组.

    """
    payload: JsonDict = {"success": False, "error": True, **state}
    return jsonify(payload), status_code
