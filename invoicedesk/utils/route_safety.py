"""路由安全执行与结构化日志助手.

`safe_route_call` 包裹发票路由与表单视图的业务闭包:业务异常(AppError/HTTPException)
记录 warning 后原样抛出,其余异常记录 error 并转换为对外文案统一的 SystemError.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal, TypeVar

from werkzeug.exceptions import HTTPException

from invoicedesk.errors import AppError, SystemError
from invoicedesk.utils.structlog_config import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from invoicedesk.types import ContextMapping, LoggerExtra

R = TypeVar("R")
LogLevel = Literal["debug", "info", "warning", "error", "critical"]
EXPECTED_EXCEPTIONS: tuple[type[BaseException], ...] = (AppError, HTTPException)


def log_with_context(
    level: LogLevel,
    event: str,
    *,
    module: str,
    action: str,
    context: ContextMapping | None = None,
    extra: LoggerExtra | None = None,
) -> None:
    """记录带有 module/action 字段的结构化日志.

    Args:
        level: structlog 方法名,例如 "info"、"error".
        event: 日志事件描述.
        module: 所属模块,例如 "invoices".
        action: 当前操作,例如 "invoice_form_create".
        context: 业务上下文,例如 invoice_id.
        extra: 附加字段,例如字段错误或异常类型.

    """
    logger = get_logger("app")
    payload: dict[str, object] = {"module": module, "action": action}
    if context:
        payload.update(context)
    if extra:
        payload.update(extra)

    log_method = getattr(logger, level, logger.error)
    log_method(event, **payload)


def safe_route_call(
    func: Callable[[], R],
    *,
    module: str,
    action: str,
    public_error: str,
    context: ContextMapping | None = None,
) -> R:
    """执行视图闭包,集中处理日志与异常转换.

    Args:
        func: 无参业务闭包.
        module: 日志模块名称.
        action: 业务动作名称,例如 "delete_invoice".
        public_error: 非预期异常时返回给客户端的文案.
        context: 写入日志的业务上下文.

    Returns:
        闭包的返回值.

    Raises:
        AppError: 业务逻辑主动抛出,或非预期异常被包装为 SystemError.

    """
    event = f"{action}执行失败"
    try:
        return func()
    except EXPECTED_EXCEPTIONS as exc:
        log_with_context(
            "warning",
            event,
            module=module,
            action=action,
            context=context,
            extra={"error_type": exc.__class__.__name__, "error_message": str(exc)},
        )
        raise
    except Exception as exc:
        log_with_context(
            "error",
            event,
            module=module,
            action=action,
            context=context,
            extra={"error_type": exc.__class__.__name__, "unexpected": True},
        )
        raise SystemError(public_error) from exc
