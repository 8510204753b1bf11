"""发票台的结构化日志配置与辅助函数."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, cast

import structlog
from flask import Flask, current_app, g, has_request_context

from invoicedesk.settings import APP_VERSION
from invoicedesk.utils.logging.context_vars import request_id_var

if TYPE_CHECKING:
    from structlog.typing import BindableLogger, Processor

    from invoicedesk.types import StructlogEventDict


class StructlogConfig:
    """structlog 配置核心类.

    负责配置 structlog 的处理器链,向每条日志注入请求与应用上下文.

    Attributes:
        configured: 是否已配置标志.

    Example:
        >>> config = StructlogConfig()
        >>> config.configure()
        >>> logger = get_logger('my_module')

    """

    def __init__(self) -> None:
        self.configured = False

    def configure(self) -> None:
        """初始化 structlog 处理器(幂等)."""
        if self.configured:
            return

        processors = [
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            self._add_request_context,
            self._add_global_context,
            self._get_console_renderer(),
        ]
        structlog.configure(
            processors=cast("list[structlog.types.Processor]", processors),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        self.configured = True

    @staticmethod
    def _add_request_context(
        _logger: BindableLogger,
        _method_name: str,
        event_dict: StructlogEventDict,
    ) -> StructlogEventDict:
        """向事件字典写入 request_id."""
        if has_request_context():
            event_dict["request_id"] = request_id_var.get()
        return event_dict

    @staticmethod
    def _add_global_context(
        _logger: BindableLogger,
        _method_name: str,
        event_dict: StructlogEventDict,
    ) -> StructlogEventDict:
        """附加环境、版本等全局上下文."""
        try:
            event_dict["app_name"] = current_app.config["APP_NAME"]
            event_dict["app_version"] = current_app.config["APP_VERSION"]
        except (RuntimeError, KeyError):
            event_dict["app_name"] = "发票台"
            event_dict["app_version"] = APP_VERSION

        if has_request_context():
            event_dict["environment"] = current_app.config.get("ENV", "development")
            event_dict["host"] = getattr(g, "host", "localhost")

        event_dict["logger_name"] = getattr(_logger, "name", "unknown")
        return event_dict

    @staticmethod
    def _get_console_renderer() -> Processor:
        """根据终端能力返回渲染器."""
        if sys.stdout.isatty():
            return structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=True, max_frames=10),
            )
        return structlog.dev.ConsoleRenderer(colors=False)


structlog_config = StructlogConfig()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """获取结构化日志记录器.

    Args:
        name: 日志记录器名称,通常使用模块名.

    Returns:
        绑定的 structlog 日志记录器实例.

    Example:
        >>> logger = get_logger('invoices')
        >>> logger.info('发票创建成功', invoice_id='...')

    """
    structlog_config.configure()
    return structlog.get_logger(name)


def configure_structlog(app: Flask) -> None:
    """配置 structlog 并注册 Flask 钩子.

    Args:
        app: Flask 应用实例.

    """
    structlog_config.configure()

    @app.teardown_appcontext
    def log_teardown_error(exception: BaseException | None) -> None:
        if exception:
            get_logger("app").error("应用请求处理异常", module="system", exception=str(exception))


def log_info(message: str, module: str = "app", **kwargs: object) -> None:
    """记录信息级别日志.

    Example:
        >>> log_info('发票删除成功', module='invoices', invoice_id='...')

    """
    get_logger("app").info(message, module=module, **kwargs)


def log_warning(
    message: str,
    module: str = "app",
    exception: BaseException | None = None,
    **kwargs: object,
) -> None:
    """记录警告级别日志."""
    logger = get_logger("app")
    if exception:
        logger.warning(message, module=module, exception=str(exception), **kwargs)
    else:
        logger.warning(message, module=module, **kwargs)


def log_error(
    message: str,
    module: str = "app",
    exception: BaseException | None = None,
    **kwargs: object,
) -> None:
    """记录错误级别日志.

    传入 exception 时会附带堆栈信息.

    Example:
        >>> try:
        ...     risky_operation()
        ... except SQLAlchemyError as e:
        ...     log_error('操作失败', module='invoices', exception=e)

    """
    logger = get_logger("app")
    if exception:
        logger.error(message, module=module, error=str(exception), exc_info=exception, **kwargs)
    else:
        logger.error(message, module=module, **kwargs)


def get_system_logger() -> structlog.stdlib.BoundLogger:
    """返回系统级 logger."""
    return get_logger("system")
