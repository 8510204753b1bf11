"""发票台 - 健康检查路由."""

import time

from flask import Blueprint, current_app
from flask.typing import ResponseReturnValue
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from invoicedesk import db
from invoicedesk.constants import HttpStatus
from invoicedesk.services.cache_service import get_view_cache_service
from invoicedesk.utils.response_utils import jsonify_unified_success
from invoicedesk.utils.route_safety import safe_route_call
from invoicedesk.utils.structlog_config import log_info, log_warning

# 创建蓝图
health_bp = Blueprint("health", __name__)

DATABASE_HEALTH_EXCEPTIONS: tuple[type[BaseException], ...] = (SQLAlchemyError,)


@health_bp.route("/api/basic")
def health_check() -> ResponseReturnValue:
    """基础健康检查.

    Returns:
        JSON 响应,包含服务状态和版本信息.

    """
    return safe_route_call(
        lambda: jsonify_unified_success(
            data={"status": "healthy", "timestamp": time.time(), "version": current_app.config["APP_VERSION"]},
            message="服务运行正常",
        ),
        module="health",
        action="health_check",
        public_error="健康检查失败",
    )


@health_bp.route("/api/health")
def get_health() -> ResponseReturnValue:
    """组件健康检查(供外部监控使用).

    快速检查数据库与缓存状态,任一异常时返回 503.

    Returns:
        JSON 响应,包含各组件的连接状态.

    """
    db_status = "connected"
    try:
        db.session.execute(text("SELECT 1"))
    except DATABASE_HEALTH_EXCEPTIONS as exc:
        db.session.rollback()
        log_warning("数据库健康检查失败", module="health", exception=exc)
        db_status = "error"

    cache_status = "connected" if get_view_cache_service().health_check() else "error"

    overall_status = "healthy" if db_status == "connected" and cache_status == "connected" else "unhealthy"
    log_info("健康检查API调用", module="health", status=overall_status)
    return jsonify_unified_success(
        data={"status": overall_status, "database": db_status, "cache": cache_status},
        status=HttpStatus.OK if overall_status == "healthy" else HttpStatus.SERVICE_UNAVAILABLE,
    )
