"""发票台 - 主要路由."""

from http import HTTPStatus

from flask import Blueprint, redirect, url_for
from flask.typing import ResponseReturnValue

# 创建蓝图
main_bp = Blueprint("main", __name__)


@main_bp.route("/")
def index() -> ResponseReturnValue:
    """首页 - 重定向到发票列表.

    Returns:
        重定向响应到发票列表.

    """
    return redirect(url_for("invoices.index"))


@main_bp.route("/favicon.ico")
def favicon() -> ResponseReturnValue:
    """提供 favicon.ico 占位,避免 404.

    Returns:
        Response: 空响应,状态码 204.

    """
    return "", HTTPStatus.NO_CONTENT
