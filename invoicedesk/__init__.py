"""发票台 - Flask 应用初始化.

基于 Flask 的发票管理后台,提供发票的创建、编辑、删除与列表查询.
"""

import logging
from importlib import import_module
from logging.handlers import RotatingFileHandler
from pathlib import Path

from flask import Blueprint, Flask, jsonify
from flask.typing import ResponseReturnValue
from flask_caching import Cache
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from flask_wtf.csrf import CSRFProtect

from invoicedesk.services.cache_service import init_view_cache_service
from invoicedesk.settings import Settings
from invoicedesk.utils.logging.request_middleware import register_request_logging
from invoicedesk.utils.response_utils import unified_error_response
from invoicedesk.utils.structlog_config import configure_structlog

# 初始化扩展
db = SQLAlchemy()
migrate = Migrate()
cache = Cache()
csrf = CSRFProtect()


def create_app(*, settings: Settings | None = None) -> Flask:
    """创建Flask应用实例.

    Args:
        settings: 可选的配置对象,用于测试或多环境启动.

    Returns:
        Flask: Flask应用实例

    """
    resolved_settings = settings or Settings.load()
    app = Flask(__name__)

    # 配置应用
    configure_app(app, resolved_settings)

    # 初始化扩展
    initialize_extensions(app, resolved_settings)

    # 注册蓝图
    configure_blueprints(app)

    # 配置日志
    configure_logging(app)

    # 配置统一日志系统
    configure_structlog(app)
    register_request_logging(app)

    # 设置全局日志级别
    log_level_name = str(app.config.get("LOG_LEVEL", "INFO"))
    logging.getLogger().setLevel(getattr(logging, log_level_name, logging.INFO))

    # 注册全局错误处理器
    @app.errorhandler(Exception)
    def handle_global_exception(error: Exception) -> ResponseReturnValue:
        """全局错误处理."""
        payload, status_code = unified_error_response(error)
        return jsonify(payload), status_code

    return app


def configure_app(app: Flask, settings: Settings) -> None:
    """写入 Settings 提供的配置.

    Args:
        app: Flask 应用实例.
        settings: 统一配置对象,包含环境变量解析、默认值与校验结果.

    """
    app.config.from_mapping(settings.to_flask_config())
    app.config.setdefault("APPLICATION_ROOT", "/")
    app.config["SESSION_COOKIE_HTTPONLY"] = True
    app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
    app.config["SESSION_COOKIE_NAME"] = "invoicedesk_session"


def initialize_extensions(app: Flask, settings: Settings) -> None:
    """初始化数据库、缓存、CSRF 等 Flask 扩展.

    Args:
        app: Flask 应用实例.
        settings: 统一配置对象,用于扩展初始化参数注入.

    """
    # 初始化数据库
    db.init_app(app)
    migrate.init_app(app, db)

    # 初始化缓存与视图缓存服务
    cache.init_app(app)
    init_view_cache_service(cache, default_ttl=settings.invoice_list_cache_ttl_seconds)

    # 初始化CSRF保护
    csrf.init_app(app)


def configure_blueprints(app: Flask) -> None:
    """注册所有蓝图以暴露路由.

    Args:
        app: Flask 应用实例.

    """
    blueprint_specs: list[tuple[str, str, str | None]] = [
        ("invoicedesk.routes.main", "main_bp", None),
        ("invoicedesk.routes.health", "health_bp", "/health"),
        ("invoicedesk.routes.invoices", "invoices_bp", "/dashboard/invoices"),
    ]

    blueprints: list[tuple[Blueprint, str | None]] = []
    for module_path, attr_name, prefix in blueprint_specs:
        module = import_module(module_path)
        blueprint = getattr(module, attr_name)
        blueprints.append((blueprint, prefix))

    for blueprint, prefix in blueprints:
        if prefix:
            app.register_blueprint(blueprint, url_prefix=prefix)
        else:
            app.register_blueprint(blueprint)


def configure_logging(app: Flask) -> None:
    """配置日志系统与文件处理器.

    Args:
        app: Flask 应用实例.

    """
    if not app.debug and not app.testing:
        # 创建日志目录
        log_path = Path(app.config["LOG_FILE"])
        log_path.parent.mkdir(parents=True, exist_ok=True)

        # 配置文件日志处理器
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=app.config["LOG_MAX_SIZE"],
            backupCount=app.config["LOG_BACKUP_COUNT"],
        )
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]"),
        )
        file_handler.setLevel(getattr(logging, app.config["LOG_LEVEL"]))
        app.logger.addHandler(file_handler)

        app.logger.setLevel(getattr(logging, app.config["LOG_LEVEL"]))
        app.logger.info("发票台应用启动")


from invoicedesk.models import customer, invoice  # noqa: F401, E402
