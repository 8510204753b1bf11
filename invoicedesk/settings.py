"""发票台 - 统一配置读取与校验.

目标:
- 将环境变量读取、默认值、校验集中到单一入口,避免散落在各模块中重复解析.
- `create_app(settings=...)` 只消费 Settings,不再直接读取环境变量.

说明:
- Settings 使用 `pydantic-settings` 的 `BaseSettings` 从环境变量与本地 `.env`(可选)读取配置.
- 生产环境默认更严格: 缺失关键密钥/连接串会直接抛出 ValueError.
"""

from __future__ import annotations

import logging
import secrets
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from invoicedesk.constants.invoices import INVOICE_LIST_PAGE_SIZE

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DOTENV_PATH = PROJECT_ROOT / ".env"

DEFAULT_ENVIRONMENT = "development"
APP_VERSION = "0.3.0"

DEFAULT_DB_CONNECTION_TIMEOUT_SECONDS = 30
DEFAULT_DB_MAX_CONNECTIONS = 10
DEFAULT_SQLALCHEMY_POOL_RECYCLE_SECONDS = 300
DEFAULT_SQLALCHEMY_MAX_OVERFLOW = 10

DEFAULT_CACHE_TYPE = "simple"
DEFAULT_CACHE_DEFAULT_TIMEOUT_SECONDS = 300
DEFAULT_INVOICE_LIST_CACHE_TTL_SECONDS = 3600
DEFAULT_CACHE_REDIS_URL = "redis://localhost:6379/0"

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FILE = "userdata/logs/app.log"
DEFAULT_LOG_MAX_SIZE_BYTES = 10 * 1024 * 1024
DEFAULT_LOG_BACKUP_COUNT = 5

_TESTING_ENVIRONMENTS = frozenset({"testing", "test"})
_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def _resolve_sqlite_fallback_url() -> str:
    db_path = _resolve_sqlite_fallback_path()
    return f"sqlite:///{db_path.absolute()}"


def _resolve_sqlite_fallback_path() -> Path:
    return PROJECT_ROOT / "userdata" / "invoicedesk_dev.db"


class Settings(BaseSettings):
    """应用运行时设置集合."""

    model_config = SettingsConfigDict(
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
        str_strip_whitespace=True,
    )

    environment: str = Field(default=DEFAULT_ENVIRONMENT, validation_alias="FLASK_ENV")
    debug: bool = Field(default=False, validation_alias="FLASK_DEBUG")

    app_name: str = Field(default="发票台", validation_alias="APP_NAME")
    app_version: str = APP_VERSION

    secret_key: str = Field(default="", validation_alias="SECRET_KEY")

    database_url: str = Field(default="", validation_alias="DATABASE_URL")
    db_connection_timeout_seconds: int = Field(
        default=DEFAULT_DB_CONNECTION_TIMEOUT_SECONDS,
        validation_alias="DB_CONNECTION_TIMEOUT",
    )
    db_max_connections: int = Field(default=DEFAULT_DB_MAX_CONNECTIONS, validation_alias="DB_MAX_CONNECTIONS")

    cache_type: str = Field(default=DEFAULT_CACHE_TYPE, validation_alias="CACHE_TYPE")
    cache_redis_url: str | None = Field(default=None, validation_alias="CACHE_REDIS_URL")
    cache_default_timeout_seconds: int = Field(
        default=DEFAULT_CACHE_DEFAULT_TIMEOUT_SECONDS,
        validation_alias="CACHE_DEFAULT_TIMEOUT",
    )
    invoice_list_cache_ttl_seconds: int = Field(
        default=DEFAULT_INVOICE_LIST_CACHE_TTL_SECONDS,
        validation_alias="INVOICE_LIST_CACHE_TTL",
    )
    invoice_list_page_size: int = Field(default=INVOICE_LIST_PAGE_SIZE, validation_alias="INVOICE_LIST_PAGE_SIZE")

    log_level: str = Field(default=DEFAULT_LOG_LEVEL, validation_alias="LOG_LEVEL")
    log_file: str = Field(default=DEFAULT_LOG_FILE, validation_alias="LOG_FILE")
    log_max_size_bytes: int = Field(default=DEFAULT_LOG_MAX_SIZE_BYTES, validation_alias="LOG_MAX_SIZE")
    log_backup_count: int = Field(default=DEFAULT_LOG_BACKUP_COUNT, validation_alias="LOG_BACKUP_COUNT")

    csrf_enabled: bool = Field(default=True, validation_alias="WTF_CSRF_ENABLED")

    @field_validator("cache_type")
    @classmethod
    def _normalize_cache_type(cls, value: str) -> str:
        return value.lower()

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("cache_redis_url", mode="before")
    @classmethod
    def _strip_blank_to_none(cls, value: object) -> object:
        if value is None:
            return None
        if isinstance(value, str):
            return value.strip() or None
        return value

    @property
    def is_production(self) -> bool:
        """当前是否为生产环境."""
        return self.environment.strip().lower() == "production"

    @property
    def is_testing(self) -> bool:
        """当前是否为测试环境."""
        return self.environment.strip().lower() in _TESTING_ENVIRONMENTS

    @property
    def sqlalchemy_engine_options(self) -> dict[str, object]:
        """生成 SQLAlchemy Engine 配置选项."""
        if self.database_url.startswith("sqlite"):
            return {"pool_pre_ping": True, "connect_args": {"check_same_thread": False}}
        return {
            "pool_pre_ping": True,
            "pool_recycle": DEFAULT_SQLALCHEMY_POOL_RECYCLE_SECONDS,
            "pool_timeout": self.db_connection_timeout_seconds,
            "max_overflow": DEFAULT_SQLALCHEMY_MAX_OVERFLOW,
            "pool_size": self.db_max_connections,
            "echo": bool(self.debug),
        }

    def to_flask_config(self) -> dict[str, object]:
        """转换为 Flask app.config 可写入的配置字典."""
        payload: dict[str, object] = {
            "ENV": self.environment,
            "DEBUG": self.debug,
            "TESTING": self.is_testing,
            "APP_NAME": self.app_name,
            "APP_VERSION": self.app_version,
            "SECRET_KEY": self.secret_key,
            "SQLALCHEMY_DATABASE_URI": self.database_url,
            "SQLALCHEMY_TRACK_MODIFICATIONS": False,
            "SQLALCHEMY_ENGINE_OPTIONS": dict(self.sqlalchemy_engine_options),
            "CACHE_TYPE": self.cache_type,
            "CACHE_DEFAULT_TIMEOUT": self.cache_default_timeout_seconds,
            "INVOICE_LIST_CACHE_TTL": self.invoice_list_cache_ttl_seconds,
            "INVOICE_LIST_PAGE_SIZE": self.invoice_list_page_size,
            "LOG_LEVEL": self.log_level,
            "LOG_FILE": self.log_file,
            "LOG_MAX_SIZE": self.log_max_size_bytes,
            "LOG_BACKUP_COUNT": self.log_backup_count,
            "WTF_CSRF_ENABLED": self.csrf_enabled,
        }
        if self.cache_type == "redis" and self.cache_redis_url:
            payload["CACHE_REDIS_URL"] = self.cache_redis_url
        return payload

    @classmethod
    def load(cls) -> Settings:
        """从环境变量加载 Settings 并执行必要校验."""
        load_dotenv(dotenv_path=DOTENV_PATH if DOTENV_PATH.exists() else None, override=False)
        return cls()

    @model_validator(mode="after")
    def _apply_defaults_and_validate(self) -> Settings:
        environment_normalized = self.environment.strip().lower()

        debug = self._resolve_debug(environment_normalized)
        self._ensure_secret_key(debug)
        self._ensure_database_url(environment_normalized)
        self._normalize_cache_redis_url(environment_normalized)
        self._apply_csrf_default(environment_normalized)

        self._validate()
        return self

    def _resolve_debug(self, environment_normalized: str) -> bool:
        if "debug" in self.model_fields_set:
            return bool(self.debug)
        debug = environment_normalized != "production"
        object.__setattr__(self, "debug", debug)
        return debug

    def _ensure_secret_key(self, debug: bool) -> None:
        if self.secret_key:
            return
        if not debug:
            raise ValueError("SECRET_KEY environment variable must be set in production")
        object.__setattr__(self, "secret_key", secrets.token_urlsafe(32))
        logger.warning("⚠️  开发环境使用随机生成的SECRET_KEY,生产环境请设置环境变量")

    def _ensure_database_url(self, environment_normalized: str) -> None:
        if self.database_url:
            return
        if environment_normalized == "production":
            raise ValueError("DATABASE_URL environment variable must be set in production")

        if environment_normalized in _TESTING_ENVIRONMENTS:
            object.__setattr__(self, "database_url", "sqlite:///:memory:")
            return

        object.__setattr__(self, "database_url", _resolve_sqlite_fallback_url())
        logger.warning(
            "⚠️  未设置 DATABASE_URL, 非 production 环境将回退 SQLite (sqlite_db_file=%s)",
            _resolve_sqlite_fallback_path().name,
        )

    def _normalize_cache_redis_url(self, environment_normalized: str) -> None:
        if self.cache_type != "redis":
            if self.cache_redis_url is not None:
                object.__setattr__(self, "cache_redis_url", None)
            return

        if self.cache_redis_url:
            return
        if environment_normalized == "production":
            raise ValueError("CACHE_REDIS_URL must be set when CACHE_TYPE=redis in production")
        object.__setattr__(self, "cache_redis_url", DEFAULT_CACHE_REDIS_URL)

    def _apply_csrf_default(self, environment_normalized: str) -> None:
        if "csrf_enabled" in self.model_fields_set:
            return
        if environment_normalized in _TESTING_ENVIRONMENTS:
            object.__setattr__(self, "csrf_enabled", False)

    def _validate(self) -> None:
        """执行跨字段校验,统一抛出可读的 ValueError."""
        checks: list[tuple[str, bool]] = [
            ("DB_CONNECTION_TIMEOUT 必须为正整数", self.db_connection_timeout_seconds <= 0),
            ("DB_MAX_CONNECTIONS 必须为正整数", self.db_max_connections <= 0),
            ("CACHE_TYPE 仅支持 simple/redis", self.cache_type not in {"simple", "redis"}),
            ("CACHE_DEFAULT_TIMEOUT 不能为负数", self.cache_default_timeout_seconds < 0),
            ("INVOICE_LIST_CACHE_TTL 不能为负数", self.invoice_list_cache_ttl_seconds < 0),
            ("INVOICE_LIST_PAGE_SIZE 必须为正整数", self.invoice_list_page_size <= 0),
            (f"LOG_LEVEL 仅支持 {'/'.join(sorted(_LOG_LEVELS))}", self.log_level not in _LOG_LEVELS),
            ("LOG_MAX_SIZE 必须为正整数(字节)", self.log_max_size_bytes <= 0),
            ("LOG_BACKUP_COUNT 不能为负数", self.log_backup_count < 0),
        ]
        errors = [message for message, condition in checks if condition]
        if errors:
            joined = "; ".join(errors)
            raise ValueError(f"配置校验失败: {joined}")
